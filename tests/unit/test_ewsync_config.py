"""Unit tests for configuration management."""

import json
from pathlib import Path
from tempfile import TemporaryDirectory

import pytest
from pydantic import ValidationError

from ewsync.config import (
    CONFIG_FILE_NAME,
    EwsyncConfig,
    ExchangeVersion,
    LogLevel,
    ServiceConfig,
    StreamingConfig,
    SyncConfig,
    create_default_config,
    find_config_file,
    load_config,
)


class TestSections:
    """Test individual configuration sections."""

    def test_service_defaults(self):
        """Test the service section needs no endpoint by default."""
        config = ServiceConfig()
        assert config.url is None
        assert config.version == ExchangeVersion.EXCHANGE2013_SP1
        assert config.timeout_seconds == 100
        assert config.verify_tls is True

    def test_service_url_must_be_http(self):
        """Test non-HTTP endpoints are rejected."""
        with pytest.raises(ValueError):
            ServiceConfig(url="ftp://mail.example.com/EWS/Exchange.asmx")

    def test_streaming_ranges(self):
        """Test heartbeat and connection timeout bounds."""
        assert StreamingConfig(heartbeatMinutes=1440).heartbeat_minutes == 1440
        with pytest.raises(ValueError):
            StreamingConfig(heartbeatMinutes=0)
        with pytest.raises(ValueError):
            StreamingConfig(connectionTimeoutMinutes=31)

    def test_sync_page_size_range(self):
        """Test the page size bounds."""
        assert SyncConfig(maxChangesReturned=512).max_changes_returned == 512
        with pytest.raises(ValueError):
            SyncConfig(maxChangesReturned=513)


class TestEwsyncConfig:
    """Test complete EwsyncConfig model."""

    def test_default_config(self):
        """Test defaults of every section."""
        config = create_default_config()
        assert config.streaming.heartbeat_minutes == 1
        assert config.streaming.connection_timeout_minutes == 30
        assert config.streaming.trace_wire_bytes is False
        assert config.sync.max_changes_returned == 100
        assert config.logging.level == LogLevel.INFO.value

    def test_config_from_dict(self):
        """Test config creation from camelCase keys."""
        config_data = {
            "service": {
                "url": "https://mail.example.com/EWS/Exchange.asmx",
                "username": "ann",
                "version": "Exchange2010_SP2",
                "verifyTls": False
            },
            "streaming": {
                "heartbeatMinutes": 5,
                "traceWireBytes": True
            },
            "logging": {
                "level": "trace",
                "traceRequests": True
            }
        }

        config = EwsyncConfig(**config_data)
        assert config.service.url == "https://mail.example.com/EWS/Exchange.asmx"
        assert config.service.version == ExchangeVersion.EXCHANGE2010_SP2
        assert config.service.verify_tls is False
        assert config.streaming.heartbeat_minutes == 5
        assert config.streaming.trace_wire_bytes is True
        assert config.logging.level == "trace"
        assert config.logging.trace_requests is True

    def test_unknown_section_rejected(self):
        """Test unknown top-level keys are forbidden."""
        with pytest.raises(ValueError):
            EwsyncConfig(output={"dir": "out"})


class TestConfigLoading:
    """Test configuration file loading."""

    def test_load_config_from_file(self):
        """Test loading an explicit configuration file."""
        with TemporaryDirectory() as temp_dir:
            config_file = Path(temp_dir) / CONFIG_FILE_NAME
            config_file.write_text(json.dumps({"sync": {"maxChangesReturned": 25}}))

            config = load_config(config_file)
            assert config.sync.max_changes_returned == 25

    def test_missing_file_gives_defaults(self):
        """Test a missing file falls back to defaults."""
        with TemporaryDirectory() as temp_dir:
            config = load_config(Path(temp_dir) / CONFIG_FILE_NAME)
            assert config == create_default_config()

    def test_invalid_json(self):
        """Test malformed JSON is reported as ValueError."""
        with TemporaryDirectory() as temp_dir:
            config_file = Path(temp_dir) / CONFIG_FILE_NAME
            config_file.write_text("{not json")

            with pytest.raises(ValueError, match="Invalid JSON"):
                load_config(config_file)

    def test_invalid_values(self):
        """Test validation failures are reported as ValueError."""
        with TemporaryDirectory() as temp_dir:
            config_file = Path(temp_dir) / CONFIG_FILE_NAME
            config_file.write_text(json.dumps({"streaming": {"heartbeatMinutes": 0}}))

            with pytest.raises(ValueError, match="Failed to load config") as exc_info:
                load_config(config_file)
            assert isinstance(exc_info.value.__cause__, ValidationError)

    def test_top_level_must_be_object(self):
        """Test a JSON document that is not an object is refused."""
        with TemporaryDirectory() as temp_dir:
            config_file = Path(temp_dir) / CONFIG_FILE_NAME
            config_file.write_text(json.dumps(["service"]))

            with pytest.raises(ValueError, match="expected a JSON object"):
                load_config(config_file)

    def test_find_config_file_in_parent(self):
        """Test the search walks up from the start directory."""
        with TemporaryDirectory() as temp_dir:
            root = Path(temp_dir)
            (root / CONFIG_FILE_NAME).write_text("{}")
            nested = root / "a" / "b"
            nested.mkdir(parents=True)

            assert find_config_file(nested) == (root / CONFIG_FILE_NAME).resolve()
