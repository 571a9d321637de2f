"""Pytest configuration and fixtures for the XML cursor tests."""

import pytest

from ews_xml import XmlReader

MESSAGES = "http://schemas.microsoft.com/exchange/services/2006/messages"
TYPES = "http://schemas.microsoft.com/exchange/services/2006/types"


@pytest.fixture
def simple_document():
    """Small document exercising text, empty and attributed elements."""
    return f"""<?xml version="1.0" encoding="utf-8"?>
<m:Root xmlns:m="{MESSAGES}" xmlns:t="{TYPES}">
  <m:Count>12</m:Count>
  <t:Flag/>
  <t:ItemId Id="AAA=" ChangeKey="CK1"></t:ItemId>
  <m:Nested>
    <t:Inner>one</t:Inner>
    <t:Inner>two</t:Inner>
  </m:Nested>
  <m:After>done</m:After>
</m:Root>""".encode("utf-8")


@pytest.fixture
def reader(simple_document):
    """Cursor over the simple document."""
    return XmlReader(simple_document)


def split_bytes(data: bytes, size: int):
    """Split a byte string into fixed size chunks."""
    return [data[i:i + size] for i in range(0, len(data), size)]


@pytest.fixture
def chunker():
    """Chunking helper for streaming tests."""
    return split_bytes
