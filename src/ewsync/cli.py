"""CLI interface for ewsync using Typer framework."""

import logging
import threading
from pathlib import Path
from typing import Annotated, List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from ews_xml import XmlParseError, XmlReader
from ewsync import __description__, __version__
from ewsync.config import EwsyncConfig, LogLevel, load_config
from ewsync.errors import EwsError
from ewsync.notifications import DisconnectEvent, NotificationGroup
from ewsync.responses import ServiceResponse, ServiceResult, read_response_collection, read_soap_response
from ewsync.service import ExchangeService, folder_id_from_name

app = typer.Typer(
    name="ewsync",
    help=__description__,
    add_completion=False,
    rich_markup_mode="rich"
)

console = Console()

_LOG_LEVELS = {
    LogLevel.ERROR.value: logging.ERROR,
    LogLevel.WARN.value: logging.WARNING,
    LogLevel.INFO.value: logging.INFO,
    LogLevel.DEBUG.value: logging.DEBUG,
    LogLevel.TRACE.value: logging.DEBUG,
}

_RESULT_STYLES = {
    ServiceResult.SUCCESS: "green",
    ServiceResult.WARNING: "yellow",
    ServiceResult.ERROR: "red",
}


def configure_logging(level: str) -> None:
    """Route log records through rich; trace output only at trace level."""
    logging.basicConfig(
        level=_LOG_LEVELS.get(level, logging.INFO),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True)],
        force=True,
    )
    trace_level = logging.DEBUG if level == LogLevel.TRACE.value else logging.WARNING
    logging.getLogger("ewsync.trace").setLevel(trace_level)


def version_callback(value: bool) -> None:
    """Show version information and exit."""
    if value:
        console.print(f"ewsync version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option("--version", "-v", callback=version_callback, help="Show version and exit")
    ] = False,
) -> None:
    """ewsync - Exchange Web Services synchronization client."""


def _load(config_path: Optional[Path], log_level: Optional[str]) -> EwsyncConfig:
    try:
        config = load_config(config_path)
    except ValueError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    configure_logging(log_level or config.logging.level)
    return config


def _service(config: EwsyncConfig) -> ExchangeService:
    if not config.service.url:
        console.print("[red]Error:[/red] No service URL configured (set service.url in .ewsync.json)")
        raise typer.Exit(1)
    return ExchangeService(config)


@app.command("inspect-response")
def inspect_response(
    path: Annotated[Path, typer.Argument(help="Saved SOAP response document")],
) -> None:
    """Show the result of every response message in a saved response."""
    if not path.exists():
        console.print(f"[red]Error:[/red] File not found: {path}")
        raise typer.Exit(1)

    try:
        reader = XmlReader(path.read_bytes())
        responses = read_soap_response(
            reader, lambda body: read_response_collection(body, None, None, lambda index: ServiceResponse()))
    except XmlParseError as e:
        console.print(f"[red]Error:[/red] Malformed response: {e}")
        raise typer.Exit(1)
    except EwsError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    table = Table(title=f"Response messages in {path.name}")
    table.add_column("#", justify="right")
    table.add_column("Result")
    table.add_column("Code")
    table.add_column("Message")
    for index, response in enumerate(responses):
        style = _RESULT_STYLES[response.result]
        table.add_row(
            str(index),
            f"[{style}]{response.result.value}[/{style}]",
            response.error_code or "",
            response.error_message or "",
        )
    console.print(table)
    console.print(f"Overall result: {responses.overall_result.value}")
    if responses.overall_result == ServiceResult.ERROR:
        raise typer.Exit(2)


@app.command("sync-items")
def sync_items(
    folder: Annotated[str, typer.Argument(help="Folder id or well-known name such as inbox")],
    state: Annotated[Optional[str], typer.Option("--state", "-s", help="Sync state from the previous run")] = None,
    max_changes: Annotated[Optional[int], typer.Option("--max-changes", "-n", help="Changes per call (1-512)")] = None,
    config_path: Annotated[Optional[Path], typer.Option("--config", "-c", help="Configuration file")] = None,
    log_level: Annotated[Optional[str], typer.Option("--log-level", help="error, warn, info, debug or trace")] = None,
) -> None:
    """Fetch one batch of item changes for a folder."""
    config = _load(config_path, log_level)
    service = _service(config)
    try:
        changes = service.sync_folder_items(folder_id_from_name(folder), sync_state=state, max_changes=max_changes)
    except EwsError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    table = Table(title=f"Changes in {folder}")
    table.add_column("Change")
    table.add_column("Id")
    table.add_column("Subject")
    for change in changes:
        item = change.item
        table.add_row(
            change.change_type.value,
            str(change.id or ""),
            (item.subject or "") if item is not None else "",
        )
    console.print(table)
    console.print(f"Sync state: {changes.sync_state}")
    if changes.more_changes_available:
        console.print("[yellow]More changes available; run again with the new sync state[/yellow]")


@app.command("stream")
def stream(
    subscription_ids: Annotated[List[str], typer.Argument(help="Subscription ids to stream events for")],
    lifetime: Annotated[Optional[int], typer.Option("--lifetime", "-l", help="Connection lifetime in minutes (1-30)")] = None,
    config_path: Annotated[Optional[Path], typer.Option("--config", "-c", help="Configuration file")] = None,
    log_level: Annotated[Optional[str], typer.Option("--log-level", help="error, warn, info, debug or trace")] = None,
) -> None:
    """Print notification events until the connection closes."""
    config = _load(config_path, log_level)
    service = _service(config)
    done = threading.Event()
    outcome: List[DisconnectEvent] = []

    def print_group(group: NotificationGroup) -> None:
        for event in group.events:
            console.print(f"[cyan]{group.subscription_id}[/cyan] {event.event_type.value} {event.timestamp or ''}")

    def finished(event: DisconnectEvent) -> None:
        outcome.append(event)
        done.set()

    try:
        connection = service.create_streaming_connection(subscription_ids, lifetime)
        connection.on_notification.append(print_group)
        connection.on_disconnect.append(finished)
        connection.open()
    except EwsError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    try:
        done.wait()
    except KeyboardInterrupt:
        connection.close()

    event = outcome[0] if outcome else None
    if event is None:
        return
    console.print(f"Disconnected: {event.reason.value}")
    if event.exception is not None:
        console.print(f"[red]{event.exception}[/red]")
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
