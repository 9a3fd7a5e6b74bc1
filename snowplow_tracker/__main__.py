import json
from dataclasses import replace
from typing import Any, NoReturn, Optional

import rich
import rich.box
import typer
from rich.markup import escape
from rich.table import Table
from typing_extensions import Annotated

from snowplow_tracker import __version__
from snowplow_tracker.config import TrackerConfig
from snowplow_tracker.emitters import NoopEmitter
from snowplow_tracker.events import SelfDescribingJson
from snowplow_tracker.exceptions import ContractFailure
from snowplow_tracker.protocol.payload import Payload
from snowplow_tracker.tracker import Tracker

app = typer.Typer(
    name="Snowplow Tracker CLI",
    add_completion=True,
    pretty_exceptions_show_locals=False,
)

ContextOption = Annotated[
    Optional[str],
    typer.Option(
        "--context",
        "-c",
        help="JSON list of self-describing JSONs "
        '(`[{"schema": "iglu:...", "data": {...}}]`).',
    ),
]
Base64Option = Annotated[
    bool,
    typer.Option(
        "--base64/--no-base64",
        help="Base64-encode JSON fields (`cx`, `ue_px`) "
        "instead of sending them raw (`co`, `ue_pr`).",
    ),
]
NamespaceOption = Annotated[
    Optional[str], typer.Option("--namespace", "-n", help="Tracker namespace.")
]
AppIdOption = Annotated[
    Optional[str], typer.Option("--app-id", "-a", help="Application id.")
]


def version_callback(value: bool) -> None:
    if value:
        typer.echo(f"Snowplow Tracker: {__version__}")
        raise typer.Exit


@app.callback()
def main(
    _: bool = typer.Option(
        None,
        "--version",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
):
    return


@app.command()
def struct(
    category: Annotated[str, typer.Argument(help="Event category.")],
    action: Annotated[str, typer.Argument(help="Event action.")],
    label: Annotated[
        Optional[str], typer.Option("--label", "-l", help="Event label.")
    ] = None,
    property_: Annotated[
        Optional[str],
        typer.Option("--property", "-p", help="Event property."),
    ] = None,
    value: Annotated[
        Optional[float], typer.Option("--value", "-v", help="Event value.")
    ] = None,
    context: ContextOption = None,
    base64: Base64Option = True,
    namespace: NamespaceOption = None,
    app_id: AppIdOption = None,
):
    """Builds the payload of a structured event."""
    tracker = _tracker(base64, namespace, app_id)
    try:
        payload = tracker.track_struct_event(
            category,
            action,
            label,
            property_,
            value,
            _parse_contexts(context),
        )
    except ContractFailure as e:
        _fail(str(e))
    _print_payload(payload)


@app.command()
def unstruct(
    schema: Annotated[str, typer.Argument(help="Iglu schema of the event.")],
    data: Annotated[str, typer.Argument(help="Event data as JSON.")],
    context: ContextOption = None,
    base64: Base64Option = True,
    namespace: NamespaceOption = None,
    app_id: AppIdOption = None,
):
    """Builds the payload of an unstructured event."""
    tracker = _tracker(base64, namespace, app_id)
    try:
        payload = tracker.track_unstruct_event(
            SelfDescribingJson(schema, _parse_json(data, "data")),
            _parse_contexts(context),
        )
    except ContractFailure as e:
        _fail(str(e))
    _print_payload(payload)


def _tracker(
    base64: bool, namespace: Optional[str], app_id: Optional[str]
) -> Tracker:
    return Tracker(
        NoopEmitter(),
        namespace=namespace,
        app_id=app_id,
        encode_base64=base64,
        config=replace(TrackerConfig.from_environ(), enabled=True),
    )


def _parse_json(text: str, name: str) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        _fail(f"Invalid JSON in {name}: {e}")


def _parse_contexts(text: Optional[str]) -> Optional[list[SelfDescribingJson]]:
    if text is None:
        return None
    raw = _parse_json(text, "context")
    if not isinstance(raw, list):
        _fail("Context must be a JSON list.")
    contexts = []
    for item in raw:
        if not isinstance(item, dict) or "schema" not in item:
            _fail(f"Context entries need a schema, got {item!r}.")
        contexts.append(SelfDescribingJson(item["schema"], item.get("data", {})))
    return contexts


def _fail(message: str) -> NoReturn:
    rich.print(f"[red]{escape(message)}[/red]")
    raise typer.Exit(1)


def _print_payload(payload: Optional[Payload]) -> None:
    if payload is None:
        _fail("Tracking is suppressed.")
    table = Table(title="Payload", box=rich.box.ROUNDED)
    table.add_column("Field", header_style="magenta i", style="cyan")
    table.add_column("Value", header_style="magenta i", overflow="fold")
    for key, value in payload.fields.items():
        table.add_row(key, escape(value))
    console = rich.console.Console()
    console.print(table)


if __name__ == "__main__":
    app()
