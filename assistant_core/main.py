"""
Command-line entry point for the assistant core.

Inspect wire contracts, validate payload files, replay actions against a
product store and check backend health.
"""

import json
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.table import Table

from assistant_core.contracts.entities import DataMode
from assistant_core.contracts.registry import CONTRACTS, Direction, decode
from assistant_core.core.config import (
    PRODUCTS,
    get_settings,
    print_configuration_summary,
    validate_required_settings,
)
from assistant_core.core.exceptions import AssistantError, SchemaViolation
from assistant_core.core.logging import set_correlation_id, setup_logging
from assistant_core.data.api_client import ENDPOINTS
from assistant_core.data.gateway import create_gateway
from assistant_core.store.actions import action_from_dict
from assistant_core.store.persistence import SnapshotFile
from assistant_core.store.products import get_profile
from assistant_core.store.state import AppState
from assistant_core.store.store import Store
from assistant_core.utils.reliability import get_circuit_breaker_status

console = Console()


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.option(
    "--product",
    type=click.Choice(PRODUCTS, case_sensitive=False),
    help="Product store to operate on (default: ASSISTANT_PRODUCT)",
)
@click.option("--correlation-id", help="Set correlation ID for request tracing")
@click.pass_context
def main(ctx, debug: bool, product: Optional[str], correlation_id: Optional[str]):
    """Assistant dashboard core: state store and backend wire contracts."""
    ctx.ensure_object(dict)

    setup_logging(debug=debug, rich_output=True)

    if correlation_id:
        set_correlation_id(correlation_id)

    ctx.obj["debug"] = debug
    ctx.obj["product"] = (product or get_settings().store.product).lower()
    ctx.obj["correlation_id"] = correlation_id


def _fail(ctx, label: str, error: Exception) -> None:
    console.print(f"[red]{label}:[/red] {error}")
    if ctx.obj.get("debug"):
        import traceback

        console.print(traceback.format_exc())
    sys.exit(1)


def _print_violation(violation: SchemaViolation) -> None:
    console.print(f"[red]Schema violation in '{violation.contract}'[/red]")
    table = Table()
    table.add_column("Path", style="cyan")
    table.add_column("Expected", style="yellow")
    for item in violation.violations:
        table.add_row(item["path"] or "<root>", item["expected"])
    console.print(table)


@main.command()
def contracts():
    """List registered wire contracts and their endpoints."""
    table = Table(title="Wire Contracts")
    table.add_column("Name", style="cyan")
    table.add_column("Endpoint", style="white")
    table.add_column("Request", style="green")
    table.add_column("Response", style="green")

    for name, contract in CONTRACTS.items():
        endpoint = ENDPOINTS.get(name)
        table.add_row(
            name,
            f"{endpoint.method} {endpoint.path}" if endpoint else "-",
            contract.request.__name__ if contract.request else "-",
            contract.response.__name__,
        )
    console.print(table)


@main.command(name="decode")
@click.argument("name")
@click.argument("payload_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--request", "as_request", is_flag=True, help="Validate as the request side")
@click.pass_context
def decode_command(ctx, name: str, payload_file: Path, as_request: bool):
    """Validate PAYLOAD_FILE against contract NAME."""
    direction = Direction.REQUEST if as_request else Direction.RESPONSE
    try:
        model = decode(name, payload_file.read_bytes(), direction)
    except SchemaViolation as e:
        _print_violation(e)
        sys.exit(1)
    except AssistantError as e:
        _fail(ctx, "Contract Error", e)

    console.print(f"[green]✅ Valid {direction.value} for '{name}'[/green]")
    console.print_json(json.dumps(model.to_wire()))


@main.group()
@click.option(
    "--snapshot",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Snapshot file (default: ASSISTANT_SNAPSHOT_PATH)",
)
@click.pass_context
def state(ctx, snapshot: Optional[Path]):
    """Inspect and modify persisted store state."""
    configured = get_settings().store.snapshot_path
    ctx.obj["snapshot"] = snapshot or (Path(configured) if configured else None)


def _open_store(ctx) -> Store:
    settings = get_settings()
    profile = get_profile(ctx.obj["product"])
    store = Store(profile, data_mode=settings.store.data_mode)
    snapshot = ctx.obj.get("snapshot")
    if snapshot is None:
        return store

    snapshot_file = SnapshotFile(snapshot)
    if snapshot_file.restore(store):
        console.print(f"[dim]Restored {profile.name} state from {snapshot}[/dim]")
    if settings.store.autosave:
        snapshot_file.attach(store)
    return store


def _print_state(current: AppState) -> None:
    table = Table(title=f"{current.profile.name.title()} State")
    table.add_column("Collection", style="cyan")
    table.add_column("Count", style="white", justify="right")
    table.add_column("Ids", style="dim")

    for spec in current.profile.collections:
        collection = current.collection(spec.kind)
        ids = ", ".join(collection.ids[:5]) + (" ..." if len(collection) > 5 else "")
        table.add_row(spec.key, str(len(collection)), ids)
    if current.profile.has_data_mode:
        table.add_row("dataMode", "-", DataMode(current.data_mode or DataMode.MOCK).value)
    console.print(table)


@state.command()
@click.option("--json", "as_json", is_flag=True, help="Print the full snapshot as JSON")
@click.pass_context
def show(ctx, as_json: bool):
    """Show the current state of the selected product."""
    try:
        store = _open_store(ctx)
    except AssistantError as e:
        _fail(ctx, "State Error", e)

    if as_json:
        console.print_json(json.dumps(store.state.to_snapshot()))
    else:
        _print_state(store.state)


@state.command()
@click.argument("actions_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--save", is_flag=True, help="Write the resulting state to the snapshot file")
@click.pass_context
def replay(ctx, actions_file: Path, save: bool):
    """Apply the JSON list of actions in ACTIONS_FILE, in order."""
    try:
        store = _open_store(ctx)
        raw_actions = json.loads(actions_file.read_text(encoding="utf-8"))
        if not isinstance(raw_actions, list):
            raise SchemaViolation(f"action.{store.profile.name}", "", "array of actions")

        for index, raw in enumerate(raw_actions):
            try:
                store.dispatch(action_from_dict(store.profile, raw))
            except SchemaViolation as e:
                console.print(f"[red]Action {index} rejected[/red]")
                _print_violation(e)
                sys.exit(1)

        console.print(f"[green]✅ Applied {len(raw_actions)} actions[/green]")
        _print_state(store.state)

        if save:
            snapshot = ctx.obj.get("snapshot")
            if snapshot is None:
                console.print("[red]No snapshot path: pass --snapshot or set ASSISTANT_SNAPSHOT_PATH[/red]")
                sys.exit(1)
            SnapshotFile(snapshot).save(store.state)
            console.print(f"[green]State saved to {snapshot}[/green]")

    except SchemaViolation as e:
        _print_violation(e)
        sys.exit(1)
    except json.JSONDecodeError as e:
        _fail(ctx, "Invalid JSON", e)
    except AssistantError as e:
        _fail(ctx, "Replay Error", e)


@main.command()
def config():
    """Display current configuration."""
    try:
        console.print("[blue]Assistant Core Configuration[/blue]")

        settings = get_settings()
        missing = validate_required_settings(settings.store.data_mode)
        if missing:
            console.print("[red]⚠️  Configuration Issues:[/red]")
            for item in missing:
                console.print(f"  • Missing: {item}")
            console.print()
        else:
            console.print("[green]✅ Configuration Valid[/green]")
            console.print()

        print_configuration_summary()
        sys.exit(0 if not missing else 1)

    except Exception as e:
        console.print(f"[red]Configuration Error:[/red] {e}")
        sys.exit(1)


@main.command()
@click.option(
    "--mode",
    type=click.Choice(["mock", "live"], case_sensitive=False),
    help="Data mode to check (default: ASSISTANT_DATA_MODE)",
)
@click.pass_context
def health(ctx, mode: Optional[str]):
    """Check backend health through the data gateway."""
    try:
        gateway = create_gateway(mode=mode.lower() if mode else None)
        console.print(f"[blue]Checking backend health ({gateway.mode.value} mode)...[/blue]")

        status = gateway.health()
        if status.healthy:
            console.print("[green]✅ Backend is healthy[/green]")
        else:
            console.print("[red]❌ Backend has issues[/red]")

        table = Table(title="Health Check Results")
        table.add_column("Field", style="cyan")
        table.add_column("Value", style="white")
        table.add_row("Status", status.status)
        table.add_row("HTTP", status.http)
        table.add_row("Message", status.message or "-")
        console.print(table)

        cb_status = get_circuit_breaker_status()
        if cb_status:
            console.print("\n[bold]Circuit Breaker Status:[/bold]")
            cb_table = Table()
            cb_table.add_column("Name", style="cyan")
            cb_table.add_column("State", style="white")
            cb_table.add_column("Failures", style="yellow")

            for name, breaker in cb_status.items():
                state_name = breaker.get("state", "unknown")
                if state_name == "closed":
                    state_text = "[green]Closed[/green]"
                elif state_name == "open":
                    state_text = "[red]Open[/red]"
                else:
                    state_text = "[yellow]Half-Open[/yellow]"
                cb_table.add_row(name, state_text, str(breaker.get("failure_count", 0)))
            console.print(cb_table)

        sys.exit(0 if status.healthy else 1)

    except SchemaViolation as e:
        _print_violation(e)
        sys.exit(1)
    except AssistantError as e:
        _fail(ctx, "Health Check Error", e)


if __name__ == "__main__":
    main()
