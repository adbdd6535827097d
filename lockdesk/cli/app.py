"""Typer-based CLI wiring."""
from __future__ import annotations

import asyncio
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, NoReturn, Optional

import typer
from rich.console import Console
from rich.table import Table

from lockdesk.core.config import ConfigManager, LockDeskSettings
from lockdesk.integration.client import LockableResourcesClient
from lockdesk.integration.dispatcher import ActionDispatcher
from lockdesk.resources.model import Resource
from lockdesk.security.permissions import Capability, PermissionSession
from lockdesk.ui_tui.action_bar import (
    BAR_CAPABILITIES,
    ActionBarController,
    ButtonState,
    headless_buttons,
)
from lockdesk.ui_tui.selection import SelectionTracker, StaticSelection
from lockdesk.utils.errors import LockDeskError
from lockdesk.utils.logging import configure_logging, get_logger

logger = get_logger(__name__)
console = Console()

app = typer.Typer(help="Browse and act on lockable resources")
config_app = typer.Typer(help="Inspect configuration")
app.add_typer(config_app, name="config")

STATE_STYLES = {
    ButtonState.ENABLED: "green",
    ButtonState.DISABLED: "yellow",
    ButtonState.HIDDEN: "dim",
}


@dataclass
class CLIContext:
    config_manager: ConfigManager
    settings: LockDeskSettings
    permissions: Dict[str, Any]


_context: Optional[CLIContext] = None


def _ctx() -> CLIContext:
    if _context is None:  # pragma: no cover - the callback always runs first
        raise typer.Exit(code=1)
    return _context


def _fail(exc: Exception) -> NoReturn:
    console.print(f"[bold red]error:[/] {exc}")
    raise typer.Exit(code=1)


@app.callback()
def main(
    ctx: typer.Context,
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Configuration file"),
    grant: Optional[List[str]] = typer.Option(
        None, "--grant", "-g", help="Grant a permission, overriding the configured ones"
    ),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Logging level"),
) -> None:
    """Load configuration before any command runs."""

    global _context
    manager = ConfigManager(config)
    try:
        settings = asyncio.run(manager.load())
    except LockDeskError as exc:
        _fail(exc)
    configure_logging(
        level=log_level or settings.logging.level,
        log_dir=settings.logging.log_dir,
        console=ctx.invoked_subcommand != "tui",
    )
    permissions: Dict[str, Any] = dict(settings.session.permissions)
    if grant:
        try:
            permissions = {Capability.coerce(name).value: True for name in grant}
        except ValueError as exc:
            _fail(exc)
    _context = CLIContext(config_manager=manager, settings=settings, permissions=permissions)


def _action_bar(permissions: Dict[str, Any]) -> tuple[ActionBarController, StaticSelection]:
    selection = StaticSelection()
    controller = ActionBarController(PermissionSession(), SelectionTracker(selection), headless_buttons())
    controller.load_permissions(permissions)
    return controller, selection


async def _fetch(names: Optional[List[str]] = None) -> List[Resource]:
    context = _ctx()
    async with LockableResourcesClient(context.settings.server) as client:
        resources = await client.list_resources(context.settings.session.user)
    if not names:
        return resources
    by_name = {resource.name: resource for resource in resources}
    missing = [name for name in names if name not in by_name]
    if missing:
        raise LockDeskError(f"Unknown resource(s): {', '.join(missing)}")
    return [by_name[name] for name in names]


def _evaluate(resources: List[Resource]) -> ActionBarController:
    controller, selection = _action_bar(_ctx().permissions)
    for resource in resources:
        selection.names.append(resource.name)
        controller.selection_changed(resource, True)
    return controller


@app.command()
def tui() -> None:
    """Launch the interactive resources table."""

    from lockdesk.ui_tui.app import launch_tui

    context = _ctx()
    asyncio.run(
        launch_tui(
            context.settings,
            config_manager=context.config_manager,
            permissions=context.permissions,
        )
    )


@app.command()
def resources() -> None:
    """List resources and the actions allowed on each."""

    try:
        items = asyncio.run(_fetch())
    except LockDeskError as exc:
        _fail(exc)
    controller, _ = _action_bar(_ctx().permissions)
    table = Table(title="Lockable resources")
    table.add_column("Resource", style="bold")
    table.add_column("Status")
    table.add_column("Reserved by")
    table.add_column("Allowed actions")
    table.add_column("Note")
    for resource in items:
        allowed = controller.rules.allowed_actions(resource)
        table.add_row(
            resource.name,
            resource.status,
            resource.reserved_by or "",
            ", ".join(c.endpoint for c in allowed) or "-",
            resource.note,
        )
    console.print(table)


@app.command()
def allowed(names: List[str] = typer.Argument(..., help="Resources to select")) -> None:
    """Show the action bar for a selection of resources."""

    try:
        items = asyncio.run(_fetch(names))
    except LockDeskError as exc:
        _fail(exc)
    controller = _evaluate(items)
    table = Table(title=f"Action bar for {', '.join(names)}")
    table.add_column("Button")
    table.add_column("State")
    for capability in BAR_CAPABILITIES:
        state = controller.state(capability)
        table.add_row(capability.button_id, f"[{STATE_STYLES[state]}]{state.value}[/]")
    console.print(table)


@app.command()
def dispatch(
    action: str = typer.Argument(..., help="unlock, steal, reserve, unreserve, reassign or reset"),
    names: List[str] = typer.Argument(..., help="Resources to act on"),
    force: bool = typer.Option(False, "--force", help="Send even if the action looks invalid"),
) -> None:
    """Submit one action for the given resources."""

    try:
        capability = Capability.coerce(action)
        if not capability.is_row_action:
            raise ValueError(f"{action} is not a resource action")
    except ValueError as exc:
        _fail(exc)

    async def _run() -> None:
        context = _ctx()
        if not force:
            controller = _evaluate(await _fetch(names))
            if controller.state(capability) is not ButtonState.ENABLED:
                raise LockDeskError(
                    f"{capability.endpoint} is not allowed for {', '.join(names)} (use --force to send anyway)"
                )
        async with LockableResourcesClient(context.settings.server) as client:
            dispatcher = ActionDispatcher(SelectionTracker(StaticSelection(names)), client)
            await dispatcher.dispatch(capability)

    try:
        asyncio.run(_run())
    except LockDeskError as exc:
        _fail(exc)
    console.print(f"[green]{capability.endpoint}[/] sent for {', '.join(names)}")


@app.command()
def note(name: str, text: str = typer.Argument(..., help="New note text")) -> None:
    """Replace the note of a resource."""

    async def _run() -> None:
        async with LockableResourcesClient(_ctx().settings.server) as client:
            await client.save_note(name, text)

    try:
        asyncio.run(_run())
    except LockDeskError as exc:
        _fail(exc)
    console.print(f"Note of [bold]{name}[/] saved")


@config_app.command("show")
def config_show() -> None:
    """Print the effective configuration."""

    context = _ctx()
    payload = context.settings.model_dump(mode="json", exclude={"server": {"api_token"}})
    payload["session"]["permissions"] = context.permissions
    console.print_json(data=payload)


__all__ = ["app", "CLIContext"]
