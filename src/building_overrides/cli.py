"""Typer CLI for building overrides."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer
from rich import print as rprint
from rich.markup import escape
from rich.table import Table

from . import get_version
from .config import AppConfig, load_config
from .db import Base, configure_engine
from .db.session import init_db
from .exceptions import ConfigError
from .host import EntityClassifier, FixedClassifier
from .overrides import ActionError, Category, OverrideStore, SelectionController, SelectionState
from .overrides.audit import OverrideAuditLog

app = typer.Typer(help="Per-building homes/jobs overrides")

ConfigOption = typer.Option(None, "--config", help="Settings file (default configs/settings.yml)")
StoreOption = typer.Option(None, "--store", help="Overrides file, overrides the settings")
CategoryOption = typer.Option(None, "--category", case_sensitive=False, help="Force the building's category")


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging")) -> None:
    if verbose:
        logging.basicConfig(level=logging.DEBUG)


def _load_config(config_path: Optional[str]) -> AppConfig:
    try:
        return load_config(Path(config_path) if config_path else None)
    except ConfigError as exc:
        rprint(f"[red]{escape(str(exc))}[/red]")
        raise typer.Exit(code=1)


def _open_store(config: AppConfig, store_path: Optional[str]) -> OverrideStore:
    store = OverrideStore.load(Path(store_path) if store_path else config.store_path)
    if store.diagnostic:
        rprint(f"[yellow]Warning: {escape(store.diagnostic)}[/yellow]")
    return store


def _audit_log(config: AppConfig) -> OverrideAuditLog | None:
    if not config.audit.enabled:
        return None
    configure_engine(config.audit.db_path)
    init_db(Base)
    return OverrideAuditLog()


def _classifier(config: AppConfig, category: Optional[Category]) -> EntityClassifier:
    return FixedClassifier(category) if category else config.build_classifier()


def _controller(
    config: AppConfig,
    store: OverrideStore,
    category: Optional[Category],
) -> SelectionController:
    return SelectionController(store, _classifier(config, category), audit=_audit_log(config))


def _select(controller: SelectionController, name: str) -> None:
    controller.on_selection_changed(name)
    if controller.state is SelectionState.NO_SELECTION:
        rprint("[red]building name must not be empty[/red]")
        raise typer.Exit(code=1)


@app.command()
def show(
    name: str = typer.Argument(..., help="Building name"),
    config_path: Optional[str] = ConfigOption,
    store_path: Optional[str] = StoreOption,
    category: Optional[Category] = CategoryOption,
) -> None:
    """Show the override for a building."""
    config = _load_config(config_path)
    store = _open_store(config, store_path)
    controller = SelectionController(store, _classifier(config, category))
    _select(controller, name)
    count = controller.current_count()
    value = str(count) if count is not None else "(none)"
    rprint(f"{name} ({controller.category.value}) {controller.label}: {value}")


@app.command("set")
def set_override(
    name: str = typer.Argument(..., help="Building name"),
    value: str = typer.Argument(..., help="Homes or jobs count (positive integer)"),
    config_path: Optional[str] = ConfigOption,
    store_path: Optional[str] = StoreOption,
    category: Optional[Category] = CategoryOption,
) -> None:
    """Save a homes/jobs override for a building."""
    config = _load_config(config_path)
    store = _open_store(config, store_path)
    controller = _controller(config, store, category)
    _select(controller, name)
    result = controller.on_save_requested(value)
    if not result.ok:
        rprint(f"[red]{escape(str(result.message))}[/red]")
        raise typer.Exit(code=1 if result.error is ActionError.INVALID_INPUT else 2)
    rprint(f"[green]{controller.label} for {name} set to {result.count}[/green]")


@app.command()
def remove(
    name: str = typer.Argument(..., help="Building name"),
    config_path: Optional[str] = ConfigOption,
    store_path: Optional[str] = StoreOption,
    category: Optional[Category] = CategoryOption,
) -> None:
    """Delete the override for a building."""
    config = _load_config(config_path)
    store = _open_store(config, store_path)
    controller = _controller(config, store, category)
    _select(controller, name)
    if not controller.can_delete:
        rprint(f"[yellow]No {controller.category.value} override for {name}[/yellow]")
        return
    result = controller.on_delete_requested()
    if not result.ok:
        rprint(f"[red]{escape(str(result.message))}[/red]")
        raise typer.Exit(code=2)
    rprint(f"[green]Removed override for {name}[/green]")


@app.command("list")
def list_overrides(
    config_path: Optional[str] = ConfigOption,
    store_path: Optional[str] = StoreOption,
    category: Optional[Category] = typer.Option(None, "--category", case_sensitive=False, help="Only this category"),
) -> None:
    """List every stored override."""
    config = _load_config(config_path)
    store = _open_store(config, store_path)
    records = [r for r in store.records() if category is None or r.category is category]
    if not records:
        rprint("No overrides stored")
        return
    table = Table(title="Building overrides")
    table.add_column("Building")
    table.add_column("Category")
    table.add_column("Count", justify="right")
    for record in records:
        table.add_row(record.entity_name, record.category.label, str(record.count))
    rprint(table)


@app.command()
def version() -> None:
    """Print the installed package version."""
    rprint(get_version())


@app.command()
def initdb(config_path: Optional[str] = ConfigOption) -> None:
    """Create the audit tables."""
    config = _load_config(config_path)
    configure_engine(config.audit.db_path)
    init_db(Base)
    rprint(f"[green]Audit database initialized at {config.audit.db_path}[/green]")


@app.command()
def history(
    name: Optional[str] = typer.Argument(None, help="Only this building"),
    config_path: Optional[str] = ConfigOption,
) -> None:
    """Print the audit trail, newest first."""
    config = _load_config(config_path)
    configure_engine(config.audit.db_path)
    init_db(Base)
    entries = OverrideAuditLog().history(name)
    if not entries:
        rprint("No audit entries")
        return
    for entry in entries:
        rprint(
            f"{entry.applied_at:%Y-%m-%d %H:%M:%S} {entry.action} {entry.entity_name} "
            f"({entry.category.value}) {entry.old_value} -> {entry.new_value}"
        )


if __name__ == "__main__":
    app()
