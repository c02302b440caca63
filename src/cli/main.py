"""aso-sync command line.

Thin layer: parses arguments, calls the service layer and renders results.
Failures come back as result envelopes and are printed, never raised.
"""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from cli import doctor
from cli.ui_components import (
    build_metadata_table,
    build_release_notes_table,
    build_translation_requests_table,
    print_banner,
)
from core.config import AppSettings
from core.domain.models import CanonicalMetadata
from core.domain.store import DEFAULT_LOCALE, Store
from core.registered_apps import (
    find_registered_app,
    get_default_registered_apps_path,
    load_registered_apps,
)
from core.services.app_store_service import AppStoreService
from core.services.locale_distribution import create_translation_requests

app = typer.Typer(no_args_is_help=True, help="Sync app listing metadata with the App Store.")
app.add_typer(doctor.app, name="doctor")

_console = Console()


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


def _fail(message: str) -> None:
    _console.print(f"[red]{message}[/red]")
    raise typer.Exit(code=1)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
    banner: bool = typer.Option(False, "--banner", help="Print the banner first."),
) -> None:
    settings = AppSettings()
    _configure_logging("DEBUG" if verbose else settings.log_level)
    if banner:
        print_banner(_console)


@app.command()
def auth(expiration: int = typer.Option(300, help="Token lifetime in seconds (capped at 1200).")) -> None:
    """Issue a token locally and show its decoded header and payload."""

    result = AppStoreService().verify_auth(expiration)
    if not result.success:
        _fail(result.error or "An unknown error occurred.")
    _console.print_json(json.dumps({"ok": True, **result.data.model_dump(exclude={"signature"})}))


@app.command()
def pull(
    app_id: str = typer.Argument(..., help="App id, bundle id or App Store URL."),
    as_json: bool = typer.Option(False, "--json", help="Print canonical JSON instead of a table."),
) -> None:
    """Pull the primary-locale metadata of the latest version."""

    result = asyncio.run(AppStoreService().pull_metadata(app_id))
    if not result.success:
        _fail(result.error or "Pull failed")
    if as_json:
        _console.print_json(result.data.model_dump_json(by_alias=True, exclude={"raw"}, exclude_none=True))
    else:
        _console.print(build_metadata_table(result.data))


@app.command()
def push(
    app_id: str = typer.Argument(..., help="App id, bundle id or App Store URL."),
    data_path: Path = typer.Argument(..., exists=True, dir_okay=False, help="Canonical metadata JSON file."),
) -> None:
    """Create or patch the version localization for the file's locale."""

    metadata = CanonicalMetadata.model_validate_json(data_path.read_text(encoding="utf-8"))
    result = asyncio.run(AppStoreService().push_metadata(app_id, metadata))
    if not result.success:
        _fail(result.error or "Push failed")
    _console.print("[green]Metadata pushed.[/green]")


@app.command(name="release-notes")
def release_notes(app_id: str = typer.Argument(..., help="App id, bundle id or App Store URL.")) -> None:
    """List "what's new" texts across recent versions."""

    result = asyncio.run(AppStoreService().pull_release_notes(app_id))
    if not result.success:
        _fail(result.error or "Pull failed")
    _console.print(build_release_notes_table(result.data))


@app.command(name="create-version")
def create_version(
    app_id: str = typer.Argument(..., help="App id, bundle id or App Store URL."),
    version: str = typer.Argument(..., help="Version string, e.g. 1.4.0."),
) -> None:
    """Create an App Store version (no-op when it already exists)."""

    result = asyncio.run(AppStoreService().create_version(app_id, version))
    if not result.success:
        _fail(result.error or "Create failed")
    state = "created" if result.data.created else "already exists"
    _console.print(f"[green]Version {version} {state}[/green] (id: {result.data.record.id})")


@app.command()
def locales(
    key: str = typer.Argument(..., help="Registered app slug, bundle id or package name."),
    store: Store = typer.Option(Store.BOTH, help="Store selector."),
    source_locale: str = typer.Option(DEFAULT_LOCALE, help="Locale of the source text."),
    apps_path: Optional[Path] = typer.Option(None, help="Registered apps JSON file."),
) -> None:
    """Show which locales a release note would be translated into."""

    path = apps_path or get_default_registered_apps_path()
    if path is None:
        _fail("Registered apps file not found (set ASO_SYNC_REGISTERED_APPS_PATH)")
    registered = find_registered_app(load_registered_apps(path), key)
    if registered is None:
        _fail(f"No registered app matches {key}")

    requests = create_translation_requests(registered, "", source_locale=source_locale, store=store)
    _console.print(build_translation_requests_table(requests))


def run() -> None:
    app()


if __name__ == "__main__":
    run()
