"""Doctor command for environment diagnostics."""

from __future__ import annotations

import asyncio

import typer
from rich.console import Console
from rich.table import Table

from adapters.http_client import build_async_client
from core.config import AppSettings, write_user_env_vars
from core.registered_apps import get_default_registered_apps_path
from core.services.app_store_service import AppStoreService

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")

_console = Console()


async def _check_http(settings: AppSettings) -> tuple[bool, str]:
    try:
        async with build_async_client(settings) as client:
            response = await client.get("v1/apps")
        # 401 without a token still proves the API is reachable.
        return True, f"HTTP {response.status_code}"
    except Exception as exc:
        return False, str(exc)


@app.command()
def run() -> None:
    """Run baseline diagnostics and show recommended fixes."""

    settings = AppSettings()

    table = Table(title="aso-sync Doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    if settings.app_store_configured:
        table.add_row("App Store credentials", "OK", f"key id {settings.app_store_key_id}")
    else:
        table.add_row("App Store credentials", "MISSING", "run `aso-sync doctor setup`")

    auth = AppStoreService(settings).verify_auth(60)
    table.add_row("Token signing", "OK" if auth.success else "FAIL", "ES256" if auth.success else auth.error or "")

    ok_http, detail_http = asyncio.run(_check_http(settings))
    table.add_row("API connectivity", "OK" if ok_http else "FAIL", detail_http)

    apps_path = get_default_registered_apps_path(settings)
    table.add_row(
        "Registered apps",
        "OK" if apps_path else "OPTIONAL",
        str(apps_path) if apps_path else "No file -> locale fan-out unavailable",
    )

    _console.print(table)


@app.command(name="setup")
def setup() -> None:
    """Interactive App Store setup (stores config in the user config .env)."""

    issuer_id = typer.prompt("Issuer ID").strip()
    key_id = typer.prompt("Key ID").strip()
    key_path = typer.prompt("Path to the .p8 private key").strip()

    if not issuer_id or not key_id or not key_path:
        raise typer.BadParameter("issuer id, key id and key path are required")

    env_path = write_user_env_vars(
        {
            "ASO_SYNC_APP_STORE_ISSUER_ID": issuer_id,
            "ASO_SYNC_APP_STORE_KEY_ID": key_id,
            "ASO_SYNC_APP_STORE_PRIVATE_KEY_PATH": key_path,
        }
    )

    _console.print(f"[green]Saved App Store config to:[/green] {env_path}")
