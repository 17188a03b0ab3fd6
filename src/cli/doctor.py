"""Doctor command for environment diagnostics."""

from __future__ import annotations

import asyncio

import httpx
import typer
from rich.console import Console
from rich.table import Table

from adapters.remote_manager import RemoteManager
from cli.ui_components import print_banner
from core.cancellation import CancellationToken
from core.config import AppSettings, get_user_env_file, write_user_env_vars
from core.errors import LeaseClientError

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")

_console = Console()


async def _check_server(settings: AppSettings, timeout: float) -> tuple[bool, str]:
    manager = RemoteManager(settings=settings)
    try:
        config = await manager.get_network_config("", cancel=CancellationToken.with_timeout(timeout))
    except (LeaseClientError, httpx.HTTPError) as exc:
        return False, str(exc) or type(exc).__name__
    return True, f"network {config.network}" if config.network else "OK"


def _settings(ctx: typer.Context) -> AppSettings:
    return ctx.obj if isinstance(ctx.obj, AppSettings) else AppSettings()


@app.command()
def run(
    ctx: typer.Context,
    timeout: float = typer.Option(5.0, "--timeout", min=0.1, help="Seconds to wait for the coordinator."),
) -> None:
    """Show effective settings and check that the coordinator answers."""

    settings = _settings(ctx)
    print_banner(_console, settings.base_url)

    table = Table(title="leasectl doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    table.add_row("Endpoint", "OK", settings.base_url)
    table.add_row("User config", "OK" if get_user_env_file().exists() else "OPTIONAL", str(get_user_env_file()))
    read_timeout = settings.read_timeout_seconds
    table.add_row("Read timeout", "OK", "none (long-poll)" if read_timeout is None else f"{read_timeout}s")

    ok, detail = asyncio.run(_check_server(settings, timeout))
    table.add_row("Coordinator", "OK" if ok else "FAIL", detail)

    _console.print(table)
    if not ok:
        raise typer.Exit(code=1)


@app.command()
def setup(ctx: typer.Context) -> None:
    """Interactive setup (stores config in the user config .env)."""

    settings = _settings(ctx)
    server = typer.prompt("Coordinator host:port", default=settings.server_addr, show_default=True).strip()
    scheme = typer.prompt("Scheme", default=settings.scheme, show_default=True).strip().lower()
    if not server:
        raise typer.BadParameter("server address is required")
    if scheme not in ("http", "https"):
        raise typer.BadParameter("scheme must be http or https")

    env_path = write_user_env_vars(
        {
            "LEASECTL_SERVER_ADDR": server,
            "LEASECTL_SCHEME": scheme,
        }
    )
    _console.print(f"[green]Saved config to:[/green] {env_path}")
