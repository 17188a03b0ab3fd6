"""CLI principal (`leasectl`).

Cada comando traduce flags a una llamada del `RemoteManager` y presenta el
resultado con Rich. Los errores del cliente se muestran y salen con código 1;
no se reintenta nada.
"""

from __future__ import annotations

import asyncio
from contextlib import aclosing
from pathlib import Path
from typing import Any, Coroutine, Optional, TypeVar

import httpx
import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape

from adapters.lease_store import export_lease_json, load_lease_json
from adapters.remote_manager import RemoteManager
from cli import doctor
from cli.ui_components import build_config_table, build_leases_table, build_watch_table
from core.cancellation import CancellationToken
from core.config import AppSettings
from core.domain.models import Lease, LeaseAttrs
from core.errors import LeaseClientError
from core.interfaces.subnet_manager import SubnetManager
from core.logging_config import setup_logging
from core.services.lease_loops import iter_watch_results, renew_before_expiry

T = TypeVar("T")

app = typer.Typer(no_args_is_help=True, help="Subnet lease client for a remote coordinator.")
app.add_typer(doctor.app, name="doctor")

_console = Console()

NETWORK_OPTION = typer.Option("", "--network", "-n", help="Network name (empty = default network).")
TIMEOUT_OPTION = typer.Option(None, "--timeout", min=0.0, help="Give up after this many seconds.")


def build_manager(settings: AppSettings) -> SubnetManager:
    return RemoteManager(settings=settings)


def _run(coro: Coroutine[Any, Any, T]) -> T:
    try:
        return asyncio.run(coro)
    except (LeaseClientError, httpx.HTTPError) as exc:
        _console.print(f"[red]Error:[/red] {escape(str(exc) or type(exc).__name__)}")
        raise typer.Exit(code=1) from exc


@app.callback()
def main(
    ctx: typer.Context,
    server: Optional[str] = typer.Option(None, "--server", help="Coordinator host:port."),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="DEBUG, INFO, WARNING..."),
) -> None:
    overrides: dict[str, Any] = {}
    if server:
        overrides["server_addr"] = server
    if log_level:
        overrides["log_level"] = log_level
    settings = AppSettings(**overrides)
    setup_logging(settings.log_level)
    ctx.obj = settings


@app.command()
def config(
    ctx: typer.Context,
    network: str = NETWORK_OPTION,
    timeout: Optional[float] = TIMEOUT_OPTION,
) -> None:
    """Fetch the network configuration."""

    manager = build_manager(ctx.obj)
    cfg = _run(manager.get_network_config(network, cancel=CancellationToken.with_timeout(timeout)))
    _console.print(build_config_table(cfg, network=network))


@app.command()
def acquire(
    ctx: typer.Context,
    public_ip: str = typer.Option(..., "--public-ip", help="Public IP of this node."),
    backend_type: Optional[str] = typer.Option(None, "--backend-type", help="Backend type, e.g. vxlan."),
    network: str = NETWORK_OPTION,
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Store the lease as JSON."),
    timeout: Optional[float] = TIMEOUT_OPTION,
) -> None:
    """Acquire a subnet lease."""

    try:
        attrs = LeaseAttrs(public_ip=public_ip, backend_type=backend_type)
    except ValidationError as exc:
        raise typer.BadParameter(f"invalid public IP: {public_ip}") from exc

    manager = build_manager(ctx.obj)
    lease = _run(manager.acquire_lease(network, attrs, cancel=CancellationToken.with_timeout(timeout)))
    _console.print(build_leases_table([lease], title="Acquired lease"))
    if output is not None:
        export_lease_json(lease=lease, output_path=output)
        _console.print(f"[green]Lease saved to:[/green] {output}")


@app.command()
def renew(
    ctx: typer.Context,
    lease_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Lease JSON from `acquire -o`."),
    network: str = NETWORK_OPTION,
    timeout: Optional[float] = TIMEOUT_OPTION,
) -> None:
    """Renew a stored lease and rewrite the file."""

    manager = build_manager(ctx.obj)

    async def _renew() -> Lease:
        lease = load_lease_json(lease_file)
        return await manager.renew_lease(network, lease, cancel=CancellationToken.with_timeout(timeout))

    lease = _run(_renew())
    export_lease_json(lease=lease, output_path=lease_file)
    _console.print(build_leases_table([lease], title="Renewed lease"))


@app.command()
def watch(
    ctx: typer.Context,
    network: str = NETWORK_OPTION,
    cursor: Optional[str] = typer.Option(None, "--cursor", help="Resume from this cursor."),
    count: int = typer.Option(0, "--count", min=0, help="Stop after N results (0 = no limit)."),
    timeout: Optional[float] = TIMEOUT_OPTION,
) -> None:
    """Watch lease changes of other nodes."""

    manager = build_manager(ctx.obj)
    cancel = CancellationToken.with_timeout(timeout)

    async def _watch() -> None:
        seen = 0
        async with aclosing(iter_watch_results(manager, network, cursor=cursor, cancel=cancel)) as results:
            async for result in results:
                _console.print(build_watch_table(result))
                seen += 1
                if count and seen >= count:
                    return

    try:
        _run(_watch())
    except KeyboardInterrupt:
        _console.print("Stopping...")


@app.command()
def keep(
    ctx: typer.Context,
    lease_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Lease JSON from `acquire -o`."),
    network: str = NETWORK_OPTION,
    margin: Optional[float] = typer.Option(None, "--margin", min=0.0, help="Renew this many seconds before expiry."),
) -> None:
    """Keep a stored lease alive until interrupted."""

    settings: AppSettings = ctx.obj
    manager = build_manager(settings)
    renew_margin = settings.renew_margin_seconds if margin is None else margin

    def _on_renewed(lease: Lease) -> None:
        export_lease_json(lease=lease, output_path=lease_file)
        _console.print(f"[green]Renewed[/green] {lease.subnet} until {lease.expiration.isoformat()}")

    async def _keep() -> None:
        lease = load_lease_json(lease_file)
        await renew_before_expiry(manager, network, lease, margin=renew_margin, on_renewed=_on_renewed)

    try:
        _run(_keep())
    except KeyboardInterrupt:
        _console.print("Stopping...")


def run() -> None:
    app()
