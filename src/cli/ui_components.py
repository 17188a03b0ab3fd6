"""Componentes de UI para CLI (Rich).

Por qué separar componentes:
- Evita mezclar lógica de comandos con detalles visuales.
- Permite reutilizar tablas en `acquire`, `renew`, `watch` y `keep`.
"""

from __future__ import annotations

from typing import Iterable

from rich.align import Align
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.domain.models import EventType, Lease, LeaseWatchResult, NetworkConfig


def print_banner(console: Console, base_url: str) -> None:
    title = Text("leasectl", style="bold cyan")
    subtitle = Text(f"Subnet leases • {base_url}", style="dim")
    body = Align.center(Text.assemble(title, "\n", subtitle), vertical="middle")
    console.print(Panel(body, border_style="cyan", padding=(1, 4)))


def build_config_table(config: NetworkConfig, *, network: str = "") -> Table:
    """Tabla clave/valor de la configuración de red (incluye campos extra)."""

    table = Table(title=f"Network config ({network or '_'})")
    table.add_column("Key", style="cyan", no_wrap=True)
    table.add_column("Value", style="white")
    for key, value in config.model_dump(mode="json", by_alias=True, exclude_none=True).items():
        table.add_row(str(key), str(value))
    return table


def _lease_row(lease: Lease) -> tuple[str, str, str, str]:
    public_ip = str(lease.attrs.public_ip) if lease.attrs else "-"
    backend = (lease.attrs.backend_type or "-") if lease.attrs else "-"
    return str(lease.subnet), public_ip, backend, lease.expiration.isoformat()


def build_leases_table(leases: Iterable[Lease], *, title: str = "Leases") -> Table:
    table = Table(title=title)
    table.add_column("Subnet", style="cyan", no_wrap=True)
    table.add_column("Public IP", style="white")
    table.add_column("Backend", style="magenta")
    table.add_column("Expires", style="dim")
    for lease in leases:
        table.add_row(*_lease_row(lease))
    return table


def build_watch_table(result: LeaseWatchResult) -> Table:
    """Eventos del watch, o el snapshot si el cursor quedó fuera de rango."""

    if not result.events:
        return build_leases_table(result.snapshot, title=f"Snapshot (cursor {result.cursor})")

    table = Table(title=f"Events (cursor {result.cursor})")
    table.add_column("Event", no_wrap=True)
    table.add_column("Subnet", style="cyan", no_wrap=True)
    table.add_column("Public IP", style="white")
    table.add_column("Backend", style="magenta")
    table.add_column("Expires", style="dim")
    for event in result.events:
        label = "[green]added[/green]" if event.type is EventType.ADDED else "[red]removed[/red]"
        table.add_row(label, *_lease_row(event.lease))
    return table
