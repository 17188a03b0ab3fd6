"""Contrato de un gestor de subredes.

Por qué Protocol:
- Los bucles de `core.services` funcionan contra cualquier implementación
  (el cliente remoto o un doble de test) sin herencia rígida.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from core.cancellation import CancellationToken
from core.domain.models import Cursor, Lease, LeaseAttrs, LeaseWatchResult, NetworkConfig


@runtime_checkable
class SubnetManager(Protocol):
    """Las cuatro operaciones del protocolo de leases.

    Todas son asíncronas y aceptan un `CancellationToken`; al completarse la
    señal dejan de esperar y levantan el error del token.
    """

    async def get_network_config(
        self, network: str, *, cancel: CancellationToken | None = None
    ) -> NetworkConfig: ...

    async def acquire_lease(
        self, network: str, attrs: LeaseAttrs, *, cancel: CancellationToken | None = None
    ) -> Lease: ...

    async def renew_lease(
        self, network: str, lease: Lease, *, cancel: CancellationToken | None = None
    ) -> Lease:
        """Renueva `lease` y lo actualiza en sitio con la respuesta del servidor."""

        ...

    async def watch_leases(
        self, network: str, cursor: Cursor = None, *, cancel: CancellationToken | None = None
    ) -> LeaseWatchResult: ...
