"""Bucles de larga duración sobre un `SubnetManager`.

- `iter_watch_results`: encadena watches, cada uno desde el cursor anterior.
- `renew_before_expiry`: mantiene vivo un lease renovándolo antes de expirar.

Ninguno reintenta: el primer error se propaga al caller, que decide la
política de reintentos.
"""

from __future__ import annotations

import asyncio
import logging
from typing import AsyncIterator, Callable

from core.cancellation import CancellationToken, Cancelled
from core.domain.models import Cursor, Lease, LeaseWatchResult
from core.interfaces.subnet_manager import SubnetManager

logger = logging.getLogger(__name__)


async def sleep_or_cancel(seconds: float, cancel: CancellationToken) -> bool:
    """Duerme `seconds`; devuelve True si el token se completó antes."""

    if cancel.done():
        return True
    try:
        await asyncio.wait_for(cancel.wait(), timeout=max(0.0, seconds))
    except asyncio.TimeoutError:
        return cancel.done()
    return True


async def iter_watch_results(
    manager: SubnetManager,
    network: str,
    *,
    cursor: Cursor = None,
    cancel: CancellationToken | None = None,
) -> AsyncIterator[LeaseWatchResult]:
    """Produce resultados de watch sucesivos hasta que el token se complete.

    La cancelación termina el iterador limpiamente; cualquier otro error se
    propaga.
    """

    cancel = cancel or CancellationToken()
    while not cancel.done():
        try:
            result = await manager.watch_leases(network, cursor, cancel=cancel)
        except Cancelled:
            return
        cursor = result.cursor
        yield result


async def renew_before_expiry(
    manager: SubnetManager,
    network: str,
    lease: Lease,
    *,
    margin: float,
    cancel: CancellationToken | None = None,
    on_renewed: Callable[[Lease], None] | None = None,
) -> None:
    """Renueva `lease` en sitio `margin` segundos antes de cada expiración.

    Vuelve cuando el token se completa. `lease` es del caller y se muta en
    cada renovación; no compartirla con otros renovadores concurrentes.
    """

    cancel = cancel or CancellationToken()
    while True:
        wait = lease.expires_in() - margin
        logger.debug("lease.renew_scheduled %s in %.1fs", lease.key(), max(0.0, wait))
        if await sleep_or_cancel(wait, cancel):
            return
        try:
            await manager.renew_lease(network, lease, cancel=cancel)
        except Cancelled:
            return
        if on_renewed is not None:
            on_renewed(lease)
