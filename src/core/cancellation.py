"""Señal de cancelación para operaciones de red.

Un `CancellationToken` se "completa" por abort explícito (`cancel()`) o al
pasar su deadline. Las operaciones del cliente esperan `wait()` en paralelo a
la petición HTTP y, si la señal gana, devuelven `error()`.

El token pertenece a un único event loop; desde otro hilo usar
`loop.call_soon_threadsafe(token.cancel)`.
"""

from __future__ import annotations

import asyncio
import time

from core.errors import LeaseClientError


class Cancelled(LeaseClientError):
    """La operación se abortó explícitamente."""


class DeadlineExceeded(Cancelled):
    """El deadline del token venció antes de terminar la operación."""


class CancellationToken:
    """Abort explícito + deadline opcional (reloj monotónico)."""

    def __init__(self, *, timeout: float | None = None, deadline: float | None = None) -> None:
        if timeout is not None and deadline is not None:
            raise ValueError("pass either timeout or deadline, not both")
        if timeout is not None:
            deadline = time.monotonic() + timeout
        self._deadline = deadline
        self._error: Cancelled | None = None
        self._event: asyncio.Event | None = None

    @classmethod
    def with_timeout(cls, seconds: float | None) -> "CancellationToken":
        """Token con deadline relativo; `None` devuelve un token sin deadline."""

        return cls(timeout=seconds)

    @property
    def deadline(self) -> float | None:
        return self._deadline

    def remaining(self) -> float | None:
        """Segundos hasta el deadline (0 si ya venció, None si no hay)."""

        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def cancel(self, reason: str = "operation cancelled") -> None:
        if self._error is None:
            self._error = Cancelled(reason)
        if self._event is not None:
            self._event.set()

    def done(self) -> bool:
        if self._error is not None:
            return True
        if self._deadline is not None and time.monotonic() >= self._deadline:
            self._error = DeadlineExceeded("deadline exceeded")
            return True
        return False

    def error(self) -> Cancelled | None:
        """Error de la señal, o None si todavía no se completó."""

        self.done()
        return self._error

    async def wait(self) -> None:
        """Bloquea hasta que el token se complete."""

        if self.done():
            return
        if self._event is None:
            self._event = asyncio.Event()
        try:
            await asyncio.wait_for(self._event.wait(), timeout=self.remaining())
        except asyncio.TimeoutError:
            if self._error is None:
                self._error = DeadlineExceeded("deadline exceeded")
