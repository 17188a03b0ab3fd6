"""Errores del cliente de leases.

Taxonomía:
- `EncodeError`: el payload de la petición no se pudo serializar (antes de I/O).
- `DecodeError`: la respuesta no encaja con el modelo esperado.
- `ProtocolError`: violaciones de contrato (status != 200, cursor inválido).

Los errores de transporte son los de `httpx` y no se envuelven. La
cancelación vive en `core.cancellation`.
"""

from __future__ import annotations


class LeaseClientError(Exception):
    """Base de todos los errores propios del cliente."""


class EncodeError(LeaseClientError):
    """El registro no pudo serializarse a JSON."""


class DecodeError(LeaseClientError):
    """El cuerpo de la respuesta no coincide con el registro esperado."""


class ProtocolError(LeaseClientError):
    """El cliente o el servidor violaron el contrato del protocolo."""


class CursorError(ProtocolError):
    """Cursor de watch con un tipo distinto de `None`/`str`."""


class HTTPStatusError(ProtocolError):
    """Respuesta con status distinto de 200.

    El mensaje combina la línea de status y el cuerpo completo, tal cual.
    """

    def __init__(self, status_code: int, reason: str, body: str) -> None:
        self.status_code = status_code
        self.reason = reason
        self.body = body
        super().__init__(f"{status_code} {reason}: {body}")
