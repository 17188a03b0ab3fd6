"""Modelos del dominio (Pydantic v2).

Por qué Pydantic en el dominio:
- La validación estructural del JSON del coordinador ocurre en el borde,
  no repartida por cada llamada.
- Los alias reproducen las claves del protocolo (`Subnet`, `PublicIP`...);
  `populate_by_name` permite construirlos con nombres Python.

Nota:
- Estos modelos describen *qué* intercambia el protocolo, no *cómo* se
  transporta.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import IntEnum
from ipaddress import IPv4Address, IPv4Network
from typing import Any

from pydantic import BaseModel, Field, field_validator
from pydantic.config import ConfigDict

from core.errors import CursorError

Cursor = str | None


def check_cursor(value: object) -> Cursor:
    """Único punto de validación del cursor de watch.

    Un cursor es opaco: o no hay (`None`, empezar de cero) o es un `str` que
    se devuelve tal cual al servidor. Cualquier otro tipo es un error.
    """

    if value is None or isinstance(value, str):
        return value
    raise CursorError(f"watch cursor must be a string or None, got {type(value).__name__}")


def subnet_key(subnet: IPv4Network) -> str:
    """Clave estable de una subred: `10.1.2.0/24` -> `10.1.2.0-24`."""

    return f"{subnet.network_address}-{subnet.prefixlen}"


def parse_subnet_key(key: str) -> IPv4Network:
    """Inversa de `subnet_key`; `ValueError` si la clave no es válida."""

    addr, sep, prefix = key.partition("-")
    if not sep or not prefix.isdigit():
        raise ValueError(f"invalid subnet key: {key!r}")
    return IPv4Network(f"{addr}/{prefix}")


class NetworkConfig(BaseModel):
    """Configuración de una red, definida por el servidor.

    El cliente no la interpreta: los campos desconocidos se conservan
    (`extra="allow"`) para que el round-trip sea opaco.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    network: IPv4Network | None = Field(
        default=None,
        alias="Network",
        description="Rango total de la red overlay.",
    )
    subnet_min: IPv4Address | None = Field(default=None, alias="SubnetMin")
    subnet_max: IPv4Address | None = Field(default=None, alias="SubnetMax")
    subnet_len: int = Field(
        default=0,
        ge=0,
        le=32,
        alias="SubnetLen",
        description="Longitud de prefijo de cada subred asignada.",
    )
    backend_type: str | None = Field(default=None, alias="BackendType")
    backend: Any = Field(
        default=None,
        alias="Backend",
        description="Configuración cruda del backend (JSON).",
    )


class LeaseAttrs(BaseModel):
    """Atributos que el nodo pide para su lease."""

    model_config = ConfigDict(populate_by_name=True)

    public_ip: IPv4Address = Field(
        ...,
        alias="PublicIP",
        description="IP pública del nodo solicitante.",
    )
    backend_type: str | None = Field(default=None, alias="BackendType")
    backend_data: Any = Field(
        default=None,
        alias="BackendData",
        description="Datos específicos del backend (JSON crudo).",
    )


class Lease(BaseModel):
    """Lease de una subred.

    Es mutable: `RemoteManager.renew_lease` reescribe la instancia del caller
    con la respuesta autoritativa del servidor (ver `overwrite`).
    """

    model_config = ConfigDict(populate_by_name=True)

    subnet: IPv4Network = Field(..., alias="Subnet")
    attrs: LeaseAttrs | None = Field(default=None, alias="Attrs")
    expiration: datetime = Field(
        default_factory=lambda: datetime.min.replace(tzinfo=timezone.utc),
        alias="Expiration",
        description="Instante de expiración (RFC 3339 en el wire).",
    )

    def key(self) -> str:
        return subnet_key(self.subnet)

    def overwrite(self, other: Lease) -> None:
        """Reemplaza todos los campos con los de `other`, en sitio."""

        for name in type(self).model_fields:
            setattr(self, name, getattr(other, name))
        self.__pydantic_fields_set__ = set(other.model_fields_set)

    def expires_in(self, now: datetime | None = None) -> float:
        """Segundos hasta la expiración (negativo si ya expiró)."""

        now = now or datetime.now(timezone.utc)
        expiration = self.expiration
        if expiration.tzinfo is None:
            expiration = expiration.replace(tzinfo=timezone.utc)
        return (expiration - now).total_seconds()


class EventType(IntEnum):
    ADDED = 0
    REMOVED = 1


class Event(BaseModel):
    type: EventType
    lease: Lease


class LeaseWatchResult(BaseModel):
    """Resultado de un watch: eventos incrementales o un snapshot completo.

    Si `events` viene vacío, el cursor quedó fuera de rango y `snapshot`
    contiene el estado actual (aunque sea vacío). `cursor` es siempre un
    `str` tras la validación.
    """

    events: list[Event] = Field(default_factory=list)
    snapshot: list[Lease] = Field(default_factory=list)
    cursor: str = Field(default=None, validate_default=True)  # type: ignore[assignment]

    @field_validator("events", "snapshot", mode="before")
    @classmethod
    def _null_as_empty(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("cursor", mode="before")
    @classmethod
    def _cursor_is_string(cls, value: Any) -> str:
        # CursorError no es ValueError: pydantic la deja propagar sin envolver.
        if not isinstance(value, str):
            raise CursorError(f"lease watch returned non-string cursor: {value!r}")
        return value
