"""Cliente remoto del protocolo de leases (HTTP/JSON).

Cada operación sigue la misma forma: construir la URL, serializar el cuerpo
si lo hay, ejecutar vía `perform` (cancelable), y traducir status + cuerpo a
un registro o a un error tipado. Una operación = un intento de red; no hay
reintentos.
"""

from __future__ import annotations

import logging
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel, ValidationError
from pydantic_core import PydanticSerializationError

from adapters.http_client import build_async_client, perform
from core.addressing import build_url
from core.cancellation import CancellationToken
from core.config import AppSettings
from core.domain.models import (
    Cursor,
    Lease,
    LeaseAttrs,
    LeaseWatchResult,
    NetworkConfig,
    check_cursor,
)
from core.errors import DecodeError, EncodeError, HTTPStatusError
from core.interfaces.subnet_manager import SubnetManager

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

JSON_CONTENT_TYPE = "application/json"


def _encode(record: BaseModel) -> bytes:
    try:
        return record.model_dump_json(by_alias=True, exclude_none=True).encode("utf-8")
    except PydanticSerializationError as exc:
        raise EncodeError(f"cannot serialize {type(record).__name__}: {exc}") from exc


def _decode(response: httpx.Response, model: type[ModelT]) -> ModelT:
    try:
        return model.model_validate_json(response.content)
    except ValidationError as exc:
        raise DecodeError(f"cannot decode {model.__name__}: {exc}") from exc


def _http_error(response: httpx.Response) -> HTTPStatusError:
    # El cuerpo ya está leído; si la lectura hubiera fallado, `perform` habría
    # propagado ese error en su lugar.
    return HTTPStatusError(response.status_code, response.reason_phrase, response.text)


class RemoteManager(SubnetManager):
    """Implementa `SubnetManager` enviando peticiones al coordinador.

    El endpoint base (`scheme://host:port/<version>`) se fija al construir y no
    cambia. Cada llamada abre y cierra su propio `httpx.AsyncClient`.
    """

    def __init__(
        self,
        base_url: str | None = None,
        *,
        settings: AppSettings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings or AppSettings()
        self._base = (base_url or self._settings.base_url).rstrip("/")
        self._transport = transport

    @classmethod
    def from_listen_addr(cls, listen_addr: str, **kwargs: Any) -> "RemoteManager":
        """Atajo para `http://<listen_addr>/v1`."""

        return cls(f"http://{listen_addr}/v1", **kwargs)

    @property
    def base(self) -> str:
        return self._base

    def url(self, network: str, *parts: str) -> str:
        return build_url(self._base, network, *parts)

    async def _do(
        self,
        method: str,
        url: str,
        cancel: CancellationToken | None,
        *,
        body: bytes | None = None,
        params: dict[str, str] | None = None,
    ) -> httpx.Response:
        headers = {"Content-Type": JSON_CONTENT_TYPE} if body is not None else None
        async with build_async_client(self._settings, transport=self._transport) as client:
            request = client.build_request(method, url, content=body, headers=headers, params=params)
            response = await perform(client, request, cancel or CancellationToken())
        if response.status_code != httpx.codes.OK:
            raise _http_error(response)
        return response

    async def get_network_config(
        self, network: str, *, cancel: CancellationToken | None = None
    ) -> NetworkConfig:
        response = await self._do("GET", self.url(network, "config"), cancel)
        return _decode(response, NetworkConfig)

    async def acquire_lease(
        self, network: str, attrs: LeaseAttrs, *, cancel: CancellationToken | None = None
    ) -> Lease:
        body = _encode(attrs)
        response = await self._do("POST", self.url(network, "leases/"), cancel, body=body)
        return _decode(response, Lease)

    async def renew_lease(
        self, network: str, lease: Lease, *, cancel: CancellationToken | None = None
    ) -> Lease:
        """Renueva `lease` y lo reescribe en sitio con la respuesta del servidor.

        Si algo falla, `lease` queda intacto. El caller no debe compartir la
        misma instancia entre renovaciones concurrentes sin sincronizar.
        """

        body = _encode(lease)
        response = await self._do("PUT", self.url(network, "leases", lease.key()), cancel, body=body)
        renewed = _decode(response, Lease)
        lease.overwrite(renewed)
        logger.debug("lease.renewed %s until %s", lease.key(), lease.expiration.isoformat())
        return lease

    async def watch_leases(
        self, network: str, cursor: Cursor = None, *, cancel: CancellationToken | None = None
    ) -> LeaseWatchResult:
        """Long-poll de cambios de leases desde `cursor`.

        Un cursor que no sea `None`/`str` falla sin tocar la red; un cursor
        no-string en la respuesta es un `ProtocolError` aunque el status sea 200.
        """

        cursor = check_cursor(cursor)
        params = {"next": cursor} if cursor is not None else None
        response = await self._do("GET", self.url(network, "leases"), cancel, params=params)
        return _decode(response, LeaseWatchResult)
