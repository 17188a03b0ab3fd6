"""Wrapper de httpx.

Por qué un wrapper:
- Estandariza timeouts y headers de todas las peticiones al coordinador.
- Hace cancelable una petición bloqueante (`perform`) sin dejar tareas vivas.
- Facilita testeo: el transporte se puede sustituir por un stub.
"""

from __future__ import annotations

import asyncio
import logging

import httpx

from core.cancellation import CancellationToken
from core.config import AppSettings

logger = logging.getLogger(__name__)


def build_async_client(
    settings: AppSettings | None = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
    extra_headers: dict[str, str] | None = None,
) -> httpx.AsyncClient:
    """Crea un `httpx.AsyncClient` con los defaults del cliente de leases.

    El timeout de lectura por defecto es `None`: un watch puede quedar en
    long-poll indefinidamente y se corta con un `CancellationToken`.
    """

    settings = settings or AppSettings()
    headers: dict[str, str] = {
        "User-Agent": settings.user_agent,
        "Accept": "application/json",
    }
    if extra_headers:
        headers.update(extra_headers)
    timeout = httpx.Timeout(
        settings.read_timeout_seconds,
        connect=settings.connect_timeout_seconds,
    )
    return httpx.AsyncClient(timeout=timeout, headers=headers, transport=transport)


async def _abort(task: asyncio.Task) -> None:
    """Cancela `task` y espera a que termine de verdad.

    La espera es incondicional: aunque el transporte ignore el abort, no se
    vuelve hasta que la tarea finaliza. Una respuesta que llegue igualmente
    se cierra.
    """

    task.cancel()
    interrupted = False
    while not task.done():
        try:
            await asyncio.wait({task})
        except asyncio.CancelledError:
            interrupted = True
    if not task.cancelled() and task.exception() is None:
        result = task.result()
        if isinstance(result, httpx.Response):
            await result.aclose()
    if interrupted:
        raise asyncio.CancelledError()


async def perform(
    client: httpx.AsyncClient,
    request: httpx.Request,
    cancel: CancellationToken,
) -> httpx.Response:
    """Ejecuta una única petición, abortable por `cancel`.

    Devuelve la respuesta (cuerpo ya leído) o propaga el error de transporte
    tal cual. Si la señal gana, aborta la petición, la drena y levanta el
    error del token, nunca el de la petición abortada.
    """

    err = cancel.error()
    if err is not None:
        raise err

    logger.debug("http.request %s %s", request.method, request.url)
    task = asyncio.create_task(client.send(request))
    waiter = asyncio.create_task(cancel.wait())
    try:
        await asyncio.wait({task, waiter}, return_when=asyncio.FIRST_COMPLETED)
    except asyncio.CancelledError:
        await _abort(waiter)
        await _abort(task)
        raise

    if task.done():
        await _abort(waiter)
        return task.result()

    logger.debug("http.cancelled %s %s", request.method, request.url)
    await _abort(task)
    err = cancel.error()
    assert err is not None
    raise err
