"""Direcciones de recursos por red.

`build_url` es puro: normaliza, nunca rechaza.
"""

from __future__ import annotations

import posixpath
import re

# Segmento reservado para "sin red concreta".
NO_NETWORK = "_"

_MULTI_SLASH = re.compile(r"/{2,}")


def build_url(base: str, network: str, *parts: str) -> str:
    """Construye `base` + `/<network>/<parts...>`.

    - `""` se normaliza a `_`.
    - Se antepone `/` a la red si no lo trae.
    - Separadores duplicados y `.`/`..` se limpian; una `/` final en el
      último segmento se conserva (`leases/` apunta a la colección).
    """

    if not network:
        network = "/" + NO_NETWORK
    if not network.startswith("/"):
        network = "/" + network

    raw = "/".join((network, *parts))
    cleaned = posixpath.normpath(_MULTI_SLASH.sub("/", raw))
    if parts and parts[-1].endswith("/") and not cleaned.endswith("/"):
        cleaned += "/"
    return base + cleaned
