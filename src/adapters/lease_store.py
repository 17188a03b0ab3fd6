"""Persistencia JSON de un lease.

Por qué JSON:
- `leasectl renew`/`keep` trabajan sobre el lease que dejó `acquire`.
- Es el mismo formato del wire, así que el archivo es legible e interoperable.
"""

from __future__ import annotations

import json
from pathlib import Path

from pydantic import ValidationError

from core.domain.models import Lease
from core.errors import DecodeError


def export_lease_json(*, lease: Lease, output_path: Path) -> Path:
    """Exporta `Lease` a JSON UTF-8 con formato estable."""

    output_path.parent.mkdir(parents=True, exist_ok=True)
    payload = lease.model_dump(mode="json", by_alias=True, exclude_none=True)
    output_path.write_text(
        json.dumps(payload, ensure_ascii=False, indent=2, sort_keys=True) + "\n",
        encoding="utf-8",
    )
    return output_path


def load_lease_json(path: Path) -> Lease:
    raw = path.read_text(encoding="utf-8")
    try:
        return Lease.model_validate_json(raw)
    except ValidationError as exc:
        raise DecodeError(f"{path}: not a valid lease: {exc}") from exc
