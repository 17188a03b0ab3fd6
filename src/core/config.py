"""Configuración del cliente de leases.

Por qué aquí:
- Centraliza variables de entorno (pydantic-settings) sin contaminar la CLI.
- El adaptador HTTP y la CLI leen el mismo contrato de configuración.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def get_user_config_dir() -> Path:
    """Directorio de configuración por usuario (cross-platform, sin dependencias)."""

    if sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA", str(Path.home())))
        return base / "leasectl"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "leasectl"

    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "leasectl"
    return Path.home() / ".config" / "leasectl"


def get_user_env_file() -> Path:
    return get_user_config_dir() / ".env"


def _parse_env_lines(text: str) -> dict[str, str]:
    data: dict[str, str] = {}
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip().strip('"').strip("'")
        if key:
            data[key] = value
    return data


def write_user_env_vars(values: dict[str, str | None], env_path: Path | None = None) -> Path:
    """Escribe/actualiza variables en el .env global del usuario.

    Las claves existentes se conservan; un valor `None` no pisa el anterior.
    """

    env_path = env_path or get_user_env_file()
    env_path.parent.mkdir(parents=True, exist_ok=True)

    existing: dict[str, str] = {}
    if env_path.exists():
        existing = _parse_env_lines(env_path.read_text(encoding="utf-8"))

    existing.update({k: v for k, v in values.items() if v is not None})

    lines = ["# leasectl user config (.env)"]
    for key in sorted(existing.keys()):
        lines.append(f"{key}={existing[key]}")
    env_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return env_path


class AppSettings(BaseSettings):
    """Configuración central del cliente.

    Orden de carga: variables `LEASECTL_*`, luego `.env` del proyecto y por
    último el `.env` del usuario.
    """

    model_config = SettingsConfigDict(
        env_prefix="LEASECTL_",
        extra="ignore",
        case_sensitive=False,
        env_file=(".env", str(get_user_env_file())),
        env_file_encoding="utf-8",
    )

    server_addr: str = Field(
        default="127.0.0.1:8888",
        min_length=1,
        description="host:port del coordinador de subredes.",
    )
    scheme: str = Field(
        default="http",
        pattern=r"^https?$",
        description="Esquema de la URL base (http/https).",
    )
    api_version: str = Field(
        default="v1",
        min_length=1,
        description="Prefijo de versión de la API.",
    )

    connect_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Timeout de conexión TCP (segundos).",
    )
    read_timeout_seconds: float | None = Field(
        default=None,
        gt=0,
        description="Timeout de lectura; None para permitir long-poll en watch.",
    )
    user_agent: str = Field(
        default="leasectl/0.1",
        min_length=1,
        description="User-Agent de las peticiones.",
    )

    renew_margin_seconds: float = Field(
        default=3600.0,
        ge=0,
        description="Renovar el lease este tiempo antes de que expire.",
    )
    log_level: str = Field(
        default="WARNING",
        description="Nivel de logging para la CLI.",
    )

    @property
    def base_url(self) -> str:
        """Endpoint base: `scheme://host:port/<api-version>`."""

        addr = self.server_addr.strip().rstrip("/")
        version = self.api_version.strip("/")
        return f"{self.scheme}://{addr}/{version}"
