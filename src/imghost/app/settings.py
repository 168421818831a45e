from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from imghost.exceptions import ConfigError

MIB = 1024 * 1024


class HostSettings(BaseSettings):
    """
    Immutable runtime configuration for the hosting service.

    Env support:
      - IMGHOST_* variables (IMGHOST_PORT, IMGHOST_UPLOAD_DIR, ...)
      - a KEY=value file passed to `load_settings`, same keys
    """

    name: str = Field(default="imghost")

    # listener
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8080, ge=0, le=65535)

    # routing
    serve_path: str = Field(default="/i")
    static_path: str = Field(default="/static")

    # storage
    upload_dir: Path = Field(default=Path("./uploads"))
    name_length: int = Field(default=6, ge=1, le=64)
    name_attempts: int = Field(default=8, ge=1)
    max_upload_bytes: int = Field(default=5 * MIB, gt=0)
    max_remote_bytes: int = Field(default=10 * MIB, gt=0)

    # timeouts, seconds
    read_timeout: float = Field(default=15.0, gt=0)
    write_timeout: float = Field(default=15.0, gt=0)
    idle_timeout: float = Field(default=60.0, gt=0)
    graceful_timeout: float = Field(default=15.0, ge=0)

    model_config = SettingsConfigDict(
        env_prefix="IMGHOST_",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    @field_validator("serve_path", "static_path")
    @classmethod
    def _normalize_prefix(cls, v: str) -> str:
        v = v.strip()
        if not v.startswith("/"):
            v = "/" + v
        v = v.rstrip("/")
        if not v:
            raise ValueError("prefix must not be the site root")
        if "{" in v or "}" in v:
            raise ValueError("prefix must be a literal path")
        return v


def load_settings(path: str | Path | None = None, **overrides: Any) -> HostSettings:
    """
    Load settings once at startup.

    `path` names a KEY=value file; it must exist when given. Keyword
    overrides that are None are dropped so file/env values still apply.
    Any problem is reported as ConfigError.
    """
    filtered = {k: v for k, v in overrides.items() if v is not None}
    if path is not None:
        p = Path(path)
        if not p.is_file():
            raise ConfigError(f"config file not found: {p}")
        filtered["_env_file"] = p
    try:
        return HostSettings(**filtered)
    except ValidationError as exc:
        raise ConfigError(f"invalid configuration: {exc}") from exc
