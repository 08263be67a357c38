from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ROOT_DIR = Path(__file__).resolve().parents[1]
load_dotenv(dotenv_path=ROOT_DIR / ".env")


def _get_env(*keys: str, default: str | None = None) -> str | None:
    for k in keys:
        v = os.getenv(k)
        if v is not None and str(v).strip() != "":
            return v.strip()
    return default


def _get_int(*keys: str, default: int) -> int:
    v = _get_env(*keys, default=None)
    if v is None:
        return default
    try:
        return int(v)
    except ValueError:
        raise RuntimeError(f"{keys[0]} must be an integer, got {v!r}")


def _get_float(*keys: str, default: float) -> float:
    v = _get_env(*keys, default=None)
    if v is None:
        return default
    try:
        return float(v)
    except ValueError:
        raise RuntimeError(f"{keys[0]} must be a number, got {v!r}")


def _get_list(*keys: str, default: str) -> tuple[str, ...]:
    v = _get_env(*keys, default=default) or default
    return tuple(part.strip() for part in v.split(",") if part.strip())


@dataclass(frozen=True)
class Settings:
    database_url: str
    product_service_url: str
    product_service_timeout: float
    host: str
    port: int
    default_user_id: str
    save_retries: int
    cors_origins: tuple[str, ...]
    log_level: str


def load_settings() -> Settings:
    return Settings(
        database_url=_get_env("DATABASE_URL", default="sqlite+pysqlite:///./carts.db") or "",
        product_service_url=(
            _get_env("PRODUCT_SERVICE_URL", default="http://localhost:3001") or ""
        ).rstrip("/"),
        product_service_timeout=_get_float("PRODUCT_SERVICE_TIMEOUT", default=5.0),
        host=_get_env("HOST", default="0.0.0.0") or "0.0.0.0",
        port=_get_int("PORT", default=3000),
        default_user_id=_get_env("DEFAULT_USER_ID", default="1") or "1",
        save_retries=max(1, _get_int("SAVE_RETRIES", default=3)),
        cors_origins=_get_list("CORS_ORIGINS", default="*"),
        log_level=(_get_env("LOG_LEVEL", default="INFO") or "INFO").upper(),
    )


settings = load_settings()
