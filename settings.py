from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from persistence.paths import default_data_file

DEFAULT_MAX_BODY_BYTES = 5 * 1024 * 1024
DEFAULT_REQUEST_TIMEOUT_SECONDS = 30.0


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return int(raw.strip())


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return float(raw.strip())


@dataclass(frozen=True)
class Settings:
    # Deployment
    environment: str

    # Persistence
    data_file_path: Path

    # Request guards
    max_body_bytes: int = DEFAULT_MAX_BODY_BYTES
    request_timeout_seconds: float = DEFAULT_REQUEST_TIMEOUT_SECONDS

    # Debug / logging
    debug_log_requests: bool = True
    log_level: str = "INFO"

    # Optional front-end bundle served at "/"
    static_dir: Path | None = None


def get_settings() -> Settings:
    environment = os.getenv("APP_ENV", "development").strip().lower() or "development"

    # Some hosts only allow writes under a specific directory (e.g. /tmp), so
    # production deployments may point the data file elsewhere.
    override = os.getenv("DATA_FILE_PATH", "").strip()
    if environment == "production" and override:
        data_file_path = Path(override)
    else:
        data_file_path = default_data_file()

    static_raw = os.getenv("STATIC_DIR", "").strip()

    return Settings(
        environment=environment,
        data_file_path=data_file_path,
        max_body_bytes=_env_int("MAX_BODY_BYTES", DEFAULT_MAX_BODY_BYTES),
        request_timeout_seconds=_env_float("REQUEST_TIMEOUT_SECONDS", DEFAULT_REQUEST_TIMEOUT_SECONDS),
        debug_log_requests=_env_bool("DEBUG_LOG_REQUESTS", True),
        log_level=os.getenv("LOG_LEVEL", "INFO").strip().upper() or "INFO",
        static_dir=Path(static_raw) if static_raw else None,
    )
