"""Runtime configuration and logger wiring."""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from dotenv import load_dotenv

# Load .env file if present
load_dotenv()

_LOG_FORMAT = "[%(levelname)s] %(name)s: %(message)s"


def get_logger(name: str) -> logging.Logger:
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_LOG_FORMAT))
        logger.addHandler(handler)
    level = os.getenv("TRIPCORE_LOG_LEVEL", "INFO").upper()
    logger.setLevel(getattr(logging, level, logging.INFO))
    logger.propagate = False
    return logger


logger = get_logger(__name__)


@dataclass(frozen=True)
class Settings:
    optimizer_url: str = ""
    optimizer_api_key: str = ""
    optimizer_timeout: float = 30.0
    route_backend_url: str = ""
    route_backend_api_key: str = ""
    route_backend_timeout: float = 30.0
    allowed_origins: tuple[str, ...] = ("*",)


def _float_env(key: str, default: float) -> float:
    raw = os.getenv(key)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("Ignoring non-numeric %s=%r; using %.1f", key, raw, default)
        return default


def load_settings() -> Settings:
    """Read settings from the environment (after ``.env`` has been loaded)."""
    raw_origins = os.getenv("TRIPCORE_ALLOWED_ORIGINS") or "*"
    origins = tuple(origin.strip() for origin in raw_origins.split(",") if origin.strip())
    return Settings(
        optimizer_url=(os.getenv("TRIPCORE_OPTIMIZER_URL") or "").rstrip("/"),
        optimizer_api_key=os.getenv("TRIPCORE_OPTIMIZER_API_KEY") or "",
        optimizer_timeout=_float_env("TRIPCORE_OPTIMIZER_TIMEOUT", 30.0),
        route_backend_url=os.getenv("TRIPCORE_ROUTE_BACKEND_URL") or "",
        route_backend_api_key=os.getenv("TRIPCORE_ROUTE_BACKEND_API_KEY") or "",
        route_backend_timeout=_float_env("TRIPCORE_ROUTE_BACKEND_TIMEOUT", 30.0),
        allowed_origins=origins or ("*",),
    )
