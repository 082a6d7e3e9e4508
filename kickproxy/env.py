from __future__ import annotations

import logging
import os
from pathlib import Path
from urllib.parse import urlparse

from dotenv import load_dotenv

from auth.models import ClientCredentials

from .constants import (
    DEFAULT_REDIRECT_URI,
    DEFAULT_SCOPES,
    LOGGER,
    TOKEN_STORE_MODES,
)


def is_truthy(value: str | None) -> bool:
    if value is None:
        return False
    return value.strip().lower() in {"1", "true", "yes", "on"}


def get_env_int(key: str, default: int) -> int:
    raw = os.getenv(key, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise RuntimeError(f"{key} must be an integer value.")


def get_env_float(key: str, default: float) -> float:
    raw = os.getenv(key, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        raise RuntimeError(f"{key} must be a number.")


def load_env() -> None:
    env_path = Path(__file__).resolve().parent.parent / ".env"
    if not env_path.exists():
        return
    load_dotenv(env_path, override=True)


def validate_env() -> None:
    required = ("KICK_CLIENT_ID", "KICK_CLIENT_SECRET")
    missing = [key for key in required if not os.getenv(key, "").strip()]
    if missing:
        raise RuntimeError(f"Missing required environment variables: {', '.join(missing)}")

    redirect_uri = os.getenv("KICK_REDIRECT_URI", DEFAULT_REDIRECT_URI).strip()
    parsed = urlparse(redirect_uri)
    if parsed.scheme not in {"http", "https"} or not parsed.netloc:
        raise RuntimeError(
            "KICK_REDIRECT_URI must be an absolute http(s) URL (for example: "
            "http://localhost:3000/auth/callback)."
        )

    mode = token_store_mode()
    if mode not in TOKEN_STORE_MODES:
        raise RuntimeError(
            f"KICK_TOKEN_STORE must be one of: {', '.join(sorted(TOKEN_STORE_MODES))}."
        )

    if get_env_int("KICK_REFRESH_BUFFER_SECONDS", 0) < 0:
        raise RuntimeError("KICK_REFRESH_BUFFER_SECONDS must not be negative.")


def load_credentials() -> ClientCredentials:
    return ClientCredentials(
        client_id=os.getenv("KICK_CLIENT_ID", "").strip(),
        client_secret=os.getenv("KICK_CLIENT_SECRET", "").strip(),
        redirect_uri=os.getenv("KICK_REDIRECT_URI", DEFAULT_REDIRECT_URI).strip(),
    )


def load_scopes() -> str:
    return " ".join(os.getenv("KICK_SCOPES", DEFAULT_SCOPES).split())


def token_store_mode() -> str:
    return os.getenv("KICK_TOKEN_STORE", "session").strip().lower()


def setup_logging() -> bool:
    debug_enabled = is_truthy(os.getenv("KICK_API_DEBUG", "1"))
    if debug_enabled:
        logging.basicConfig(level=logging.INFO)
        LOGGER.setLevel(logging.INFO)
    return debug_enabled
