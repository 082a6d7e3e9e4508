from __future__ import annotations

import logging

LOGGER = logging.getLogger("kickproxy")
APP_VERSION = "0.1.0"

KICK_API_BASE_URL = "https://kick.com/api"
DEFAULT_REDIRECT_URI = "http://localhost:3000/auth/callback"
DEFAULT_SCOPES = "user:read channel:read"
DEFAULT_API_TIMEOUT = 10.0
DEFAULT_REFRESH_BUFFER_SECONDS = 300
DEFAULT_TOKEN_STORE_PATH = "tokens.json"

TOKEN_STORE_MODES = {"session", "file"}

SESSION_COOKIE = "session_id"
PENDING_COOKIE_MAX_AGE = 10 * 60
SESSION_COOKIE_MAX_AGE = 24 * 60 * 60
