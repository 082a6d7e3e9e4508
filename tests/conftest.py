import pytest

KICK_ENV_KEYS = (
    "KICK_REDIRECT_URI",
    "KICK_SCOPES",
    "KICK_OAUTH_BASE_URL",
    "KICK_API_BASE_URL",
    "KICK_API_TIMEOUT",
    "KICK_TOKEN_STORE",
    "KICK_TOKEN_STORE_PATH",
    "KICK_REFRESH_BUFFER_SECONDS",
    "KICK_COOKIE_SECURE",
)


@pytest.fixture
def kick_env(monkeypatch):
    for key in KICK_ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("KICK_CLIENT_ID", "kick-client")
    monkeypatch.setenv("KICK_CLIENT_SECRET", "kick-secret")
    monkeypatch.setenv("KICK_API_DEBUG", "0")
    return monkeypatch
