from tests.oauth_helpers import _build_app


def test_health_returns_200(kick_env) -> None:
    _, client, _ = _build_app(kick_env)

    response = client.get("/health")

    assert response.status_code == 200


def test_health_response_format(kick_env) -> None:
    _, client, _ = _build_app(kick_env)

    payload = client.get("/health").json()

    assert payload == {"status": "ok", "version": "0.1.0", "token_store": "session"}


def test_home_links_to_login(kick_env) -> None:
    _, client, _ = _build_app(kick_env)

    response = client.get("/")

    assert response.status_code == 200
    assert 'href="/auth/login"' in response.text
