from __future__ import annotations

import contextlib
import os
import time

import uvicorn
from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import HTMLResponse, JSONResponse, Response
from starlette.routing import Route

from auth.auth_server import AuthServer
from auth.kick_oauth2 import KICK_OAUTH_BASE_URL, KickOAuthClient
from auth.pending import PendingAuthStore
from auth.refresh_gate import RefreshGate
from auth.sessions import SessionStore
from auth.token_store import FileTokenStore
from kickproxy.api_client import KickAPIClient
from kickproxy.api_routes import ApiRoutes
from kickproxy.constants import (
    APP_VERSION,
    DEFAULT_API_TIMEOUT,
    DEFAULT_REFRESH_BUFFER_SECONDS,
    DEFAULT_TOKEN_STORE_PATH,
    KICK_API_BASE_URL,
    LOGGER,
)
from kickproxy.env import (
    get_env_float,
    get_env_int,
    is_truthy,
    load_credentials,
    load_env,
    load_scopes,
    setup_logging,
    token_store_mode,
    validate_env,
)
from kickproxy.http import build_http_client
from kickproxy.web import log_requests

HOME_HTML = '<h1>Kick API OAuth Client</h1><a href="/auth/login">Login with Kick</a>'


async def home_route(request: Request) -> Response:
    del request
    return HTMLResponse(HOME_HTML)


def build_health_route(mode: str) -> Route:
    async def health_route(request: Request) -> Response:
        del request
        return JSONResponse(
            {
                "status": "ok",
                "version": APP_VERSION,
                "token_store": mode,
            }
        )

    return Route("/health", health_route, methods=["GET"])


def create_app(
    *,
    oauth_client: KickOAuthClient | None = None,
    clock=time.time,
) -> Starlette:
    load_env()
    debug_enabled = setup_logging()
    validate_env()

    credentials = load_credentials()
    oauth_client = oauth_client or KickOAuthClient(
        credentials,
        oauth_base_url=os.getenv("KICK_OAUTH_BASE_URL", KICK_OAUTH_BASE_URL),
    )

    api_base_url = os.getenv("KICK_API_BASE_URL", KICK_API_BASE_URL)
    timeout = get_env_float("KICK_API_TIMEOUT", DEFAULT_API_TIMEOUT)
    http_client = build_http_client(timeout=timeout, debug_enabled=debug_enabled)

    mode = token_store_mode()
    file_store = None
    if mode == "file":
        file_store = FileTokenStore(
            os.getenv("KICK_TOKEN_STORE_PATH", DEFAULT_TOKEN_STORE_PATH)
        )
        LOGGER.info("Using file token store at %s", file_store.path)

    refresh_gate = RefreshGate(
        oauth_client,
        buffer_seconds=get_env_int(
            "KICK_REFRESH_BUFFER_SECONDS", DEFAULT_REFRESH_BUFFER_SECONDS
        ),
        clock=clock,
    )
    auth_server = AuthServer(
        oauth_client=oauth_client,
        sessions=SessionStore(clock=clock),
        pending_store=PendingAuthStore(clock=clock),
        refresh_gate=refresh_gate,
        scope=load_scopes(),
        file_store=file_store,
        cookie_secure=is_truthy(os.getenv("KICK_COOKIE_SECURE")),
        clock=clock,
    )
    api_routes = ApiRoutes(
        oauth_client=oauth_client,
        api_client_factory=lambda: KickAPIClient(api_base_url, client=http_client),
    )

    @contextlib.asynccontextmanager
    async def lifespan(app: Starlette):
        LOGGER.info("Kick OAuth client ready (token store: %s)", mode)
        try:
            yield
        finally:
            await http_client.aclose()

    routes = [
        Route("/", home_route, methods=["GET"]),
        build_health_route(mode),
        *auth_server.routes(),
        *api_routes.routes(),
    ]
    app = Starlette(
        routes=routes,
        middleware=[Middleware(BaseHTTPMiddleware, dispatch=log_requests)],
        lifespan=lifespan,
    )
    app.state.auth_server = auth_server
    app.state.http_client = http_client
    return app


def main() -> None:
    load_env()
    host = os.getenv("HOST", "127.0.0.1")
    port = get_env_int("PORT", 3000)
    app = create_app()
    LOGGER.info("Server is running on http://%s:%s", host, port)
    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    main()
