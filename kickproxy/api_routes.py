from __future__ import annotations

from typing import Awaitable, Callable

import httpx
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Route

from auth.errors import OAuthError, UpstreamAPIError
from auth.kick_oauth2 import KickOAuthClient

from .api_client import KickAPIClient
from .constants import LOGGER
from .web import extract_bearer_token, read_body


class ApiRoutes:
    """``/api`` endpoints: raw token grants and bearer-forwarded Kick API reads."""

    def __init__(
        self,
        *,
        oauth_client: KickOAuthClient,
        api_client_factory: Callable[[], KickAPIClient],
    ) -> None:
        self.oauth_client = oauth_client
        self.api_client_factory = api_client_factory

    def routes(self) -> list[Route]:
        return [
            Route("/api/app-access-token", self._handle_app_access_token, methods=["POST"]),
            Route("/api/user-access-token", self._handle_user_access_token, methods=["POST"]),
            Route("/api/refresh-token", self._handle_refresh_token, methods=["POST"]),
            Route("/api/revoke-token", self._handle_revoke_token, methods=["POST"]),
            Route("/api/user", self._handle_user, methods=["GET"]),
            Route("/api/channels/{username}", self._handle_channel, methods=["GET"]),
            Route(
                "/api/channels/{channel_id}/livestream",
                self._handle_livestream,
                methods=["GET"],
            ),
        ]

    # -- token grants ----------------------------------------------------------

    async def _handle_app_access_token(self, request: Request) -> Response:
        try:
            token = await self.oauth_client.get_app_access_token()
        except OAuthError as error:
            return _error(str(error), 500)
        return JSONResponse(token.to_payload())

    async def _handle_user_access_token(self, request: Request) -> Response:
        payload = await read_body(request)
        code = payload.get("code")
        code_verifier = payload.get("codeVerifier")
        if not code or not code_verifier:
            return _error("Missing code or codeVerifier", 400)

        try:
            token = await self.oauth_client.exchange_code_for_token(code, code_verifier)
        except OAuthError as error:
            return _error(str(error), 500)
        return JSONResponse(token.to_payload())

    async def _handle_refresh_token(self, request: Request) -> Response:
        payload = await read_body(request)
        refresh_token = payload.get("refreshToken")
        if not refresh_token:
            return _error("Missing refreshToken", 400)

        try:
            token = await self.oauth_client.refresh_access_token(refresh_token)
        except OAuthError as error:
            return _error(str(error), 500)
        return JSONResponse(token.to_payload())

    async def _handle_revoke_token(self, request: Request) -> Response:
        payload = await read_body(request)
        token = payload.get("token")
        if not token:
            return _error("Missing token", 400)

        try:
            await self.oauth_client.revoke_token(token, payload.get("tokenTypeHint"))
        except OAuthError as error:
            return _error(str(error), 500)
        return Response(status_code=204)

    # -- Kick API reads --------------------------------------------------------

    async def _handle_user(self, request: Request) -> Response:
        return await self._forward(
            request,
            lambda api: api.get_user(),
            "Error fetching user data",
        )

    async def _handle_channel(self, request: Request) -> Response:
        username = request.path_params["username"]
        return await self._forward(
            request,
            lambda api: api.get_channel(username),
            "Error fetching channel data",
        )

    async def _handle_livestream(self, request: Request) -> Response:
        channel_id = request.path_params["channel_id"]
        return await self._forward(
            request,
            lambda api: api.get_livestream(channel_id),
            "Error fetching livestream data",
        )

    async def _forward(
        self,
        request: Request,
        call: Callable[[KickAPIClient], Awaitable],
        failure_message: str,
    ) -> Response:
        token = extract_bearer_token(request.headers.get("authorization"))
        if token is None:
            return _error("Authorization token required", 401)

        api = self.api_client_factory()
        api.set_access_token(token)
        try:
            data = await call(api)
        except UpstreamAPIError as error:
            LOGGER.error("%s status=%s", failure_message, error.status_code)
            # Only client and server errors are passed through as-is.
            status_code = error.status_code if error.status_code >= 400 else 502
            return JSONResponse(
                {"error": failure_message, "details": error.body},
                status_code=status_code,
            )
        except httpx.HTTPError as error:
            LOGGER.error("%s: %s", failure_message, error)
            return JSONResponse(
                {"error": failure_message, "details": str(error)},
                status_code=500,
            )
        return JSONResponse(data)


def _error(message: str, status_code: int) -> Response:
    return JSONResponse({"error": message}, status_code=status_code)
