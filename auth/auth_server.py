from __future__ import annotations

import hmac
import time

from starlette.requests import Request
from starlette.responses import (
    HTMLResponse,
    JSONResponse,
    PlainTextResponse,
    RedirectResponse,
    Response,
)
from starlette.routing import Route

from auth import pkce
from auth.errors import (
    AuthorizationCodeError,
    ClientCredentialsError,
    InvalidSessionError,
    ReauthenticationRequired,
    RefreshTokenError,
    RevocationError,
    StateMismatchError,
)
from auth.kick_oauth2 import KickOAuthClient
from auth.models import PendingAuthorization, TokenRecord
from auth.pending import PendingAuthStore
from auth.refresh_gate import RefreshGate
from auth.sessions import SessionStore
from auth.token_store import FileTokenStore, SessionTokenStore, TokenStore
from kickproxy.constants import (
    DEFAULT_SCOPES,
    LOGGER,
    PENDING_COOKIE_MAX_AGE,
    SESSION_COOKIE,
    SESSION_COOKIE_MAX_AGE,
)
from kickproxy.web import mask_token, read_body

DASHBOARD_HTML = """
<h1>Kick Dashboard</h1>
<p>You are authenticated!</p>
<a href="/auth/logout">Logout</a>
"""


class AuthServer:
    def __init__(
        self,
        *,
        oauth_client: KickOAuthClient,
        sessions: SessionStore,
        pending_store: PendingAuthStore,
        refresh_gate: RefreshGate,
        scope: str = DEFAULT_SCOPES,
        file_store: FileTokenStore | None = None,
        cookie_secure: bool = False,
        clock=time.time,
    ) -> None:
        self.oauth_client = oauth_client
        self.sessions = sessions
        self.pending_store = pending_store
        self.refresh_gate = refresh_gate
        self.scope = scope
        self.file_store = file_store
        self.cookie_secure = cookie_secure
        self._clock = clock

    # -- token store selection -------------------------------------------------

    def token_store_for(self, session_id: str | None) -> TokenStore:
        if self.file_store is not None:
            return self.file_store
        return SessionTokenStore(self.sessions, session_id or "")

    def consume_pending(self, session_id: str | None, state: str | None) -> PendingAuthorization:
        pending = self.pending_store.pop(session_id)
        if pending is None:
            raise InvalidSessionError("Unknown or expired login session.")
        if not state or not hmac.compare_digest(
            pending.state.encode("utf-8"), state.encode("utf-8")
        ):
            raise StateMismatchError("State parameter does not match the login session.")
        return pending

    # -- routes ----------------------------------------------------------------

    def routes(self) -> list[Route]:
        return [
            Route("/auth/login", self._handle_login, methods=["GET"]),
            Route("/auth/callback", self._handle_callback, methods=["GET"]),
            Route("/auth/token", self._handle_app_token, methods=["POST"]),
            Route("/auth/refresh", self._handle_refresh, methods=["POST"]),
            Route("/auth/logout", self._handle_logout, methods=["GET"]),
            Route("/dashboard", self._handle_dashboard, methods=["GET"]),
        ]

    # -- handlers --------------------------------------------------------------

    async def _handle_login(self, request: Request) -> Response:
        try:
            session = self.sessions.get(request.cookies.get(SESSION_COOKIE))
            if session is None:
                session = self.sessions.create()

            pair = pkce.generate_pkce_pair()
            state = pkce.generate_state()
            self.pending_store.put(
                session.session_id,
                state=state,
                code_verifier=pair.code_verifier,
            )
            authorize_url = self.oauth_client.get_authorization_url(
                self.scope, pair.code_challenge, state
            )
        except Exception:
            LOGGER.exception("Error initiating OAuth flow")
            return PlainTextResponse("Error initiating login flow", status_code=500)

        response = RedirectResponse(url=authorize_url, status_code=302)
        # An authenticated session keeps its full lifetime while re-logging in.
        max_age = PENDING_COOKIE_MAX_AGE
        if session.tokens is not None:
            max_age = SESSION_COOKIE_MAX_AGE
        self._set_session_cookie(response, session.session_id, max_age)
        return response

    async def _handle_callback(self, request: Request) -> Response:
        session_id = request.cookies.get(SESSION_COOKIE)
        provider_error = request.query_params.get("error")
        if provider_error:
            self.pending_store.pop(session_id)
            LOGGER.warning("Kick authorization returned an error: %s", provider_error)
            return PlainTextResponse(f"Authorization failed: {provider_error}", status_code=400)

        try:
            pending = self.consume_pending(session_id, request.query_params.get("state"))
        except InvalidSessionError:
            return PlainTextResponse("Invalid session", status_code=400)
        except StateMismatchError:
            LOGGER.warning("Rejected OAuth callback with mismatched state")
            return PlainTextResponse("Invalid state parameter", status_code=400)

        code = request.query_params.get("code")
        if not code:
            return PlainTextResponse("Missing authorization code", status_code=400)

        try:
            token_response = await self.oauth_client.exchange_code_for_token(
                code, pending.code_verifier
            )
        except AuthorizationCodeError as error:
            LOGGER.error("Error in OAuth callback: %s", error)
            return PlainTextResponse("Error processing authentication", status_code=500)

        store = self.token_store_for(session_id)
        await store.set(TokenRecord.from_token_response(token_response, now=self._clock()))
        LOGGER.info("Stored tokens for login session")

        response = JSONResponse(
            {
                "success": True,
                "message": "Successfully authenticated with Kick",
                "tokenInfo": {
                    "accessToken": mask_token(token_response.access_token),
                    "expiresIn": token_response.expires_in,
                    "tokenType": token_response.token_type,
                    "scope": token_response.scope,
                },
            }
        )
        self._set_session_cookie(response, session_id, SESSION_COOKIE_MAX_AGE)
        return response

    async def _handle_app_token(self, request: Request) -> Response:
        try:
            token_response = await self.oauth_client.get_app_access_token()
        except ClientCredentialsError as error:
            LOGGER.error("Error getting app access token: %s", error)
            return PlainTextResponse("Error obtaining access token", status_code=500)

        return JSONResponse(
            {
                "success": True,
                "accessToken": mask_token(token_response.access_token),
                "expiresIn": token_response.expires_in,
                "tokenType": token_response.token_type,
            }
        )

    async def _handle_refresh(self, request: Request) -> Response:
        payload = await read_body(request)
        refresh_token = payload.get("refreshToken")
        if not isinstance(refresh_token, str) or not refresh_token:
            return PlainTextResponse("Refresh token is required", status_code=400)

        try:
            token_response = await self.oauth_client.refresh_access_token(refresh_token)
        except RefreshTokenError as error:
            LOGGER.error("Error refreshing token: %s", error)
            return PlainTextResponse("Error refreshing token", status_code=500)

        return JSONResponse(
            {
                "success": True,
                "tokenInfo": {
                    "accessToken": mask_token(token_response.access_token),
                    "refreshToken": mask_token(token_response.refresh_token),
                    "expiresIn": token_response.expires_in,
                    "tokenType": token_response.token_type,
                    "scope": token_response.scope,
                },
            }
        )

    async def _handle_dashboard(self, request: Request) -> Response:
        session_id = request.cookies.get(SESSION_COOKIE)
        store = self.token_store_for(session_id)
        try:
            await self.refresh_gate.ensure_fresh(store)
        except ReauthenticationRequired as error:
            LOGGER.info("Redirecting to login: %s", error)
            self.sessions.destroy(session_id)
            return RedirectResponse(url="/auth/login", status_code=302)

        return HTMLResponse(DASHBOARD_HTML)

    async def _handle_logout(self, request: Request) -> Response:
        session_id = request.cookies.get(SESSION_COOKIE)
        store = self.token_store_for(session_id)

        access_token = await store.get_access_token()
        if access_token:
            try:
                await self.oauth_client.revoke_token(access_token, "access_token")
            except RevocationError as error:
                LOGGER.warning("Token revocation failed during logout: %s", error)

        await store.clear()
        self.sessions.destroy(session_id)

        response = RedirectResponse(url="/", status_code=302)
        response.delete_cookie(SESSION_COOKIE)
        return response

    # -- helpers ---------------------------------------------------------------

    def _set_session_cookie(self, response: Response, session_id: str, max_age: int) -> None:
        response.set_cookie(
            SESSION_COOKIE,
            session_id,
            max_age=max_age,
            httponly=True,
            secure=self.cookie_secure,
            samesite="lax",
        )
