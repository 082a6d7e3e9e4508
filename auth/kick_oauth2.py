from __future__ import annotations

import urllib.parse
from dataclasses import dataclass, field

import httpx

from auth.errors import (
    AuthorizationCodeError,
    ClientCredentialsError,
    OAuthError,
    RefreshTokenError,
    RevocationError,
)
from auth.models import ClientCredentials
from kickproxy.constants import LOGGER

KICK_OAUTH_BASE_URL = "https://id.kick.com"
FORM_HEADERS = {"Content-Type": "application/x-www-form-urlencoded"}


@dataclass
class TokenResponse:
    access_token: str
    refresh_token: str | None
    expires_in: int | None
    token_type: str
    scope: str
    raw: dict = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def from_payload(cls, payload, *, error_cls: type[OAuthError] = OAuthError) -> "TokenResponse":
        if not isinstance(payload, dict):
            raise error_cls("Token response must be a JSON object.")

        access_token = payload.get("access_token")
        refresh_token = payload.get("refresh_token")
        expires_in = payload.get("expires_in")
        token_type = payload.get("token_type") or "Bearer"
        scope = payload.get("scope") or ""

        if not isinstance(access_token, str) or not access_token:
            raise error_cls("Token response missing access_token.")
        if refresh_token is not None and not isinstance(refresh_token, str):
            raise error_cls("Token response refresh_token must be a string.")
        if expires_in is not None and (
            isinstance(expires_in, bool) or not isinstance(expires_in, int)
        ):
            raise error_cls("Token response expires_in must be an integer.")
        if not isinstance(token_type, str) or not isinstance(scope, str):
            raise error_cls("Token response token_type and scope must be strings.")

        return cls(
            access_token=access_token,
            refresh_token=refresh_token or None,
            expires_in=expires_in,
            token_type=token_type,
            scope=scope,
            raw=dict(payload),
        )

    def to_payload(self) -> dict:
        if self.raw:
            return dict(self.raw)
        payload = {
            "access_token": self.access_token,
            "token_type": self.token_type,
            "scope": self.scope,
        }
        if self.refresh_token is not None:
            payload["refresh_token"] = self.refresh_token
        if self.expires_in is not None:
            payload["expires_in"] = self.expires_in
        return payload


class KickOAuthClient:
    """OAuth2 client for the Kick identity service.

    Every entry point (login, callback, refresh gate, the ``/api`` token
    endpoints) goes through this one class. Calls are one-shot: a rejected
    grant or a transport failure is raised as the boundary's error type and
    never retried.
    """

    def __init__(
        self,
        credentials: ClientCredentials,
        *,
        oauth_base_url: str = KICK_OAUTH_BASE_URL,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.credentials = credentials
        self.oauth_base_url = oauth_base_url.rstrip("/")
        self._client = client

    @property
    def authorize_url(self) -> str:
        return f"{self.oauth_base_url}/oauth/authorize"

    @property
    def token_url(self) -> str:
        return f"{self.oauth_base_url}/oauth/token"

    @property
    def revoke_url(self) -> str:
        return f"{self.oauth_base_url}/oauth/revoke"

    def get_authorization_url(self, scope: str, code_challenge: str, state: str) -> str:
        query = {
            "response_type": "code",
            "client_id": self.credentials.client_id,
            "redirect_uri": self.credentials.redirect_uri,
            "scope": scope,
            "code_challenge": code_challenge,
            "code_challenge_method": "S256",
            "state": state,
        }
        return f"{self.authorize_url}?{urllib.parse.urlencode(query)}"

    async def exchange_code_for_token(self, code: str, code_verifier: str) -> TokenResponse:
        payload = await self._post(
            self.token_url,
            {
                "grant_type": "authorization_code",
                "client_id": self.credentials.client_id,
                "client_secret": self.credentials.client_secret,
                "redirect_uri": self.credentials.redirect_uri,
                "code": code,
                "code_verifier": code_verifier,
            },
            error_cls=AuthorizationCodeError,
            action="Authorization code exchange",
        )
        return TokenResponse.from_payload(payload, error_cls=AuthorizationCodeError)

    async def get_app_access_token(self) -> TokenResponse:
        payload = await self._post(
            self.token_url,
            {
                "grant_type": "client_credentials",
                "client_id": self.credentials.client_id,
                "client_secret": self.credentials.client_secret,
            },
            error_cls=ClientCredentialsError,
            action="App access token request",
        )
        return TokenResponse.from_payload(payload, error_cls=ClientCredentialsError)

    async def refresh_access_token(self, refresh_token: str) -> TokenResponse:
        payload = await self._post(
            self.token_url,
            {
                "grant_type": "refresh_token",
                "client_id": self.credentials.client_id,
                "client_secret": self.credentials.client_secret,
                "refresh_token": refresh_token,
            },
            error_cls=RefreshTokenError,
            action="Token refresh",
        )
        return TokenResponse.from_payload(payload, error_cls=RefreshTokenError)

    async def revoke_token(self, token: str, token_type_hint: str | None = None) -> None:
        query = {"token": token}
        if token_type_hint:
            query["token_hint_type"] = token_type_hint
        await self._post(
            f"{self.revoke_url}?{urllib.parse.urlencode(query)}",
            None,
            error_cls=RevocationError,
            action="Token revocation",
            parse_json=False,
        )

    async def _post(
        self,
        url: str,
        form: dict[str, str] | None,
        *,
        error_cls: type[OAuthError],
        action: str,
        parse_json: bool = True,
    ):
        own_client = self._client is None
        http_client = self._client or httpx.AsyncClient()

        try:
            response = await http_client.post(url, data=form, headers=FORM_HEADERS)
            response.raise_for_status()
            if not parse_json:
                return None
            return response.json()
        except httpx.HTTPStatusError as error:
            detail = error.response.text
            LOGGER.warning(
                "%s failed with status %s", action, error.response.status_code
            )
            raise error_cls(
                f"{action} failed with status {error.response.status_code}: {detail}",
                status_code=error.response.status_code,
                body=detail,
            ) from error
        except httpx.RequestError as error:
            LOGGER.warning("%s failed: %s", action, error)
            raise error_cls(f"{action} failed: {error}") from error
        except ValueError as error:
            raise error_cls(f"{action} returned a non-JSON response.") from error
        finally:
            if own_client:
                await http_client.aclose()
