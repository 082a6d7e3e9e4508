from __future__ import annotations

import urllib.parse

import httpx

from auth.errors import MissingAccessTokenError, UpstreamAPIError

from .constants import DEFAULT_API_TIMEOUT, KICK_API_BASE_URL, LOGGER


class KickAPIClient:
    """Bearer-authenticated calls against the Kick REST API.

    Non-2xx responses are raised as ``UpstreamAPIError`` carrying the
    upstream status and body untouched.
    """

    def __init__(
        self,
        base_url: str = KICK_API_BASE_URL,
        *,
        client: httpx.AsyncClient | None = None,
        timeout: float = DEFAULT_API_TIMEOUT,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.access_token: str | None = None
        self.token_type = "Bearer"
        self._client = client
        self._timeout = timeout

    def set_access_token(self, token: str, token_type: str = "Bearer") -> None:
        self.access_token = token
        self.token_type = token_type or "Bearer"

    def get_auth_headers(self) -> dict[str, str]:
        if not self.access_token:
            raise MissingAccessTokenError()
        return {
            "Authorization": f"{self.token_type} {self.access_token}",
            "Content-Type": "application/json",
        }

    async def request(
        self,
        endpoint: str,
        method: str = "GET",
        data: dict | None = None,
        authenticated: bool = True,
    ):
        method = method.upper()
        headers = (
            self.get_auth_headers() if authenticated else {"Content-Type": "application/json"}
        )
        url = f"{self.base_url}{endpoint}"

        kwargs: dict = {"headers": headers}
        if data is not None:
            if method == "GET":
                kwargs["params"] = data
            else:
                kwargs["json"] = data

        own_client = self._client is None
        http_client = self._client or httpx.AsyncClient(timeout=self._timeout)

        LOGGER.info("Making %s request to %s", method, endpoint)
        try:
            response = await http_client.request(method, url, **kwargs)
        finally:
            if own_client:
                await http_client.aclose()

        if response.is_success:
            return _parse_body(response)

        body = _parse_body(response)
        LOGGER.error(
            "API request failed status=%s endpoint=%s body=%s",
            response.status_code,
            endpoint,
            body,
        )
        raise UpstreamAPIError(response.status_code, body, endpoint=endpoint)

    async def get_user(self):
        return await self.request("/v1/user")

    async def get_channel(self, username: str):
        return await self.request(f"/v1/channels/{_quote(username)}")

    async def get_livestream(self, channel_id: str):
        return await self.request(f"/v1/channels/{_quote(channel_id)}/livestream")


def _quote(segment: str) -> str:
    return urllib.parse.quote(str(segment), safe="")


def _parse_body(response: httpx.Response):
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text
