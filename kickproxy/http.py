from __future__ import annotations

import httpx

from .constants import DEFAULT_API_TIMEOUT, LOGGER

MAX_LOGGED_BODY = 1000


async def log_request(request: httpx.Request) -> None:
    LOGGER.info("Kick API request %s %s", request.method, request.url)


async def log_response(response: httpx.Response) -> None:
    LOGGER.info(
        "Kick API response %s %s -> %s",
        response.request.method,
        response.request.url,
        response.status_code,
    )
    if response.status_code >= 400:
        body = await response.aread()
        text = body.decode("utf-8", errors="replace")
        if len(text) > MAX_LOGGED_BODY:
            text = text[:MAX_LOGGED_BODY] + "...<truncated>"
        LOGGER.warning("Kick API error body: %s", text)


def build_http_client(
    *,
    timeout: float = DEFAULT_API_TIMEOUT,
    debug_enabled: bool = True,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    event_hooks: dict[str, list] = {"request": [], "response": []}
    if debug_enabled:
        event_hooks["request"].append(log_request)
        event_hooks["response"].append(log_response)

    return httpx.AsyncClient(
        timeout=timeout,
        transport=transport,
        event_hooks=event_hooks,
    )
