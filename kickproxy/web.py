from __future__ import annotations

from starlette.requests import Request

from .constants import LOGGER


async def read_body(request: Request) -> dict:
    """Parse a JSON or form-encoded request body into a flat dict.

    Malformed or missing bodies come back empty so handlers can report the
    missing field themselves.
    """
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("application/json"):
        try:
            payload = await request.json()
        except ValueError:
            return {}
        return payload if isinstance(payload, dict) else {}

    if content_type.startswith(
        ("application/x-www-form-urlencoded", "multipart/form-data")
    ):
        form = await request.form()
        return {key: str(value) for key, value in form.multi_items()}

    return {}


def mask_token(token: str | None) -> str | None:
    if not token:
        return None
    return token[:10] + "..."


def extract_bearer_token(authorization_header: str | None) -> str | None:
    if not authorization_header:
        return None
    scheme, _, token = authorization_header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


async def log_requests(request: Request, call_next):
    LOGGER.info("%s %s", request.method, request.url.path)
    return await call_next(request)
