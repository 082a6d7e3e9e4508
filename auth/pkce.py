from __future__ import annotations

import base64
import hashlib
import secrets
from dataclasses import dataclass

VERIFIER_BYTES = 32
STATE_BYTES = 16


@dataclass(frozen=True)
class PKCEPair:
    code_verifier: str
    code_challenge: str


def generate_code_verifier() -> str:
    # 32 bytes encode to 43 url-safe characters, the PKCE minimum.
    return secrets.token_urlsafe(VERIFIER_BYTES)


def generate_code_challenge(verifier: str) -> str:
    digest = hashlib.sha256(verifier.encode("utf-8")).digest()
    return base64.urlsafe_b64encode(digest).decode("utf-8").rstrip("=")


def generate_state() -> str:
    return secrets.token_hex(STATE_BYTES)


def generate_pkce_pair() -> PKCEPair:
    verifier = generate_code_verifier()
    return PKCEPair(code_verifier=verifier, code_challenge=generate_code_challenge(verifier))
