from __future__ import annotations


class OAuthError(RuntimeError):
    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        body: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class InvalidSessionError(OAuthError):
    """No pending authorization exists for the caller's session."""


class StateMismatchError(OAuthError):
    """The state echoed by the provider does not match the pending one."""


class AuthorizationCodeError(OAuthError):
    """The provider rejected the authorization code exchange."""


class ClientCredentialsError(OAuthError):
    """The provider refused to issue an app access token."""


class RefreshTokenError(OAuthError):
    """The refresh token is expired, revoked or otherwise unusable."""


class RevocationError(OAuthError):
    pass


class ReauthenticationRequired(RuntimeError):
    def __init__(self, message: str = "Re-authentication required.") -> None:
        super().__init__(message)


class MissingAccessTokenError(RuntimeError):
    def __init__(
        self, message: str = "No access token set. Call set_access_token first."
    ) -> None:
        super().__init__(message)


class UpstreamAPIError(RuntimeError):
    def __init__(self, status_code: int, body, *, endpoint: str | None = None) -> None:
        super().__init__(f"Kick API request failed with status {status_code}.")
        self.status_code = status_code
        self.body = body
        self.endpoint = endpoint
