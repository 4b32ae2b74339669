"""Email/password sign-in against Firebase Authentication (Identity Toolkit REST)."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx

log = logging.getLogger(__name__)

_SIGN_IN_URL = "https://identitytoolkit.googleapis.com/v1/accounts:signInWithPassword"

# Identity Toolkit error codes -> message shown on the login form.
_MESSAGES = {
    "INVALID_EMAIL": "Please enter a valid email address.",
    "USER_DISABLED": "This user account has been disabled.",
    "EMAIL_NOT_FOUND": "Invalid email or password.",
    "INVALID_PASSWORD": "Invalid email or password.",
    "INVALID_LOGIN_CREDENTIALS": "Invalid email or password.",
}
_GENERIC_MESSAGE = "An unexpected error occurred. Please try again."


class AuthError(Exception):
    """Sign-in failed. ``code`` is the provider's error code, ``message`` is user-facing."""

    def __init__(self, code: str, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message


@dataclass
class Session:
    """A signed-in user."""

    uid: str
    email: str
    id_token: str
    refresh_token: str = ""
    expires_in: int = 3600


class FirebaseAuth:
    """Sign users in with email and password."""

    def __init__(self, api_key: str, base_url: str = _SIGN_IN_URL, timeout: float = 10.0) -> None:
        if not api_key:
            raise ValueError("Firebase web API key is required")
        self._api_key = api_key
        self._url = base_url
        self._timeout = timeout

    def sign_in(self, email: str, password: str) -> Session:
        """Exchange credentials for an ID token.

        Raises:
            AuthError: Rejected credentials or unreachable provider.
        """
        try:
            resp = httpx.post(
                self._url,
                params={"key": self._api_key},
                json={"email": email, "password": password, "returnSecureToken": True},
                timeout=self._timeout,
            )
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            code = _error_code(e.response)
            log.info("Sign-in rejected for %s: %s", email, code)
            raise AuthError(code, _MESSAGES.get(code, _GENERIC_MESSAGE)) from e
        except (httpx.RequestError, OSError) as e:
            log.warning("Auth provider unreachable: %s", e)
            raise AuthError("NETWORK_ERROR", _GENERIC_MESSAGE) from e

        data = resp.json()
        log.info("Signed in %s", email)
        return Session(
            uid=data["localId"],
            email=data.get("email", email),
            id_token=data["idToken"],
            refresh_token=data.get("refreshToken", ""),
            expires_in=int(data.get("expiresIn", 3600)),
        )


def _error_code(resp: httpx.Response) -> str:
    """Pull the error code out of {"error": {"message": "CODE : detail"}}."""
    try:
        message = resp.json()["error"]["message"]
    except (ValueError, KeyError, TypeError):
        return "UNKNOWN"
    return str(message).split(":")[0].strip()
