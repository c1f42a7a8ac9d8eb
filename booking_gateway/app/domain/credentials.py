"""
Bearer credential extraction for Gateway routes.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Mapping, Optional

from shared.errors import AuthMissingError


class CredentialSource(str, Enum):
    """Where a route accepts its bearer token from."""

    ANY = "any"
    HEADER = "header"
    COOKIE = "cookie"


@dataclass(frozen=True)
class Credential:
    """Opaque bearer token and the place it was found."""

    token: str
    source: CredentialSource

    def __repr__(self) -> str:
        return f"Credential(source={self.source.value!r}, token='{self.token[:4]}...')"


class CredentialExtractor:
    """Pulls a bearer token from the Authorization header or a cookie.

    Only presence is checked here; the upstream API decides whether the
    token is valid.
    """

    def __init__(self, cookie_name: str = "token"):
        self.cookie_name = cookie_name

    def extract(
        self,
        headers: Mapping[str, str],
        cookies: Mapping[str, str],
        source: CredentialSource = CredentialSource.ANY,
    ) -> Credential:
        if source in (CredentialSource.ANY, CredentialSource.HEADER):
            token = self._from_header(headers)
            if token:
                return Credential(token=token, source=CredentialSource.HEADER)

        if source in (CredentialSource.ANY, CredentialSource.COOKIE):
            token = (cookies.get(self.cookie_name) or "").strip()
            if token:
                return Credential(token=token, source=CredentialSource.COOKIE)

        raise AuthMissingError(details={"source": source.value})

    @staticmethod
    def _from_header(headers: Mapping[str, str]) -> Optional[str]:
        auth_header = headers.get("authorization") or headers.get("Authorization")
        if not auth_header:
            return None

        scheme, _, token = auth_header.strip().partition(" ")
        if scheme.lower() != "bearer":
            return None
        return token.strip() or None
