"""Principal Resolver — bearer access token → user id.

Invariants:
    - Only tokens signed with the configured secret/algorithms are accepted
    - exp is always required and checked; aud checked when configured
    - The "sub" claim is the user id; a token without it is rejected
    - Every failure raises AuthenticationError (HTTP 401) — never a raw jwt exception

Design Decisions:
    - Local HS256 verification (PyJWT) over a round trip to the identity provider:
      the provider signs access tokens with a shared secret, verification is offline
    - Resolver is a class with injected settings: tests mint tokens with a known secret
"""

import logging

import jwt

from app.core.domain_types import UserId
from app.core.errors import AuthenticationError

logger = logging.getLogger(__name__)

_BEARER_PREFIX = "bearer "


def extract_bearer_token(authorization: str | None) -> str:
    """Return the raw token from an Authorization header value."""
    if not authorization:
        raise AuthenticationError("missing authorization header")
    if not authorization.lower().startswith(_BEARER_PREFIX):
        raise AuthenticationError("authorization scheme is not Bearer")
    token = authorization[len(_BEARER_PREFIX):].strip()
    if not token:
        raise AuthenticationError("empty bearer token")
    return token


class PrincipalResolver:
    """Verifies access tokens issued by the identity provider."""

    def __init__(
        self,
        secret: str,
        algorithms: list[str],
        audience: str | None = None,
    ):
        self.secret = secret
        self.algorithms = algorithms
        self.audience = audience

    def resolve(self, token: str) -> UserId:
        """Verify token and return its subject."""
        options = {"require": ["exp", "sub"], "verify_aud": bool(self.audience)}
        try:
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=self.algorithms,
                audience=self.audience,
                options=options,
            )
        except jwt.ExpiredSignatureError:
            raise AuthenticationError("token expired")
        except jwt.InvalidTokenError as e:
            logger.info(f"Rejected access token: {e}")
            raise AuthenticationError("invalid token")

        subject = payload.get("sub")
        if not isinstance(subject, str) or not subject.strip():
            raise AuthenticationError("token has no subject")
        return UserId(subject)
