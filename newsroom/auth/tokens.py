"""
Token codec — issues and verifies the bearer tokens that carry a
principal's identity and role.

Tokens are HS256 JWTs with claims ``sub`` (user id as a string), ``role``,
``iat`` and ``exp``.  There is no server-side token store: a token is
valid exactly when its signature checks out and ``exp`` has not passed.

PyJWT verifies the signature before it looks at any claim, so a token
that is both tampered and expired reports ``InvalidSignature``.
"""
from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from functools import lru_cache

import jwt

from newsroom.config import settings
from newsroom.exceptions import ExpiredTokenError, InvalidSignatureError


class Role(str, enum.Enum):
    READER = "reader"
    PUBLISHER = "publisher"


@dataclass(frozen=True)
class Principal:
    """The authenticated caller for the duration of one request."""

    id: int
    role: Role


class TokenCodec:
    """Signs and verifies bearer tokens with a single process-wide key."""

    def __init__(
        self,
        secret_key: str,
        algorithm: str = "HS256",
        default_ttl: timedelta = timedelta(hours=24),
    ) -> None:
        self._secret_key = secret_key
        self._algorithm = algorithm
        self._default_ttl = default_ttl

    def __repr__(self) -> str:
        # Keep the key out of tracebacks and debug output.
        return f"TokenCodec(algorithm={self._algorithm!r})"

    def issue(self, principal: Principal, ttl: timedelta | None = None) -> str:
        issued_at = datetime.now(timezone.utc)
        claims = {
            "sub": str(principal.id),
            "role": Role(principal.role).value,
            "iat": issued_at,
            "exp": issued_at + (ttl if ttl is not None else self._default_ttl),
        }
        return jwt.encode(claims, self._secret_key, algorithm=self._algorithm)

    def verify(self, token: str) -> Principal:
        """
        Return the principal encoded in *token*.

        Raises ``ExpiredTokenError`` for a correctly signed token whose
        ``exp`` has passed and ``InvalidSignatureError`` for everything
        else that fails: bad signature, foreign key, garbled structure or
        claims this service cannot interpret.
        """
        try:
            claims = jwt.decode(
                token,
                self._secret_key,
                algorithms=[self._algorithm],
                options={"require": ["sub", "role", "iat", "exp"]},
            )
        except jwt.ExpiredSignatureError as exc:
            raise ExpiredTokenError() from exc
        except jwt.InvalidTokenError as exc:
            raise InvalidSignatureError() from exc

        try:
            return Principal(id=int(claims["sub"]), role=Role(claims["role"]))
        except (TypeError, ValueError) as exc:
            raise InvalidSignatureError("Bearer token claims are malformed") from exc


@lru_cache(maxsize=1)
def get_token_codec() -> TokenCodec:
    """Process-wide codec; the signing key is read from settings once."""
    return TokenCodec(
        secret_key=settings.SECRET_KEY,
        algorithm=settings.TOKEN_ALGORITHM,
        default_ttl=timedelta(minutes=settings.ACCESS_TOKEN_TTL_MINUTES),
    )
