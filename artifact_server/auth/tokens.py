"""Access token issuing and verification (HS256 JWT via python-jose)."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

from jose import ExpiredSignatureError, JWTError, jwt

from artifact_server.utils.exceptions import ExpiredTokenError, InvalidTokenError
from artifact_server.utils.logging import get_logger

logger = get_logger(__name__)


class TokenService:
    """Issues and verifies time-limited bearer tokens signed with one shared secret.

    A token proves that its bearer authenticated once; it is not bound to
    any particular artifact.
    """

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        default_expires_in: timedelta = timedelta(hours=5),
    ) -> None:
        self._secret = secret
        self.algorithm = algorithm
        self.default_expires_in = default_expires_in

    def issue(self, claims: dict[str, Any], expires_in: timedelta | None = None) -> str:
        """Sign *claims* with ``iat`` and ``exp`` added."""
        now = datetime.now(timezone.utc)
        to_encode = dict(claims)
        to_encode.update(
            {
                "iat": int(now.timestamp()),
                "exp": now + (expires_in if expires_in is not None else self.default_expires_in),
            }
        )
        return jwt.encode(to_encode, self._secret, algorithm=self.algorithm)

    def verify(self, token: str) -> dict[str, Any]:
        """Return the token's claims.

        Raises
        ------
        InvalidTokenError
            Malformed token or signature mismatch.
        ExpiredTokenError
            Valid signature but ``exp`` has passed.
        """
        try:
            return jwt.decode(token, self._secret, algorithms=[self.algorithm])
        except ExpiredSignatureError as exc:
            logger.info("token_rejected", reason="expired")
            raise ExpiredTokenError() from exc
        except JWTError as exc:
            logger.info("token_rejected", reason="invalid", detail=str(exc))
            raise InvalidTokenError(str(exc)) from exc
