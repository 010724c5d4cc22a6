"""Signed, stateless session tokens.

A token is an itsdangerous URL-safe timed payload carrying the identity id
and role. The signer's timestamp is the issue time; expiry is enforced with
``max_age`` on load, in whole seconds. Validity windows are fixed at
issuance; there is no sliding renewal and no revocation list.
"""

import time
from dataclasses import dataclass
from typing import Any, Callable

from itsdangerous import (
    BadData,
    BadSignature,
    SignatureExpired,
    TimestampSigner,
    URLSafeTimedSerializer,
)

from safetour.auth.guard import Role

TOKEN_SALT = "safetour-session"


@dataclass(frozen=True)
class Claims:
    """Decoded, verified token payload."""

    identity_id: str
    role: Role
    issued_at: float
    expires_at: float


class TokenVerification:
    """Outcome of verifying a token. Never raised; inspect ``valid``."""

    __slots__ = ("valid", "code", "message", "claims")

    def __init__(
        self,
        valid: bool,
        code: str = "",
        message: str = "",
        claims: Claims | None = None,
    ):
        self.valid = valid
        self.code = code
        self.message = message
        self.claims = claims


def _clocked_signer(clock: Callable[[], float]) -> type[TimestampSigner]:
    class ClockedSigner(TimestampSigner):
        def get_timestamp(self) -> int:
            return int(clock())

    return ClockedSigner


class TokenService:
    """Issues and verifies session tokens with a symmetric secret."""

    def __init__(
        self,
        secret: str,
        ttl_seconds: int,
        clock: Callable[[], float] = time.time,
    ):
        if not secret:
            raise ValueError("Token signing secret must not be empty")
        if ttl_seconds <= 0:
            raise ValueError("Token validity window must be positive")
        self._serializer = URLSafeTimedSerializer(
            secret, salt=TOKEN_SALT, signer=_clocked_signer(clock),
        )
        self.ttl_seconds = ttl_seconds

    def issue(self, identity: Any) -> str:
        """Sign a token for anything with ``id`` and ``role`` attributes."""
        payload = {
            "sub": str(identity.id),
            "role": Role(identity.role).value,
        }
        return self._serializer.dumps(payload)

    def verify(self, token: str | None) -> TokenVerification:
        if not token or not isinstance(token, str):
            return TokenVerification(False, "MALFORMED", "Token is empty")

        try:
            payload, signed_at = self._serializer.loads(
                token, max_age=self.ttl_seconds, return_timestamp=True,
            )
        # SignatureExpired is a BadSignature
        except SignatureExpired:
            return TokenVerification(False, "EXPIRED", "Token has expired")
        except BadSignature:
            return TokenVerification(False, "BAD_SIGNATURE", "Token signature mismatch")
        except BadData:
            return TokenVerification(False, "MALFORMED", "Token payload is not decodable")

        claims = self._parse_claims(payload, signed_at.timestamp())
        if claims is None:
            return TokenVerification(False, "MALFORMED", "Token claims are incomplete")

        return TokenVerification(True, "VALID", "Token is valid", claims)

    def _parse_claims(self, payload: Any, issued_at: float) -> Claims | None:
        if not isinstance(payload, dict):
            return None
        try:
            sub = payload["sub"]
            role = Role(payload["role"])
        except (KeyError, ValueError, TypeError):
            return None
        if not isinstance(sub, str) or not sub:
            return None
        return Claims(
            identity_id=sub,
            role=role,
            issued_at=issued_at,
            expires_at=issued_at + self.ttl_seconds,
        )
