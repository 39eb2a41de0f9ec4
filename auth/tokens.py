"""
JWT-style token creation and verification.

Tokens are base64url-encoded JSON payloads signed with HMAC-SHA256::

    <base64url(payload)>.<hex signature>

The payload carries ``id``, ``email`` and ``exp`` (epoch seconds).  The
secret comes from ``Settings.jwt_secret`` (env var: ``JWT_SECRET``) and is
handed to :class:`TokenService` by the application factory.
"""

from __future__ import annotations

import hashlib
import hmac
import json
import time
from base64 import urlsafe_b64decode, urlsafe_b64encode
from typing import Any, Callable, Dict, Optional

DEFAULT_TTL_SECONDS = 3600


class InvalidTokenError(Exception):
    """Token is malformed, carries a bad signature, or has expired."""


class TokenService:
    def __init__(
        self,
        secret: str,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if not secret:
            raise ValueError("Token secret must not be empty")
        self._secret = secret.encode()
        self._ttl = ttl_seconds
        self._clock = clock

    def _sign(self, raw: bytes) -> str:
        return hmac.new(self._secret, raw, hashlib.sha256).hexdigest()

    def issue(self, claims: Dict[str, Any], ttl: Optional[int] = None) -> str:
        """Create a signed token for *claims*, expiring ``ttl`` seconds from now."""
        payload = dict(claims)
        payload["exp"] = int(self._clock()) + (self._ttl if ttl is None else ttl)
        raw = json.dumps(payload, separators=(",", ":")).encode()
        return urlsafe_b64encode(raw).decode() + "." + self._sign(raw)

    def issue_for(self, user) -> str:
        return self.issue({"id": user.id, "email": user.email})

    def verify(self, token: str) -> Dict[str, Any]:
        """
        Verify *token* and return its claims.

        Raises ``InvalidTokenError`` on bad format, bad signature or expiry.
        """
        try:
            encoded, sig = token.split(".", 1)
            raw = urlsafe_b64decode(encoded.encode())
        except (ValueError, TypeError) as exc:
            raise InvalidTokenError("bad format") from exc

        if not hmac.compare_digest(sig.encode(), self._sign(raw).encode()):
            raise InvalidTokenError("bad signature")

        try:
            payload = json.loads(raw)
            exp = int(payload["exp"])
        except (ValueError, TypeError, KeyError) as exc:
            raise InvalidTokenError("bad payload") from exc

        if exp <= self._clock():
            raise InvalidTokenError("token expired")
        return payload
