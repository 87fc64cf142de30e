"""
Signed, expiring, URL-safe tokens.

Wire form: ``<base64url(json payload)>.<base64url(hmac-sha256 of the first part)>``,
both parts without ``=`` padding. Used for magic links and the session cookie.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import json
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import timedelta
from typing import Any

INVALID_FORMAT = "invalid token format"
INVALID_SIGNATURE = "invalid signature"
TOKEN_EXPIRED = "token expired"
INVALID_TOKEN = "invalid token"


def _b64encode(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def _b64decode(data: str) -> bytes:
    padded = data + "=" * (-len(data) % 4)
    return base64.urlsafe_b64decode(padded.encode("ascii"))


@dataclass(frozen=True)
class VerifyResult:
    """Outcome of verifying a token. ``claims`` on success, ``reason`` otherwise."""

    valid: bool
    claims: dict[str, Any] | None = None
    reason: str | None = None

    @classmethod
    def ok(cls, claims: dict[str, Any]) -> VerifyResult:
        return cls(valid=True, claims=claims)

    @classmethod
    def fail(cls, reason: str) -> VerifyResult:
        return cls(valid=False, reason=reason)


class TokenSigner:
    """
    Issues and verifies signed tokens under one secret.

    Stateless apart from the secret, so one instance can serve every request.
    """

    def __init__(self, secret: str, clock: Callable[[], float] = time.time) -> None:
        if not secret:
            raise ValueError("TokenSigner requires a non-empty secret")
        self._key = secret.encode("utf-8")
        self._clock = clock

    def now_ms(self) -> int:
        """Current time in epoch milliseconds."""
        return int(self._clock() * 1000)

    def _sign(self, encoded_payload: str) -> str:
        digest = hmac.new(self._key, encoded_payload.encode("ascii"), hashlib.sha256).digest()
        return _b64encode(digest)

    def issue(self, claims: Mapping[str, Any], ttl: timedelta) -> str:
        """
        Sign a claim set with an expiry of now + ttl.

        Args:
            claims: JSON-serializable claims, must include ``email``
            ttl: Lifetime of the token

        Returns:
            Token string ``payload.signature``

        Raises:
            ValueError: If ``email`` is missing or ttl is not positive
        """
        if "email" not in claims:
            raise ValueError("claims must include 'email'")
        if ttl <= timedelta(0):
            raise ValueError("ttl must be positive")

        exp = self.now_ms() + int(ttl.total_seconds() * 1000)
        payload = {**claims, "exp": exp}
        data = json.dumps(payload, separators=(",", ":"), ensure_ascii=False).encode("utf-8")
        encoded_payload = _b64encode(data)
        return f"{encoded_payload}.{self._sign(encoded_payload)}"

    def verify(self, token: str) -> VerifyResult:
        """
        Verify an untrusted token string. Never raises.

        Checks run in order: format, signature, payload decoding, expiry.
        Expiry is only reported for authentic tokens.
        """
        if not isinstance(token, str):
            return VerifyResult.fail(INVALID_FORMAT)

        parts = token.split(".")
        if len(parts) != 2 or not parts[0] or not parts[1]:
            return VerifyResult.fail(INVALID_FORMAT)
        encoded_payload, signature = parts

        try:
            expected = self._sign(encoded_payload)
        except UnicodeEncodeError:
            return VerifyResult.fail(INVALID_SIGNATURE)
        if not signature.isascii() or not hmac.compare_digest(expected, signature):
            return VerifyResult.fail(INVALID_SIGNATURE)

        try:
            claims = json.loads(_b64decode(encoded_payload).decode("utf-8"))
        except ValueError:
            # binascii.Error, UnicodeDecodeError and JSONDecodeError are all ValueErrors
            return VerifyResult.fail(INVALID_TOKEN)

        if not isinstance(claims, dict):
            return VerifyResult.fail(INVALID_TOKEN)
        exp = claims.get("exp")
        if isinstance(exp, bool) or not isinstance(exp, (int, float)):
            return VerifyResult.fail(INVALID_TOKEN)

        if self.now_ms() >= exp:
            return VerifyResult.fail(TOKEN_EXPIRED)

        return VerifyResult.ok(claims)
