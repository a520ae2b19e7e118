"""Signed, self-contained session tokens.

A token is ``base64url(header) . base64url(payload) . base64url(signature)``
where the signature is HMAC-SHA256 over the first two segments with the
server secret. That is the HS256 JWT layout, so tokens can be inspected with
ordinary JWT tooling, but only this module decides whether one is valid.
"""
import hashlib
import hmac
import json
import time

from itsdangerous import BadData, Signer
from itsdangerous.encoding import base64_decode, base64_encode

from security.principal import Principal

HEADER = {"alg": "HS256", "typ": "JWT"}
DEFAULT_TTL = 60 * 60 * 12


def _encode_segment(data):
    return base64_encode(json.dumps(data, separators=(",", ":")).encode("utf-8"))


class SessionTokenCodec:
    def __init__(self, secret, ttl=DEFAULT_TTL):
        if not secret:
            raise ValueError("a session secret is required")
        self.ttl = int(ttl)
        # key_derivation="none" signs with the raw secret, i.e. plain HMAC-SHA256
        self._signer = Signer(
            secret, sep=".", key_derivation="none", digest_method=hashlib.sha256
        )

    def _signature(self, signing_input):
        return self._signer.get_signature(signing_input)

    def issue(self, principal, now=None):
        """Return a token for ``principal`` valid for ``ttl`` seconds from ``now``."""
        now = int(time.time()) if now is None else int(now)
        payload = {
            "sub": principal.user_id,
            "username": principal.username,
            "role": principal.role,
            "fullName": principal.full_name or "",
            "iat": now,
            "exp": now + self.ttl,
        }
        signing_input = _encode_segment(HEADER) + b"." + _encode_segment(payload)
        token = signing_input + b"." + self._signature(signing_input)
        return token.decode("ascii")

    def verify(self, token, now=None):
        """Return the Principal carried by ``token``, or None.

        Never raises for bad input: wrong shape, wrong signature, unreadable
        payload and expiry all come back as None.
        """
        if not token or not isinstance(token, str):
            return None
        parts = token.split(".")
        if len(parts) != 3 or not all(parts):
            return None
        try:
            header, body, signature = (p.encode("ascii") for p in parts)
        except UnicodeEncodeError:
            return None

        expected = self._signature(header + b"." + body)
        if not hmac.compare_digest(expected, signature):
            return None

        try:
            payload = json.loads(base64_decode(body))
        except (BadData, ValueError):
            return None
        if not isinstance(payload, dict):
            return None

        now = int(time.time()) if now is None else int(now)
        try:
            expires_at = int(payload["exp"])
            principal = Principal(
                user_id=payload["sub"],
                username=str(payload["username"]),
                role=str(payload["role"]),
                full_name=str(payload.get("fullName") or ""),
                issued_at=int(payload.get("iat") or 0),
                expires_at=expires_at,
            )
        except (KeyError, TypeError, ValueError):
            return None
        if now >= expires_at:
            return None
        return principal
