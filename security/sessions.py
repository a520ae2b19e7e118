"""Session backends.

An application instance uses exactly one backend, chosen by
``AUTH_SESSION_BACKEND``:

* ``signed`` (default): stateless. The principal lives inside a signed token,
  nothing is stored, and a session cannot be revoked before it expires.
* ``memory``: stateful. Tokens are random and map to principals held by the
  backend instance; revocation is immediate and expiry slides on every use.
"""
import logging
import secrets
import threading
import time

from security.principal import Principal
from security.tokens import SessionTokenCodec

logger = logging.getLogger(__name__)


def _now(now):
    return int(time.time()) if now is None else int(now)


class SignedSessionBackend:
    def __init__(self, secret, ttl):
        self.codec = SessionTokenCodec(secret, ttl)
        self.ttl = self.codec.ttl

    def issue(self, user, now=None):
        now = _now(now)
        return self.codec.issue(Principal.for_user(user, now, self.ttl), now=now)

    def resolve(self, token, now=None):
        return self.codec.verify(token, now=now)

    def revoke(self, token):
        # the client drops the cookie; the token stays valid until exp
        return False

    def revoke_user(self, user_id):
        logger.info("signed sessions cannot be revoked early (user_id=%s)", user_id)
        return 0


class MemorySessionBackend:
    def __init__(self, ttl):
        self.ttl = int(ttl)
        self._sessions = {}
        self._lock = threading.Lock()

    def issue(self, user, now=None):
        now = _now(now)
        token = secrets.token_urlsafe(32)
        with self._lock:
            # abandoned cookies are never presented again, so expire them here
            self._sweep(now)
            self._sessions[token] = Principal.for_user(user, now, self.ttl)
        return token

    def resolve(self, token, now=None):
        if not token:
            return None
        now = _now(now)
        with self._lock:
            principal = self._sessions.get(token)
            if principal is None:
                return None
            if now >= principal.expires_at:
                del self._sessions[token]
                return None
            principal = principal.extended(now + self.ttl)
            self._sessions[token] = principal
        return principal

    def revoke(self, token):
        with self._lock:
            return self._sessions.pop(token, None) is not None

    def revoke_user(self, user_id):
        with self._lock:
            doomed = [t for t, p in self._sessions.items() if p.user_id == user_id]
            for token in doomed:
                del self._sessions[token]
        if doomed:
            logger.info("revoked %d session(s) for user_id=%s", len(doomed), user_id)
        return len(doomed)

    def purge_expired(self, now=None):
        now = _now(now)
        with self._lock:
            return self._sweep(now)

    def _sweep(self, now):
        expired = [t for t, p in self._sessions.items() if now >= p.expires_at]
        for token in expired:
            del self._sessions[token]
        return len(expired)

    def __len__(self):
        with self._lock:
            return len(self._sessions)


def build_session_backend(config):
    backend = config.get("AUTH_SESSION_BACKEND", "signed")
    ttl = config["AUTH_SESSION_TTL"]
    if backend == "signed":
        return SignedSessionBackend(config["AUTH_SECRET"], ttl)
    if backend == "memory":
        return MemorySessionBackend(ttl)
    raise ValueError(f"Unknown session backend: {backend!r}")
