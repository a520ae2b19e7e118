"""Password hashing.

New hashes come from Werkzeug's salted KDF. Accounts imported from the old
store carry a bare SHA-256 hex digest; those still verify, and callers are
expected to re-hash them after a successful login (see ``needs_rehash``).
"""
import hashlib
import hmac
import re

from werkzeug.security import check_password_hash, generate_password_hash

_LEGACY_DIGEST = re.compile(r"^[0-9a-f]{64}$")

# compared against when the username is unknown so both login failures cost the same
_DUMMY_HASH = generate_password_hash("not-a-real-password")


def legacy_digest(password):
    """Unsalted SHA-256 hex digest used by the old user store."""
    return hashlib.sha256(password.encode("utf-8")).hexdigest()


def hash_password(password):
    return generate_password_hash(password)


def is_legacy_hash(password_hash):
    return bool(password_hash) and bool(_LEGACY_DIGEST.match(password_hash))


def needs_rehash(password_hash):
    return is_legacy_hash(password_hash)


def verify_password(password_hash, password):
    if not password_hash or password is None:
        return False
    if is_legacy_hash(password_hash):
        return hmac.compare_digest(legacy_digest(password), password_hash)
    try:
        return check_password_hash(password_hash, password)
    except ValueError:
        # unknown hash method stored in the row
        return False


def burn_password_check(password):
    """Spend the same work as a real check for a username that does not exist."""
    check_password_hash(_DUMMY_HASH, password or "")
    return False
