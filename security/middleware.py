# security/middleware.py: resolve the session cookie into g.principal and gate views on it
import time
from functools import wraps
from urllib.parse import unquote

from flask import current_app, g, request
from werkzeug.http import parse_cookie

from errors import AuthenticationRequired, Forbidden

EXTENSION_KEY = "auth_sessions"


def get_sessions(app=None):
    return (app or current_app).extensions[EXTENSION_KEY]


def parse_cookie_header(header):
    """Split a raw Cookie header into a dict of URL-decoded values."""
    cookies = {}
    for name, value in parse_cookie(header or "").items():
        try:
            cookies[name] = unquote(value, errors="strict")
        except UnicodeDecodeError:
            cookies[name] = value
    return cookies


def session_token(cookie_header, cookie_name="sessionId"):
    return parse_cookie_header(cookie_header).get(cookie_name) or None


def resolve_principal(cookie_header, sessions, cookie_name="sessionId", now=None):
    """Return the Principal for a Cookie header, or None for an anonymous request."""
    token = session_token(cookie_header, cookie_name)
    if not token:
        return None
    return sessions.resolve(token, now=now)


def require_auth(principal):
    if principal is None:
        raise AuthenticationRequired()
    return principal


def require_admin(principal):
    require_auth(principal)
    if not principal.is_admin:
        raise Forbidden()
    return principal


def load_principal():
    # one clock reading per request
    g.request_time = int(time.time())
    header = request.headers.get("Cookie")
    cookie_name = current_app.config["AUTH_COOKIE_NAME"]
    g.session_token = session_token(header, cookie_name)
    g.principal = resolve_principal(header, get_sessions(), cookie_name, now=g.request_time)


def admin_required(f):
    @wraps(f)
    def decorated(*args, **kwargs):
        require_admin(g.get("principal"))
        return f(*args, **kwargs)
    return decorated


def init_app(app, sessions):
    app.extensions[EXTENSION_KEY] = sessions
    app.before_request(load_principal)
