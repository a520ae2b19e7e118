# routes/auth.py
from urllib.parse import quote

from flask import Blueprint, current_app, g, jsonify
from sqlalchemy.exc import IntegrityError

from errors import AuthenticationRequired, Conflict
from extensions import db
from models.user import ROLE_CUSTOMER, User
from routes.forms import CredentialsForm, SignupForm, load_form
from security.middleware import get_sessions
from security.passwords import burn_password_check

auth_bp = Blueprint('auth', __name__, url_prefix='/api/auth')

INVALID_CREDENTIALS = "Invalid username or password"


def _set_session_cookie(response, token):
    cfg = current_app.config
    response.set_cookie(
        cfg["AUTH_COOKIE_NAME"],
        quote(token, safe=""),
        max_age=cfg["AUTH_SESSION_TTL"],
        path="/",
        httponly=True,
        secure=cfg["AUTH_COOKIE_SECURE"],
        samesite="Lax",
    )


def _clear_session_cookie(response):
    cfg = current_app.config
    response.delete_cookie(
        cfg["AUTH_COOKIE_NAME"],
        path="/",
        httponly=True,
        secure=cfg["AUTH_COOKIE_SECURE"],
        samesite="Lax",
    )


def _session_response(user, status):
    token = get_sessions().issue(user, now=g.request_time)
    response = jsonify(user.to_public())
    response.status_code = status
    _set_session_cookie(response, token)
    return response


@auth_bp.route("/signup", methods=["POST"])
def signup():
    form = load_form(SignupForm)
    username = User.normalize_username(form.username.data)

    if User.find_by_username(username):
        raise Conflict("Username already exists")

    user = User(username=username, role=ROLE_CUSTOMER, full_name=form.fullName.data or "")
    user.set_password(form.password.data)
    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise Conflict("Username already exists")

    current_app.logger.info("Signup: %s (id=%s)", user.username, user.id)
    # signup implies login
    return _session_response(user, 201)


@auth_bp.route("/login", methods=["POST"])
def login():
    form = load_form(CredentialsForm)
    username = User.normalize_username(form.username.data)

    user = User.find_by_username(username)
    if user is None:
        burn_password_check(form.password.data)
    if user is None or not user.check_password(form.password.data):
        current_app.logger.info("Login failed for: %s", username)
        raise AuthenticationRequired(INVALID_CREDENTIALS)

    # check_password may have upgraded a legacy hash
    db.session.commit()
    current_app.logger.info("Login: %s (id=%s)", user.username, user.id)
    return _session_response(user, 200)


@auth_bp.route("/logout", methods=["POST"])
def logout():
    if g.session_token:
        get_sessions().revoke(g.session_token)
    if g.principal is not None:
        current_app.logger.info("Logout: %s", g.principal.username)
    response = jsonify({"success": True})
    _clear_session_cookie(response)
    return response


@auth_bp.route("/me", methods=["GET"])
def me():
    principal = g.principal
    if principal is None:
        return jsonify({"authenticated": False})

    # the token may carry a stale role or name; report what the store holds now
    user = db.session.get(User, principal.user_id)
    if user is None:
        get_sessions().revoke(g.session_token)
        return jsonify({"authenticated": False})
    return jsonify({"authenticated": True, "user": user.to_public()})
