"""Tests for the admin-only /api/users endpoints."""
from extensions import db
from models.user import User
from security.middleware import get_sessions


def _login(app, username, password):
    client = app.test_client()
    res = client.post("/api/auth/login", json={"username": username, "password": password})
    assert res.status_code == 200
    return client


def test_list_requires_session(client):
    res = client.get("/api/users")
    assert res.status_code == 401
    assert res.get_json() == {"error": "Unauthorized"}


def test_list_forbidden_for_customer(app, create_user):
    create_user("henry", password="pw")
    res = _login(app, "henry", "pw").get("/api/users")
    assert res.status_code == 403
    assert res.get_json() == {"error": "Forbidden"}


def test_list_as_admin(admin_client, create_user):
    create_user("zoe", full_name="Zoe Z")
    create_user("adam")

    res = admin_client.get("/api/users")
    assert res.status_code == 200
    users = res.get_json()
    assert [u["username"] for u in users] == ["adam", "root", "zoe"]
    assert {"id", "username", "fullName", "role"} == set(users[0])
    roles = {u["username"]: u["role"] for u in users}
    assert roles == {"adam": "customer", "root": "admin", "zoe": "customer"}


def test_delete_user(app, admin_client, create_user):
    victim_id = create_user("ivan", password="pw")
    victim = _login(app, "ivan", "pw")

    res = admin_client.delete(f"/api/users/{victim_id}")
    assert res.status_code == 200
    assert res.get_json() == {"success": True}

    with app.app_context():
        assert db.session.get(User, victim_id) is None
    assert victim.get("/api/auth/me").get_json() == {"authenticated": False}


def test_delete_missing_user(admin_client):
    res = admin_client.delete("/api/users/9999")
    assert res.status_code == 404
    assert res.get_json() == {"error": "User not found"}


def test_delete_forbidden_for_customer(app, create_user):
    target = create_user("jack")
    create_user("kate", password="pw")
    res = _login(app, "kate", "pw").delete(f"/api/users/{target}")
    assert res.status_code == 403


def test_delete_revokes_memory_sessions(make_app):
    app = make_app(AUTH_SESSION_BACKEND="memory")
    with app.app_context():
        admin = User(username="root", role="admin")
        admin.set_password("rootpass")
        victim = User(username="lena")
        victim.set_password("pw")
        db.session.add_all([admin, victim])
        db.session.commit()
        victim_id = victim.id

    victim_client = _login(app, "lena", "pw")
    token = victim_client.get_cookie("sessionId").value
    assert get_sessions(app).resolve(token) is not None

    admin_client = _login(app, "root", "rootpass")
    assert admin_client.delete(f"/api/users/{victim_id}").status_code == 200
    assert get_sessions(app).resolve(token) is None


def test_admin_gate_uses_token_role(app, create_user):
    # a customer token stays a customer token until the next login
    create_user("mia", password="pw")
    client = _login(app, "mia", "pw")
    with app.app_context():
        User.find_by_username("mia").role = "admin"
        db.session.commit()

    assert client.get("/api/users").status_code == 403
    assert _login(app, "mia", "pw").get("/api/users").status_code == 200
