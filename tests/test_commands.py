from types import SimpleNamespace

from models.user import User
from security.middleware import get_sessions


def test_init_db(app):
    result = app.test_cli_runner().invoke(args=["init-db"])
    assert result.exit_code == 0
    assert "Database tables created." in result.output


def test_create_admin_then_login(app):
    runner = app.test_cli_runner()
    result = runner.invoke(args=["create-admin", "Owner", "--password", "ownerpw", "--full-name", "Shop Owner"])
    assert result.exit_code == 0, result.output

    with app.app_context():
        user = User.find_by_username("owner")
        assert user.is_admin
        assert user.full_name == "Shop Owner"

    client = app.test_client()
    res = client.post("/api/auth/login", json={"username": "owner", "password": "ownerpw"})
    assert res.status_code == 200
    assert res.get_json()["role"] == "admin"
    assert client.get("/api/users").status_code == 200


def test_create_admin_promotes_existing(app, create_user):
    create_user("olga", password="before")
    result = app.test_cli_runner().invoke(args=["create-admin", "olga", "--password", "after"])
    assert result.exit_code == 0, result.output

    with app.app_context():
        assert User.query.filter_by(username="olga").count() == 1
        user = User.find_by_username("olga")
        assert user.is_admin
        assert user.check_password("after")


def test_reset_password(app, create_user):
    create_user("paul", password="old")
    runner = app.test_cli_runner()

    result = runner.invoke(args=["reset-password", "paul", "new"])
    assert result.exit_code == 0
    res = app.test_client().post("/api/auth/login", json={"username": "paul", "password": "new"})
    assert res.status_code == 200

    missing = runner.invoke(args=["reset-password", "ghost", "x"])
    assert missing.exit_code != 0
    assert "User not found" in missing.output


def test_purge_sessions_signed_backend(app):
    result = app.test_cli_runner().invoke(args=["purge-sessions"])
    assert result.exit_code == 0, result.output
    assert "nothing to purge" in result.output


def test_purge_sessions_memory_backend(make_app):
    app = make_app(AUTH_SESSION_BACKEND="memory", AUTH_SESSION_TTL=60)
    sessions = get_sessions(app)
    live = sessions.issue(SimpleNamespace(id=2, username="new", role="customer", full_name=""))
    sessions.issue(SimpleNamespace(id=1, username="old", role="customer", full_name=""), now=0)

    result = app.test_cli_runner().invoke(args=["purge-sessions"])
    assert result.exit_code == 0, result.output
    assert "Purged 1 expired session(s)." in result.output
    assert len(sessions) == 1
    assert sessions.resolve(live) is not None
