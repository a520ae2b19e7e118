import pytest

from app import create_app
from extensions import db
from models.user import ROLE_ADMIN, ROLE_CUSTOMER, User

TEST_SECRET = "test-session-secret"


@pytest.fixture
def make_app(tmp_path):
    """Build an isolated app; keyword overrides go straight into app.config."""
    apps = []

    def _make(**overrides):
        config = {
            "TESTING": True,
            "SQLALCHEMY_DATABASE_URI": f"sqlite:///{tmp_path / f'test{len(apps)}.db'}",
            "SECRET_KEY": TEST_SECRET,
            "AUTH_SECRET": TEST_SECRET,
            "AUTH_SESSION_BACKEND": "signed",
            "AUTH_SESSION_TTL": 60 * 60 * 12,
            "UPLOAD_FOLDER": str(tmp_path / "uploads"),
            "RATELIMIT_ENABLED": False,
        }
        config.update(overrides)
        app = create_app(config)
        with app.app_context():
            db.create_all()
        apps.append(app)
        return app

    yield _make

    for app in apps:
        with app.app_context():
            db.session.remove()
            db.drop_all()


@pytest.fixture
def app(make_app):
    return make_app()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def create_user(app):
    def _create(username, password="secret1", role=ROLE_CUSTOMER, full_name=""):
        with app.app_context():
            user = User(username=User.normalize_username(username), role=role, full_name=full_name)
            user.set_password(password)
            db.session.add(user)
            db.session.commit()
            return user.id
    return _create


@pytest.fixture
def admin_client(app, create_user):
    create_user("root", password="rootpass", role=ROLE_ADMIN, full_name="Site Admin")
    c = app.test_client()
    res = c.post("/api/auth/login", json={"username": "root", "password": "rootpass"})
    assert res.status_code == 200, res.get_data(as_text=True)
    return c
