# models/user.py
from datetime import datetime, timezone

from extensions import db
from security.passwords import hash_password, needs_rehash, verify_password

ROLE_CUSTOMER = "customer"
ROLE_ADMIN = "admin"
ROLES = (ROLE_CUSTOMER, ROLE_ADMIN)


def _utcnow():
    return datetime.now(timezone.utc)


class User(db.Model):
    __tablename__ = "users"
    id = db.Column(db.Integer, primary_key=True)
    # always stored lowercased, which makes the unique index case-insensitive
    username = db.Column(db.String(80), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(256), nullable=False)
    role = db.Column(db.String(20), nullable=False, default=ROLE_CUSTOMER)  # 'customer' or 'admin'
    full_name = db.Column(db.String(120), nullable=False, default="")
    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow)

    @staticmethod
    def normalize_username(username):
        return (username or "").strip().lower()

    @classmethod
    def find_by_username(cls, username):
        return cls.query.filter_by(username=cls.normalize_username(username)).first()

    @property
    def is_admin(self):
        return self.role == ROLE_ADMIN

    def set_password(self, password):
        self.password_hash = hash_password(password)

    def check_password(self, password):
        """Check a plaintext password, upgrading a legacy digest in place on success."""
        if not verify_password(self.password_hash, password):
            return False
        if needs_rehash(self.password_hash):
            self.set_password(password)
        return True

    def to_public(self):
        # password_hash never leaves the server
        return {
            "id": self.id,
            "username": self.username,
            "fullName": self.full_name or "",
            "role": self.role if self.role in ROLES else ROLE_CUSTOMER,
        }

    def __repr__(self):
        return f"<User {self.username}>"
