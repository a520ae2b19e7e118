# security/principal.py
from dataclasses import dataclass, replace


@dataclass(frozen=True)
class Principal:
    """The authenticated identity attached to a request."""

    user_id: int
    username: str
    role: str
    full_name: str = ""
    issued_at: int = 0
    expires_at: int = 0

    @property
    def is_admin(self):
        return self.role == "admin"

    @classmethod
    def for_user(cls, user, now, ttl):
        return cls(
            user_id=user.id,
            username=user.username,
            role=user.role,
            full_name=user.full_name or "",
            issued_at=now,
            expires_at=now + ttl,
        )

    def extended(self, expires_at):
        return replace(self, expires_at=expires_at)

    def to_public(self):
        return {
            "id": self.user_id,
            "username": self.username,
            "fullName": self.full_name,
            "role": self.role,
        }
