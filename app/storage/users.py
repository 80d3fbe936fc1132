from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Optional
from uuid import uuid4

from app.core.security import get_password_hash, verify_password


@dataclass
class User:
    id: str
    email: str
    hashed_password: str
    created_at: datetime = field(default_factory=datetime.utcnow)

    def to_public(self) -> dict:
        return {"id": self.id, "email": self.email, "created_at": self.created_at.isoformat() + "Z"}


class UserStore:
    """مخزن المستخدمين في الذاكرة مع بحث بالبريد الإلكتروني."""

    def __init__(self) -> None:
        self._users: Dict[str, User] = {}

    def create(self, email: str, password: str) -> User:
        email = email.strip().lower()
        if self.get_by_email(email):
            raise ValueError("email already registered")
        user = User(id=uuid4().hex, email=email, hashed_password=get_password_hash(password))
        self._users[user.id] = user
        return user

    def get(self, user_id: str) -> Optional[User]:
        return self._users.get(user_id)

    def get_by_email(self, email: str) -> Optional[User]:
        email = email.strip().lower()
        return next((user for user in self._users.values() if user.email == email), None)

    def authenticate(self, email: str, password: str) -> Optional[User]:
        user = self.get_by_email(email)
        if not user or not verify_password(password, user.hashed_password):
            return None
        return user
