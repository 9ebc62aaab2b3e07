import threading
from datetime import datetime, timezone
from typing import List, Optional

from ..models.user import User


class UserRepository:
    """In-memory user registry, kept in registration order"""

    def __init__(self):
        self._users: dict[str, User] = {}
        self._lock = threading.RLock()

    def get(self, user_id: str) -> Optional[User]:
        with self._lock:
            return self._users.get(user_id)

    def get_or_create(self, user_id: str, firebase_uid: str, email: str, full_name: str) -> User:
        with self._lock:
            user = self._users.get(user_id)
            if user is None:
                user = User(user_id=user_id, firebase_uid=firebase_uid, email=email, full_name=full_name)
                self._users[user_id] = user
            return user

    def update_preferences(self, user_id: str, preferences: List[str]) -> Optional[User]:
        with self._lock:
            user = self._users.get(user_id)
            if user is None:
                return None
            user.preferences = list(preferences)
            user.updated_at = datetime.now(timezone.utc)
            return user

    def list_users(self, limit: Optional[int] = None) -> List[User]:
        with self._lock:
            users = list(self._users.values())
        return users if limit is None else users[:limit]

