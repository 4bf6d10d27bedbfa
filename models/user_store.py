"""
Credential store adapter.

Lookup and update of user records by id, username, email and the two
single-use tokens. Deleting a user removes the record; owned records held by
the surrounding system reference users.id with ON DELETE CASCADE.
"""
from __future__ import annotations

from typing import Optional

from sqlalchemy import func

from models.db_storage import DBStorage
from models.user import User


class UserStore:
    def __init__(self, storage: DBStorage):
        self._storage = storage

    def _query(self):
        return self._storage.get_session().query(User)

    def get(self, user_id) -> Optional[User]:
        try:
            user_id = int(user_id)
        except (TypeError, ValueError):
            return None
        return self._storage.get(User, user_id)

    def find_by_username(self, username: str) -> Optional[User]:
        return self._query().filter(User.username == username).first()

    def find_by_email(self, email: str) -> Optional[User]:
        if not email:
            return None
        return self._query().filter(func.lower(User.email) == email.strip().lower()).first()

    def find_by_login(self, identifier: str) -> Optional[User]:
        """Login accepts either the username or the email address; an exact username wins."""
        return self.find_by_username(identifier) or self.find_by_email(identifier)

    def find_by_verification_token(self, token: str) -> Optional[User]:
        if not token:
            return None
        return self._query().filter(User.email_verification_token == token).first()

    def find_by_reset_token(self, token: str) -> Optional[User]:
        if not token:
            return None
        return self._query().filter(User.password_reset_token == token).first()

    def add(self, user: User) -> User:
        self._storage.new(user)
        self._storage.save()
        return user

    def save(self, user: User) -> User:
        self._storage.new(user)
        self._storage.save()
        return user

    def delete(self, user: User) -> None:
        self._storage.delete(user)
        self._storage.save()

    def count(self) -> int:
        return self._storage.count(User)
