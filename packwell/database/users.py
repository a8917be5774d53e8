"""User storage"""

import threading
import uuid
from typing import Any, Optional

from ..models.common import matches_search, utcnow
from ..models.user import Address, User, UserRole


class UserDatabase:
    """In-memory user storage with embedded addresses"""

    def __init__(self):
        self.users: dict[str, User] = {}
        self._lock = threading.RLock()

    def reset(self) -> None:
        with self._lock:
            self.users.clear()

    def get_user(self, user_id: str) -> Optional[User]:
        return self.users.get(user_id)

    def get_by_email(self, email: str) -> Optional[User]:
        wanted = email.strip().lower()
        return next((u for u in self.users.values() if u.email.lower() == wanted), None)

    def create_user(
        self,
        name: str,
        email: str,
        phone: Optional[str] = None,
        role: UserRole = UserRole.USER,
        user_id: Optional[str] = None,
    ) -> User:
        with self._lock:
            user = User(
                id=user_id or str(uuid.uuid4()),
                name=name,
                email=email.strip().lower(),
                phone=phone,
                role=role,
            )
            self.users[user.id] = user
            return user

    def list_users(
        self,
        search: Optional[str] = None,
        role: Optional[UserRole] = None,
        is_active: Optional[bool] = None,
    ) -> list[User]:
        """Filter users, newest first"""
        results = [
            u for u in self.users.values()
            if matches_search(search, u.name, u.email, u.phone)
            and (role is None or u.role == role)
            and (is_active is None or u.is_active == is_active)
        ]
        results.sort(key=lambda u: u.created_at, reverse=True)
        return results

    def update_user(self, user_id: str, **fields: Any) -> Optional[User]:
        with self._lock:
            user = self.get_user(user_id)
            if not user:
                return None
            for name, value in fields.items():
                setattr(user, name, value)
            user.updated_at = utcnow()
            return user

    # ==================== Addresses ====================

    def add_address(self, user_id: str, **fields: Any) -> Optional[User]:
        with self._lock:
            user = self.get_user(user_id)
            if not user:
                return None
            address = Address(id=str(uuid.uuid4()), **fields)
            if address.is_default:
                self._clear_default(user)
            user.addresses.append(address)
            user.updated_at = utcnow()
            return user

    def update_address(self, user_id: str, address_id: str, **fields: Any) -> Optional[User]:
        """Replace an address; None if the user or address is missing"""
        with self._lock:
            user = self.get_user(user_id)
            index = self._address_index(user, address_id)
            if index is None:
                return None
            address = Address(id=address_id, **fields)
            if address.is_default:
                self._clear_default(user)
            user.addresses[index] = address
            user.updated_at = utcnow()
            return user

    def delete_address(self, user_id: str, address_id: str) -> Optional[User]:
        with self._lock:
            user = self.get_user(user_id)
            index = self._address_index(user, address_id)
            if index is None:
                return None
            del user.addresses[index]
            user.updated_at = utcnow()
            return user

    def set_default_address(self, user_id: str, address_id: str) -> Optional[User]:
        with self._lock:
            user = self.get_user(user_id)
            index = self._address_index(user, address_id)
            if index is None:
                return None
            self._clear_default(user)
            user.addresses[index].is_default = True
            user.updated_at = utcnow()
            return user

    def _address_index(self, user: Optional[User], address_id: str) -> Optional[int]:
        if not user:
            return None
        return next(
            (i for i, a in enumerate(user.addresses) if a.id == address_id),
            None,
        )

    def _clear_default(self, user: User) -> None:
        for address in user.addresses:
            address.is_default = False


# Singleton instance
user_db = UserDatabase()
