"""Contact submission storage"""

import threading
import uuid
from typing import Any, Optional

from ..models.common import matches_search, utcnow
from ..models.contact import Contact, ContactStatus


class ContactDatabase:
    """In-memory contact form storage"""

    def __init__(self):
        self.contacts: dict[str, Contact] = {}
        self._lock = threading.RLock()

    def reset(self) -> None:
        with self._lock:
            self.contacts.clear()

    def create_contact(self, **fields: Any) -> Contact:
        with self._lock:
            contact = Contact(id=str(uuid.uuid4()), **fields)
            self.contacts[contact.id] = contact
            return contact

    def get_contact(self, contact_id: str) -> Optional[Contact]:
        return self.contacts.get(contact_id)

    def update_contact(self, contact_id: str, **fields: Any) -> Optional[Contact]:
        with self._lock:
            contact = self.get_contact(contact_id)
            if not contact:
                return None
            for name, value in fields.items():
                setattr(contact, name, value)
            contact.updated_at = utcnow()
            return contact

    def delete_contact(self, contact_id: str) -> bool:
        with self._lock:
            return self.contacts.pop(contact_id, None) is not None

    def list_contacts(
        self,
        status: Optional[ContactStatus] = None,
        search: Optional[str] = None,
    ) -> list[Contact]:
        """Filter submissions, newest first"""
        results = [
            c for c in self.contacts.values()
            if (status is None or c.status == status)
            and matches_search(search, c.first_name, c.last_name, c.email, c.message)
        ]
        results.sort(key=lambda c: c.created_at, reverse=True)
        return results


# Singleton instance
contact_db = ContactDatabase()
