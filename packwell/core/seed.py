"""Startup seeding for the admin account"""

import logging
import uuid

from ..database.users import user_db
from ..models.user import User, UserRole

logger = logging.getLogger(__name__)

ADMIN_NAMESPACE = uuid.UUID("6f1c7b52-3c1e-4a55-9d0e-2f4f0e8a9b10")


def admin_id_for(email: str) -> str:
    """Stable user id for an admin email, so tokens survive restarts"""
    return str(uuid.uuid5(ADMIN_NAMESPACE, email.strip().lower()))


def ensure_admin(email: str, name: str) -> User:
    """Create the admin account, or promote and reactivate an existing one"""
    existing = user_db.get_by_email(email)
    if existing:
        if existing.role != UserRole.ADMIN or not existing.is_active:
            user_db.update_user(existing.id, role=UserRole.ADMIN, is_active=True)
            logger.info(f"Promoted {existing.email} to admin")
        return existing

    admin = user_db.create_user(
        name=name,
        email=email,
        role=UserRole.ADMIN,
        user_id=admin_id_for(email),
    )
    logger.info(f"Created admin account {admin.email}")
    return admin
