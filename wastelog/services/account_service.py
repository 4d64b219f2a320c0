"""Bootstrap administrator provisioning and credential checks."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy.orm import Session

from wastelog.core.config import settings
from wastelog.core.security import get_password_hash, verify_password
from wastelog.models import User
from wastelog.models.user import ROLE_ELEVATED
from wastelog.services.user_service import create_user, get_user_by_username

logger = logging.getLogger(__name__)

FALLBACK_ADMIN_PASSWORD = "admin123"


def _repair_bootstrap_admin(db: Session, admin: User) -> None:
    changed: list[str] = []
    if not admin.is_active:
        admin.is_active = True
        changed.append("is_active")
    if admin.role != ROLE_ELEVATED:
        logger.warning("[BOOTSTRAP] Bootstrap admin had role=%s; restoring ELEVATED.", admin.role)
        admin.role = ROLE_ELEVATED
        changed.append("role")
    if admin.branch_id is not None:
        admin.branch_id = None
        changed.append("branch_id")
    if changed:
        db.commit()
        logger.info("[BOOTSTRAP] Bootstrap admin repaired (%s).", ", ".join(changed))


def ensure_default_admin(db: Session) -> bool:
    """Ensure the configured elevated admin exists, is active and unscoped.

    Returns:
        bool: True when the admin account existed before this call.
    """
    username = settings.admin_user or "admin"
    existing_admin = get_user_by_username(db, username)
    if existing_admin is not None:
        _repair_bootstrap_admin(db, existing_admin)
        logger.info("[BOOTSTRAP] Admin exists")
        return True

    password = settings.admin_pass or FALLBACK_ADMIN_PASSWORD
    create_user(db, username, get_password_hash(password), ROLE_ELEVATED)
    if not settings.admin_pass:
        logger.warning(
            "[SECURITY] Default admin account created: %s/%s. Set ADMIN_PASS and change it immediately.",
            username,
            FALLBACK_ADMIN_PASSWORD,
        )
    return False


def authenticate_user(db: Session, username: str, password: str) -> User | None:
    """Return the active user for valid credentials and stamp the login time."""
    user = get_user_by_username(db, username.strip())
    if user is None or not user.is_active or not verify_password(password, user.password_hash):
        return None
    user.last_login_at = datetime.now(timezone.utc)
    db.commit()
    db.refresh(user)
    return user
