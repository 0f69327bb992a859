"""
Application initialization module
Handles initial setup tasks like creating the default admin account
"""

import logging

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.hasher import PasswordHelper
from app.models.user import User, UserRole

logger = logging.getLogger(__name__)


def init_default_admin(db: Session) -> None:
    """
    Create the default admin account if no admin exists yet.

    Credentials come from settings (config.py).
    """
    try:
        existing_admin = db.query(User).filter(User.role == UserRole.ADMIN.value).first()

        if existing_admin:
            logger.info(
                f"✅ Admin user already exists (ID: {existing_admin.id}, Email: {existing_admin.email})"
            )
            return

        admin = User(
            name=settings.admin_default_name,
            email=settings.admin_default_email.lower(),
            hashed_password=PasswordHelper.hash_password(
                settings.admin_default_password
            ),
            role=UserRole.ADMIN.value,
        )

        db.add(admin)
        db.commit()
        db.refresh(admin)

        logger.info("=" * 60)
        logger.info("🎉 DEFAULT ADMIN CREATED SUCCESSFULLY!")
        logger.info(f"Email: {settings.admin_default_email}")
        logger.info("=" * 60)
        logger.warning("⚠️  IMPORTANT: Change the default password immediately!")

    except Exception as e:
        logger.error(f"❌ Failed to initialize default admin: {e}", exc_info=True)
        db.rollback()
        raise


def initialize_application(db: Session) -> None:
    """Run every start-up initialization step."""
    logger.info("🚀 Starting application initialization...")
    init_default_admin(db)
    logger.info("✅ Application initialization completed")
