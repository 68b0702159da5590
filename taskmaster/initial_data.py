# taskmaster/initial_data.py

import logging
from sqlalchemy.orm import Session
from taskmaster.database import SessionLocal, init_db
from taskmaster.crud.user import create_user as crud_create_user, get_user_by_email
from taskmaster.core.constants import UserRole
from taskmaster.core.settings import settings
from taskmaster.core.exceptions import ConflictError

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("TaskMaster.InitialData")

def create_initial_admin_user(db: Session) -> None:
    """
    Создаёт платформенного админа из FIRST_ADMIN_EMAIL / FIRST_ADMIN_PASSWORD, если его ещё нет.
    """
    admin_email = settings.FIRST_ADMIN_EMAIL
    admin_password = settings.FIRST_ADMIN_PASSWORD
    if not admin_email or not admin_password:
        logger.info("FIRST_ADMIN_EMAIL / FIRST_ADMIN_PASSWORD are not set. Skipping admin creation.")
        return

    admin_user = get_user_by_email(db, admin_email)
    if admin_user:
        logger.info(f"Admin user '{admin_email}' already exists. No action taken.")
        return

    logger.info(f"Admin user '{admin_email}' not found. Creating...")
    try:
        crud_create_user(db=db, data={
            "first_name": "Admin",
            "last_name": "User",
            "email": admin_email,
            "password": admin_password,
            "role": UserRole.ADMIN,
            "is_active": True,
        })
        logger.info(f"Admin user '{admin_email}' created successfully.")
    except ConflictError as e:
        logger.error(f"Failed to create admin user: {e}")

def main() -> None:
    logger.info("Initializing database and initial data (admin user)...")
    init_db()
    db = SessionLocal()
    try:
        create_initial_admin_user(db)
    finally:
        db.close()
    logger.info("Finished initial data setup.")

if __name__ == "__main__":
    from dotenv import load_dotenv
    load_dotenv()

    main()
