# storefront/data/seed.py
from storefront.data.database import SessionLocal
from storefront.domain.schemas import UserCreate
from storefront.repos.user_repo import UserRepo
from storefront.services.user_service import UserService
from storefront.utils.settings import ADMIN_EMAIL, ADMIN_PASSWORD, ADMIN_USERNAME
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def seed():
    db = SessionLocal()
    try:
        # tylko gdy skonfigurowane i jeszcze nie istnieje
        if not ADMIN_EMAIL or not ADMIN_PASSWORD:
            return
        if UserRepo(db).get_by_email(ADMIN_EMAIL):
            return
        UserService(db).register(
            UserCreate(username=ADMIN_USERNAME, email=ADMIN_EMAIL, password=ADMIN_PASSWORD),
            role="admin",
        )
        logger.info(f"Seeded admin account {ADMIN_EMAIL}")
    finally:
        db.close()
