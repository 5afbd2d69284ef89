# storefront/services/user_service.py
import bcrypt
from sqlalchemy.orm import Session

from storefront.data.models.user import UserModel
from storefront.domain.errors import NotFoundError, ValidationError
from storefront.domain.schemas import UserCreate, UserRead
from storefront.repos.user_repo import UserRepo
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        return False


class UserService:
    def __init__(self, db: Session):
        self.repo = UserRepo(db)

    def register(self, payload: UserCreate, role: str = "user") -> UserRead:
        email = payload.email.strip().lower()
        if self.repo.get_by_email(email):
            raise ValidationError("Email already registered")

        user = UserModel(
            username=payload.username.strip(),
            email=email,
            password=hash_password(payload.password),
            address=payload.address or None,
            contact=payload.contact or None,
            role=role,
        )
        created = self.repo.create_user(user)
        logger.info(f"Registered user {created.id} ({created.email}) role={role}")
        return UserRead.model_validate(created)

    def authenticate(self, email: str, password: str) -> UserModel:
        user = self.repo.get_by_email(email.strip().lower())
        if not user or not verify_password(password, user.password):
            raise ValidationError("Invalid email or password.")
        return user

    def get_user(self, user_id: int) -> UserRead:
        user = self.repo.get_user(user_id)
        if not user:
            raise NotFoundError("User not found")
        return UserRead.model_validate(user)
