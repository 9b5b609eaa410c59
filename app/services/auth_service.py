import structlog
from sqlalchemy.orm import Session

from app.models.organization import Organization
from app.models.user import User
from app.models.role import UserRole
from app.repositories.organization_repository import OrganizationRepository
from app.repositories.user_repository import UserRepository
from app.schemas.auth_schemas import RegisterRequest, LoginRequest
from app.core.security import hash_password, verify_password
from app.core.exceptions import UnauthorizedException, ValidationException

logger = structlog.get_logger(__name__)


class AuthService:
    """Service layer for registration and login"""

    def __init__(self, db: Session):
        self.db = db
        self.organization_repo = OrganizationRepository(db)
        self.user_repo = UserRepository(db)

    def register(self, data: RegisterRequest) -> User:
        """
        Create an organization and its first user atomically.

        The first user is the organization's ADMIN.

        Args:
            data: Organization and admin credentials

        Returns:
            Created admin user

        Raises:
            ValidationException: If the slug or email is already taken
        """
        if self.organization_repo.get_by_slug(data.slug):
            raise ValidationException(f"Organization slug '{data.slug}' is already taken")
        if self.user_repo.get_by_email(data.email):
            raise ValidationException("Email is already registered")

        organization = self.organization_repo.create_no_commit(
            Organization(name=data.organization_name, slug=data.slug)
        )
        user = self.user_repo.create_no_commit(
            User(
                organization_id=organization.id,
                username=data.username,
                email=data.email.lower(),
                password_hash=hash_password(data.password),
                role=UserRole.ADMIN,
            )
        )
        self.db.commit()
        self.db.refresh(user)

        logger.info("organization_registered", organization_id=organization.id, user_id=user.id)
        return user

    def login(self, data: LoginRequest) -> User:
        """
        Authenticate by email and password.

        Raises:
            UnauthorizedException: On unknown email, wrong password or archived user
        """
        user = self.user_repo.get_by_email(data.email)
        if user is None or not verify_password(data.password, user.password_hash):
            logger.info("login_failed", email=data.email.lower())
            raise UnauthorizedException("Invalid email or password")
        if not user.is_active:
            raise UnauthorizedException("User account is archived")
        return user
