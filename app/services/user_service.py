"""Account service: sign-up, sign-in and profile changes."""
from sqlmodel import Session, select
from typing import Optional

import bcrypt

from app.models.user import User
from app.schemas.auth import SignUpRequest, UserUpdate
from app.services.audit_service import AuditService
from app.services.errors import RecordError, DUPLICATE, INVALID_CREDENTIALS, VALIDATION_ERROR
from app.utils.logger import get_logger
from app.utils.time import utcnow

logger = get_logger(__name__)

# bcrypt only looks at the first 72 bytes of a password
BCRYPT_MAX_BYTES = 72

REQUIRED_FIELDS = {"mfa_enabled"}


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8")[:BCRYPT_MAX_BYTES], bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    return bcrypt.checkpw(password.encode("utf-8")[:BCRYPT_MAX_BYTES], password_hash.encode("utf-8"))


class UserService:
    """Service class for account lifecycle."""

    def __init__(self, session: Session):
        self.session = session
        self.audit = AuditService(session)

    def get_by_id(self, user_id: str) -> Optional[User]:
        return self.session.get(User, user_id)

    def get_by_email(self, email: str) -> Optional[User]:
        statement = select(User).where(User.email == email.lower())
        return self.session.exec(statement).first()

    def register(self, data: SignUpRequest) -> User:
        """Create an account; emails are unique and stored lowercase."""
        if self.get_by_email(data.email):
            logger.warning("Sign-up rejected: email already registered")
            raise RecordError(
                code=DUPLICATE,
                message="User with this email already exists",
            )

        user = User(
            email=data.email.lower(),
            password_hash=hash_password(data.password),
            first_name=data.first_name,
            last_name=data.last_name,
            phone=data.phone,
        )
        self.session.add(user)
        self.audit.record(user.id, "user.created", "user", user.id)
        self.session.commit()
        self.session.refresh(user)
        logger.info("User registered", user_id=user.id)
        return user

    def authenticate(self, email: str, password: str) -> User:
        """Check credentials and stamp last_login. Inactive accounts cannot sign in."""
        user = self.get_by_email(email)
        if not user or not user.is_active or not verify_password(password, user.password_hash):
            logger.warning("Sign-in rejected", email_known=user is not None)
            raise RecordError(
                code=INVALID_CREDENTIALS,
                message="Invalid email or password",
            )

        user.last_login = utcnow()
        self.session.add(user)
        self.session.commit()
        self.session.refresh(user)
        return user

    def update_profile(self, user_id: str, data: UserUpdate) -> Optional[User]:
        user = self.get_by_id(user_id)
        if not user:
            return None

        changes = data.model_dump(exclude_unset=True)
        for field in REQUIRED_FIELDS:
            if field in changes and changes[field] is None:
                raise RecordError(
                    code=VALIDATION_ERROR,
                    message=f"{field} cannot be null",
                    details={"field": field},
                )
        for field, value in changes.items():
            setattr(user, field, value)
        user.updated_at = utcnow()

        self.session.add(user)
        self.audit.record(user_id, "user.updated", "user", user_id, {"fields": sorted(changes)})
        self.session.commit()
        self.session.refresh(user)
        return user

    def deactivate(self, user_id: str) -> Optional[User]:
        """Soft-deactivate: the account and its records stay, sign-in stops working."""
        user = self.get_by_id(user_id)
        if not user:
            return None

        user.is_active = False
        user.updated_at = utcnow()
        self.session.add(user)
        self.audit.record(user_id, "user.deactivated", "user", user_id)
        self.session.commit()
        self.session.refresh(user)
        logger.info("User deactivated", user_id=user_id)
        return user
