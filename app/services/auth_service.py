import logging
from typing import Tuple

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.exceptions import AuthenticationError, InternalError, ValidationError
from app.core.security import create_access_token, get_password_hash, verify_password
from app.models.user import User, UserRole
from app.schemas.user import Actor, LoginRequest, RegisterRequest

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid credentials"


def issue_token(user: User) -> str:
    return create_access_token({"id": user.id, "role": user.role.value})


class AuthService:
    def __init__(self, db: Session):
        self.db = db

    def register(self, data: RegisterRequest) -> Tuple[User, str]:
        existing = (
            self.db.query(User)
            .filter(or_(User.email == data.email, User.username == data.username))
            .first()
        )
        if existing:
            raise ValidationError("User already exists")

        role = data.role
        if role != UserRole.USER:
            if settings.ALLOW_SELF_ASSIGNED_ROLE:
                logger.warning("user %s registered with self-assigned role %s", data.username, role.value)
            else:
                role = UserRole.USER

        user = User(
            username=data.username,
            email=data.email,
            hashed_password=get_password_hash(data.password),
            role=role,
            team=data.team,
        )
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError as exc:
            # Lost a race with a concurrent registration
            self.db.rollback()
            raise ValidationError("User already exists") from exc
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception("could not store user %s", data.username)
            raise InternalError(str(exc)) from exc
        self.db.refresh(user)

        logger.info("registered user %s (%s)", user.id, user.role.value)
        return user, issue_token(user)

    def login(self, credentials: LoginRequest) -> Tuple[User, str]:
        if not credentials.email or not credentials.password:
            raise ValidationError("Please provide email and password")

        email = credentials.email.strip().lower()
        user = self.db.query(User).filter(User.email == email).first()
        if user is None or not verify_password(credentials.password, user.hashed_password):
            logger.info("failed login for %s", email)
            raise AuthenticationError(INVALID_CREDENTIALS)

        logger.info("user %s logged in", user.id)
        return user, issue_token(user)

    def get_profile(self, actor: Actor) -> User:
        user = self.db.get(User, actor.id)
        if user is None:
            raise AuthenticationError()
        return user
