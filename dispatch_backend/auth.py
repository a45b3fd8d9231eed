from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
import logging

import jwt
from fastapi import Depends, Header, HTTPException, status
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from .config import get_settings
from .database import get_db
from .errors import Forbidden
from .models.user import User, UserRole

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


@dataclass(frozen=True)
class Actor:
    """The authenticated caller as seen by the dispatch services."""

    user_id: int
    role: UserRole

    @classmethod
    def from_user(cls, user: User) -> "Actor":
        return cls(user_id=user.id, role=UserRole(user.role))


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    return pwd_context.verify(password, password_hash)


def ensure_default_admin(db: Session) -> None:
    settings = get_settings()
    existing = db.query(User).filter(User.email == settings.DEV_ADMIN_EMAIL).first()
    if existing:
        return
    user = User(
        email=settings.DEV_ADMIN_EMAIL,
        full_name=settings.DEV_ADMIN_NAME,
        role=UserRole.ADMIN,
        password_hash=hash_password(settings.DEV_ADMIN_PASSWORD),
    )
    db.add(user)
    db.commit()
    logger.info("Created default admin user %s", user.id)


def authenticate_dev_stub(db: Session, email: str, password: str) -> User | None:
    user = db.query(User).filter(User.email == email).first()
    if not user or not user.is_active:
        return None
    if not verify_password(password, user.password_hash):
        return None
    user.last_login_at = datetime.now(timezone.utc)
    db.add(user)
    db.commit()
    return user


def create_access_token(user: User) -> str:
    settings = get_settings()
    if not settings.SECRET_KEY:
        raise RuntimeError("SECRET_KEY is not set")
    payload = {
        "sub": str(user.id),
        "role": UserRole(user.role).value,
        "exp": datetime.now(timezone.utc) + timedelta(hours=settings.ACCESS_TOKEN_HOURS),
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm="HS256")


def get_current_user(
    authorization: str | None = Header(default=None),
    db: Session = Depends(get_db),
) -> User:
    settings = get_settings()
    if settings.AUTH_MODE != "dev_stub":
        raise HTTPException(status_code=status.HTTP_501_NOT_IMPLEMENTED, detail="OIDC not wired")
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing token")
    token = authorization.split(" ", 1)[1]
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=["HS256"])
        user_id = int(payload["sub"])
    except (jwt.InvalidTokenError, KeyError, ValueError):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")
    user = db.get(User, user_id)
    if not user or not user.is_active:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found")
    return user


def get_current_actor(user: User = Depends(get_current_user)) -> Actor:
    return Actor.from_user(user)


def require_role(actor: Actor, *roles: UserRole, detail: str = "Insufficient role") -> None:
    if actor.role not in roles:
        raise Forbidden(detail)
