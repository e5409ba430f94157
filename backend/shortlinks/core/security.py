from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
import jwt
from jwt.exceptions import InvalidTokenError
from passlib.context import CryptContext
from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from .errors import UnauthorizedError
from ..config import Settings
from ..database import get_db
from ..logger import get_logger
from ..models import User

logger = get_logger(__name__)

# Password hashing
# Use bcrypt 4.x compatible settings
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=12
)

# OAuth2 scheme; a missing token is not an error for optional auth
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against a hash"""
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except Exception:
        # passlib cannot drive newer bcrypt releases
        try:
            return bcrypt.checkpw(
                plain_password.encode('utf-8'),
                hashed_password.encode('utf-8') if isinstance(hashed_password, str) else hashed_password
            )
        except ValueError:
            return False


def get_password_hash(password: str) -> str:
    """Hash a password"""
    try:
        return pwd_context.hash(password)
    except Exception:
        # passlib cannot drive newer bcrypt releases
        hashed = bcrypt.hashpw(password.encode('utf-8'), bcrypt.gensalt())
        return hashed.decode('utf-8')


def create_access_token(data: dict, settings: Settings, expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a JWT access token.

    Args:
        data: Data to encode in the token
        settings: Supplies the key, algorithm and default lifetime
        expires_delta: Token expiration time

    Returns:
        Encoded JWT token
    """
    to_encode = data.copy()

    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode.update({"exp": expire})

    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def authenticate_user(db: Session, email: str, password: str) -> Optional[User]:
    """
    Authenticate a user.

    Returns:
        User object if authenticated, None otherwise
    """
    user = db.query(User).filter(User.email == email.lower()).first()

    if not user:
        return None

    if not verify_password(password, user.hashed_password):
        return None

    return user


def _user_from_token(token: str, settings: Settings, db: Session) -> Optional[User]:
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except InvalidTokenError:
        return None

    user_id = payload.get("sub")
    if user_id is None:
        return None

    return db.query(User).filter(User.id == user_id).first()


async def get_current_user_optional(
    request: Request,
    token: Optional[str] = Depends(oauth2_scheme),
    db: Session = Depends(get_db)
) -> Optional[User]:
    """The authenticated user, or None for anonymous callers and bad tokens."""
    if not token:
        return None

    user = _user_from_token(token, request.app.state.settings, db)
    if user is None:
        logger.info("Ignoring invalid bearer token on optional-auth route")
    return user


async def get_current_user(
    request: Request,
    token: Optional[str] = Depends(oauth2_scheme),
    db: Session = Depends(get_db)
) -> User:
    """
    Get the current authenticated user from token.

    Raises:
        UnauthorizedError: If the token is missing or invalid
    """
    if not token:
        raise UnauthorizedError()

    user = _user_from_token(token, request.app.state.settings, db)
    if user is None:
        raise UnauthorizedError("Could not validate credentials")

    return user
