from fastapi import APIRouter, Depends
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .deps import get_app_settings
from ..config import Settings
from ..core.errors import UnauthorizedError, ValidationError
from ..core.security import authenticate_user, create_access_token, get_current_user, get_password_hash
from ..database import get_db
from ..logger import get_logger
from ..models import User
from ..schemas.user import Token, UserCreate, UserLogin, UserResponse

logger = get_logger(__name__)

router = APIRouter(prefix="/auth")


def _email_taken() -> ValidationError:
    message = "An account with this email already exists"
    return ValidationError(message, errors=[{"field": "email", "message": message}])


@router.post("/register", response_model=Token)
def register(
    user_data: UserCreate,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings)
):
    """Create an account and return an access token for it."""
    email = user_data.email.lower()

    if db.query(User).filter(User.email == email).first():
        raise _email_taken()

    user = User(
        email=email,
        first_name=user_data.first_name,
        hashed_password=get_password_hash(user_data.password)
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise _email_taken()
    db.refresh(user)

    logger.info(f"Registered user {user.id}")
    return {
        "access_token": create_access_token({"sub": user.id}, settings),
        "token_type": "bearer"
    }


@router.post("/login", response_model=Token)
def login(
    credentials: UserLogin,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings)
):
    user = authenticate_user(db, credentials.email, credentials.password)
    if not user:
        raise UnauthorizedError("Invalid email or password")

    return {
        "access_token": create_access_token({"sub": user.id}, settings),
        "token_type": "bearer"
    }


@router.get("/me", response_model=UserResponse)
def read_current_user(current_user: User = Depends(get_current_user)):
    return current_user
