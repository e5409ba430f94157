import random
import string
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .errors import AllocationExhaustedError, ReservedSlugError, SlugTakenError
from ..logger import get_logger
from ..models import Link

logger = get_logger(__name__)

# Case-sensitive Base62 alphabet
CHARSET = string.ascii_uppercase + string.ascii_lowercase + string.digits  # A-Za-z0-9

DEFAULT_CODE_LENGTH = 6
DEFAULT_MAX_ATTEMPTS = 10

# Slugs that would shadow application routes
RESERVED_SLUGS = frozenset([
    'api', 'admin', 'login', 'signup', 'register', 'dashboard',
    'auth', 'static', 'assets', 'health', 'status', 'settings',
    'profile', 'account', 'help', 'support', 'terms', 'privacy',
    'about', 'contact', 'home', 'index', 'favicon', 'robots',
    'docs', 'redoc'
])

# SQLSTATE for unique_violation (PostgreSQL)
UNIQUE_VIOLATION = "23505"


def generate_short_code(length: int = DEFAULT_CODE_LENGTH) -> str:
    """
    Generate a random case-sensitive short code.

    Note:
        - 6 chars: 62^6 = 56,800,235,584 combinations
        - Uniqueness is not checked here; the insert decides.
    """
    return ''.join(random.choices(CHARSET, k=length))


def is_reserved_slug(slug: str) -> bool:
    return slug.lower() in RESERVED_SLUGS


def is_unique_violation(error: IntegrityError) -> bool:
    """Tell a duplicate-key failure apart from other integrity failures (FK, NOT NULL)."""
    orig = error.orig
    if getattr(orig, "pgcode", None) == UNIQUE_VIOLATION or getattr(orig, "sqlstate", None) == UNIQUE_VIOLATION:
        return True
    message = str(orig).lower()
    return "unique constraint" in message or "duplicate key" in message


def _insert_link(db: Session, link: Link) -> bool:
    """Attempt one insert. Returns False on a uniqueness conflict, re-raises anything else."""
    db.add(link)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        if is_unique_violation(e):
            return False
        raise
    db.refresh(link)
    return True


def allocate(
    db: Session,
    original_url: str,
    custom_slug: Optional[str] = None,
    owner_id: Optional[str] = None,
    length: int = DEFAULT_CODE_LENGTH,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
) -> Link:
    """
    Reserve a short code for original_url and persist the link.

    A custom slug gets exactly one insert: a conflict raises SlugTakenError,
    never a substitute code. Random codes are regenerated on conflict up to
    max_attempts times before AllocationExhaustedError.

    Args:
        db: Database session
        original_url: Target URL, stored as given
        custom_slug: Caller-chosen code, already pattern-validated
        owner_id: Owning user id, None for anonymous links
        length: Length of generated codes
        max_attempts: Total insert attempts for generated codes

    Returns:
        The persisted Link
    """
    custom_slug = custom_slug.strip() if custom_slug else None
    custom_slug = custom_slug or None

    if custom_slug:
        if is_reserved_slug(custom_slug):
            raise ReservedSlugError()

        link = Link(
            original_url=original_url,
            short_code=custom_slug,
            custom_slug=custom_slug,
            owner_id=owner_id,
            is_active=True
        )
        if not _insert_link(db, link):
            logger.info(f"Custom slug {custom_slug!r} already taken")
            raise SlugTakenError()
        return link

    for attempt in range(1, max_attempts + 1):
        link = Link(
            original_url=original_url,
            short_code=generate_short_code(length),
            owner_id=owner_id,
            is_active=True
        )
        if _insert_link(db, link):
            return link
        logger.warning(f"Short code collision on attempt {attempt}/{max_attempts}, retrying")

    logger.error(f"Exhausted {max_attempts} attempts to allocate a short code")
    raise AllocationExhaustedError()
