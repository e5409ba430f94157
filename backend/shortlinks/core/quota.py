"""
Anonymous-session quota.

The check and the increment are separate steps: the shorten flow checks,
allocates, and only then increments. Concurrent requests from one session
can therefore push url_count slightly past the limit; the quota is a soft
limit.
"""

from typing import Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .errors import QuotaExceededError
from ..logger import get_logger
from ..models import AnonymousSession

logger = get_logger(__name__)

ANONYMOUS_URL_LIMIT = 10


def remaining_urls(url_count: int, limit: int = ANONYMOUS_URL_LIMIT) -> int:
    return max(0, limit - url_count)


def get_anonymous_session(db: Session, session_id: str) -> Optional[AnonymousSession]:
    return db.query(AnonymousSession).filter(
        AnonymousSession.session_id == session_id
    ).first()


def get_or_create_session(db: Session, session_id: str) -> AnonymousSession:
    """Fetch the session record, creating it with url_count=0 on first use."""
    anonymous_session = get_anonymous_session(db, session_id)
    if anonymous_session:
        return anonymous_session

    anonymous_session = AnonymousSession(session_id=session_id, url_count=0)
    db.add(anonymous_session)
    try:
        db.commit()
    except IntegrityError:
        # Another request created it first
        db.rollback()
        return get_anonymous_session(db, session_id)

    db.refresh(anonymous_session)
    return anonymous_session


def check_quota(db: Session, session_id: str, limit: int = ANONYMOUS_URL_LIMIT) -> AnonymousSession:
    """
    Make sure the session may create another link.

    Raises:
        QuotaExceededError: If url_count has reached the limit
    """
    anonymous_session = get_or_create_session(db, session_id)

    if (anonymous_session.url_count or 0) >= limit:
        logger.info(f"Anonymous session {session_id} reached the limit of {limit} URLs")
        raise QuotaExceededError()

    return anonymous_session


def record_usage(db: Session, anonymous_session: AnonymousSession) -> int:
    """Increment url_count by one after a successful shorten. Returns the new count."""
    anonymous_session.url_count = (anonymous_session.url_count or 0) + 1
    db.commit()
    return anonymous_session.url_count


def get_quota_status(db: Session, session_id: Optional[str], limit: int = ANONYMOUS_URL_LIMIT) -> Tuple[int, int]:
    """Return (url_count, remaining) without creating a record."""
    if not session_id:
        return 0, limit

    anonymous_session = get_anonymous_session(db, session_id)
    url_count = (anonymous_session.url_count or 0) if anonymous_session else 0
    return url_count, remaining_urls(url_count, limit)
