from typing import Callable, Optional

from sqlalchemy.orm import Session

from .clicks import ClickRecorder
from ..core.errors import NotFoundError
from ..logger import get_logger
from ..models import Link
from ..utils.validators import is_valid_short_code

logger = get_logger(__name__)


def resolve(db: Session, short_code: str) -> Link:
    """
    Find the active link for a short code (case-sensitive).

    Malformed, missing and disabled codes all raise the same NotFoundError.
    """
    if not is_valid_short_code(short_code):
        raise NotFoundError()

    link = db.query(Link).filter(
        Link.short_code == short_code,
        Link.is_active == True  # noqa: E712
    ).first()

    if not link:
        raise NotFoundError()

    return link


def resolve_and_track(
    db: Session,
    short_code: str,
    recorder: ClickRecorder,
    schedule: Callable,
    ip_address: str,
    user_agent: str,
    referer: Optional[str] = None,
) -> str:
    """
    Resolve a short code and hand the click to `schedule` (e.g. BackgroundTasks.add_task).

    The click is recorded after the caller returns; nothing about it can
    change or delay the returned URL.
    """
    link = resolve(db, short_code)

    try:
        schedule(recorder.record, link.id, ip_address, user_agent, referer)
    except Exception:
        logger.exception(f"Could not schedule click recording for {short_code}")

    return link.original_url
