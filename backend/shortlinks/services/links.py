from typing import List, Optional

from sqlalchemy import func, desc
from sqlalchemy.orm import Session

from ..config import Settings
from ..core import quota
from ..core.errors import NotFoundError, UnauthorizedError, ValidationError
from ..core.shortener import allocate
from ..logger import get_logger
from ..models import Click, Link
from ..utils.validators import is_valid_url, normalize_url

logger = get_logger(__name__)


def build_short_url(short_code: str, short_domain: str) -> str:
    return f"https://{short_domain}/{short_code}"


def shorten(
    db: Session,
    settings: Settings,
    original_url: str,
    custom_slug: Optional[str] = None,
    owner_id: Optional[str] = None,
    session_id: Optional[str] = None,
) -> dict:
    """
    Create a short link for an account or an anonymous session.

    Anonymous callers go through the quota: check, allocate, then increment.
    Authenticated callers are unlimited.

    Raises:
        ValidationError, ReservedSlugError, SlugTakenError,
        QuotaExceededError, AllocationExhaustedError
    """
    original_url = normalize_url(original_url)
    is_valid, error_msg = is_valid_url(original_url)
    if not is_valid:
        raise ValidationError(error_msg, errors=[{"field": "originalUrl", "message": error_msg}])

    anonymous_session = None
    if owner_id is None:
        if not session_id:
            raise UnauthorizedError("An account or an anonymous session is required")
        anonymous_session = quota.check_quota(db, session_id, settings.ANONYMOUS_URL_LIMIT)

    link = allocate(
        db,
        original_url,
        custom_slug=custom_slug,
        owner_id=owner_id,
        length=settings.SHORT_CODE_LENGTH,
        max_attempts=settings.SHORT_CODE_MAX_ATTEMPTS,
    )
    logger.info(f"Created link {link.short_code} for {owner_id or 'anonymous session'}")

    result = {
        "id": link.id,
        "short_code": link.short_code,
        "short_url": build_short_url(link.short_code, settings.SHORT_DOMAIN),
        "original_url": link.original_url,
        "is_anonymous": anonymous_session is not None,
        "remaining_urls": None
    }

    if anonymous_session is not None:
        url_count = quota.record_usage(db, anonymous_session)
        result["remaining_urls"] = quota.remaining_urls(url_count, settings.ANONYMOUS_URL_LIMIT)

    return result


def get_owned_link(db: Session, link_id: str, owner_id: str) -> Link:
    link = db.query(Link).filter(
        Link.id == link_id,
        Link.owner_id == owner_id
    ).first()

    if not link:
        raise NotFoundError()

    return link


def delete_link(db: Session, link_id: str, owner_id: str) -> None:
    """Hard delete scoped to the owner; clicks go with it"""
    link = get_owned_link(db, link_id, owner_id)
    db.delete(link)
    db.commit()
    logger.info(f"Link {link_id} deleted by {owner_id}")


def toggle_link(db: Session, link_id: str, owner_id: str) -> bool:
    """Flip is_active without deleting. Returns the new state."""
    link = get_owned_link(db, link_id, owner_id)
    link.is_active = not link.is_active
    db.commit()
    return link.is_active


def list_links_by_owner(db: Session, owner_id: str, short_domain: str) -> List[dict]:
    """Owner's links newest first, each with click totals, last click and top country"""
    links = db.query(Link).filter(
        Link.owner_id == owner_id
    ).order_by(desc(Link.created_at)).all()

    return with_click_stats(db, links, short_domain)


def get_owned_link_with_stats(db: Session, link_id: str, owner_id: str, short_domain: str) -> dict:
    link = get_owned_link(db, link_id, owner_id)
    return with_click_stats(db, [link], short_domain)[0]


def with_click_stats(db: Session, links: List[Link], short_domain: str) -> List[dict]:
    if not links:
        return []

    link_ids = [link.id for link in links]

    stats = {
        row.link_id: row
        for row in db.query(
            Click.link_id,
            func.count(Click.id).label('clicks'),
            func.count(func.distinct(Click.ip_address)).label('unique_clicks'),
            func.max(Click.clicked_at).label('last_clicked')
        ).filter(
            Click.link_id.in_(link_ids)
        ).group_by(Click.link_id).all()
    }

    # Highest count per link wins; ties go to the alphabetically first country
    top_countries = {}
    country_rows = db.query(
        Click.link_id,
        Click.country,
        func.count(Click.id).label('clicks')
    ).filter(
        Click.link_id.in_(link_ids),
        Click.country.isnot(None)
    ).group_by(
        Click.link_id, Click.country
    ).order_by(
        Click.link_id, func.count(Click.id).desc(), Click.country
    ).all()
    for row in country_rows:
        top_countries.setdefault(row.link_id, row.country)

    result = []
    for link in links:
        row = stats.get(link.id)
        result.append({
            "id": link.id,
            "original_url": link.original_url,
            "short_code": link.short_code,
            "custom_slug": link.custom_slug,
            "short_url": build_short_url(link.short_code, short_domain),
            "owner_id": link.owner_id,
            "is_active": link.is_active,
            "created_at": link.created_at,
            "expires_at": link.expires_at,
            "click_count": row.clicks if row else 0,
            "unique_clicks": row.unique_clicks if row else 0,
            "last_clicked": row.last_clicked if row else None,
            "top_country": top_countries.get(link.id)
        })

    return result
