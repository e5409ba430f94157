import math
from typing import List, Optional

from sqlalchemy import func, desc
from sqlalchemy.orm import Session

from ..models import Click, Link
from ..utils.geo import country_flag

DAYS_LIMIT = 30
COUNTRIES_LIMIT = 10
RECENT_CLICKS_LIMIT = 50

UNKNOWN = "Unknown"
DIRECT = "Direct"


def round_half_up(value: float, digits: int = 0) -> float:
    """Round halves away from zero (round() rounds halves to even)."""
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def get_percentage(clicks: int, total: int) -> int:
    return int(round_half_up(clicks / total * 100)) if total > 0 else 0


def get_total_clicks(db: Session, link_id: str) -> int:
    return db.query(func.count(Click.id)).filter(
        Click.link_id == link_id
    ).scalar() or 0


def get_unique_visitors(db: Session, link_id: str) -> int:
    """Distinct IP addresses; a rough visitor count"""
    return db.query(func.count(func.distinct(Click.ip_address))).filter(
        Click.link_id == link_id
    ).scalar() or 0


def get_clicks_by_day(db: Session, link_id: str, limit: int = DAYS_LIMIT) -> List[dict]:
    """Clicks per calendar day for the most recent `limit` days with clicks, oldest first"""
    day = func.date(Click.clicked_at)

    results = db.query(
        day.label('date'),
        func.count(Click.id).label('clicks')
    ).filter(
        Click.link_id == link_id
    ).group_by(
        day
    ).order_by(
        day.desc()
    ).limit(limit).all()

    return [
        {
            "date": row.date if isinstance(row.date, str) else row.date.isoformat(),
            "clicks": row.clicks
        }
        for row in reversed(results)
    ]


def _group_counts(db: Session, link_id: str, column):
    """Count clicks grouped by column with nulls folded into "Unknown", largest first"""
    value = func.coalesce(column, UNKNOWN)

    return db.query(
        value.label('value'),
        func.count(Click.id).label('clicks')
    ).filter(
        Click.link_id == link_id
    ).group_by(
        value
    ).order_by(
        func.count(Click.id).desc(),
        value
    ).all()


def get_clicks_by_country(db: Session, link_id: str, total_clicks: int, limit: int = COUNTRIES_LIMIT) -> List[dict]:
    """Top countries, each with its share of all clicks and a flag"""
    if total_clicks == 0:
        return []

    country = func.coalesce(Click.country, UNKNOWN)

    results = db.query(
        country.label('value'),
        func.max(Click.country_code).label('country_code'),
        func.count(Click.id).label('clicks')
    ).filter(
        Click.link_id == link_id
    ).group_by(
        country
    ).order_by(
        func.count(Click.id).desc(),
        country
    ).limit(limit).all()

    return [
        {
            "country": row.value,
            "flag": country_flag(row.country_code),
            "clicks": row.clicks,
            "percentage": get_percentage(row.clicks, total_clicks)
        }
        for row in results
    ]


def get_clicks_by_device(db: Session, link_id: str) -> List[dict]:
    return [
        {"device": row.value, "clicks": row.clicks}
        for row in _group_counts(db, link_id, Click.device)
    ]


def get_clicks_by_browser(db: Session, link_id: str) -> List[dict]:
    return [
        {"browser": row.value, "clicks": row.clicks}
        for row in _group_counts(db, link_id, Click.browser)
    ]


def get_recent_clicks(db: Session, link_id: str, limit: int = RECENT_CLICKS_LIMIT) -> List[dict]:
    """Latest clicks, newest first"""
    clicks = db.query(Click).filter(
        Click.link_id == link_id
    ).order_by(desc(Click.clicked_at)).limit(limit).all()

    return [
        {
            "timestamp": click.clicked_at,
            "country": click.country or UNKNOWN,
            "city": click.city or UNKNOWN,
            "device": click.device or UNKNOWN,
            "browser": click.browser or UNKNOWN,
            "referer": click.referer or DIRECT
        }
        for click in clicks
    ]


def analyze(db: Session, link_id: str) -> dict:
    """Get complete click analytics for a link"""
    total_clicks = get_total_clicks(db, link_id)

    return {
        "total_clicks": total_clicks,
        "unique_visitors": get_unique_visitors(db, link_id),
        "clicks_by_day": get_clicks_by_day(db, link_id),
        "clicks_by_country": get_clicks_by_country(db, link_id, total_clicks),
        "clicks_by_device": get_clicks_by_device(db, link_id),
        "clicks_by_browser": get_clicks_by_browser(db, link_id),
        "recent_clicks": get_recent_clicks(db, link_id)
    }


def get_top_country(db: Session, owner_id: str) -> Optional[str]:
    """Country with the most clicks across the owner's links; clicks without a country are ignored"""
    row = db.query(
        Click.country,
        func.count(Click.id).label('clicks')
    ).join(
        Link, Click.link_id == Link.id
    ).filter(
        Link.owner_id == owner_id,
        Click.country.isnot(None)
    ).group_by(
        Click.country
    ).order_by(
        func.count(Click.id).desc(),
        Click.country
    ).first()

    return row.country if row else None


def summarize(db: Session, owner_id: str) -> dict:
    """Dashboard totals for one owner"""
    total_urls = db.query(func.count(Link.id)).filter(
        Link.owner_id == owner_id
    ).scalar() or 0

    total_clicks = db.query(func.count(Click.id)).join(
        Link, Click.link_id == Link.id
    ).filter(
        Link.owner_id == owner_id
    ).scalar() or 0

    click_rate = round_half_up(total_clicks / total_urls, 2) if total_urls > 0 else 0

    return {
        "total_urls": total_urls,
        "total_clicks": total_clicks,
        "click_rate": click_rate,
        "top_country": get_top_country(db, owner_id)
    }
