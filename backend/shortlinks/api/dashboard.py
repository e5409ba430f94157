from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from .deps import get_app_settings, peek_anonymous_id
from ..config import Settings
from ..core import quota
from ..core.security import get_current_user
from ..database import get_db
from ..models import User
from ..schemas.analytics import DashboardStats
from ..schemas.session import QuotaStatus
from ..services import analytics

router = APIRouter()


@router.get("/dashboard/stats", response_model=DashboardStats)
def get_dashboard_stats(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Totals across the caller's links."""
    return analytics.summarize(db, current_user.id)


@router.get("/session/anonymous", response_model=QuotaStatus)
def get_anonymous_quota(
    request: Request,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings)
):
    """How many links this anonymous session has created and how many remain."""
    url_count, remaining = quota.get_quota_status(db, peek_anonymous_id(request), settings.ANONYMOUS_URL_LIMIT)
    return {
        "url_count": url_count,
        "remaining_urls": remaining
    }
