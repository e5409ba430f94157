from typing import List, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, FastAPI, Request
from fastapi.responses import RedirectResponse
from slowapi import Limiter
from sqlalchemy.orm import Session

from .deps import get_anonymous_id, get_app_settings, get_click_recorder
from ..config import Settings
from ..core.security import get_current_user, get_current_user_optional
from ..database import get_db
from ..logger import get_logger
from ..models import User
from ..schemas.analytics import LinkAnalyticsResponse
from ..schemas.link import LinkCreate, LinkCreateResponse, LinkResponse, LinkToggleResponse, MessageResponse
from ..services import analytics, links
from ..services.clicks import ClickRecorder
from ..services.redirect import resolve_and_track
from ..utils.validators import get_client_ip

logger = get_logger(__name__)

router = APIRouter()


def create_short_link(
    request: Request,
    link_data: LinkCreate,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
    current_user: Optional[User] = Depends(get_current_user_optional)
):
    """
    Create a short link.

    Anonymous callers are limited to ANONYMOUS_URL_LIMIT links per session;
    the response then carries remainingUrls.
    """
    if current_user:
        return links.shorten(
            db, settings, link_data.original_url,
            custom_slug=link_data.custom_slug,
            owner_id=current_user.id
        )

    return links.shorten(
        db, settings, link_data.original_url,
        custom_slug=link_data.custom_slug,
        session_id=get_anonymous_id(request)
    )


@router.get("/urls", response_model=List[LinkResponse])
def get_my_links(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
    current_user: User = Depends(get_current_user)
):
    """List the caller's links, newest first, with click stats."""
    return links.list_links_by_owner(db, current_user.id, settings.SHORT_DOMAIN)


@router.get("/urls/{link_id}/analytics", response_model=LinkAnalyticsResponse)
def get_link_analytics(
    link_id: str,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
    current_user: User = Depends(get_current_user)
):
    """Full click analytics for one of the caller's links."""
    url = links.get_owned_link_with_stats(db, link_id, current_user.id, settings.SHORT_DOMAIN)
    return {
        "url": url,
        "analytics": analytics.analyze(db, link_id)
    }


@router.delete("/urls/{link_id}", response_model=MessageResponse)
def delete_link(
    link_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    links.delete_link(db, link_id, current_user.id)
    return {"message": "URL deleted successfully"}


@router.patch("/urls/{link_id}/toggle", response_model=LinkToggleResponse)
def toggle_link_status(
    link_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Enable or disable a link without deleting it."""
    is_active = links.toggle_link(db, link_id, current_user.id)
    return {
        "message": "Link status updated",
        "is_active": is_active
    }


def redirect_to_url(
    short_code: str,
    request: Request,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    recorder: ClickRecorder = Depends(get_click_recorder)
):
    """
    Redirect to the original URL from short code.

    Case-sensitive lookup. The click is recorded in the background after
    the 301 is sent.
    """
    target = resolve_and_track(
        db,
        short_code,
        recorder,
        background_tasks.add_task,
        ip_address=get_client_ip(request),
        user_agent=request.headers.get('user-agent', ''),
        referer=request.headers.get('referer')
    )

    return RedirectResponse(url=target, status_code=301)


def add_rate_limited_routes(app: FastAPI, limiter: Limiter, settings: Settings) -> None:
    """
    Register shorten and redirect with the app's own limiter and limits.

    Call last: the redirect is a catch-all and must not shadow other routes.
    """
    app.post(
        "/api/urls/shorten",
        response_model=LinkCreateResponse,
        response_model_exclude_none=True,
        tags=["links"]
    )(limiter.limit(settings.RATE_LIMIT_SHORTEN)(create_short_link))

    app.get("/{short_code}", tags=["redirect"])(
        limiter.limit(settings.RATE_LIMIT_REDIRECT)(redirect_to_url)
    )
