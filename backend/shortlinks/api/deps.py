import uuid
from typing import Optional

from fastapi import Request

from ..config import Settings
from ..services.clicks import ClickRecorder

ANONYMOUS_ID_KEY = "anonymous_id"


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_click_recorder(request: Request) -> ClickRecorder:
    return request.app.state.click_recorder


def get_anonymous_id(request: Request) -> str:
    """Anonymous session id from the signed session cookie, assigned on first use."""
    anonymous_id = request.session.get(ANONYMOUS_ID_KEY)
    if not anonymous_id:
        anonymous_id = str(uuid.uuid4())
        request.session[ANONYMOUS_ID_KEY] = anonymous_id
    return anonymous_id


def peek_anonymous_id(request: Request) -> Optional[str]:
    """Anonymous session id if one was assigned, without creating it."""
    return request.session.get(ANONYMOUS_ID_KEY)
