from typing import Optional
from datetime import datetime

from pydantic import Field, field_validator

from .base import CamelModel


class LinkCreate(CamelModel):
    """Schema for creating a new short link"""
    original_url: str = Field(..., description="Original URL to shorten", min_length=1, max_length=2048)
    custom_slug: Optional[str] = Field(None, description="Custom slug used as the short code", max_length=50)

    @field_validator("custom_slug", mode="before")
    @classmethod
    def blank_slug_is_none(cls, value):
        if isinstance(value, str):
            value = value.strip()
            return value or None
        return value

    @field_validator("custom_slug")
    @classmethod
    def slug_charset(cls, value):
        if value is not None and not all(c.isascii() and (c.isalnum() or c in "-_") for c in value):
            raise ValueError("Only letters, numbers, hyphens, and underscores allowed")
        return value


class LinkCreateResponse(CamelModel):
    """Schema for shorten response"""
    id: str
    short_code: str
    short_url: str
    original_url: str
    is_anonymous: bool
    remaining_urls: Optional[int] = None


class LinkResponse(CamelModel):
    """Schema for a link in the owner's list"""
    id: str
    original_url: str
    short_code: str
    custom_slug: Optional[str] = None
    short_url: str
    owner_id: Optional[str] = None
    is_active: bool
    created_at: datetime
    expires_at: Optional[datetime] = None
    click_count: int = 0
    unique_clicks: int = 0
    last_clicked: Optional[datetime] = None
    top_country: Optional[str] = None


class LinkToggleResponse(CamelModel):
    message: str
    is_active: bool


class MessageResponse(CamelModel):
    message: str
