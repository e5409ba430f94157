from typing import List, Optional
from datetime import datetime

from .base import CamelModel
from .link import LinkResponse


class DayStats(CamelModel):
    """Clicks on one calendar day"""
    date: str  # ISO date
    clicks: int


class CountryStats(CamelModel):
    """Country-level statistics"""
    country: str
    flag: str  # emoji, globe when the country code is unknown
    clicks: int
    percentage: int


class DeviceStats(CamelModel):
    device: str
    clicks: int


class BrowserStats(CamelModel):
    browser: str
    clicks: int


class RecentClick(CamelModel):
    timestamp: datetime
    country: str
    city: str
    device: str
    browser: str
    referer: str


class ClickAnalytics(CamelModel):
    """Complete analytics for a link"""
    total_clicks: int
    unique_visitors: int
    clicks_by_day: List[DayStats]
    clicks_by_country: List[CountryStats]
    clicks_by_device: List[DeviceStats]
    clicks_by_browser: List[BrowserStats]
    recent_clicks: List[RecentClick]


class LinkAnalyticsResponse(CamelModel):
    url: LinkResponse
    analytics: ClickAnalytics


class DashboardStats(CamelModel):
    """Totals across one owner's links"""
    total_urls: int
    total_clicks: int
    click_rate: float
    top_country: Optional[str] = None
