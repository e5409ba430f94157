from .link import LinkCreate, LinkCreateResponse, LinkResponse
from .analytics import ClickAnalytics, DashboardStats, LinkAnalyticsResponse
from .session import QuotaStatus
from .user import UserCreate, UserLogin, UserResponse, Token

__all__ = [
    "LinkCreate", "LinkCreateResponse", "LinkResponse",
    "ClickAnalytics", "DashboardStats", "LinkAnalyticsResponse",
    "QuotaStatus",
    "UserCreate", "UserLogin", "UserResponse", "Token",
]
