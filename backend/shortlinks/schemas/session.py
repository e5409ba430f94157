from .base import CamelModel


class QuotaStatus(CamelModel):
    """Anonymous quota usage"""
    url_count: int
    remaining_urls: int
