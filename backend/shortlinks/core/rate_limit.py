from slowapi import Limiter
from slowapi.util import get_remote_address

from ..config import Settings


def make_limiter(settings: Settings) -> Limiter:
    """
    Build the limiter for one app.

    Each app gets its own instance, so the on/off switch and the in-memory
    counters are never shared between apps in one process.
    """
    return Limiter(key_func=get_remote_address, enabled=settings.RATE_LIMIT_ENABLED)
