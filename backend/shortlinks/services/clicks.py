"""
Click recording.

record() is scheduled as a background task after the redirect response has
been built. It opens its own database session and never raises: a click
that cannot be stored is logged and dropped, the visitor is unaffected.
"""

from typing import Callable, Optional

from sqlalchemy.orm import Session, sessionmaker

from ..logger import get_logger
from ..models import Click
from ..utils.geo import GeoData

logger = get_logger(__name__)

# Width of Click.ip_address; header-supplied values are not trusted to fit
IP_ADDRESS_MAX_LENGTH = 45


def parse_user_agent(user_agent: Optional[str]) -> dict:
    """
    Classify a user agent by case-insensitive substring matching.

    Order matters: Chrome and Edge UAs also carry "safari"/"chrome" tokens.

    Returns:
        {"device": ..., "browser": ..., "os": ...}
    """
    ua = (user_agent or "").lower()

    device = "Desktop"
    if "mobile" in ua or "android" in ua or "iphone" in ua:
        device = "Mobile"
    elif "tablet" in ua or "ipad" in ua:
        device = "Tablet"

    browser = "Unknown"
    if "firefox" in ua:
        browser = "Firefox"
    elif "chrome" in ua and "edg" not in ua:
        browser = "Chrome"
    elif "safari" in ua and "chrome" not in ua:
        browser = "Safari"
    elif "edg" in ua:
        browser = "Edge"
    elif "opera" in ua:
        browser = "Opera"

    os = "Unknown"
    if "windows" in ua:
        os = "Windows"
    elif "mac os" in ua or "macos" in ua:
        os = "macOS"
    elif "linux" in ua:
        os = "Linux"
    elif "android" in ua:
        os = "Android"
    elif "ios" in ua or "iphone" in ua or "ipad" in ua:
        os = "iOS"

    return {"device": device, "browser": browser, "os": os}


class ClickRecorder:
    """Classifies a hit and appends a Click row."""

    def __init__(self, session_factory: sessionmaker, geolocate: Callable[[str], GeoData]):
        self.session_factory = session_factory
        self.geolocate = geolocate

    def _locate(self, ip_address: str) -> GeoData:
        try:
            return self.geolocate(ip_address) or GeoData()
        except Exception:
            logger.exception(f"Geolocation raised for {ip_address}, storing click without location")
            return GeoData()

    def build_click(self, link_id: str, ip_address: str, user_agent: str, referer: Optional[str] = None) -> Click:
        if ip_address:
            ip_address = ip_address[:IP_ADDRESS_MAX_LENGTH]
        device_info = parse_user_agent(user_agent)
        geo = self._locate(ip_address)

        return Click(
            link_id=link_id,
            ip_address=ip_address,
            user_agent=user_agent,
            referer=referer or None,
            country=geo.country,
            country_code=geo.country_code,
            city=geo.city,
            device=device_info["device"],
            browser=device_info["browser"],
            os=device_info["os"],
        )

    def record(self, link_id: str, ip_address: str, user_agent: str, referer: Optional[str] = None) -> None:
        """Persist one click. Failures are logged and swallowed."""
        db: Session = self.session_factory()
        try:
            db.add(self.build_click(link_id, ip_address, user_agent, referer))
            db.commit()
        except Exception:
            db.rollback()
            logger.exception(f"Failed to record click for link {link_id}")
        finally:
            db.close()
