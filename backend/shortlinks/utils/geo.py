import re
from functools import lru_cache
from typing import Optional, Tuple

import httpx

from ..logger import get_logger

logger = get_logger(__name__)

# Private IP patterns
PRIVATE_IP_PATTERNS = [
    re.compile(r'^127\.'),  # Loopback
    re.compile(r'^10\.'),  # Class A private
    re.compile(r'^172\.(1[6-9]|2[0-9]|3[0-1])\.'),  # Class B private
    re.compile(r'^192\.168\.'),  # Class C private
    re.compile(r'^169\.254\.'),  # Link-local
    re.compile(r'^::1$'),  # IPv6 loopback
    re.compile(r'^fc00:', re.IGNORECASE),  # IPv6 unique local
    re.compile(r'^fe80:', re.IGNORECASE),  # IPv6 link-local
]

FINDIP_URL = "https://api.findip.net/{ip}/"
IP_API_URL = "http://ip-api.com/json/{ip}"


def is_private_ip(ip: str) -> bool:
    """Check if IP address is private/local"""
    if not ip or ip == "unknown":
        return True
    for pattern in PRIVATE_IP_PATTERNS:
        if pattern.match(ip):
            return True
    return False


class GeoData:
    """Container for geo data"""
    def __init__(self, country: Optional[str] = None,
                 city: Optional[str] = None,
                 country_code: Optional[str] = None):
        self.country = country
        self.city = city
        self.country_code = country_code

    def __repr__(self):
        return f"<GeoData {self.country_code} {self.country} / {self.city}>"


def _from_findip(client: httpx.Client, ip: str, token: str) -> Optional[Tuple]:
    response = client.get(FINDIP_URL.format(ip=ip), params={"token": token})
    response.raise_for_status()
    data = response.json()
    if not data or not data.get("country"):
        return None
    country = data["country"]
    city = data.get("city") or {}
    return (
        (country.get("names") or {}).get("en"),
        (city.get("names") or {}).get("en"),
        country.get("iso_code"),
    )


def _from_ip_api(client: httpx.Client, ip: str) -> Optional[Tuple]:
    response = client.get(
        IP_API_URL.format(ip=ip),
        params={"fields": "status,country,countryCode,city"}
    )
    response.raise_for_status()
    data = response.json()
    if data.get("status") != "success":
        return None
    return (
        data.get("country"),
        data.get("city"),
        data.get("countryCode"),
    )


class GeoLookupError(Exception):
    """The fallback provider could not be reached; the result is unknown, not empty."""


# LRU cache for geo data (max 10000 entries); raised lookups are not cached
@lru_cache(maxsize=10000)
def _get_geo_data_cached(ip: str, timeout: float, findip_token: Optional[str]) -> Tuple[Optional[str], Optional[str], Optional[str]]:
    """
    Resolve an IP with findip.net (when a token is configured), falling back to ip-api.com.
    Returns tuple: (country, city, country_code)

    Raises:
        GeoLookupError: If ip-api.com failed with a network or HTTP error
    """
    with httpx.Client(timeout=timeout) as client:
        if findip_token:
            try:
                result = _from_findip(client, ip, findip_token)
                if result:
                    return result
            except (httpx.HTTPError, ValueError) as e:
                logger.warning(f"findip.net lookup failed for {ip}: {e}")

        try:
            result = _from_ip_api(client, ip)
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"ip-api.com lookup failed for {ip}: {e}")
            raise GeoLookupError(ip) from e

    return result or (None, None, None)


class GeoLocator:
    """
    IP geolocation. lookup() never raises: any failure gives an all-null GeoData.
    """

    def __init__(self, enabled: bool = True, timeout: float = 2.0, findip_token: Optional[str] = None):
        self.enabled = enabled
        self.timeout = timeout
        self.findip_token = findip_token

    def lookup(self, ip: str) -> GeoData:
        if not self.enabled or is_private_ip(ip):
            return GeoData()

        try:
            country, city, country_code = _get_geo_data_cached(ip, self.timeout, self.findip_token)
        except GeoLookupError:
            return GeoData()
        except Exception:
            logger.exception(f"Geolocation failed for {ip}")
            return GeoData()

        return GeoData(country=country, city=city, country_code=country_code)

    __call__ = lookup


def country_flag(country_code: Optional[str]) -> str:
    """Regional-indicator flag for a two-letter ISO code, globe otherwise."""
    if not country_code or len(country_code) != 2 or not country_code.isalpha():
        return '🌍'
    return ''.join(chr(127397 + ord(char)) for char in country_code.upper())
