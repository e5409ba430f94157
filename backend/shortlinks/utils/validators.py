import re
from urllib.parse import urlparse

MAX_URL_LENGTH = 2048

SHORT_CODE_PATTERN = re.compile(r'^[A-Za-z0-9_-]{1,50}$')


def normalize_url(url: str) -> str:
    """Trim and prepend https:// when no http(s) scheme is present."""
    url = url.strip()
    if not url.startswith('http://') and not url.startswith('https://'):
        return f"https://{url}"
    return url


def is_valid_url(url: str) -> tuple[bool, str]:
    """
    Validate if a URL is well-formed.

    Args:
        url: The URL to validate

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not url or len(url) < 1:
        return False, "URL cannot be empty"

    if len(url) > MAX_URL_LENGTH:
        return False, f"URL is too long (max {MAX_URL_LENGTH} characters)"

    try:
        result = urlparse(url)
    except ValueError as e:
        return False, f"Invalid URL: {str(e)}"

    # Must have scheme and netloc
    if not all([result.scheme, result.netloc]):
        return False, "Please enter a valid URL"

    # Only http and https
    if result.scheme not in ['http', 'https']:
        return False, "Only HTTP and HTTPS URLs are allowed"

    if any(ch.isspace() for ch in result.netloc):
        return False, "Please enter a valid URL"

    return True, ""


def is_valid_short_code(short_code: str) -> bool:
    return bool(short_code) and SHORT_CODE_PATTERN.match(short_code) is not None


def get_client_ip(request) -> str:
    """
    Get the best-effort client IP address from request.

    Priority: CF-Connecting-IP, first X-Forwarded-For entry, X-Real-IP,
    socket peer, else "unknown".
    """
    connecting = request.headers.get("CF-Connecting-IP")
    if connecting:
        return connecting.strip()

    # Check for X-Forwarded-For header (if behind proxy)
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        # Take the first IP in the chain
        first = forwarded.split(",")[0].strip()
        if first:
            return first

    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip.strip()

    # Otherwise use client.host
    return request.client.host if request.client and request.client.host else "unknown"
