"""URL shortening service with anonymous quotas and click analytics."""

__version__ = "1.0.0"
