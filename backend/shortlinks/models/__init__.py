from .link import Link
from .user import User
from .click import Click
from .anonymous_session import AnonymousSession

__all__ = ["Link", "User", "Click", "AnonymousSession"]
