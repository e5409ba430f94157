import uuid

from sqlalchemy import Column, Integer, String, DateTime
from ..database import Base, utcnow


class AnonymousSession(Base):
    """Per-browser-session counter of anonymously created links"""
    __tablename__ = "anonymous_sessions"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    session_id = Column(String(64), unique=True, index=True, nullable=False)
    url_count = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    last_access_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    def __repr__(self):
        return f"<AnonymousSession {self.session_id} ({self.url_count})>"
