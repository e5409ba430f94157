import uuid

from sqlalchemy import Column, String, Text, DateTime, Boolean, ForeignKey, Index
from sqlalchemy.orm import relationship
from ..database import Base, utcnow


class Link(Base):
    """Short link model"""
    __tablename__ = "links"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    original_url = Column(Text, nullable=False)
    # Unique constraint is the only guard against duplicate codes
    short_code = Column(String(50), unique=True, nullable=False)
    custom_slug = Column(String(50), nullable=True)
    owner_id = Column(String(36), ForeignKey("users.id"), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    expires_at = Column(DateTime, nullable=True)  # stored, never enforced

    # Relationship with clicks; the database cascades deletes
    clicks = relationship("Click", back_populates="link", cascade="all, delete-orphan", passive_deletes=True)
    owner = relationship("User", back_populates="links")

    __table_args__ = (
        Index('idx_links_owner_id', owner_id),
    )

    def __repr__(self):
        return f"<Link {self.short_code} -> {self.original_url}>"
