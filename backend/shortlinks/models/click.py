import uuid

from sqlalchemy import Column, String, Text, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship
from ..database import Base, utcnow


class Click(Base):
    """Click statistics model (append-only)"""
    __tablename__ = "clicks"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    link_id = Column(String(36), ForeignKey("links.id", ondelete="CASCADE"), nullable=False)
    ip_address = Column(String(45), nullable=True)  # IPv4 or IPv6
    user_agent = Column(Text, nullable=True)
    referer = Column(Text, nullable=True)
    country = Column(String(100), nullable=True)
    country_code = Column(String(2), nullable=True)
    city = Column(String(100), nullable=True)
    device = Column(String(20), nullable=True)
    browser = Column(String(20), nullable=True)
    os = Column(String(20), nullable=True)
    clicked_at = Column(DateTime, default=utcnow, nullable=False)

    # Relationship with link
    link = relationship("Link", back_populates="clicks")

    __table_args__ = (
        Index('idx_clicks_link_id', link_id),
        Index('idx_clicks_clicked_at', clicked_at),
    )

    def __repr__(self):
        return f"<Click {self.id} for link {self.link_id}>"
