import uuid

from sqlalchemy import Column, String, DateTime
from sqlalchemy.orm import relationship
from ..database import Base, utcnow


class User(Base):
    """Registered account; owns links"""
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    first_name = Column(String(50), nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    links = relationship("Link", back_populates="owner")

    def __repr__(self):
        return f"<User {self.email}>"
