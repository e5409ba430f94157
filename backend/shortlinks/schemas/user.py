from typing import Optional
from datetime import datetime

from pydantic import BaseModel, EmailStr, Field, model_validator

from .base import CamelModel


class UserCreate(CamelModel):
    """Schema for creating a new user"""
    first_name: str = Field(..., min_length=1, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=100)
    confirm_password: str

    @model_validator(mode="after")
    def passwords_match(self):
        if self.password != self.confirm_password:
            raise ValueError("Passwords don't match")
        return self


class UserLogin(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class UserResponse(CamelModel):
    """Schema for user response"""
    id: str
    email: str
    first_name: Optional[str] = None
    created_at: datetime


class Token(BaseModel):
    """Schema for authentication token"""
    access_token: str
    token_type: str
