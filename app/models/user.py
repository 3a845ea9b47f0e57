from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import EmailStr, Field

from app.models.base import APIModel


class UserRole(str, Enum):
    USER = "user"
    ADMIN = "admin"


class UserCreate(APIModel):
    name: str = Field(..., min_length=1, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=6)


class UserLogin(APIModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class UserPublic(APIModel):
    """Публичные данные пользователя, подставляемые в посты и комментарии."""
    id: str
    name: Optional[str] = None
    email: Optional[str] = None


class User(UserPublic):
    role: UserRole = UserRole.USER
    created_at: Optional[datetime] = None
