from datetime import datetime
from typing import Optional

from pydantic import Field

from app.models.base import APIModel


class CategoryCreate(APIModel):
    name: str = Field(..., min_length=1, max_length=50)
    description: Optional[str] = Field(None, max_length=200)


class CategoryRef(APIModel):
    """Категория в составе поста: только ID и название."""
    id: str
    name: Optional[str] = None


class Category(CategoryRef):
    description: Optional[str] = None
    created_at: Optional[datetime] = None
