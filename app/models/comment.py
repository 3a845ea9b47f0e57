from datetime import datetime
from typing import Optional

from pydantic import Field

from app.models.base import APIModel
from app.models.user import UserPublic


class CommentCreate(APIModel):
    content: str = Field(..., min_length=1)


class Comment(APIModel):
    id: str
    user: Optional[UserPublic] = None
    content: str
    created_at: datetime
