from datetime import datetime
from typing import List, Optional

from pydantic import Field

from app.models.base import APIModel
from app.models.category import CategoryRef
from app.models.comment import Comment
from app.models.user import UserPublic


class PostBase(APIModel):
    title: str = Field(..., min_length=1, max_length=100)
    content: str = Field(..., min_length=1)
    excerpt: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    featured_image: Optional[str] = None


class PostCreate(PostBase):
    category: str = Field(..., min_length=1)
    is_published: bool = True


class PostUpdate(APIModel):
    """
    Частичное обновление поста.
    Пустые строки и null не меняют сохранённое значение.
    """
    title: Optional[str] = Field(None, max_length=100)
    content: Optional[str] = None
    excerpt: Optional[str] = None
    category: Optional[str] = None
    tags: Optional[List[str]] = None
    featured_image: Optional[str] = None
    is_published: Optional[bool] = None


class Post(PostBase):
    id: str
    category: Optional[CategoryRef] = None
    author: Optional[UserPublic] = None
    view_count: int = 0
    comments: List[Comment] = Field(default_factory=list)
    is_published: bool = True
    created_at: datetime
    updated_at: datetime


class PostList(APIModel):
    posts: List[Post]
    total_pages: int
    current_page: int
    total_posts: int
