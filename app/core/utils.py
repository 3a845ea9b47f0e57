from datetime import datetime, timezone
from typing import Any, Optional

from bson import ObjectId


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def to_object_id(value: Any) -> Optional[ObjectId]:
    """Преобразование строки в ObjectId; None, если строка не является валидным ID."""
    if isinstance(value, ObjectId):
        return value
    if isinstance(value, str) and ObjectId.is_valid(value):
        return ObjectId(value)
    return None


def get_excerpt_from_content(content: str, max_length: int = 150) -> str:
    if len(content) <= max_length:
        return content

    excerpt = content[:max_length]
    last_space = excerpt.rfind(' ')

    if last_space != -1:
        excerpt = excerpt[:last_space]

    return excerpt.rstrip() + "..."
