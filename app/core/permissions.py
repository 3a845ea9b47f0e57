from typing import Any, Dict

from app.models.user import UserRole


def is_admin(user: Dict[str, Any]) -> bool:
    return user.get("role") == UserRole.ADMIN


def can_modify_post(user: Dict[str, Any], author_id: Any) -> bool:
    """
    Право на изменение или удаление поста.
    Разрешено автору поста и администратору.
    """
    if author_id is not None and str(author_id) == user.get("id"):
        return True
    return is_admin(user)
