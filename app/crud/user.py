import logging
from typing import Any, Dict, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError

from app.core.exceptions import ConflictError
from app.core.security import get_password_hash, verify_password
from app.core.utils import to_object_id, utcnow
from app.models.user import UserCreate, UserRole

logger = logging.getLogger(__name__)


def user_to_public(user: Dict[str, Any]) -> Dict[str, Any]:
    """Публичный профиль пользователя для подстановки в посты и комментарии."""
    return {
        "id": str(user["_id"]),
        "name": user.get("name"),
        "email": user.get("email"),
    }


def _prepare_user(user: Dict[str, Any]) -> Dict[str, Any]:
    # Преобразуем _id в строку и удаляем пароль
    user["id"] = str(user.pop("_id"))
    user.pop("password", None)
    return user


async def get_user_by_id(db: AsyncIOMotorDatabase, user_id: str) -> Optional[Dict[str, Any]]:
    """Получение пользователя по ID (без пароля)."""
    oid = to_object_id(user_id)
    if oid is None:
        return None

    user = await db.users.find_one({"_id": oid})
    if not user:
        return None
    return _prepare_user(user)


async def get_user_by_email(db: AsyncIOMotorDatabase, email: str) -> Optional[Dict[str, Any]]:
    """Получение пользователя по email вместе с хешем пароля."""
    return await db.users.find_one({"email": email.lower()})


async def create_user(
    db: AsyncIOMotorDatabase,
    user_data: UserCreate,
    role: UserRole = UserRole.USER
) -> Dict[str, Any]:
    """Регистрация нового пользователя."""
    email = user_data.email.lower()
    if await db.users.find_one({"email": email}):
        raise ConflictError("User with this email already exists")

    user_dict = {
        "name": user_data.name,
        "email": email,
        "password": get_password_hash(user_data.password),
        "role": role.value,
        "created_at": utcnow(),
    }

    try:
        result = await db.users.insert_one(user_dict)
    except DuplicateKeyError:
        raise ConflictError("User with this email already exists")

    logger.info("User %s registered", result.inserted_id)
    return await get_user_by_id(db, str(result.inserted_id))


async def authenticate_user(
    db: AsyncIOMotorDatabase,
    email: str,
    password: str
) -> Optional[Dict[str, Any]]:
    """Проверка email и пароля; None, если они не подходят."""
    user = await get_user_by_email(db, email)
    if not user or not verify_password(password, user.get("password", "")):
        return None
    return _prepare_user(user)
