import logging
from typing import Any, Dict, List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError

from app.core.exceptions import ConflictError
from app.core.utils import to_object_id, utcnow
from app.models.category import CategoryCreate

logger = logging.getLogger(__name__)


def _prepare_category(category: Dict[str, Any]) -> Dict[str, Any]:
    category["id"] = str(category.pop("_id"))
    return category


async def category_exists(db: AsyncIOMotorDatabase, category_id: Any) -> bool:
    """Проверка существования категории по ID."""
    oid = to_object_id(category_id)
    if oid is None:
        return False
    return await db.categories.count_documents({"_id": oid}) > 0


async def get_category_by_id(db: AsyncIOMotorDatabase, category_id: str) -> Optional[Dict[str, Any]]:
    oid = to_object_id(category_id)
    if oid is None:
        return None

    category = await db.categories.find_one({"_id": oid})
    if not category:
        return None
    return _prepare_category(category)


async def get_category_by_name(db: AsyncIOMotorDatabase, name: str) -> Optional[Dict[str, Any]]:
    category = await db.categories.find_one({"name": name})
    if not category:
        return None
    return _prepare_category(category)


async def get_categories(db: AsyncIOMotorDatabase) -> List[Dict[str, Any]]:
    """Получение всех категорий, отсортированных по названию."""
    cursor = db.categories.find().sort("name", 1)
    return [_prepare_category(category) async for category in cursor]


async def create_category(db: AsyncIOMotorDatabase, category_data: CategoryCreate) -> Dict[str, Any]:
    """Создание категории. Название категории уникально."""
    if await db.categories.find_one({"name": category_data.name}):
        raise ConflictError("Category already exists")

    category_dict = category_data.model_dump()
    category_dict["created_at"] = utcnow()

    try:
        result = await db.categories.insert_one(category_dict)
    except DuplicateKeyError:
        raise ConflictError("Category already exists")

    logger.info("Category '%s' created", category_data.name)
    return await get_category_by_id(db, str(result.inserted_id))
