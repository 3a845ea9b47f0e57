import logging
import math
import re
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional, Tuple

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument

from app.core.config import get_settings
from app.core.exceptions import BadRequestError, NotFoundError, UnauthorizedError
from app.core.permissions import can_modify_post
from app.core.utils import get_excerpt_from_content, to_object_id, utcnow
from app.crud.category import category_exists, get_category_by_name
from app.crud.user import user_to_public
from app.models.comment import CommentCreate
from app.models.post import PostCreate, PostUpdate

settings = get_settings()
logger = logging.getLogger(__name__)

# Поля, по которым выполняется поиск
SEARCH_FIELDS = ("title", "content", "excerpt", "tags")

# Сохраняет загруженное изображение и возвращает имя файла
ImageSaver = Callable[[], Awaitable[str]]


async def _load_users(db: AsyncIOMotorDatabase, ids: Iterable[ObjectId]) -> Dict[ObjectId, Dict[str, Any]]:
    ids = list(set(ids))
    if not ids:
        return {}
    cursor = db.users.find({"_id": {"$in": ids}}, {"name": 1, "email": 1})
    return {user["_id"]: user_to_public(user) async for user in cursor}


async def _load_categories(db: AsyncIOMotorDatabase, ids: Iterable[ObjectId]) -> Dict[ObjectId, Dict[str, Any]]:
    ids = list(set(ids))
    if not ids:
        return {}
    cursor = db.categories.find({"_id": {"$in": ids}}, {"name": 1})
    return {
        category["_id"]: {"id": str(category["_id"]), "name": category.get("name")}
        async for category in cursor
    }


def _prepare_comment(comment: Dict[str, Any], users: Dict[ObjectId, Dict[str, Any]]) -> Dict[str, Any]:
    user_id = comment.get("user")
    return {
        "id": str(comment["_id"]),
        "user": users.get(user_id) or ({"id": str(user_id)} if user_id else None),
        "content": comment.get("content", ""),
        "created_at": comment.get("created_at"),
    }


async def populate_posts(db: AsyncIOMotorDatabase, posts: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """
    Подстановка автора, категории и авторов комментариев в посты.
    Пользователи и категории загружаются одним запросом на коллекцию.
    """
    user_ids = []
    category_ids = []
    for post in posts:
        if post.get("author"):
            user_ids.append(post["author"])
        if post.get("category"):
            category_ids.append(post["category"])
        user_ids.extend(c["user"] for c in post.get("comments", []) if c.get("user"))

    users = await _load_users(db, user_ids)
    categories = await _load_categories(db, category_ids)

    result = []
    for post in posts:
        author_id = post.pop("author", None)
        category_id = post.pop("category", None)

        post["id"] = str(post.pop("_id"))
        post["author"] = users.get(author_id) or ({"id": str(author_id)} if author_id else None)
        post["category"] = categories.get(category_id)
        post["comments"] = [_prepare_comment(c, users) for c in post.get("comments", [])]
        result.append(post)

    return result


async def populate_post(db: AsyncIOMotorDatabase, post: Dict[str, Any]) -> Dict[str, Any]:
    return (await populate_posts(db, [post]))[0]


def _visibility_query(published_only: bool) -> Dict[str, Any]:
    return {"is_published": True} if published_only else {}


async def _resolve_category(db: AsyncIOMotorDatabase, category_id: str) -> ObjectId:
    """Категория должна существовать до записи поста."""
    if not await category_exists(db, category_id):
        raise BadRequestError("Category not found")
    return to_object_id(category_id)


async def _build_list_query(
    db: AsyncIOMotorDatabase,
    category: Optional[str],
    published_only: bool
) -> Optional[Dict[str, Any]]:
    """
    Фильтр для списка постов.
    Категория задаётся ID или названием; None означает, что подходящих постов нет.
    """
    query = _visibility_query(published_only)
    if not category or category == "all":
        return query

    category_oid = to_object_id(category)
    if category_oid is None:
        category_doc = await get_category_by_name(db, category)
        if not category_doc:
            return None
        category_oid = ObjectId(category_doc["id"])

    query["category"] = category_oid
    return query


async def get_posts(
    db: AsyncIOMotorDatabase,
    page: int = 1,
    limit: int = 10,
    category: Optional[str] = None,
    published_only: bool = True
) -> Tuple[List[Dict[str, Any]], int]:
    """Получение страницы постов (новые сначала) и общего количества."""
    query = await _build_list_query(db, category, published_only)
    if query is None:
        return [], 0

    skip = (page - 1) * limit
    cursor = db.posts.find(query).sort("created_at", -1).skip(skip).limit(limit)
    posts = await cursor.to_list(length=limit)

    total = await db.posts.count_documents(query)
    return await populate_posts(db, posts), total


async def get_posts_page(
    db: AsyncIOMotorDatabase,
    page: int = 1,
    limit: int = 10,
    category: Optional[str] = None,
    published_only: bool = True
) -> Dict[str, Any]:
    posts, total = await get_posts(db, page, limit, category, published_only)
    return {
        "posts": posts,
        "total_pages": math.ceil(total / limit),
        "current_page": page,
        "total_posts": total,
    }


async def get_post_document(db: AsyncIOMotorDatabase, post_id: str) -> Optional[Dict[str, Any]]:
    """Получение поста без подстановки связанных данных."""
    oid = to_object_id(post_id)
    if oid is None:
        return None
    return await db.posts.find_one({"_id": oid})


async def get_post_by_id(db: AsyncIOMotorDatabase, post_id: str) -> Optional[Dict[str, Any]]:
    """Получение поста по ID с информацией об авторе, категории и комментаторах."""
    post = await get_post_document(db, post_id)
    if not post:
        return None
    return await populate_post(db, post)


async def view_post(
    db: AsyncIOMotorDatabase,
    post_id: str,
    published_only: bool = True
) -> Dict[str, Any]:
    """
    Просмотр поста: счётчик просмотров увеличивается на 1 при каждом
    успешном запросе, в ответе уже новое значение.
    """
    oid = to_object_id(post_id)
    if oid is None:
        raise NotFoundError("Post", post_id)

    query = {"_id": oid, **_visibility_query(published_only)}
    post = await db.posts.find_one_and_update(
        query,
        {"$inc": {"view_count": 1}},
        return_document=ReturnDocument.AFTER
    )
    if not post:
        raise NotFoundError("Post", post_id)

    return await populate_post(db, post)


async def create_post(
    db: AsyncIOMotorDatabase,
    post_data: PostCreate,
    author_id: str,
    save_image: Optional[ImageSaver] = None
) -> Dict[str, Any]:
    """
    Создание нового поста. Автором всегда становится текущий пользователь.
    Загруженное изображение сохраняется только после проверки категории.
    """
    category_oid = await _resolve_category(db, post_data.category)

    post_dict = post_data.model_dump()
    if save_image:
        post_dict["featured_image"] = await save_image()
    now = utcnow()

    # Генерация excerpt из content, если он не указан
    if not post_dict.get("excerpt"):
        post_dict["excerpt"] = get_excerpt_from_content(post_dict["content"], settings.EXCERPT_LENGTH)

    post_dict["category"] = category_oid
    post_dict["author"] = ObjectId(author_id)
    post_dict["view_count"] = 0
    post_dict["comments"] = []
    post_dict["created_at"] = now
    post_dict["updated_at"] = now

    result = await db.posts.insert_one(post_dict)
    logger.info("Post %s created by user %s", result.inserted_id, author_id)

    return await get_post_by_id(db, str(result.inserted_id))


def _sparse_patch(post_data: PostUpdate) -> Dict[str, Any]:
    """Только переданные и непустые поля заменяют сохранённые значения."""
    return {
        field: value
        for field, value in post_data.model_dump(exclude_unset=True).items()
        if value is not None and value != ""
    }


async def _get_post_for_change(
    db: AsyncIOMotorDatabase,
    post_id: str,
    current_user: Dict[str, Any],
    action: str
) -> Dict[str, Any]:
    post = await get_post_document(db, post_id)
    if not post:
        raise NotFoundError("Post", post_id)

    if not can_modify_post(current_user, post.get("author")):
        logger.warning("User %s is not allowed to %s post %s", current_user.get("id"), action, post_id)
        raise UnauthorizedError(f"Not authorized to {action} this post")

    return post


async def update_post(
    db: AsyncIOMotorDatabase,
    post_id: str,
    post_data: PostUpdate,
    current_user: Dict[str, Any],
    save_image: Optional[ImageSaver] = None
) -> Dict[str, Any]:
    """Обновление поста автором или администратором."""
    post = await _get_post_for_change(db, post_id, current_user, "update")

    update_data = _sparse_patch(post_data)
    if "category" in update_data:
        update_data["category"] = await _resolve_category(db, update_data["category"])
    if save_image:
        update_data["featured_image"] = await save_image()

    if update_data:
        update_data["updated_at"] = utcnow()
        await db.posts.update_one({"_id": post["_id"]}, {"$set": update_data})
        logger.info("Post %s updated by user %s", post_id, current_user["id"])

    return await get_post_by_id(db, post_id)


async def delete_post(
    db: AsyncIOMotorDatabase,
    post_id: str,
    current_user: Dict[str, Any]
) -> None:
    """Удаление поста вместе со всеми комментариями."""
    post = await _get_post_for_change(db, post_id, current_user, "delete")

    await db.posts.delete_one({"_id": post["_id"]})
    logger.info("Post %s deleted by user %s", post_id, current_user["id"])


async def add_comment(
    db: AsyncIOMotorDatabase,
    post_id: str,
    comment_data: CommentCreate,
    user_id: str
) -> Dict[str, Any]:
    """Добавление комментария к посту. Возвращает новый комментарий."""
    oid = to_object_id(post_id)
    if oid is None:
        raise NotFoundError("Post", post_id)

    now = utcnow()
    comment = {
        "_id": ObjectId(),
        "user": ObjectId(user_id),
        "content": comment_data.content,
        "created_at": now,
    }

    result = await db.posts.update_one(
        {"_id": oid},
        {"$push": {"comments": comment}, "$set": {"updated_at": now}}
    )
    if result.matched_count == 0:
        raise NotFoundError("Post", post_id)

    users = await _load_users(db, [comment["user"]])
    return _prepare_comment(comment, users)


async def search_posts(
    db: AsyncIOMotorDatabase,
    q: str,
    published_only: bool = True
) -> List[Dict[str, Any]]:
    """Поиск подстроки без учёта регистра по заголовку, тексту, excerpt и тегам."""
    pattern = re.escape(q)
    query = {
        **_visibility_query(published_only),
        "$or": [{field: {"$regex": pattern, "$options": "i"}} for field in SEARCH_FIELDS],
    }

    posts = await db.posts.find(query).sort("created_at", -1).to_list(length=None)
    return await populate_posts(db, posts)
