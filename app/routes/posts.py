from functools import partial
from typing import Annotated, Any, Dict, List, Optional, Tuple, Type
from fastapi import APIRouter, Depends, Path, Query, Request, status, Body
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, ValidationError as PydanticValidationError
from starlette.datastructures import UploadFile
from motor.motor_asyncio import AsyncIOMotorDatabase

from app.core.config import get_settings
from app.core.deps import get_database, get_current_user, pagination_params
from app.core.exceptions import BadRequestError
from app.crud.post import (
    get_posts_page, view_post, create_post, update_post,
    delete_post, add_comment, search_posts
)
from app.models.comment import Comment, CommentCreate
from app.models.post import Post, PostCreate, PostUpdate, PostList
from app.services.uploads import UploadStorage, get_upload_storage

settings = get_settings()

router = APIRouter()


@router.get("", response_model=PostList)
async def get_posts_route(
    db: Annotated[AsyncIOMotorDatabase, Depends(get_database)],
    pagination: Annotated[dict, Depends(pagination_params)],
    category: Annotated[Optional[str], Query()] = None
):
    """Получение списка постов с пагинацией и фильтром по категории."""
    return await get_posts_page(
        db,
        pagination["page"],
        pagination["limit"],
        category,
        settings.PUBLISHED_ONLY
    )


@router.get("/search", response_model=List[Post])
async def search_posts_route(
    db: Annotated[AsyncIOMotorDatabase, Depends(get_database)],
    q: Annotated[Optional[str], Query()] = None
):
    """Поиск постов по подстроке в заголовке, тексте, excerpt и тегах."""
    if not q or not q.strip():
        raise BadRequestError("Search query is required")
    return await search_posts(db, q, settings.PUBLISHED_ONLY)


@router.get("/{post_id}", response_model=Post)
async def get_post_route(
    post_id: Annotated[str, Path(...)],
    db: Annotated[AsyncIOMotorDatabase, Depends(get_database)]
):
    """Получение поста по ID. Каждый просмотр увеличивает счётчик просмотров."""
    return await view_post(db, post_id, settings.PUBLISHED_ONLY)


IMAGE_FIELD = "featuredImage"


async def read_post_body(
    request: Request,
    model: Type[BaseModel]
) -> Tuple[BaseModel, Optional[UploadFile]]:
    """
    Тело запроса на создание или обновление поста: JSON или multipart/form-data.
    В multipart изображение передаётся файлом в поле featuredImage, теги повторяющимся полем tags.
    """
    upload = None
    if request.headers.get("content-type", "").startswith("multipart/form-data"):
        form = await request.form()
        data: Dict[str, Any] = {}
        for key, value in form.multi_items():
            if isinstance(value, UploadFile):
                if key == IMAGE_FIELD and value.filename:
                    upload = value
            elif key == "tags":
                data.setdefault("tags", []).append(value)
            else:
                data[key] = value
    else:
        try:
            data = await request.json()
        except ValueError:
            raise RequestValidationError(
                [{"type": "json_invalid", "loc": ("body",), "msg": "Invalid JSON body", "input": None}]
            )

    try:
        payload = model.model_validate(data)
    except PydanticValidationError as exc:
        raise RequestValidationError(
            [{**error, "loc": ("body", *error["loc"])} for error in exc.errors(include_url=False)]
        )
    return payload, upload


async def post_create_body(request: Request) -> Tuple[PostCreate, Optional[UploadFile]]:
    return await read_post_body(request, PostCreate)


async def post_update_body(request: Request) -> Tuple[PostUpdate, Optional[UploadFile]]:
    return await read_post_body(request, PostUpdate)


@router.post("", response_model=Post, status_code=status.HTTP_201_CREATED)
async def create_post_route(
    current_user: Annotated[dict, Depends(get_current_user)],
    body: Annotated[tuple, Depends(post_create_body)],
    db: Annotated[AsyncIOMotorDatabase, Depends(get_database)],
    storage: Annotated[UploadStorage, Depends(get_upload_storage)]
):
    """Создание нового поста от имени текущего пользователя."""
    post_data, upload = body
    save_image = partial(storage.save, upload) if upload else None
    return await create_post(db, post_data, current_user["id"], save_image)


@router.put("/{post_id}", response_model=Post)
async def update_post_route(
    post_id: Annotated[str, Path(...)],
    current_user: Annotated[dict, Depends(get_current_user)],
    body: Annotated[tuple, Depends(post_update_body)],
    db: Annotated[AsyncIOMotorDatabase, Depends(get_database)],
    storage: Annotated[UploadStorage, Depends(get_upload_storage)]
):
    """
    Обновление поста.
    Пользователи могут обновлять только свои посты.
    Администраторы могут обновлять любые посты.
    """
    post_data, upload = body
    save_image = partial(storage.save, upload) if upload else None
    return await update_post(db, post_id, post_data, current_user, save_image)


@router.delete("/{post_id}")
async def delete_post_route(
    post_id: Annotated[str, Path(...)],
    current_user: Annotated[dict, Depends(get_current_user)],
    db: Annotated[AsyncIOMotorDatabase, Depends(get_database)]
):
    """
    Удаление поста.
    Пользователи могут удалять только свои посты.
    Администраторы могут удалять любые посты.
    """
    await delete_post(db, post_id, current_user)
    return {"message": "Post removed"}


@router.post("/{post_id}/comments", response_model=Comment, status_code=status.HTTP_201_CREATED)
async def add_comment_route(
    post_id: Annotated[str, Path(...)],
    comment_data: Annotated[CommentCreate, Body(...)],
    current_user: Annotated[dict, Depends(get_current_user)],
    db: Annotated[AsyncIOMotorDatabase, Depends(get_database)]
):
    """Добавление комментария к посту любым авторизованным пользователем."""
    return await add_comment(db, post_id, comment_data, current_user["id"])
