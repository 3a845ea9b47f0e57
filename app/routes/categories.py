from typing import Annotated, List
from fastapi import APIRouter, Depends, status, Body
from motor.motor_asyncio import AsyncIOMotorDatabase

from app.core.deps import get_database, get_current_admin_user
from app.crud.category import get_categories, create_category
from app.models.category import Category, CategoryCreate

router = APIRouter()


@router.get("", response_model=List[Category])
async def get_categories_route(
    db: Annotated[AsyncIOMotorDatabase, Depends(get_database)]
):
    """Получение всех категорий."""
    return await get_categories(db)


@router.post("", response_model=Category, status_code=status.HTTP_201_CREATED)
async def create_category_route(
    category_data: Annotated[CategoryCreate, Body(...)],
    current_user: Annotated[dict, Depends(get_current_admin_user)],
    db: Annotated[AsyncIOMotorDatabase, Depends(get_database)]
):
    """
    Создание категории.
    Только для администраторов.
    """
    return await create_category(db, category_data)
