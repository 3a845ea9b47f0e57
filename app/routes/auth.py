from typing import Annotated
from fastapi import APIRouter, Depends, status, Body
from motor.motor_asyncio import AsyncIOMotorDatabase

from app.core.deps import get_database, get_current_user
from app.core.exceptions import UnauthorizedError
from app.core.security import create_access_token
from app.crud.user import create_user, authenticate_user
from app.models.auth import Token
from app.models.user import User, UserCreate, UserLogin

router = APIRouter()


@router.post("/register", response_model=Token, status_code=status.HTTP_201_CREATED)
async def register_route(
    user_data: Annotated[UserCreate, Body(...)],
    db: Annotated[AsyncIOMotorDatabase, Depends(get_database)]
):
    """Регистрация пользователя и выдача токена."""
    user = await create_user(db, user_data)
    return {"access_token": create_access_token(user["id"]), "token_type": "bearer"}


@router.post("/login", response_model=Token)
async def login_route(
    credentials: Annotated[UserLogin, Body(...)],
    db: Annotated[AsyncIOMotorDatabase, Depends(get_database)]
):
    """Вход по email и паролю."""
    user = await authenticate_user(db, credentials.email, credentials.password)
    if not user:
        raise UnauthorizedError("Invalid email or password")
    return {"access_token": create_access_token(user["id"]), "token_type": "bearer"}


@router.get("/me", response_model=User)
async def read_users_me(
    current_user: Annotated[dict, Depends(get_current_user)]
):
    """Получение информации о текущем пользователе."""
    return current_user
