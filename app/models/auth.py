from pydantic import BaseModel


class Token(BaseModel):
    """Модель JWT токена"""
    access_token: str
    token_type: str = "bearer"
