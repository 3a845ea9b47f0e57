"""
Иерархия исключений приложения.

Crud-функции поднимают эти исключения, а обработчики из app.main
превращают их в JSON-ответы с нужным HTTP-статусом:

    BlogAPIError
    ├── ValidationError    → 400 (со списком всех нарушений)
    ├── BadRequestError    → 400
    ├── UnauthorizedError  → 401
    ├── NotFoundError      → 404
    └── ConflictError      → 409
"""
from typing import Any, Dict, List, Optional

from fastapi import status


class BlogAPIError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str = "Server error"):
        self.message = message
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        return {"message": self.message}


class ValidationError(BlogAPIError):
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(
        self,
        errors: List[Dict[str, Any]],
        message: str = "Validation failed",
    ):
        super().__init__(message)
        self.errors = errors

    def to_dict(self) -> Dict[str, Any]:
        return {"message": self.message, "errors": self.errors}


class BadRequestError(BlogAPIError):
    status_code = status.HTTP_400_BAD_REQUEST


class UnauthorizedError(BlogAPIError):
    status_code = status.HTTP_401_UNAUTHORIZED


class NotFoundError(BlogAPIError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, resource: str = "Resource", resource_id: Optional[str] = None):
        super().__init__(f"{resource} not found")
        self.resource = resource
        self.resource_id = resource_id


class ConflictError(BlogAPIError):
    status_code = status.HTTP_409_CONFLICT
