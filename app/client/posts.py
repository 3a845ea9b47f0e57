"""
Асинхронный клиент API постов для фронтенда и скриптов.

Клиент только загружает данные и форматирует их для отображения;
вся бизнес-логика остаётся на сервере.
"""
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

import httpx


def image_url(base_origin: str, filename: Optional[str]) -> Optional[str]:
    """URL изображения поста: origin сервера + /uploads/ + имя файла."""
    if not filename:
        return None
    return f"{base_origin.rstrip('/')}/uploads/{filename}"


def format_post_summary(post: Dict[str, Any]) -> str:
    author = (post.get("author") or {}).get("name") or "Unknown author"
    created_at = post.get("createdAt")
    if created_at:
        created_at = datetime.fromisoformat(created_at.replace("Z", "+00:00")).strftime("%d.%m.%Y")

    header = f"{post['title']} by {author}"
    if created_at:
        header = f"{header}, {created_at}"
    return f"{header}\n{post.get('excerpt') or ''}".rstrip()


class PostsClient:
    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        api_prefix: str = "/api",
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        self._client = httpx.AsyncClient(
            base_url=f"{base_url.rstrip('/')}{api_prefix}",
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "PostsClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def close(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, url: str, **kwargs) -> Any:
        response = await self._client.request(method, url, **kwargs)
        response.raise_for_status()
        return response.json()

    async def list_posts(self, page: int = 1, limit: int = 10, category: Optional[str] = None) -> Dict[str, Any]:
        params = {"page": page, "limit": limit}
        if category:
            params["category"] = category
        return await self._request("GET", "/posts", params=params)

    async def get_post(self, post_id: str) -> Dict[str, Any]:
        return await self._request("GET", f"/posts/{post_id}")

    async def search_posts(self, q: str) -> List[Dict[str, Any]]:
        return await self._request("GET", "/posts/search", params={"q": q})

    async def create_post(self, image: Optional[Tuple[str, bytes, str]] = None, **fields: Any) -> Dict[str, Any]:
        """
        Создание поста. Изображение передаётся кортежем (имя файла, содержимое, MIME-тип)
        и отправляется вместе с полями как multipart/form-data.
        """
        if image:
            return await self._request("POST", "/posts", data=fields, files={"featuredImage": image})
        return await self._request("POST", "/posts", json=fields)

    async def add_comment(self, post_id: str, content: str) -> Dict[str, Any]:
        return await self._request("POST", f"/posts/{post_id}/comments", json={"content": content})
