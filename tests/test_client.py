import json

import httpx
import pytest

from app.client import PostsClient, format_post_summary, image_url


def make_transport(requests):
    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        if request.url.path == "/api/posts" and request.method == "GET":
            return httpx.Response(
                200, json={"posts": [], "totalPages": 0, "currentPage": 2, "totalPosts": 0}
            )
        if request.url.path == "/api/posts/search":
            return httpx.Response(200, json=[{"id": "1", "title": "Hello"}])
        if request.url.path == "/api/posts" and request.method == "POST":
            return httpx.Response(201, json={"id": "p1", "featuredImage": "stored.png"})
        if request.url.path.endswith("/comments"):
            return httpx.Response(201, json={"id": "c1", "content": json.loads(request.content)["content"]})
        return httpx.Response(404, json={"message": "Post not found"})

    return httpx.MockTransport(handler)


@pytest.mark.asyncio
async def test_list_posts_sends_pagination():
    requests = []
    async with PostsClient("http://blog.local", transport=make_transport(requests)) as client:
        data = await client.list_posts(page=2, limit=5, category="Tech")

    assert data["currentPage"] == 2
    assert requests[0].url.params["page"] == "2"
    assert requests[0].url.params["limit"] == "5"
    assert requests[0].url.params["category"] == "Tech"


@pytest.mark.asyncio
async def test_search_posts():
    requests = []
    async with PostsClient("http://blog.local/", transport=make_transport(requests)) as client:
        posts = await client.search_posts("hello")

    assert posts == [{"id": "1", "title": "Hello"}]
    assert str(requests[0].url) == "http://blog.local/api/posts/search?q=hello"


@pytest.mark.asyncio
async def test_token_is_sent_as_bearer():
    requests = []
    async with PostsClient("http://blog.local", token="abc", transport=make_transport(requests)) as client:
        comment = await client.add_comment("42", "Nice")

    assert comment == {"id": "c1", "content": "Nice"}
    assert requests[0].headers["authorization"] == "Bearer abc"


@pytest.mark.asyncio
async def test_http_errors_are_raised():
    async with PostsClient("http://blog.local", transport=make_transport([])) as client:
        with pytest.raises(httpx.HTTPStatusError) as exc_info:
            await client.get_post("missing")

    assert exc_info.value.response.status_code == 404


def test_image_url():
    assert image_url("http://blog.local/", "cover.png") == "http://blog.local/uploads/cover.png"
    assert image_url("http://blog.local", None) is None


def test_format_post_summary():
    post = {
        "title": "Hello",
        "author": {"name": "Alice"},
        "createdAt": "2024-03-05T10:00:00Z",
        "excerpt": "Short intro",
    }

    assert format_post_summary(post) == "Hello by Alice, 05.03.2024\nShort intro"


def test_format_post_summary_without_optional_fields():
    assert format_post_summary({"title": "Hello"}) == "Hello by Unknown author"


@pytest.mark.asyncio
async def test_create_post_with_image_is_multipart():
    requests = []
    async with PostsClient("http://blog.local", token="abc", transport=make_transport(requests)) as client:
        post = await client.create_post(
            title="Hello", content="Body", category="c1", tags=["a", "b"],
            image=("cover.png", b"png-bytes", "image/png"),
        )

    assert post["featuredImage"] == "stored.png"
    request = requests[0]
    assert request.headers["content-type"].startswith("multipart/form-data")
    body = request.content
    assert b'name="featuredImage"; filename="cover.png"' in body
    assert b"png-bytes" in body
    assert body.count(b'name="tags"') == 2


@pytest.mark.asyncio
async def test_create_post_without_image_is_json():
    requests = []
    async with PostsClient("http://blog.local", transport=make_transport(requests)) as client:
        await client.create_post(title="Hello", content="Body", category="c1")

    assert json.loads(requests[0].content) == {"title": "Hello", "content": "Body", "category": "c1"}
