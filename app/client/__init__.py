from app.client.posts import PostsClient, format_post_summary, image_url

__all__ = ["PostsClient", "format_post_summary", "image_url"]
