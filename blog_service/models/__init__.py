from blog_service.models.user import User
from blog_service.models.post import Post
from blog_service.models.comment import Comment

__all__ = ["User", "Post", "Comment"]
