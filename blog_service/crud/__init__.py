from blog_service.crud.user import CredentialStore
from blog_service.crud.post import PostStore
from blog_service.crud.comment import CommentStore

__all__ = ["CredentialStore", "PostStore", "CommentStore"]
