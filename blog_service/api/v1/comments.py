from typing import Any, List
from uuid import UUID

from fastapi import APIRouter, Depends, Request, status

from blog_service.api.deps import get_comment_store, get_current_user, get_post_store
from blog_service.core.logging import get_request_logger
from blog_service.crud.comment import CommentStore
from blog_service.crud.post import PostStore
from blog_service.models.user import User
from blog_service.schemas.comment import CommentCreate, CommentResponse

router = APIRouter()


@router.post("", response_model=CommentResponse, status_code=status.HTTP_201_CREATED)
async def create_comment(
    request: Request,
    comment_in: CommentCreate,
    current_user: User = Depends(get_current_user),
    posts: PostStore = Depends(get_post_store),
    comments: CommentStore = Depends(get_comment_store),
) -> Any:
    """コメントを追加する（投稿が存在しない場合は404）"""
    logger = get_request_logger(request)
    await posts.get(comment_in.post_id)

    comment = await comments.create(comment_in, username=current_user.username)
    logger.info(f"コメント作成: ID={comment.id}, 投稿ID={comment.post_id}")
    return comment


@router.get("/{post_id}", response_model=List[CommentResponse])
async def list_comments(post_id: UUID, comments: CommentStore = Depends(get_comment_store)) -> Any:
    return await comments.get_by_post(post_id)
