from typing import Any, List
from uuid import UUID

from fastapi import APIRouter, Depends, Request, status

from blog_service.api.deps import ensure_owner_or_admin, get_current_user, get_post_store
from blog_service.core.logging import get_request_logger
from blog_service.crud.post import PostStore
from blog_service.models.user import User
from blog_service.schemas.post import PostCreate, PostResponse, PostUpdate

router = APIRouter()


@router.post("", response_model=PostResponse, status_code=status.HTTP_201_CREATED)
async def create_post(
    request: Request,
    post_in: PostCreate,
    current_user: User = Depends(get_current_user),
    posts: PostStore = Depends(get_post_store),
) -> Any:
    """投稿を作成する（投稿者はログインユーザー）"""
    logger = get_request_logger(request)
    post = await posts.create(post_in, author=current_user.username)
    logger.info(f"投稿作成: ID={post.id}, 投稿者={post.author}")
    return post


@router.get("", response_model=List[PostResponse])
async def list_posts(posts: PostStore = Depends(get_post_store)) -> Any:
    """投稿一覧を新しい順に取得する"""
    return await posts.get_all()


@router.get("/{post_id}", response_model=PostResponse)
async def get_post(post_id: UUID, posts: PostStore = Depends(get_post_store)) -> Any:
    return await posts.get(post_id)


@router.put("/{post_id}", response_model=PostResponse)
async def update_post(
    request: Request,
    post_id: UUID,
    post_in: PostUpdate,
    current_user: User = Depends(get_current_user),
    posts: PostStore = Depends(get_post_store),
) -> Any:
    """
    投稿を更新する
    - 投稿者本人または管理者のみ
    """
    logger = get_request_logger(request)
    post = await posts.get(post_id)
    ensure_owner_or_admin(current_user, post.author)

    updated = await posts.update(post, post_in)
    logger.info(f"投稿更新: ID={post_id}, 要求元={current_user.username}")
    return updated


@router.delete("/{post_id}")
async def delete_post(
    request: Request,
    post_id: UUID,
    current_user: User = Depends(get_current_user),
    posts: PostStore = Depends(get_post_store),
) -> Any:
    """
    投稿と、その投稿へのコメントを削除する
    - 投稿者本人または管理者のみ
    """
    logger = get_request_logger(request)
    post = await posts.get(post_id)
    ensure_owner_or_admin(current_user, post.author)

    await posts.delete(post)
    logger.info(f"投稿削除: ID={post_id}, 要求元={current_user.username}")
    return {"detail": "投稿を削除しました"}
