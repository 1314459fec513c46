"""Post API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from postboard.api.dependencies import Caller, get_caller, get_post_service
from postboard.schemas.post import PostCreate, PostResponse, PostUpdate
from postboard.services.post_service import PostService

router = APIRouter(prefix="/api/v1/posts", tags=["posts"])


@router.get("", response_model=list[PostResponse])
async def get_posts(
    caller: Annotated[Caller, Depends(get_caller)],
    posts: Annotated[PostService, Depends(get_post_service)],
):
    """Get all posts, newest first."""
    return [posts.to_response(post) for post in posts.list_all()]


@router.get("/user/{user_id}", response_model=list[PostResponse])
async def get_user_posts(
    user_id: int,
    caller: Annotated[Caller, Depends(get_caller)],
    posts: Annotated[PostService, Depends(get_post_service)],
):
    """Get all posts written by a user."""
    return [posts.to_response(post) for post in posts.list_by_user(user_id)]


@router.get("/user/{user_id}/count")
async def count_user_posts(
    user_id: int,
    caller: Annotated[Caller, Depends(get_caller)],
    posts: Annotated[PostService, Depends(get_post_service)],
):
    """Count the posts written by a user."""
    return {"user_id": user_id, "count": posts.count_by_user(user_id)}


@router.get("/{post_id}", response_model=PostResponse)
async def get_post(
    post_id: int,
    caller: Annotated[Caller, Depends(get_caller)],
    posts: Annotated[PostService, Depends(get_post_service)],
):
    """Get a specific post."""
    post = posts.get(post_id)
    if post is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Post not found")
    return posts.to_response(post)


@router.post("", response_model=PostResponse, status_code=status.HTTP_201_CREATED)
async def create_post(
    post_data: PostCreate,
    caller: Annotated[Caller, Depends(get_caller)],
    posts: Annotated[PostService, Depends(get_post_service)],
):
    """Create a post authored by the current user."""
    post = posts.create(caller.id, post_data)
    return posts.to_response(post)


@router.put("/{post_id}", response_model=PostResponse)
async def update_post(
    post_id: int,
    post_data: PostUpdate,
    caller: Annotated[Caller, Depends(get_caller)],
    posts: Annotated[PostService, Depends(get_post_service)],
):
    """Update a post. Authors may edit their own posts, administrators any post."""
    post = posts.update(post_id, caller.id, post_data, is_admin=caller.is_admin)
    if post is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Post not found")
    return posts.to_response(post)


@router.delete("/{post_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_post(
    post_id: int,
    caller: Annotated[Caller, Depends(get_caller)],
    posts: Annotated[PostService, Depends(get_post_service)],
):
    """Delete a post. Authors may delete their own posts, administrators any post."""
    if not posts.delete(post_id, caller.id, is_admin=caller.is_admin):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Post not found")
