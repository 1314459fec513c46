"""User API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Response, status

from postboard.api.dependencies import Caller, get_account_service, get_caller, require_admin
from postboard.schemas.user import UserCreate, UserResponse, UserUpdate
from postboard.services.account_service import AccountService

router = APIRouter(prefix="/api/v1/users", tags=["users"])


@router.get("", response_model=list[UserResponse])
async def get_users(
    caller: Annotated[Caller, Depends(get_caller)],
    accounts: Annotated[AccountService, Depends(get_account_service)],
):
    """Get all users."""
    return [accounts.to_response(user) for user in accounts.list_all()]


@router.get("/export")
async def export_users(
    caller: Annotated[Caller, Depends(require_admin)],
    accounts: Annotated[AccountService, Depends(get_account_service)],
):
    """Download all users as CSV (administrators only)."""
    return Response(
        content=accounts.export_csv(),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="users.csv"'},
    )


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: int,
    caller: Annotated[Caller, Depends(get_caller)],
    accounts: Annotated[AccountService, Depends(get_account_service)],
):
    """Get a specific user."""
    user = accounts.get(user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return accounts.to_response(user)


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    user_data: UserCreate,
    accounts: Annotated[AccountService, Depends(get_account_service)],
):
    """Create a user; a password setup email is sent when enabled."""
    user = accounts.create(user_data)
    return accounts.to_response(user)


@router.put("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: int,
    user_data: UserUpdate,
    caller: Annotated[Caller, Depends(get_caller)],
    accounts: Annotated[AccountService, Depends(get_account_service)],
):
    """Update a user's email and notification preferences (self or administrator)."""
    # Other users' accounts are reported as missing
    if caller.id != user_id and not caller.is_admin:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    user = accounts.update(user_id, user_data, can_grant_admin=caller.is_admin)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return accounts.to_response(user)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    user_id: int,
    caller: Annotated[Caller, Depends(require_admin)],
    accounts: Annotated[AccountService, Depends(get_account_service)],
):
    """Delete a user with their posts and preferences (administrators only)."""
    if not accounts.delete(user_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
