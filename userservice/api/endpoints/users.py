from typing import Optional, Union
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from userservice.api.deps import Pagination, get_pagination
from userservice.core.database import get_db
from userservice.schemas.user import (
    User, ShortUser, UserCreate, UserUpdate, PagedUsers, PagedShortUsers
)
from userservice.services.user import UserService
from userservice.utils.exceptions import ValidationError

router = APIRouter()


@router.post("/register", response_model=User, status_code=status.HTTP_201_CREATED)
async def register(
    user_data: UserCreate,
    db: AsyncSession = Depends(get_db)
):
    """Register a new user"""
    return await UserService(db).register(user_data)


@router.get("", response_model=PagedUsers)
async def list_users(
    page: Pagination = Depends(get_pagination),
    db: AsyncSession = Depends(get_db)
):
    """List full profiles"""
    return await UserService(db).list_all(page.offset, page.limit)


@router.get("/main", response_model=PagedShortUsers)
async def list_users_short(
    page: Pagination = Depends(get_pagination),
    db: AsyncSession = Depends(get_db)
):
    """List short profiles"""
    return await UserService(db).list_all_short(page.offset, page.limit)


@router.get("/search-api", response_model=Union[ShortUser, PagedShortUsers])
async def search_users(
    uid: Optional[str] = Query(None, description="Exact public handle"),
    nickname: Optional[str] = Query(None, description="Part of the nickname"),
    page: Pagination = Depends(get_pagination),
    db: AsyncSession = Depends(get_db)
):
    """Find one user by uid, or page through users matching a nickname"""
    service = UserService(db)
    if uid is not None:
        return await service.get_by_uid(uid)
    if nickname is not None:
        return await service.search_by_nickname(nickname, page.offset, page.limit)
    raise ValidationError("Either uid or nickname must be provided")


@router.get("/{user_id}", response_model=User)
async def get_user(
    user_id: UUID,
    db: AsyncSession = Depends(get_db)
):
    return await UserService(db).get(user_id)


@router.get("/{user_id}/main", response_model=ShortUser)
async def get_user_short(
    user_id: UUID,
    db: AsyncSession = Depends(get_db)
):
    return await UserService(db).get_short(user_id)


@router.patch("/{user_id}", response_model=User)
async def update_user(
    user_id: UUID,
    user_update: UserUpdate,
    db: AsyncSession = Depends(get_db)
):
    """Update only the fields present in the body"""
    return await UserService(db).update(user_id, user_update)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    user_id: UUID,
    db: AsyncSession = Depends(get_db)
):
    """Delete a user with all friendships and enemy entries"""
    await UserService(db).delete(user_id)
    return None
