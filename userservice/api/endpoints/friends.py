from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from userservice.api.deps import Pagination, get_pagination
from userservice.core.database import get_db
from userservice.core.notifier import NotifierService, get_notifier
from userservice.schemas.friendship import Friendship, RelationExists
from userservice.schemas.user import PagedShortUsers
from userservice.services.friendship import FriendshipService

router = APIRouter()


@router.post("/{friend_id}", response_model=Friendship, status_code=status.HTTP_201_CREATED)
async def send_friend_request(
    user_id: UUID,
    friend_id: UUID,
    db: AsyncSession = Depends(get_db),
    notifier: NotifierService = Depends(get_notifier)
):
    """Send a friend request from user_id to friend_id"""
    service = FriendshipService(db, notifier)
    return await service.send_request(user_id, friend_id)


@router.patch("/{friend_id}/accept", response_model=Friendship)
async def accept_friend_request(
    user_id: UUID,
    friend_id: UUID,
    db: AsyncSession = Depends(get_db)
):
    """Accept the request friend_id sent to user_id"""
    service = FriendshipService(db)
    return await service.accept_request(user_id, friend_id)


@router.patch("/{friend_id}/reject", status_code=status.HTTP_204_NO_CONTENT)
async def reject_friend_request(
    user_id: UUID,
    friend_id: UUID,
    db: AsyncSession = Depends(get_db)
):
    """Reject the request friend_id sent to user_id"""
    service = FriendshipService(db)
    await service.reject_request(user_id, friend_id)
    return None


@router.delete("/{friend_id}", status_code=status.HTTP_204_NO_CONTENT)
async def unfriend(
    user_id: UUID,
    friend_id: UUID,
    db: AsyncSession = Depends(get_db)
):
    """Remove a friend, or withdraw a request in either direction"""
    service = FriendshipService(db)
    await service.unfriend(user_id, friend_id)
    return None


@router.get("/{friend_id}/exists", response_model=RelationExists)
async def friend_exists(
    user_id: UUID,
    friend_id: UUID,
    include_pending: bool = Query(False, description="Count pending requests as well"),
    db: AsyncSession = Depends(get_db)
):
    service = FriendshipService(db)
    if include_pending:
        exists = await service.is_pending_or_accepted(user_id, friend_id)
    else:
        exists = await service.is_accepted_friend(user_id, friend_id)
    return RelationExists(exists=exists)


@router.get("", response_model=PagedShortUsers)
async def get_friends(
    user_id: UUID,
    page: Pagination = Depends(get_pagination),
    db: AsyncSession = Depends(get_db)
):
    """Get accepted friends with pagination"""
    service = FriendshipService(db)
    return await service.get_friends(user_id, page.offset, page.limit)


@router.get("/requests/incoming", response_model=PagedShortUsers)
async def get_incoming_requests(
    user_id: UUID,
    page: Pagination = Depends(get_pagination),
    db: AsyncSession = Depends(get_db)
):
    service = FriendshipService(db)
    return await service.get_incoming_requests(user_id, page.offset, page.limit)


@router.get("/requests/outgoing", response_model=PagedShortUsers)
async def get_outgoing_requests(
    user_id: UUID,
    page: Pagination = Depends(get_pagination),
    db: AsyncSession = Depends(get_db)
):
    service = FriendshipService(db)
    return await service.get_outgoing_requests(user_id, page.offset, page.limit)
