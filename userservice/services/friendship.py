from datetime import datetime, timezone
from typing import Optional
from uuid import UUID
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from userservice.core.notifier import NotifierService, notifier_service
from userservice.repositories.enemy import EnemyRepository
from userservice.repositories.friendship import FriendshipRepository
from userservice.schemas.friendship import Friendship
from userservice.schemas.notify import FriendRequestNotification
from userservice.schemas.user import PagedShortUsers, ShortUser
from userservice.services.user import UserService
from userservice.utils.exceptions import (
    AuthorizationError, ConflictError, NotFoundError, ValidationError
)
from userservice.utils.pagination import validate_pagination

logger = logging.getLogger(__name__)


class FriendshipService:
    """Friend request lifecycle: send, accept, reject, unfriend and listings.

    A friendship is stored as one directional row per pair of users but every
    read matches both orderings. Sending a request clears the sender's own
    enemy entry for the target and is refused outright when the target has
    the sender on their enemy list.
    """

    def __init__(self, db: AsyncSession, notifier: Optional[NotifierService] = None):
        self.db = db
        self.repo = FriendshipRepository(db)
        self.enemy_repo = EnemyRepository(db)
        self.users = UserService(db)
        self.notifier = notifier or notifier_service

    async def send_request(self, requester_id: UUID, addressee_id: UUID) -> Friendship:
        """Send a friend request"""
        if requester_id == addressee_id:
            logger.warning(f"User {requester_id} tried to add self as friend")
            raise ValidationError("Cannot send friend request to yourself")

        requester = await self.users.get_model(requester_id)
        addressee = await self.users.get_model(addressee_id)
        requester_name, addressee_name = requester.nickname, addressee.nickname

        if await self.repo.is_pending_or_accepted(requester_id, addressee_id):
            logger.warning(f"Friend relationship between {requester_id} and {addressee_id} already exists")
            raise ConflictError("User is already a friend or a request is pending")

        if await self.enemy_repo.exists(addressee_id, requester_id):
            logger.warning(
                f"Friend request {requester_id} -> {addressee_id} blocked: sender is on target's enemy list"
            )
            raise AuthorizationError("Cannot send request: you are on that user's enemy list")

        # committed together with the new request, rolled back if it fails
        cleared_enmity = await self.enemy_repo.delete(requester_id, addressee_id, commit=False)

        friendship = await self.repo.create_request(requester_id, addressee_id)
        if not friendship:
            raise ConflictError("User is already a friend or a request is pending")
        if cleared_enmity:
            logger.info(f"User {requester_id} removed {addressee_id} from enemies before sending a request")

        logger.info(f"User {requester_id} sent friend request to {addressee_id}")
        response = Friendship.model_validate(friendship)

        await self.notifier.notify_friend_request(
            FriendRequestNotification(
                sender_id=requester_id,
                receiver_id=addressee_id,
                sender_name=requester_name,
                receiver_name=addressee_name,
                created_at=datetime.now(timezone.utc),
            )
        )
        return response

    async def accept_request(self, recipient_id: UUID, requester_id: UUID) -> Friendship:
        """Accept the pending request requester_id sent to recipient_id"""
        await self.users.ensure_exists(recipient_id)
        await self.users.ensure_exists(requester_id)

        friendship = await self.repo.accept_request(requester_id, recipient_id)
        if not friendship:
            logger.warning(f"Friend request {requester_id} -> {recipient_id} not found")
            raise NotFoundError("Friend request does not exist")

        logger.info(f"User {recipient_id} accepted friend request from {requester_id}")
        return Friendship.model_validate(friendship)

    async def reject_request(self, recipient_id: UUID, requester_id: UUID) -> None:
        """Reject (delete) the pending request requester_id sent to recipient_id"""
        await self.users.ensure_exists(recipient_id)
        await self.users.ensure_exists(requester_id)

        if not await self.repo.delete_request(requester_id, recipient_id):
            logger.warning(f"Friend request {requester_id} -> {recipient_id} not found")
            raise NotFoundError("Friend request does not exist")

        logger.info(f"User {recipient_id} rejected friend request from {requester_id}")

    async def unfriend(self, user_id: UUID, friend_id: UUID) -> None:
        """Remove the relationship between two users whichever way it was stored"""
        await self.users.ensure_exists(user_id)
        await self.users.ensure_exists(friend_id)

        if not await self.repo.delete_between(user_id, friend_id):
            logger.warning(f"Friend relationship between {user_id} and {friend_id} not found")
            raise NotFoundError("User is not in your friend list")

        logger.info(f"User {user_id} removed {friend_id} from friends")

    async def is_accepted_friend(self, user_id: UUID, friend_id: UUID) -> bool:
        await self.users.ensure_exists(user_id)
        await self.users.ensure_exists(friend_id)
        return await self.repo.is_accepted(user_id, friend_id)

    async def is_pending_or_accepted(self, user_id: UUID, friend_id: UUID) -> bool:
        await self.users.ensure_exists(user_id)
        await self.users.ensure_exists(friend_id)
        return await self.repo.is_pending_or_accepted(user_id, friend_id)

    async def get_friends(self, user_id: UUID, offset: int, limit: int) -> PagedShortUsers:
        validate_pagination(offset, limit)
        await self.users.ensure_exists(user_id)
        friends, total = await self.repo.get_friends(user_id, offset, limit)
        return self._paged(friends, offset, limit, total)

    async def get_incoming_requests(self, user_id: UUID, offset: int, limit: int) -> PagedShortUsers:
        validate_pagination(offset, limit)
        await self.users.ensure_exists(user_id)
        requesters, total = await self.repo.get_incoming_requests(user_id, offset, limit)
        return self._paged(requesters, offset, limit, total)

    async def get_outgoing_requests(self, user_id: UUID, offset: int, limit: int) -> PagedShortUsers:
        validate_pagination(offset, limit)
        await self.users.ensure_exists(user_id)
        addressees, total = await self.repo.get_outgoing_requests(user_id, offset, limit)
        return self._paged(addressees, offset, limit, total)

    @staticmethod
    def _paged(users, offset: int, limit: int, total: int) -> PagedShortUsers:
        return PagedShortUsers(
            data=[ShortUser.model_validate(u) for u in users],
            offset=offset,
            limit=limit,
            total=total
        )
