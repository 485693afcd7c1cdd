from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import or_, and_, func, select, delete
from sqlalchemy.exc import IntegrityError
from typing import List, Optional, Tuple
from uuid import UUID
import logging

from userservice.models.friendship import Friendship
from userservice.models.user import User
from userservice.schemas.friendship import FriendshipStatus

logger = logging.getLogger(__name__)

ACTIVE_STATUSES = (FriendshipStatus.APPLICATION_SENT.value, FriendshipStatus.FRIEND.value)


def _between(user1_id: UUID, user2_id: UUID):
    """Match the pair in either stored direction"""
    return or_(
        and_(Friendship.user_id == user1_id, Friendship.friend_id == user2_id),
        and_(Friendship.user_id == user2_id, Friendship.friend_id == user1_id)
    )


class FriendshipRepository:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_between(self, user1_id: UUID, user2_id: UUID) -> Optional[Friendship]:
        """Get the friendship row between two users, whoever sent the request"""
        stmt = select(Friendship).where(_between(user1_id, user2_id))
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def is_pending_or_accepted(self, user1_id: UUID, user2_id: UUID) -> bool:
        stmt = select(Friendship.pair_key).where(
            _between(user1_id, user2_id),
            Friendship.status.in_(ACTIVE_STATUSES)
        )
        result = await self.db.execute(stmt)
        return result.first() is not None

    async def is_accepted(self, user1_id: UUID, user2_id: UUID) -> bool:
        stmt = select(Friendship.pair_key).where(
            _between(user1_id, user2_id),
            Friendship.status == FriendshipStatus.FRIEND.value
        )
        result = await self.db.execute(stmt)
        return result.first() is not None

    async def create_request(self, requester_id: UUID, addressee_id: UUID) -> Optional[Friendship]:
        """Create a pending request, None if a row for the pair already exists"""
        friendship = Friendship(
            user_id=requester_id,
            friend_id=addressee_id,
            status=FriendshipStatus.APPLICATION_SENT.value,
            pair_key=Friendship.make_pair_key(requester_id, addressee_id)
        )
        try:
            self.db.add(friendship)
            await self.db.commit()
            await self.db.refresh(friendship)
            return friendship
        except IntegrityError:
            await self.db.rollback()
            logger.warning(f"Friend request {requester_id} -> {addressee_id} rejected by a unique constraint")
            return None

    async def accept_request(self, requester_id: UUID, recipient_id: UUID) -> Optional[Friendship]:
        """Accept a pending request; the row is re-keyed so the recipient owns it"""
        stmt = select(Friendship).where(
            and_(
                Friendship.user_id == requester_id,
                Friendship.friend_id == recipient_id,
                Friendship.status == FriendshipStatus.APPLICATION_SENT.value
            )
        )
        result = await self.db.execute(stmt)
        friendship = result.scalar_one_or_none()

        if friendship:
            friendship.user_id = recipient_id
            friendship.friend_id = requester_id
            friendship.status = FriendshipStatus.FRIEND.value
            await self.db.commit()
            await self.db.refresh(friendship)

        return friendship

    async def delete_request(self, requester_id: UUID, recipient_id: UUID) -> bool:
        """Delete a pending request sent by requester_id to recipient_id"""
        stmt = delete(Friendship).where(
            and_(
                Friendship.user_id == requester_id,
                Friendship.friend_id == recipient_id,
                Friendship.status == FriendshipStatus.APPLICATION_SENT.value
            )
        )
        result = await self.db.execute(stmt)
        await self.db.commit()
        return result.rowcount > 0

    async def delete_between(self, user1_id: UUID, user2_id: UUID, commit: bool = True) -> bool:
        """Remove any friendship or request between two users.

        With commit=False the delete stays in the open transaction and is
        committed or rolled back with the caller's next write.
        """
        result = await self.db.execute(delete(Friendship).where(_between(user1_id, user2_id)))
        if commit:
            await self.db.commit()
        return result.rowcount > 0

    async def _page(self, stmt, offset: int, limit: int) -> Tuple[List[User], int]:
        count_stmt = select(func.count()).select_from(stmt.subquery())
        total_count = await self.db.scalar(count_stmt)

        page_stmt = stmt.order_by(User.id).offset(offset).limit(limit)
        result = await self.db.execute(page_stmt)
        return list(result.scalars().all()), total_count

    async def get_friends(self, user_id: UUID, offset: int, limit: int) -> Tuple[List[User], int]:
        """Get accepted friends of a user with pagination"""
        stmt = select(User).join(
            Friendship,
            or_(
                and_(Friendship.user_id == user_id, Friendship.friend_id == User.id),
                and_(Friendship.friend_id == user_id, Friendship.user_id == User.id)
            )
        ).where(
            Friendship.status == FriendshipStatus.FRIEND.value
        )
        return await self._page(stmt, offset, limit)

    async def get_incoming_requests(self, user_id: UUID, offset: int, limit: int) -> Tuple[List[User], int]:
        """Users who sent a still pending request to user_id"""
        stmt = select(User).join(Friendship, Friendship.user_id == User.id).where(
            and_(
                Friendship.friend_id == user_id,
                Friendship.status == FriendshipStatus.APPLICATION_SENT.value
            )
        )
        return await self._page(stmt, offset, limit)

    async def get_outgoing_requests(self, user_id: UUID, offset: int, limit: int) -> Tuple[List[User], int]:
        """Users user_id sent a still pending request to"""
        stmt = select(User).join(Friendship, Friendship.friend_id == User.id).where(
            and_(
                Friendship.user_id == user_id,
                Friendship.status == FriendshipStatus.APPLICATION_SENT.value
            )
        )
        return await self._page(stmt, offset, limit)
