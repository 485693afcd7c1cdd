from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID
import logging

from sqlalchemy import delete, func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from userservice.models.enemy import Enmity
from userservice.models.friendship import Friendship
from userservice.models.user import User

logger = logging.getLogger(__name__)


class UserRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, user: User) -> Optional[User]:
        """Insert a new user, None if uid or email is already taken"""
        try:
            self.db.add(user)
            await self.db.commit()
            await self.db.refresh(user)
            return user
        except IntegrityError:
            await self.db.rollback()
            logger.warning("Insert of a new user rejected by a unique constraint")
            return None

    async def get_by_id(self, user_id: UUID) -> Optional[User]:
        """Get user by ID"""
        query = select(User).filter(User.id == user_id)
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def get_by_uid(self, uid: str) -> Optional[User]:
        """Get user by public handle"""
        query = select(User).filter(User.uid == uid)
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def exists(self, user_id: UUID) -> bool:
        query = select(User.id).filter(User.id == user_id)
        result = await self.db.execute(query)
        return result.first() is not None

    async def uid_taken(self, uid: str, exclude_id: Optional[UUID] = None) -> bool:
        """Check if another user already holds this uid"""
        query = select(User.id).filter(User.uid == uid)
        if exclude_id is not None:
            query = query.filter(User.id != exclude_id)
        result = await self.db.execute(query)
        return result.first() is not None

    async def email_taken(self, email: str, exclude_id: Optional[UUID] = None) -> bool:
        """Check if another user already holds this email"""
        query = select(User.id).filter(User.email == email)
        if exclude_id is not None:
            query = query.filter(User.id != exclude_id)
        result = await self.db.execute(query)
        return result.first() is not None

    async def update(self, user: User, changes: Dict[str, Any]) -> Optional[User]:
        """Apply field changes to a loaded user, None on a unique constraint clash"""
        user_id = user.id
        for field, value in changes.items():
            setattr(user, field, value)

        try:
            await self.db.commit()
            await self.db.refresh(user)
            return user
        except IntegrityError:
            await self.db.rollback()
            logger.warning(f"Update of user {user_id} rejected by a unique constraint")
            return None

    async def delete(self, user_id: UUID) -> bool:
        """Delete user together with every friend and enemy row pointing at it"""
        if not await self.exists(user_id):
            return False

        await self.db.execute(
            delete(Friendship).where(
                or_(Friendship.user_id == user_id, Friendship.friend_id == user_id)
            )
        )
        await self.db.execute(
            delete(Enmity).where(
                or_(Enmity.user_id == user_id, Enmity.enemy_id == user_id)
            )
        )
        await self.db.execute(delete(User).where(User.id == user_id))
        await self.db.commit()
        return True

    async def get_all(self, offset: int, limit: int) -> Tuple[List[User], int]:
        """Get a page of all users ordered by id"""
        total = await self.db.scalar(select(func.count()).select_from(User))
        stmt = select(User).order_by(User.id).offset(offset).limit(limit)
        result = await self.db.execute(stmt)
        return list(result.scalars().all()), total

    async def search_by_nickname(self, nickname: str, offset: int, limit: int) -> Tuple[List[User], int]:
        """Case-insensitive partial match on nickname"""
        pattern = nickname.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
        condition = User.nickname.ilike(f"%{pattern}%", escape="\\")
        total = await self.db.scalar(select(func.count()).select_from(User).where(condition))
        stmt = (
            select(User)
            .where(condition)
            .order_by(User.nickname, User.id)
            .offset(offset)
            .limit(limit)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all()), total
