from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import and_, func, select, delete
from sqlalchemy.exc import IntegrityError
from typing import List, Optional, Tuple
from uuid import UUID
import logging

from userservice.models.enemy import Enmity
from userservice.models.user import User

logger = logging.getLogger(__name__)


class EnemyRepository:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def exists(self, user_id: UUID, enemy_id: UUID) -> bool:
        """Has user_id put enemy_id on their enemy list"""
        stmt = select(Enmity.user_id).where(
            and_(Enmity.user_id == user_id, Enmity.enemy_id == enemy_id)
        )
        result = await self.db.execute(stmt)
        return result.first() is not None

    async def create(self, user_id: UUID, enemy_id: UUID) -> Optional[Enmity]:
        """Add enemy_id to user_id's enemy list, None if already there"""
        enmity = Enmity(user_id=user_id, enemy_id=enemy_id)
        try:
            self.db.add(enmity)
            await self.db.commit()
            await self.db.refresh(enmity)
            return enmity
        except IntegrityError:
            await self.db.rollback()
            logger.warning(f"Enemy {user_id} -> {enemy_id} rejected by a unique constraint")
            return None

    async def delete(self, user_id: UUID, enemy_id: UUID, commit: bool = True) -> bool:
        stmt = delete(Enmity).where(
            and_(Enmity.user_id == user_id, Enmity.enemy_id == enemy_id)
        )
        result = await self.db.execute(stmt)
        if commit:
            await self.db.commit()
        return result.rowcount > 0

    async def get_enemies(self, user_id: UUID, offset: int, limit: int) -> Tuple[List[User], int]:
        """Get users on user_id's enemy list with pagination"""
        stmt = select(User).join(Enmity, Enmity.enemy_id == User.id).where(Enmity.user_id == user_id)

        count_stmt = select(func.count()).select_from(stmt.subquery())
        total_count = await self.db.scalar(count_stmt)

        page_stmt = stmt.order_by(User.id).offset(offset).limit(limit)
        result = await self.db.execute(page_stmt)
        return list(result.scalars().all()), total_count
