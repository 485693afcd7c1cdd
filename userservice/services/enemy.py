from uuid import UUID
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from userservice.repositories.enemy import EnemyRepository
from userservice.repositories.friendship import FriendshipRepository
from userservice.schemas.enemy import Enmity
from userservice.schemas.user import PagedShortUsers, ShortUser
from userservice.services.user import UserService
from userservice.utils.exceptions import ConflictError, NotFoundError, ValidationError
from userservice.utils.pagination import validate_pagination

logger = logging.getLogger(__name__)


class EnemyService:

    def __init__(self, db: AsyncSession):
        self.db = db
        self.repo = EnemyRepository(db)
        self.friendship_repo = FriendshipRepository(db)
        self.users = UserService(db)

    async def declare(self, user_id: UUID, enemy_id: UUID) -> Enmity:
        """Put enemy_id on user_id's enemy list, dropping any friendship or request between them"""
        if user_id == enemy_id:
            logger.warning(f"User {user_id} tried to add self as enemy")
            raise ValidationError("Cannot add yourself as an enemy")

        await self.users.ensure_exists(user_id)
        await self.users.ensure_exists(enemy_id)

        if await self.repo.exists(user_id, enemy_id):
            logger.warning(f"Enemy relationship {user_id} -> {enemy_id} already exists")
            raise ConflictError("User is already in your enemy list")

        # committed together with the enmity, rolled back if it fails
        removed_friendship = await self.friendship_repo.delete_between(user_id, enemy_id, commit=False)

        enmity = await self.repo.create(user_id, enemy_id)
        if not enmity:
            raise ConflictError("User is already in your enemy list")
        if removed_friendship:
            logger.info(f"Friendship between {user_id} and {enemy_id} removed by enemy declaration")

        logger.info(f"User {user_id} added {enemy_id} to enemies")
        return Enmity.model_validate(enmity)

    async def revoke(self, user_id: UUID, enemy_id: UUID) -> None:
        await self.users.ensure_exists(user_id)
        await self.users.ensure_exists(enemy_id)

        if not await self.repo.delete(user_id, enemy_id):
            logger.warning(f"Enemy relationship {user_id} -> {enemy_id} not found")
            raise NotFoundError("User is not in your enemy list")

        logger.info(f"User {user_id} removed {enemy_id} from enemies")

    async def exists(self, user_id: UUID, enemy_id: UUID) -> bool:
        await self.users.ensure_exists(user_id)
        await self.users.ensure_exists(enemy_id)
        return await self.repo.exists(user_id, enemy_id)

    async def get_enemies(self, user_id: UUID, offset: int, limit: int) -> PagedShortUsers:
        validate_pagination(offset, limit)
        await self.users.ensure_exists(user_id)
        enemies, total = await self.repo.get_enemies(user_id, offset, limit)
        return PagedShortUsers(
            data=[ShortUser.model_validate(e) for e in enemies],
            offset=offset,
            limit=limit,
            total=total
        )
