from datetime import date, datetime, timezone
from typing import Optional
from uuid import UUID
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from userservice.core.config import settings
from userservice.core.logging import sanitize_for_log
from userservice.models.user import User as UserModel
from userservice.repositories.user import UserRepository
from userservice.schemas.user import (
    User, ShortUser, UserCreate, UserUpdate, UserStatus, PagedUsers, PagedShortUsers
)
from userservice.utils.exceptions import ConflictError, NotFoundError, ValidationError
from userservice.utils.pagination import validate_pagination

logger = logging.getLogger(__name__)


class UserService:

    def __init__(self, db: AsyncSession):
        self.db = db
        self.repo = UserRepository(db)

    async def register(self, user_data: UserCreate) -> User:
        """Register a new user with default status and avatar"""
        await self._validate_uid_and_email(None, user_data.uid, user_data.email)
        self._validate_date_of_birth(user_data.date_of_birth)

        user = await self.repo.create(
            UserModel(
                uid=user_data.uid,
                nickname=user_data.nickname,
                email=user_data.email,
                gender=user_data.gender.value,
                status=UserStatus.ONLINE.value,
                avatar_url=settings.DEFAULT_AVATAR_URL,
                date_of_birth=user_data.date_of_birth,
            )
        )
        if not user:
            raise ConflictError("User with this UID or email already exists")

        logger.info(f"User {user.id} registered")
        return User.model_validate(user)

    async def update(self, user_id: UUID, user_data: UserUpdate) -> User:
        """Apply the non-null fields of user_data"""
        user = await self.get_model(user_id)

        changes = user_data.model_dump(exclude_none=True)
        await self._validate_uid_and_email(user_id, changes.get("uid"), changes.get("email"))
        self._validate_date_of_birth(changes.get("date_of_birth"))

        for field in ("gender", "status"):
            if field in changes:
                changes[field] = changes[field].value

        updated = await self.repo.update(user, changes)
        if not updated:
            raise ConflictError("User with this UID or email already exists")

        logger.info(f"User {user_id} updated fields: {', '.join(sorted(changes)) or 'none'}")
        return User.model_validate(updated)

    async def delete(self, user_id: UUID) -> None:
        """Delete a user and every relationship row referencing it"""
        if not await self.repo.delete(user_id):
            logger.warning(f"Delete failed: user {user_id} not found")
            raise NotFoundError("User does not exist")
        logger.info(f"User {user_id} deleted")

    async def get(self, user_id: UUID) -> User:
        return User.model_validate(await self.get_model(user_id))

    async def get_short(self, user_id: UUID) -> ShortUser:
        return ShortUser.model_validate(await self.get_model(user_id))

    async def get_by_uid(self, uid: str) -> ShortUser:
        user = await self.repo.get_by_uid(uid)
        if not user:
            logger.warning(f"User with uid {sanitize_for_log(uid)} not found")
            raise NotFoundError("User does not exist")
        return ShortUser.model_validate(user)

    async def search_by_nickname(self, nickname: str, offset: int, limit: int) -> PagedShortUsers:
        validate_pagination(offset, limit)
        users, total = await self.repo.search_by_nickname(nickname, offset, limit)
        return PagedShortUsers(
            data=[ShortUser.model_validate(u) for u in users],
            offset=offset,
            limit=limit,
            total=total
        )

    async def list_all(self, offset: int, limit: int) -> PagedUsers:
        validate_pagination(offset, limit)
        users, total = await self.repo.get_all(offset, limit)
        return PagedUsers(
            data=[User.model_validate(u) for u in users],
            offset=offset,
            limit=limit,
            total=total
        )

    async def list_all_short(self, offset: int, limit: int) -> PagedShortUsers:
        validate_pagination(offset, limit)
        users, total = await self.repo.get_all(offset, limit)
        return PagedShortUsers(
            data=[ShortUser.model_validate(u) for u in users],
            offset=offset,
            limit=limit,
            total=total
        )

    async def exists(self, user_id: UUID) -> bool:
        return await self.repo.exists(user_id)

    async def ensure_exists(self, user_id: UUID) -> None:
        """Existence guard: raise NotFoundError for an unknown user"""
        if not await self.repo.exists(user_id):
            logger.warning(f"User {user_id} not found")
            raise NotFoundError("User does not exist")

    async def get_model(self, user_id: UUID) -> UserModel:
        """Load the stored user or raise NotFoundError"""
        user = await self.repo.get_by_id(user_id)
        if not user:
            logger.warning(f"User {user_id} not found")
            raise NotFoundError("User does not exist")
        return user

    async def _validate_uid_and_email(
        self, user_id: Optional[UUID], uid: Optional[str], email: Optional[str]
    ) -> None:
        if uid is not None and await self.repo.uid_taken(uid, exclude_id=user_id):
            logger.warning(f"Validation failed: uid {sanitize_for_log(uid)} already exists")
            raise ConflictError("User with this UID already exists")

        if email is not None and await self.repo.email_taken(email, exclude_id=user_id):
            logger.warning(f"Validation failed: email already bound to another account (user {user_id})")
            raise ConflictError("This email is already bound to another account")

    @staticmethod
    def _validate_date_of_birth(date_of_birth: Optional[date]) -> None:
        if date_of_birth is not None and date_of_birth > datetime.now(timezone.utc).date():
            logger.warning("Validation failed: date of birth is in the future")
            raise ValidationError("Date of birth cannot be in the future")
