from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from userservice.api.deps import Pagination, get_pagination
from userservice.core.database import get_db
from userservice.schemas.enemy import Enmity
from userservice.schemas.friendship import RelationExists
from userservice.schemas.user import PagedShortUsers
from userservice.services.enemy import EnemyService

router = APIRouter()


@router.post("/{enemy_id}", response_model=Enmity, status_code=status.HTTP_201_CREATED)
async def add_enemy(
    user_id: UUID,
    enemy_id: UUID,
    db: AsyncSession = Depends(get_db)
):
    """Add a user to the enemy list (removes any existing friendship)"""
    return await EnemyService(db).declare(user_id, enemy_id)


@router.delete("/{enemy_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_enemy(
    user_id: UUID,
    enemy_id: UUID,
    db: AsyncSession = Depends(get_db)
):
    await EnemyService(db).revoke(user_id, enemy_id)
    return None


@router.get("/{enemy_id}/exists", response_model=RelationExists)
async def enemy_exists(
    user_id: UUID,
    enemy_id: UUID,
    db: AsyncSession = Depends(get_db)
):
    exists = await EnemyService(db).exists(user_id, enemy_id)
    return RelationExists(exists=exists)


@router.get("", response_model=PagedShortUsers)
async def get_enemies(
    user_id: UUID,
    page: Pagination = Depends(get_pagination),
    db: AsyncSession = Depends(get_db)
):
    """Get the enemy list with pagination"""
    return await EnemyService(db).get_enemies(user_id, page.offset, page.limit)
