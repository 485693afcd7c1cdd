from pydantic import BaseModel, ConfigDict
from datetime import datetime
from typing import Optional
from uuid import UUID
from enum import Enum


class FriendshipStatus(str, Enum):
    APPLICATION_SENT = "ApplicationSent"
    FRIEND = "Friend"
    # Rejection deletes the row, so this value is never stored
    APPLICATION_REJECTED = "ApplicationRejected"


class Friendship(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: UUID
    friend_id: UUID
    status: FriendshipStatus
    created_at: datetime
    updated_at: Optional[datetime] = None


class RelationExists(BaseModel):
    exists: bool
