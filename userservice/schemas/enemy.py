from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class Enmity(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: UUID
    enemy_id: UUID
    created_at: datetime
