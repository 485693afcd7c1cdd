from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class FriendRequestNotification(BaseModel):
    """Body POSTed to the notification service when a friend request is sent"""
    model_config = ConfigDict(populate_by_name=True)

    sender_id: UUID = Field(..., alias="senderId")
    receiver_id: UUID = Field(..., alias="receiverId")
    sender_name: str = Field(..., alias="senderName")
    receiver_name: str = Field(..., alias="receiverName")
    created_at: datetime = Field(..., alias="createdAt")
    type_dto: str = Field("Invite", alias="typeDto")

    def to_payload(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)
