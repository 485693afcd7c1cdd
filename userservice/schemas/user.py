from datetime import date, datetime
from enum import Enum
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class Gender(str, Enum):
    MALE = "Male"
    FEMALE = "Female"


class UserStatus(str, Enum):
    ONLINE = "Online"
    INACTIVE = "Inactive"
    DO_NOT_DISTURB = "DoNotDisturb"
    OFFLINE = "Offline"


class UserCreate(BaseModel):
    uid: str = Field(..., min_length=1, max_length=10)
    nickname: str = Field(..., min_length=1, max_length=50)
    email: EmailStr
    gender: Gender
    date_of_birth: date


class UserUpdate(BaseModel):
    """Every field is optional; only the ones sent (and not null) are applied"""
    uid: Optional[str] = Field(None, min_length=1, max_length=10)
    nickname: Optional[str] = Field(None, min_length=1, max_length=50)
    email: Optional[EmailStr] = None
    avatar_url: Optional[str] = Field(None, max_length=255)
    gender: Optional[Gender] = None
    status: Optional[UserStatus] = None
    date_of_birth: Optional[date] = None


class ShortUser(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    uid: str
    nickname: str
    avatar_url: str
    status: UserStatus


class User(ShortUser):
    email: str
    gender: Gender
    date_of_birth: date
    account_creation_time: datetime


class PagedUsers(BaseModel):
    data: List[User]
    offset: int
    limit: int
    total: int


class PagedShortUsers(BaseModel):
    data: List[ShortUser]
    offset: int
    limit: int
    total: int
