import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, String, Date, DateTime, Uuid, Index

from userservice.core.database import Base
from userservice.schemas.user import UserStatus


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    uid = Column(String(10), nullable=False, unique=True, index=True)
    nickname = Column(String(50), nullable=False, index=True)
    email = Column(String(128), nullable=False, unique=True, index=True)
    avatar_url = Column(String(255), nullable=False, default="")
    gender = Column(String(16), nullable=False)  # Male, Female
    status = Column(String(16), nullable=False, default=UserStatus.ONLINE.value)
    date_of_birth = Column(Date, nullable=False)

    # Set once on insert, never updated
    account_creation_time = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (
        Index("idx_users_nickname_uid", "nickname", "uid"),
    )
