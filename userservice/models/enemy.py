from sqlalchemy import Column, DateTime, ForeignKey, Uuid

from userservice.core.database import Base
from userservice.models.user import utcnow


class Enmity(Base):
    """user_id has put enemy_id on their enemy list"""
    __tablename__ = "enemies"

    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    enemy_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
