from sqlalchemy import Column, String, DateTime, ForeignKey, Uuid, UniqueConstraint

from userservice.core.database import Base
from userservice.models.user import utcnow
from userservice.schemas.friendship import FriendshipStatus


class Friendship(Base):
    __tablename__ = "friends"

    # user_id sent the request; after acceptance the row is flipped so the
    # recipient owns it
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    friend_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True, index=True)
    status = Column(String(32), nullable=False, default=FriendshipStatus.APPLICATION_SENT.value)  # ApplicationSent, Friend

    # Sorted "low:high" id pair, one row per unordered pair of users
    pair_key = Column(String(73), nullable=False)

    # Timestamps
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), onupdate=utcnow)

    # Constraints
    __table_args__ = (
        UniqueConstraint("pair_key", name="unique_friendship_pair"),
    )

    @staticmethod
    def make_pair_key(user1_id, user2_id) -> str:
        return ":".join(sorted((str(user1_id), str(user2_id))))
