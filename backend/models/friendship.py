from datetime import datetime
from sqlalchemy import String, TIMESTAMP, ForeignKey, CheckConstraint, Index, func
from sqlalchemy.orm import Mapped, mapped_column
from database import Base

PENDING = "pending"
ACCEPTED = "accepted"


def canonical_pair(a: int, b: int) -> tuple[int, int]:
    """Order two user ids so an undirected edge always has one (low, high) key."""
    return (a, b) if a < b else (b, a)


class Friendship(Base):
    __tablename__ = "friendships"

    user_one_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), primary_key=True
    )
    user_two_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), primary_key=True
    )
    status: Mapped[str] = mapped_column(String(20), default=PENDING, nullable=False)
    # Whoever made the last transition: the sender while pending, the accepter afterwards
    action_user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    created_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), server_default=func.now())

    __table_args__ = (
        CheckConstraint("user_one_id < user_two_id", name="ck_friendship_canonical"),
        Index("idx_friendships_user_two", "user_two_id", "status"),
    )
