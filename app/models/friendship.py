# app/models/friendship.py

import enum
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Tuple

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String

from app.db.base_class import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class FriendStatus(str, enum.Enum):
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"


def pair_of(a: str, b: str) -> Tuple[str, str]:
    """The unordered pair {a, b} in a canonical order."""
    return (a, b) if a <= b else (b, a)


def pair_key(a: str, b: str) -> str:
    low, high = pair_of(a, b)
    # user ids never contain "|" (see UserCreate)
    return f"{low}|{high}"


class Friendship(Base):
    __tablename__ = "friendships"

    id = Column(Integer, primary_key=True, index=True)
    # one row per unordered pair, whatever the direction
    pair_key = Column(String(101), unique=True, index=True, nullable=False)
    requester_id = Column(String(50), ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False)
    target_id = Column(String(50), ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False)
    status = Column(String(20), default=FriendStatus.PENDING.value, nullable=False)

    created_at = Column(DateTime(timezone=True), default=_utcnow)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)


@dataclass(frozen=True)
class Relationship:
    """Snapshot of a friendship row handed out by the relationship stores."""

    requester: str
    target: str
    status: FriendStatus

    @classmethod
    def from_row(cls, row: Friendship) -> "Relationship":
        return cls(
            requester=row.requester_id,
            target=row.target_id,
            status=FriendStatus(row.status),
        )
