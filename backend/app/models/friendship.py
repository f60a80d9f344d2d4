import uuid
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import CheckConstraint, DateTime
from sqlalchemy import Enum as SAEnum
from sqlmodel import Column, Field, SQLModel

from app.core.enums import FriendshipStatus

__all__ = [
    "RelationshipEdge",
    "utcnow",
]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RelationshipEdge(SQLModel, table=True):
    """
    A single relationship between two accounts.

    Directional (requester -> target) while pending, symmetric once accepted.
    `pair_key` is the unordered pair, so at most one edge can exist for two
    accounts regardless of who sent the request.
    """

    __table_args__ = (
        CheckConstraint("requester_id <> target_id", name="ck_edge_not_self"),
    )

    id: UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    requester_id: UUID = Field(index=True)
    target_id: UUID = Field(index=True)
    pair_key: str = Field(unique=True, index=True, max_length=80)
    status: FriendshipStatus = Field(
        default=FriendshipStatus.PENDING,
        sa_column=Column(
            SAEnum(
                FriendshipStatus,
                native_enum=False,
                name="friendshipstatus",
                length=16,
                values_callable=lambda statuses: [s.value for s in statuses],
            ),
            nullable=False,
        ),
    )
    message: str | None = Field(default=None, max_length=500)
    created_at: datetime = Field(
        default_factory=utcnow, sa_type=DateTime(timezone=True), nullable=False
    )
    updated_at: datetime = Field(
        default_factory=utcnow, sa_type=DateTime(timezone=True), nullable=False
    )
