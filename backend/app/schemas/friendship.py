from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from app.core.config import settings
from app.core.enums import FriendshipStatus

__all__ = [
    "PendingRequestRef",
    "FriendshipView",
    "FriendRequestCreate",
    "FriendRequestSent",
    "FriendshipActionResult",
    "FriendRequestPublic",
    "FriendRequestsPublic",
    "FriendPublic",
    "FriendshipStats",
]


class PendingRequestRef(BaseModel):
    id: UUID
    is_incoming: bool


class FriendshipView(BaseModel):
    """Relationship between the viewing account and one other account."""

    is_friend: bool = False
    pending: PendingRequestRef | None = None

    @classmethod
    def none(cls) -> "FriendshipView":
        return cls(is_friend=False, pending=None)


class FriendRequestCreate(BaseModel):
    other_id: UUID
    message: str | None = Field(
        default=None, max_length=settings.FRIEND_REQUEST_MESSAGE_MAX_LENGTH
    )


class FriendRequestSent(BaseModel):
    edge_id: UUID


class FriendshipActionResult(BaseModel):
    message: str
    other_id: UUID
    status: FriendshipView
    # True when the conditional write lost a race and `status` is the
    # state another actor left behind.
    resolved_by_race: bool = False


class FriendRequestPublic(BaseModel):
    id: UUID
    requester_id: UUID
    target_id: UUID
    status: FriendshipStatus
    message: str | None
    created_at: datetime
    updated_at: datetime


class FriendRequestsPublic(BaseModel):
    sent: list[FriendRequestPublic]
    received: list[FriendRequestPublic]


class FriendPublic(BaseModel):
    account_id: UUID
    edge_id: UUID
    friends_since: datetime


class FriendshipStats(BaseModel):
    friends_count: int
    pending_sent_count: int
    pending_received_count: int
