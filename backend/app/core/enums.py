from enum import Enum, unique


@unique
class FriendshipStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
