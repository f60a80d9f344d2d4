from uuid import UUID

from fastapi import status

from .base import AppError


class SelfRelationshipError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, account_id: UUID):
        detail = f"Account {account_id} cannot have a relationship with itself."
        super().__init__(detail)


class FriendRequestAlreadyExistsError(AppError):
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, sender_id: UUID, receiver_id: UUID):
        detail = (
            f"Request already pending. Accounts {sender_id} and {receiver_id} "
            "already have a pending request or are already friends."
        )
        super().__init__(detail)
        self.sender_id = sender_id
        self.receiver_id = receiver_id


class FriendRequestForbiddenError(AppError):
    status_code = status.HTTP_403_FORBIDDEN

    def __init__(self, account_id: UUID, edge_id: UUID, action: str):
        detail = f"Account {account_id} is not allowed to {action} friend request {edge_id}."
        super().__init__(detail)


class FriendRequestNotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, edge_id: UUID):
        detail = f"Friend request {edge_id} not found. It may have been accepted, declined or cancelled."
        super().__init__(detail)
        self.edge_id = edge_id


class RelationshipStoreUnavailableError(AppError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    def __init__(self):
        detail = "Relationship store is unavailable. Check the current status before retrying."
        super().__init__(detail)


class InvalidLinkedProfileError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, profile_id: object):
        detail = f"Linked profile id {profile_id!r} is not a valid account id."
        super().__init__(detail)
