import uuid

from fastapi import APIRouter, Query, status

from app.api.deps import (
    ActingAccount,
    SessionDep,
)
from app.schemas.friendship import (
    FriendPublic,
    FriendRequestCreate,
    FriendRequestSent,
    FriendRequestsPublic,
    FriendshipActionResult,
    FriendshipStats,
    FriendshipView,
)
from app.services import friends as friends_service

router = APIRouter(prefix="/friends", tags=["friends"])


@router.get("/status/{other_id}", response_model=FriendshipView)
def get_friendship_status(
    *, session: SessionDep, acting_id: ActingAccount, other_id: uuid.UUID
) -> FriendshipView:
    return friends_service.check_status(
        session=session,
        acting_id=acting_id,
        other_id=other_id,
    )


@router.post(
    "/requests",
    response_model=FriendRequestSent,
    status_code=status.HTTP_201_CREATED,
)
def send_friend_request(
    *, session: SessionDep, acting_id: ActingAccount, body: FriendRequestCreate
) -> FriendRequestSent:
    return friends_service.send_friend_request(
        session=session,
        acting_id=acting_id,
        other_id=body.other_id,
        message=body.message,
    )


@router.get("/requests", response_model=FriendRequestsPublic)
def get_friend_requests(
    *, session: SessionDep, acting_id: ActingAccount
) -> FriendRequestsPublic:
    return friends_service.get_friend_requests(session=session, acting_id=acting_id)


@router.post("/requests/{edge_id}/accept", response_model=FriendshipActionResult)
def accept_friend_request(
    *,
    session: SessionDep,
    acting_id: ActingAccount,
    edge_id: uuid.UUID,
    other_id: uuid.UUID | None = None,
) -> FriendshipActionResult:
    return friends_service.accept_friend_request(
        session=session,
        acting_id=acting_id,
        edge_id=edge_id,
        other_id=other_id,
    )


@router.post("/requests/{edge_id}/decline", response_model=FriendshipActionResult)
def decline_friend_request(
    *,
    session: SessionDep,
    acting_id: ActingAccount,
    edge_id: uuid.UUID,
    other_id: uuid.UUID | None = None,
) -> FriendshipActionResult:
    return friends_service.decline_friend_request(
        session=session,
        acting_id=acting_id,
        edge_id=edge_id,
        other_id=other_id,
    )


@router.post("/requests/{edge_id}/cancel", response_model=FriendshipActionResult)
def cancel_friend_request(
    *,
    session: SessionDep,
    acting_id: ActingAccount,
    edge_id: uuid.UUID,
    other_id: uuid.UUID | None = None,
) -> FriendshipActionResult:
    return friends_service.cancel_friend_request(
        session=session,
        acting_id=acting_id,
        edge_id=edge_id,
        other_id=other_id,
    )


@router.get("/stats", response_model=FriendshipStats)
def get_friendship_stats(
    *, session: SessionDep, acting_id: ActingAccount
) -> FriendshipStats:
    return friends_service.get_friendship_stats(session=session, acting_id=acting_id)


@router.get("/", response_model=list[FriendPublic])
def get_friends(
    *,
    session: SessionDep,
    acting_id: ActingAccount,
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
) -> list[FriendPublic]:
    return friends_service.get_friends(
        session=session,
        acting_id=acting_id,
        limit=limit,
        offset=offset,
    )


@router.delete("/{other_id}", response_model=FriendshipActionResult)
def remove_friend(
    *,
    session: SessionDep,
    acting_id: ActingAccount,
    other_id: uuid.UUID,
) -> FriendshipActionResult:
    return friends_service.remove_friend(
        session=session,
        acting_id=acting_id,
        other_id=other_id,
    )
