from logging import getLogger
from uuid import UUID

from sqlalchemy.exc import OperationalError
from sqlmodel import Session

from app.converters import friendship as friendship_converters
from app.core.enums import FriendshipStatus
from app.crud import friendship as friendship_crud
from app.exceptions.base import AppError
from app.exceptions.friends_exceptions import (
    FriendRequestAlreadyExistsError,
    FriendRequestForbiddenError,
    FriendRequestNotFoundError,
    RelationshipStoreUnavailableError,
    SelfRelationshipError,
)
from app.schemas.friendship import (
    FriendPublic,
    FriendRequestSent,
    FriendRequestsPublic,
    FriendshipActionResult,
    FriendshipStats,
    FriendshipView,
)

logger = getLogger(__name__)

# Which side of a pending edge may perform each response.
_REQUIRED_ROLE = {
    "accept": "target",
    "decline": "target",
    "cancel": "requester",
}

_SUCCESS_MESSAGES = {
    "accept": "Friend request accepted successfully.",
    "decline": "Friend request declined successfully.",
    "cancel": "Friend request cancelled successfully.",
}


def _ensure_not_self(acting_id: UUID, other_id: UUID) -> None:
    if acting_id == other_id:
        raise SelfRelationshipError(acting_id)


def check_status(
    *,
    session: Session,
    acting_id: UUID,
    other_id: UUID,
) -> FriendshipView:
    """
    Get the relationship between the acting account and another account,
    as seen by the acting account.

    Raises:
        SelfRelationshipError: If both ids are the same account.
        RelationshipStoreUnavailableError: If the store could not be reached.
    """
    _ensure_not_self(acting_id, other_id)
    try:
        edge = friendship_crud.get_edge_for_pair(
            session=session, account_a=acting_id, account_b=other_id
        )
    except OperationalError as e:
        raise RelationshipStoreUnavailableError() from e
    return friendship_converters.to_view(edge, viewer_id=acting_id)


def send_friend_request(
    *,
    session: Session,
    acting_id: UUID,
    other_id: UUID,
    message: str | None = None,
) -> FriendRequestSent:
    """
    Send a friend request from the acting account to another account.

    Raises:
        SelfRelationshipError: If the acting account targets itself.
        FriendRequestAlreadyExistsError: If any edge already exists for the
            pair, in either direction and with any status.
        RelationshipStoreUnavailableError: If the store could not be reached.
        AppError: For any other (unexpected) errors.
    """
    _ensure_not_self(acting_id, other_id)
    try:
        edge = friendship_crud.insert_pending_if_absent(
            session=session,
            requester_id=acting_id,
            target_id=other_id,
            message=message,
        )
        if edge is None:
            session.rollback()
            raise FriendRequestAlreadyExistsError(acting_id, other_id)
        session.commit()
    except AppError:
        raise
    except OperationalError as e:
        session.rollback()
        raise RelationshipStoreUnavailableError() from e
    except Exception as e:
        session.rollback()
        raise AppError from e

    logger.info("Friend request %s sent from %s to %s", edge.id, acting_id, other_id)
    return FriendRequestSent(edge_id=edge.id)


def _resolve_after_race(
    *,
    session: Session,
    acting_id: UUID,
    other_id: UUID,
    edge_id: UUID,
    action: str,
) -> FriendshipActionResult:
    session.rollback()
    view = check_status(session=session, acting_id=acting_id, other_id=other_id)
    logger.warning(
        "Could not %s friend request %s for %s: edge changed concurrently, resolved to %s",
        action,
        edge_id,
        acting_id,
        view.model_dump(mode="json"),
    )
    return FriendshipActionResult(
        message=f"Friend request was already resolved; could not {action} it.",
        other_id=other_id,
        status=view,
        resolved_by_race=True,
    )


def _respond_to_friend_request(
    *,
    session: Session,
    acting_id: UUID,
    edge_id: UUID,
    other_id: UUID | None,
    action: str,
) -> FriendshipActionResult:
    if other_id is not None:
        _ensure_not_self(acting_id, other_id)
    try:
        edge = friendship_crud.get_edge(session=session, edge_id=edge_id)
        if edge is None:
            if other_id is None:
                raise FriendRequestNotFoundError(edge_id)
            # Already removed; report where the pair ended up instead.
            return _resolve_after_race(
                session=session,
                acting_id=acting_id,
                other_id=other_id,
                edge_id=edge_id,
                action=action,
            )

        observed_status = edge.status
        allowed_id = (
            edge.requester_id
            if _REQUIRED_ROLE[action] == "requester"
            else edge.target_id
        )
        if acting_id != allowed_id:
            raise FriendRequestForbiddenError(acting_id, edge_id, action)
        other_id = friendship_converters.counterpart(edge, viewer_id=acting_id)

        if observed_status != FriendshipStatus.PENDING:
            return _resolve_after_race(
                session=session,
                acting_id=acting_id,
                other_id=other_id,
                edge_id=edge_id,
                action=action,
            )

        if action == "accept":
            applied = friendship_crud.transition(
                session=session,
                edge_id=edge_id,
                expected_status=FriendshipStatus.PENDING,
                new_status=FriendshipStatus.ACCEPTED,
            )
        else:
            applied = friendship_crud.delete_edge(
                session=session,
                edge_id=edge_id,
                expected_status=FriendshipStatus.PENDING,
            )

        if not applied:
            return _resolve_after_race(
                session=session,
                acting_id=acting_id,
                other_id=other_id,
                edge_id=edge_id,
                action=action,
            )
        session.commit()
    except AppError:
        raise
    except OperationalError as e:
        session.rollback()
        raise RelationshipStoreUnavailableError() from e
    except Exception as e:
        session.rollback()
        raise AppError from e

    logger.info("Friend request %s: %s by %s", edge_id, action, acting_id)
    if action == "accept":
        view = FriendshipView(is_friend=True, pending=None)
    else:
        view = FriendshipView.none()
    return FriendshipActionResult(
        message=_SUCCESS_MESSAGES[action], other_id=other_id, status=view
    )


def accept_friend_request(
    *,
    session: Session,
    acting_id: UUID,
    edge_id: UUID,
    other_id: UUID | None = None,
) -> FriendshipActionResult:
    """
    Accept a pending friend request addressed to the acting account.

    If the request was resolved by someone else first (declined, cancelled or
    already accepted), the resolved status is returned with
    `resolved_by_race` set instead of an error. When the edge is already gone,
    the pair can only be re-read if the caller passes the other account's id
    as `other_id`.

    Raises:
        FriendRequestNotFoundError: If no edge with this id exists and no
            `other_id` was given.
        FriendRequestForbiddenError: If the acting account is not the target.
        SelfRelationshipError: If `other_id` is the acting account.
        RelationshipStoreUnavailableError: If the store could not be reached.
        AppError: For any other (unexpected) errors.
    """
    return _respond_to_friend_request(
        session=session,
        acting_id=acting_id,
        edge_id=edge_id,
        other_id=other_id,
        action="accept",
    )


def decline_friend_request(
    *,
    session: Session,
    acting_id: UUID,
    edge_id: UUID,
    other_id: UUID | None = None,
) -> FriendshipActionResult:
    """
    Decline a pending friend request addressed to the acting account.
    Behaves and raises like `accept_friend_request`.
    """
    return _respond_to_friend_request(
        session=session,
        acting_id=acting_id,
        edge_id=edge_id,
        other_id=other_id,
        action="decline",
    )


def cancel_friend_request(
    *,
    session: Session,
    acting_id: UUID,
    edge_id: UUID,
    other_id: UUID | None = None,
) -> FriendshipActionResult:
    """
    Cancel a pending friend request sent by the acting account.

    Raises:
        FriendRequestNotFoundError: If no edge with this id exists and no
            `other_id` was given.
        FriendRequestForbiddenError: If the acting account is not the requester.
        SelfRelationshipError: If `other_id` is the acting account.
        RelationshipStoreUnavailableError: If the store could not be reached.
        AppError: For any other (unexpected) errors.
    """
    return _respond_to_friend_request(
        session=session,
        acting_id=acting_id,
        edge_id=edge_id,
        other_id=other_id,
        action="cancel",
    )


def remove_friend(
    *,
    session: Session,
    acting_id: UUID,
    other_id: UUID,
) -> FriendshipActionResult:
    """
    Remove the friendship between the acting account and another account.

    Removing a friendship that does not exist (never existed, or the other
    side removed it first) is reported as success.

    Raises:
        SelfRelationshipError: If both ids are the same account.
        RelationshipStoreUnavailableError: If the store could not be reached.
        AppError: For any other (unexpected) errors.
    """
    _ensure_not_self(acting_id, other_id)
    try:
        edge = friendship_crud.get_edge_for_pair(
            session=session, account_a=acting_id, account_b=other_id
        )
        if edge is None or edge.status != FriendshipStatus.ACCEPTED:
            view = friendship_converters.to_view(edge, viewer_id=acting_id)
            return FriendshipActionResult(
                message="No friendship to remove.", other_id=other_id, status=view
            )

        edge_id = edge.id
        applied = friendship_crud.delete_edge(
            session=session,
            edge_id=edge_id,
            expected_status=FriendshipStatus.ACCEPTED,
        )
        if not applied:
            return _resolve_after_race(
                session=session,
                acting_id=acting_id,
                other_id=other_id,
                edge_id=edge_id,
                action="unfriend",
            )
        session.commit()
    except AppError:
        raise
    except OperationalError as e:
        session.rollback()
        raise RelationshipStoreUnavailableError() from e
    except Exception as e:
        session.rollback()
        raise AppError from e

    logger.info("Friendship %s removed by %s", edge_id, acting_id)
    return FriendshipActionResult(
        message="Friend removed successfully.",
        other_id=other_id,
        status=FriendshipView.none(),
    )


def get_friends(
    *,
    session: Session,
    acting_id: UUID,
    limit: int = 50,
    offset: int = 0,
) -> list[FriendPublic]:
    try:
        edges = friendship_crud.get_friend_edges(
            session=session, account_id=acting_id, limit=limit, offset=offset
        )
    except OperationalError as e:
        raise RelationshipStoreUnavailableError() from e
    return [
        friendship_converters.to_friend_public(edge, viewer_id=acting_id)
        for edge in edges
    ]


def get_friend_requests(
    *,
    session: Session,
    acting_id: UUID,
) -> FriendRequestsPublic:
    """
    Get the pending requests the acting account has sent and received.
    """
    try:
        sent = friendship_crud.get_pending_edges(
            session=session, account_id=acting_id, incoming=False
        )
        received = friendship_crud.get_pending_edges(
            session=session, account_id=acting_id, incoming=True
        )
    except OperationalError as e:
        raise RelationshipStoreUnavailableError() from e
    return FriendRequestsPublic(
        sent=[friendship_converters.to_request_public(edge) for edge in sent],
        received=[friendship_converters.to_request_public(edge) for edge in received],
    )


def get_friendship_stats(
    *,
    session: Session,
    acting_id: UUID,
) -> FriendshipStats:
    try:
        return FriendshipStats(
            friends_count=friendship_crud.count_friends(
                session=session, account_id=acting_id
            ),
            pending_sent_count=friendship_crud.count_pending(
                session=session, account_id=acting_id, incoming=False
            ),
            pending_received_count=friendship_crud.count_pending(
                session=session, account_id=acting_id, incoming=True
            ),
        )
    except OperationalError as e:
        raise RelationshipStoreUnavailableError() from e
