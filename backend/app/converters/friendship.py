from uuid import UUID

from app.core.enums import FriendshipStatus
from app.models.friendship import RelationshipEdge
from app.schemas.friendship import (
    FriendPublic,
    FriendRequestPublic,
    FriendshipView,
    PendingRequestRef,
)


def to_view(edge: RelationshipEdge | None, *, viewer_id: UUID) -> FriendshipView:
    """
    Converts the edge between the viewer and another account (if any) into
    the viewer's FriendshipView.

    Parameters:
        edge (RelationshipEdge | None): The edge for the pair, or None.
        viewer_id (UUID): The account the view is computed for.
    Returns:
        FriendshipView: `is_friend` for an accepted edge, `pending` with
        `is_incoming` set when the viewer is the target of a pending edge.
    Raises:
        ValueError: If the viewer is not part of the edge.
    """
    if edge is None:
        return FriendshipView.none()
    if viewer_id not in (edge.requester_id, edge.target_id):
        raise ValueError(f"Account {viewer_id} is not part of edge {edge.id}")
    if edge.status == FriendshipStatus.ACCEPTED:
        return FriendshipView(is_friend=True, pending=None)
    return FriendshipView(
        is_friend=False,
        pending=PendingRequestRef(id=edge.id, is_incoming=edge.target_id == viewer_id),
    )


def counterpart(edge: RelationshipEdge, *, viewer_id: UUID) -> UUID:
    return edge.target_id if edge.requester_id == viewer_id else edge.requester_id


def to_request_public(edge: RelationshipEdge) -> FriendRequestPublic:
    return FriendRequestPublic(
        id=edge.id,
        requester_id=edge.requester_id,
        target_id=edge.target_id,
        status=edge.status,
        message=edge.message,
        created_at=edge.created_at,
        updated_at=edge.updated_at,
    )


def to_friend_public(edge: RelationshipEdge, *, viewer_id: UUID) -> FriendPublic:
    return FriendPublic(
        account_id=counterpart(edge, viewer_id=viewer_id),
        edge_id=edge.id,
        friends_since=edge.updated_at,
    )
