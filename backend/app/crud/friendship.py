from uuid import UUID

from sqlalchemy import delete, func, or_, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlmodel import Session, col, select

from app.core.enums import FriendshipStatus
from app.models.friendship import RelationshipEdge, utcnow

_INSERT_BY_DIALECT = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def pair_key(account_a: UUID, account_b: UUID) -> str:
    """
    Normalized key for the unordered pair of two accounts.

    pair_key(a, b) == pair_key(b, a) for all a, b.
    """
    low, high = sorted((str(account_a), str(account_b)))
    return f"{low}|{high}"


def insert_pending_if_absent(
    *,
    session: Session,
    requester_id: UUID,
    target_id: UUID,
    message: str | None = None,
) -> RelationshipEdge | None:
    """
    Create a pending edge from requester to target unless any edge already
    exists for the pair, in either direction.

    The existence check and the insert are one statement, so two concurrent
    calls for the same pair (in either direction) cannot both create an edge.

    Parameters:
        session (Session): The database session.
        requester_id (UUID): The account sending the request.
        target_id (UUID): The account receiving the request.
        message (str | None): Optional note attached to the request.
    Returns:
        RelationshipEdge | None: The new edge, or None if the pair already
        has an edge.
    """
    dialect = session.get_bind().dialect.name
    try:
        insert = _INSERT_BY_DIALECT[dialect]
    except KeyError:
        raise NotImplementedError(f"Unsupported database dialect: {dialect}") from None

    edge = RelationshipEdge(
        requester_id=requester_id,
        target_id=target_id,
        pair_key=pair_key(requester_id, target_id),
        status=FriendshipStatus.PENDING,
        message=message,
    )
    stmt = (
        insert(RelationshipEdge)
        .values(
            id=edge.id,
            requester_id=edge.requester_id,
            target_id=edge.target_id,
            pair_key=edge.pair_key,
            status=edge.status,
            message=edge.message,
            created_at=edge.created_at,
            updated_at=edge.updated_at,
        )
        .on_conflict_do_nothing(index_elements=[col(RelationshipEdge.pair_key)])
    )
    result = session.execute(stmt)
    if result.rowcount == 0:
        return None
    return edge


def transition(
    *,
    session: Session,
    edge_id: UUID,
    expected_status: FriendshipStatus,
    new_status: FriendshipStatus,
) -> bool:
    """
    Move an edge to a new status if it is still in the status the caller
    last observed.

    Parameters:
        session (Session): The database session.
        edge_id (UUID): The edge to update.
        expected_status (FriendshipStatus): The status the caller observed.
        new_status (FriendshipStatus): The status to move to.
    Returns:
        bool: True if the edge was updated, False if it was removed or its
        status changed in the meantime (stale).
    """
    stmt = (
        update(RelationshipEdge)
        .where(
            col(RelationshipEdge.id) == edge_id,
            col(RelationshipEdge.status) == expected_status,
        )
        .values(status=new_status, updated_at=utcnow())
        .execution_options(synchronize_session=False)
    )
    result = session.execute(stmt)
    return result.rowcount == 1


def delete_edge(
    *,
    session: Session,
    edge_id: UUID,
    expected_status: FriendshipStatus,
) -> bool:
    """
    Delete an edge if it is still in the status the caller last observed.

    Parameters:
        session (Session): The database session.
        edge_id (UUID): The edge to delete.
        expected_status (FriendshipStatus): The status the caller observed.
    Returns:
        bool: True if the edge was deleted, False if it was already gone or
        its status changed in the meantime (stale).
    """
    stmt = (
        delete(RelationshipEdge)
        .where(
            col(RelationshipEdge.id) == edge_id,
            col(RelationshipEdge.status) == expected_status,
        )
        .execution_options(synchronize_session=False)
    )
    result = session.execute(stmt)
    return result.rowcount == 1


def get_edge(
    *,
    session: Session,
    edge_id: UUID,
) -> RelationshipEdge | None:
    stmt = (
        select(RelationshipEdge)
        .where(col(RelationshipEdge.id) == edge_id)
        .execution_options(populate_existing=True)
    )
    return session.exec(stmt).one_or_none()


def get_edge_for_pair(
    *,
    session: Session,
    account_a: UUID,
    account_b: UUID,
) -> RelationshipEdge | None:
    """
    Get the edge between two accounts, whoever sent the request.

    Parameters:
        session (Session): The database session.
        account_a (UUID): One account of the pair.
        account_b (UUID): The other account of the pair.
    Returns:
        RelationshipEdge | None: The edge if one exists, otherwise None.
    """
    stmt = (
        select(RelationshipEdge)
        .where(col(RelationshipEdge.pair_key) == pair_key(account_a, account_b))
        .execution_options(populate_existing=True)
    )
    return session.exec(stmt).one_or_none()


def get_friend_edges(
    *,
    session: Session,
    account_id: UUID,
    limit: int,
    offset: int,
) -> list[RelationshipEdge]:
    stmt = (
        select(RelationshipEdge)
        .where(
            col(RelationshipEdge.status) == FriendshipStatus.ACCEPTED,
            or_(
                col(RelationshipEdge.requester_id) == account_id,
                col(RelationshipEdge.target_id) == account_id,
            ),
        )
        .order_by(col(RelationshipEdge.updated_at).desc(), col(RelationshipEdge.id))
        .limit(limit)
        .offset(offset)
    )
    return list(session.exec(stmt).all())


def get_pending_edges(
    *,
    session: Session,
    account_id: UUID,
    incoming: bool,
) -> list[RelationshipEdge]:
    """
    Get pending requests received by (incoming) or sent by the account,
    newest first.
    """
    side = RelationshipEdge.target_id if incoming else RelationshipEdge.requester_id
    stmt = (
        select(RelationshipEdge)
        .where(
            col(RelationshipEdge.status) == FriendshipStatus.PENDING,
            col(side) == account_id,
        )
        .order_by(col(RelationshipEdge.created_at).desc(), col(RelationshipEdge.id))
    )
    return list(session.exec(stmt).all())


def count_friends(
    *,
    session: Session,
    account_id: UUID,
) -> int:
    stmt = select(func.count()).select_from(RelationshipEdge).where(
        col(RelationshipEdge.status) == FriendshipStatus.ACCEPTED,
        or_(
            col(RelationshipEdge.requester_id) == account_id,
            col(RelationshipEdge.target_id) == account_id,
        ),
    )
    return session.exec(stmt).one()


def count_pending(
    *,
    session: Session,
    account_id: UUID,
    incoming: bool,
) -> int:
    side = RelationshipEdge.target_id if incoming else RelationshipEdge.requester_id
    stmt = select(func.count()).select_from(RelationshipEdge).where(
        col(RelationshipEdge.status) == FriendshipStatus.PENDING,
        col(side) == account_id,
    )
    return session.exec(stmt).one()
