from collections.abc import Callable
from types import SimpleNamespace
from uuid import UUID, uuid4

import pytest
from pytest_mock import MockerFixture
from sqlmodel import Session

from app.core.enums import FriendshipStatus
from app.exceptions.friends_exceptions import (
    FriendRequestAlreadyExistsError,
    FriendRequestNotFoundError,
    InvalidLinkedProfileError,
    RelationshipStoreUnavailableError,
)
from app.models.friendship import RelationshipEdge
from app.schemas.friendship import FriendshipView, PendingRequestRef
from app.services import friends as friends_services
from app.services.contact_linking import LinkedProfileLinker
from app.services.status_cache import FriendshipStatusCache


@pytest.fixture
def cache_factory(
    session_factory: Callable[[], Session],
) -> Callable[[UUID], FriendshipStatusCache]:
    def _cache_factory(acting_id: UUID) -> FriendshipStatusCache:
        return FriendshipStatusCache(
            session_factory=session_factory, acting_id=acting_id
        )

    return _cache_factory


def test_get_reads_through_once(
    mocker: MockerFixture,
    *,
    cache_factory: Callable[[UUID], FriendshipStatusCache],
    account_factory: Callable[[], UUID],
):
    spy = mocker.spy(friends_services, "check_status")
    cache = cache_factory(account_factory())
    other_id = account_factory()

    first = cache.get(other_id)
    second = cache.get(other_id)

    assert first == second == FriendshipView.none()
    assert spy.call_count == 1
    assert other_id in cache


def test_refresh_picks_up_external_change(
    *,
    db_session: Session,
    cache_factory: Callable[[UUID], FriendshipStatusCache],
    account_factory: Callable[[], UUID],
):
    me = account_factory()
    other_id = account_factory()
    cache = cache_factory(me)
    assert cache.get(other_id).pending is None

    sent = friends_services.send_friend_request(
        session=db_session, acting_id=other_id, other_id=me
    )

    assert cache.get(other_id).pending is None
    view = cache.refresh(other_id)
    assert view.pending == PendingRequestRef(id=sent.edge_id, is_incoming=True)


def test_invalidate_and_clear(
    *,
    cache_factory: Callable[[UUID], FriendshipStatusCache],
    account_factory: Callable[[], UUID],
):
    cache = cache_factory(account_factory())
    first = account_factory()
    second = account_factory()
    cache.get(first)
    cache.get(second)
    assert len(cache) == 2

    cache.invalidate(first)
    assert first not in cache
    assert cache.peek(first) is None
    assert second in cache

    cache.clear()
    assert len(cache) == 0


def test_send_records_outgoing_pending(
    *,
    cache_factory: Callable[[UUID], FriendshipStatusCache],
    account_factory: Callable[[], UUID],
):
    cache = cache_factory(account_factory())
    other_id = account_factory()

    view = cache.send(other_id, message="hello")

    assert view.is_friend is False
    assert view.pending is not None
    assert view.pending.is_incoming is False
    assert cache.peek(other_id) == view
    assert cache.edge_counterpart(view.pending.id) == other_id


def test_send_conflict_refreshes_entry(
    *,
    db_session: Session,
    cache_factory: Callable[[UUID], FriendshipStatusCache],
    account_factory: Callable[[], UUID],
):
    me = account_factory()
    other_id = account_factory()
    cache = cache_factory(me)
    cache.get(other_id)
    sent = friends_services.send_friend_request(
        session=db_session, acting_id=other_id, other_id=me
    )

    with pytest.raises(FriendRequestAlreadyExistsError):
        cache.send(other_id)

    assert cache.peek(other_id) == FriendshipView(
        is_friend=False, pending=PendingRequestRef(id=sent.edge_id, is_incoming=True)
    )


def test_send_store_unavailable_drops_entry(
    mocker: MockerFixture,
    *,
    cache_factory: Callable[[UUID], FriendshipStatusCache],
    account_factory: Callable[[], UUID],
):
    cache = cache_factory(account_factory())
    other_id = account_factory()
    cache.get(other_id)
    mocker.patch(
        "app.services.friends.send_friend_request",
        side_effect=RelationshipStoreUnavailableError(),
    )

    with pytest.raises(RelationshipStoreUnavailableError):
        cache.send(other_id)

    assert other_id not in cache


def test_accept_and_unfriend_update_entry(
    *,
    relationship_edge_factory: Callable[..., RelationshipEdge],
    cache_factory: Callable[[UUID], FriendshipStatusCache],
):
    edge = relationship_edge_factory()
    edge_id, requester_id, target_id = edge.id, edge.requester_id, edge.target_id
    cache = cache_factory(target_id)
    assert cache.get(requester_id).pending is not None

    accepted = cache.accept(edge_id)

    assert accepted.resolved_by_race is False
    assert cache.peek(requester_id) == FriendshipView(is_friend=True, pending=None)

    removed = cache.unfriend(requester_id)

    assert removed.status == FriendshipView.none()
    assert cache.peek(requester_id) == FriendshipView.none()


def test_decline_updates_entry(
    *,
    relationship_edge_factory: Callable[..., RelationshipEdge],
    cache_factory: Callable[[UUID], FriendshipStatusCache],
):
    edge = relationship_edge_factory()
    edge_id, requester_id, target_id = edge.id, edge.requester_id, edge.target_id
    cache = cache_factory(target_id)

    result = cache.decline(edge_id)

    assert result.other_id == requester_id
    assert cache.peek(requester_id) == FriendshipView.none()


def test_cancel_vanished_edge_resolves_from_store(
    *,
    db_session: Session,
    relationship_edge_factory: Callable[..., RelationshipEdge],
    cache_factory: Callable[[UUID], FriendshipStatusCache],
):
    edge = relationship_edge_factory()
    edge_id, requester_id, target_id = edge.id, edge.requester_id, edge.target_id
    cache = cache_factory(requester_id)
    assert cache.get(target_id).pending is not None
    friends_services.accept_friend_request(
        session=db_session, acting_id=target_id, edge_id=edge_id
    )
    friends_services.remove_friend(
        session=db_session, acting_id=target_id, other_id=requester_id
    )

    result = cache.cancel(edge_id)

    assert result.resolved_by_race is True
    assert result.other_id == target_id
    assert result.status == FriendshipView.none()
    assert cache.peek(target_id) == FriendshipView.none()


def test_accept_vanished_edge_resolves_to_new_request(
    *,
    db_session: Session,
    relationship_edge_factory: Callable[..., RelationshipEdge],
    cache_factory: Callable[[UUID], FriendshipStatusCache],
):
    edge = relationship_edge_factory()
    edge_id, requester_id, target_id = edge.id, edge.requester_id, edge.target_id
    cache = cache_factory(target_id)
    cache.get(requester_id)
    friends_services.cancel_friend_request(
        session=db_session, acting_id=requester_id, edge_id=edge_id
    )
    resent = friends_services.send_friend_request(
        session=db_session, acting_id=requester_id, other_id=target_id
    )

    result = cache.accept(edge_id)

    assert result.resolved_by_race is True
    assert result.status.pending == PendingRequestRef(
        id=resent.edge_id, is_incoming=True
    )


def test_accept_unknown_edge_raises(
    *,
    cache_factory: Callable[[UUID], FriendshipStatusCache],
    account_factory: Callable[[], UUID],
):
    cache = cache_factory(account_factory())

    with pytest.raises(FriendRequestNotFoundError):
        cache.accept(uuid4())


def test_respond_store_unavailable_drops_entry(
    mocker: MockerFixture,
    *,
    relationship_edge_factory: Callable[..., RelationshipEdge],
    cache_factory: Callable[[UUID], FriendshipStatusCache],
):
    edge = relationship_edge_factory()
    edge_id, requester_id, target_id = edge.id, edge.requester_id, edge.target_id
    cache = cache_factory(target_id)
    cache.get(requester_id)
    mocker.patch(
        "app.services.friends.accept_friend_request",
        side_effect=RelationshipStoreUnavailableError(),
    )

    with pytest.raises(RelationshipStoreUnavailableError):
        cache.accept(edge_id)

    assert requester_id not in cache


def test_observe_and_edge_counterpart(
    *,
    cache_factory: Callable[[UUID], FriendshipStatusCache],
    account_factory: Callable[[], UUID],
):
    cache = cache_factory(account_factory())
    other_id = account_factory()
    edge_id = uuid4()

    cache.observe(
        other_id,
        FriendshipView(
            is_friend=False, pending=PendingRequestRef(id=edge_id, is_incoming=True)
        ),
    )

    assert cache.edge_counterpart(edge_id) == other_id
    assert cache.edge_counterpart(uuid4()) is None


def test_select_contact_refreshes_linked_contact(
    mocker: MockerFixture,
    *,
    relationship_edge_factory: Callable[..., RelationshipEdge],
    cache_factory: Callable[[UUID], FriendshipStatusCache],
):
    edge = relationship_edge_factory(status=FriendshipStatus.ACCEPTED)
    requester_id, target_id = edge.requester_id, edge.target_id
    cache = cache_factory(requester_id)
    cache.observe(target_id, FriendshipView.none())
    spy = mocker.spy(friends_services, "check_status")
    linker = LinkedProfileLinker()

    from_mapping = cache.select_contact(
        {"name": "Bob", "linked_profile": {"id": str(target_id)}}, linker
    )
    from_object = cache.select_contact(
        SimpleNamespace(linked_profile=SimpleNamespace(id=target_id)), linker
    )

    assert from_mapping == from_object == FriendshipView(is_friend=True, pending=None)
    assert spy.call_count == 2


@pytest.mark.parametrize(
    "contact",
    [
        {"name": "Not on the platform"},
        {"name": "Empty profile", "linked_profile": None},
        SimpleNamespace(linked_profile=None),
    ],
)
def test_select_contact_unlinked(
    contact,
    *,
    cache_factory: Callable[[UUID], FriendshipStatusCache],
    account_factory: Callable[[], UUID],
):
    cache = cache_factory(account_factory())

    assert cache.select_contact(contact, LinkedProfileLinker()) is None
    assert len(cache) == 0


def test_select_contact_self(
    *,
    cache_factory: Callable[[UUID], FriendshipStatusCache],
    account_factory: Callable[[], UUID],
):
    me = account_factory()
    cache = cache_factory(me)

    assert cache.select_contact({"linked_profile": {"id": me}}, LinkedProfileLinker()) is None


@pytest.mark.parametrize("profile_id", ["not-a-uuid", "", 42])
def test_select_contact_malformed_profile_id(
    profile_id,
    *,
    cache_factory: Callable[[UUID], FriendshipStatusCache],
    account_factory: Callable[[], UUID],
):
    cache = cache_factory(account_factory())

    with pytest.raises(InvalidLinkedProfileError):
        cache.select_contact(
            {"linked_profile": {"id": profile_id}}, LinkedProfileLinker()
        )
    assert len(cache) == 0
