from collections.abc import Callable
from typing import Any
from uuid import UUID

from sqlmodel import Session

from app.exceptions.friends_exceptions import (
    FriendRequestAlreadyExistsError,
    RelationshipStoreUnavailableError,
)
from app.schemas.friendship import (
    FriendshipActionResult,
    FriendshipView,
    PendingRequestRef,
)
from app.services import friends as friends_service
from app.services.contact_linking import ContactLinker


class FriendshipStatusCache:
    """
    Read-through cache of FriendshipViews for one client session.

    Maps the other account's id to the acting account's view of that pair.
    Entries are rewritten with the authoritative outcome after every mutation
    made through the cache, and dropped when the outcome is unknown. The
    cache is owned by a single session and is not thread-safe.
    """

    def __init__(
        self,
        *,
        session_factory: Callable[[], Session],
        acting_id: UUID,
    ):
        self._session_factory = session_factory
        self.acting_id = acting_id
        self._views: dict[UUID, FriendshipView] = {}

    def __contains__(self, other_id: UUID) -> bool:
        return other_id in self._views

    def __len__(self) -> int:
        return len(self._views)

    def peek(self, other_id: UUID) -> FriendshipView | None:
        return self._views.get(other_id)

    def get(self, other_id: UUID) -> FriendshipView:
        view = self._views.get(other_id)
        if view is None:
            view = self._load(other_id)
        return view

    def refresh(self, other_id: UUID) -> FriendshipView:
        self.invalidate(other_id)
        return self._load(other_id)

    def invalidate(self, other_id: UUID) -> None:
        self._views.pop(other_id, None)

    def clear(self) -> None:
        self._views.clear()

    def observe(self, other_id: UUID, view: FriendshipView) -> None:
        """Record a view learned outside this cache, e.g. from a push event."""
        self._views[other_id] = view

    def select_contact(
        self, contact: Any, linker: ContactLinker
    ) -> FriendshipView | None:
        """
        Load the view for a contact the caller just (re)selected.

        Selecting a contact always refreshes its entry. Contacts that are not
        linked to a platform account have no view.

        Raises:
            InvalidLinkedProfileError: If the contact links to a malformed id.
        """
        other_id = linker.resolve(contact)
        if other_id is None or other_id == self.acting_id:
            return None
        return self.refresh(other_id)

    def edge_counterpart(self, edge_id: UUID) -> UUID | None:
        for other_id, view in self._views.items():
            if view.pending is not None and view.pending.id == edge_id:
                return other_id
        return None

    def send(self, other_id: UUID, message: str | None = None) -> FriendshipView:
        """
        Raises:
            FriendRequestAlreadyExistsError: After refreshing the entry, if the
                pair already has an edge.
            RelationshipStoreUnavailableError: After dropping the entry, since
                the request may or may not have been stored.
        """
        try:
            with self._session_factory() as session:
                sent = friends_service.send_friend_request(
                    session=session,
                    acting_id=self.acting_id,
                    other_id=other_id,
                    message=message,
                )
        except FriendRequestAlreadyExistsError:
            self.refresh(other_id)
            raise
        except RelationshipStoreUnavailableError:
            self.invalidate(other_id)
            raise

        view = FriendshipView(
            is_friend=False,
            pending=PendingRequestRef(id=sent.edge_id, is_incoming=False),
        )
        self._views[other_id] = view
        return view

    def accept(self, edge_id: UUID) -> FriendshipActionResult:
        return self._respond(edge_id, friends_service.accept_friend_request)

    def decline(self, edge_id: UUID) -> FriendshipActionResult:
        return self._respond(edge_id, friends_service.decline_friend_request)

    def cancel(self, edge_id: UUID) -> FriendshipActionResult:
        return self._respond(edge_id, friends_service.cancel_friend_request)

    def unfriend(self, other_id: UUID) -> FriendshipActionResult:
        try:
            with self._session_factory() as session:
                result = friends_service.remove_friend(
                    session=session, acting_id=self.acting_id, other_id=other_id
                )
        except RelationshipStoreUnavailableError:
            self.invalidate(other_id)
            raise
        self._views[other_id] = result.status
        return result

    def _respond(
        self,
        edge_id: UUID,
        respond: Callable[..., FriendshipActionResult],
    ) -> FriendshipActionResult:
        """
        Raises:
            FriendRequestNotFoundError: If the edge is gone and this cache
                never showed it, so the pair cannot be re-read.
            RelationshipStoreUnavailableError: After dropping the entry.
        """
        other_id = self.edge_counterpart(edge_id)
        try:
            with self._session_factory() as session:
                result = respond(
                    session=session,
                    acting_id=self.acting_id,
                    edge_id=edge_id,
                    other_id=other_id,
                )
        except RelationshipStoreUnavailableError:
            if other_id is not None:
                self.invalidate(other_id)
            raise

        self._views[result.other_id] = result.status
        return result

    def _load(self, other_id: UUID) -> FriendshipView:
        with self._session_factory() as session:
            view = friends_service.check_status(
                session=session, acting_id=self.acting_id, other_id=other_id
            )
        self._views[other_id] = view
        return view
