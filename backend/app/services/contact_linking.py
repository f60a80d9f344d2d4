from collections.abc import Mapping
from typing import Any, Protocol
from uuid import UUID

from app.exceptions.friends_exceptions import InvalidLinkedProfileError


class ContactLinker(Protocol):
    """Resolves an external contact record to the platform account it belongs to."""

    def resolve(self, contact: Any) -> UUID | None: ...


class LinkedProfileLinker:
    """
    Reads the linked profile id the contacts service attaches to a contact,
    either as a mapping (`{"linked_profile": {"id": ...}}`) or as an object
    with a `linked_profile` attribute.

    Raises:
        InvalidLinkedProfileError: If the linked profile id is not a UUID.
    """

    def resolve(self, contact: Any) -> UUID | None:
        if isinstance(contact, Mapping):
            profile = contact.get("linked_profile")
        else:
            profile = getattr(contact, "linked_profile", None)
        if not profile:
            return None

        profile_id = profile.get("id") if isinstance(profile, Mapping) else getattr(profile, "id", None)
        if profile_id is None:
            return None
        if isinstance(profile_id, UUID):
            return profile_id
        try:
            return UUID(str(profile_id))
        except ValueError as e:
            raise InvalidLinkedProfileError(profile_id) from e
