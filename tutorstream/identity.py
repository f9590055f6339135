"""Identity records and the directory that authenticates them.

User records live outside this service. The provider interface is the
seam to whatever owns them; ``InMemoryIdentityProvider`` backs development
and tests.
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Iterable

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from werkzeug.security import check_password_hash

logger = logging.getLogger(__name__)

# The only fields ever echoed back to the client
PUBLIC_FIELDS = ("id", "name", "email")

# Known sensitive fields, kept off the response by PUBLIC_FIELDS
SENSITIVE_FIELDS = frozenset({
    "password",
    "role",
    "active",
    "password_changed_at",
    "created_at",
    "updated_at",
    "profile_image_id",
    "cover_image_id",
})


class Identity(BaseModel):
    """
    An authenticated user's account record.

    Records may arrive with the owning system's naming (``_id``,
    ``passwordHash``, ``updatedAt`` ...); unknown fields are kept on the
    record but never leave it through ``public_view``.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str = Field(validation_alias=AliasChoices("id", "_id"))
    name: str | None = None
    email: str | None = None
    password: str | None = Field(  # credential hash
        default=None,
        validation_alias=AliasChoices("password", "passwordHash", "password_hash"),
    )
    role: str = "user"
    active: bool = True
    password_changed_at: datetime | None = Field(
        default=None,
        validation_alias=AliasChoices("password_changed_at", "passwordChangedAt"),
    )
    created_at: datetime | str | None = Field(
        default=None,
        validation_alias=AliasChoices("created_at", "createdAt"),
    )
    updated_at: datetime | str | None = Field(
        default=None,
        validation_alias=AliasChoices("updated_at", "updatedAt"),
    )
    profile_image_id: str | None = Field(
        default=None,
        validation_alias=AliasChoices("profile_image_id", "profileImageId"),
    )
    cover_image_id: str | None = Field(
        default=None,
        validation_alias=AliasChoices("cover_image_id", "coverImageId"),
    )

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        # Upstream ids may be integers or ObjectId-like values
        if value is None or isinstance(value, str):
            return value
        return str(value)

    def public_view(self) -> dict[str, Any]:
        """Return a response copy holding only the public fields."""
        return self.model_dump(mode="json", include=set(PUBLIC_FIELDS))

    def changed_password_after(self, timestamp: int) -> bool:
        """Whether the password changed after ``timestamp`` (epoch seconds)."""
        if self.password_changed_at is None:
            return False
        changed_at = self.password_changed_at
        if changed_at.tzinfo is None:
            changed_at = changed_at.replace(tzinfo=timezone.utc)
        return int(changed_at.timestamp()) > timestamp


class IdentityProvider(ABC):
    """Directory of identities owned by an external system."""

    @abstractmethod
    def get(self, identity_id: str) -> Identity | None:
        """Look up an identity by id."""
        pass

    @abstractmethod
    def find_by_email(self, email: str) -> Identity | None:
        """Look up an identity by email address."""
        pass

    def authenticate(self, email: str, password: str) -> Identity | None:
        """
        Check an email/password pair.

        Returns:
            The matching identity, or None if the pair does not match
        """
        identity = self.find_by_email(email)
        if identity is None or not identity.password:
            return None
        if not check_password_hash(identity.password, password):
            return None
        return identity


class InMemoryIdentityProvider(IdentityProvider):
    """Identity directory held in process memory."""

    def __init__(self, identities: Iterable[Identity] = ()):
        self._by_id: dict[str, Identity] = {}
        for identity in identities:
            self.add(identity)

    def add(self, identity: Identity) -> None:
        self._by_id[identity.id] = identity
        logger.debug(f"Registered identity {identity.id}")

    def get(self, identity_id: str) -> Identity | None:
        return self._by_id.get(identity_id)

    def find_by_email(self, email: str) -> Identity | None:
        wanted = email.strip().lower()
        for identity in self._by_id.values():
            if identity.email and identity.email.lower() == wanted:
                return identity
        return None
