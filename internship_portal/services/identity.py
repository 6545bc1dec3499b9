"""
Identity Store

Holds the signed-in user for one session and mirrors it to a storage provider
under a fixed key. Every mutation rewrites the persisted snapshot before it
returns, so a restored session always matches the last completed action.

Example Usage:
    from internship_portal.services.identity import IdentityStore
    from internship_portal.utils.storage import MemoryStorage

    identity = IdentityStore(MemoryStorage())
    identity.sign_in(user)
    identity.update_profile(phone="+359 888 123 456")
    identity.sign_out()
"""

from typing import Any, Optional

from pydantic import ValidationError

from internship_portal.models.user import User, utc_now
from internship_portal.utils.errors import FormValidationError, NoActiveSession
from internship_portal.utils.forms import build_model
from internship_portal.utils.logger import get_logger
from internship_portal.utils.storage import StorageProvider

IMMUTABLE_FIELDS = frozenset({"id", "created_at", "updated_at"})


class IdentityStore:
    """Signed-in identity for one session, persisted on every change."""

    def __init__(
        self,
        storage: StorageProvider,
        storage_key: str = "user",
        correlation_id: Optional[str] = None,
    ):
        """
        Initialize IdentityStore. Starts signed out; call restore() to reload.

        Args:
            storage: Key-value storage provider for the identity snapshot
            storage_key: Fixed key the snapshot is stored under
            correlation_id: Correlation ID for logging
        """
        self.storage = storage
        self.storage_key = storage_key
        self._user: Optional[User] = None
        self.logger = get_logger(correlation_id=correlation_id, component="identity_store")

    @property
    def current(self) -> Optional[User]:
        return self._user

    @property
    def is_signed_in(self) -> bool:
        return self._user is not None

    def require_user(self) -> User:
        """Return the signed-in user or raise NoActiveSession."""
        if self._user is None:
            raise NoActiveSession()
        return self._user

    def restore(self) -> Optional[User]:
        """
        Reload the identity from storage.

        A snapshot that cannot be parsed is removed and the session stays
        signed out.

        Returns:
            The restored user, or None
        """
        raw = self.storage.get(self.storage_key)
        if raw is None:
            self._user = None
            return None

        try:
            self._user = User.model_validate_json(raw)
        except ValidationError as e:
            self.logger.warning(
                "Failed to parse stored identity, discarding it",
                storage_key=self.storage_key,
                error=str(e),
            )
            self.storage.remove(self.storage_key)
            self._user = None
            return None

        self.logger.info("Identity restored", user_id=self._user.id, role=self._user.role.value)
        return self._user

    def sign_in(self, user: User) -> None:
        """Make ``user`` the current identity and persist it."""
        self._user = user
        self._persist()
        self.logger.info("Signed in", user_id=user.id, role=user.role.value)

    def sign_out(self) -> None:
        """Clear the current identity and its snapshot."""
        user_id = self._user.id if self._user else None
        self._user = None
        self.storage.remove(self.storage_key)
        self.logger.info("Signed out", user_id=user_id)

    def update_profile(self, fields: Optional[dict[str, Any]] = None, **kwargs: Any) -> User:
        """
        Merge fields into the current identity and persist the result.

        Args:
            fields: Partial user fields
            **kwargs: Partial user fields (merged after ``fields``)

        Returns:
            The updated user

        Raises:
            NoActiveSession: If nobody is signed in
            FormValidationError: If a field is unknown, immutable or invalid
        """
        user = self.require_user()
        changes = {**(fields or {}), **kwargs}

        blocked = IMMUTABLE_FIELDS.intersection(changes)
        if blocked:
            field = sorted(blocked)[0]
            raise FormValidationError(f"{field} cannot be changed", field=field)

        merged = user.model_dump()
        merged.update(changes)
        merged["updated_at"] = utc_now()
        updated = build_model(User, merged)

        self._user = updated
        self._persist()
        self.logger.info(
            "Profile updated",
            user_id=updated.id,
            fields=sorted(changes),
            profile_completed=updated.profile_completed,
        )
        return updated

    def _persist(self) -> None:
        assert self._user is not None
        self.storage.set(self.storage_key, self._user.model_dump_json().encode("utf-8"))
