"""
Unit tests for IdentityStore.
"""

import pytest

from internship_portal.models.user import User, UserRole
from internship_portal.services.identity import IdentityStore
from internship_portal.utils.errors import FormValidationError, NoActiveSession
from internship_portal.utils.storage import FileStorage, MemoryStorage


@pytest.fixture
def student() -> User:
    return User(id="2", email="ivan.petrov@school.bg", name="Ivan Petrov", role=UserRole.STUDENT)


class TestSignInOut:
    """Test cases for sign_in / sign_out persistence."""

    def test_starts_signed_out(self):
        store = IdentityStore(MemoryStorage())
        assert store.current is None
        assert not store.is_signed_in

    def test_sign_in_persists_snapshot(self, student):
        """Test that sign_in writes the identity under the storage key."""
        # Arrange
        storage = MemoryStorage()
        store = IdentityStore(storage, storage_key="user")

        # Act
        store.sign_in(student)

        # Assert
        assert storage.get("user") is not None
        assert User.model_validate_json(storage.get("user")) == student

    def test_restore_round_trips_identity(self, student):
        """Test that a new store over the same storage restores the same user."""
        # Arrange
        storage = MemoryStorage()
        IdentityStore(storage).sign_in(student)

        # Act
        restored = IdentityStore(storage).restore()

        # Assert
        assert restored == student

    def test_restore_from_file_storage(self, student, tmp_path):
        IdentityStore(FileStorage(tmp_path)).sign_in(student)
        assert IdentityStore(FileStorage(tmp_path)).restore() == student

    def test_sign_out_clears_snapshot(self, student):
        storage = MemoryStorage()
        store = IdentityStore(storage)
        store.sign_in(student)

        store.sign_out()

        assert store.current is None
        assert storage.get("user") is None
        assert IdentityStore(storage).restore() is None

    def test_custom_storage_key(self, student):
        storage = MemoryStorage()
        IdentityStore(storage, storage_key="portal-user").sign_in(student)
        assert storage.get("user") is None
        assert storage.get("portal-user") is not None

    def test_corrupt_snapshot_is_discarded(self):
        """Test that an unreadable snapshot leaves the session signed out."""
        # Arrange
        storage = MemoryStorage()
        storage.set("user", b"{not json")

        # Act
        restored = IdentityStore(storage).restore()

        # Assert
        assert restored is None
        assert storage.get("user") is None


class TestUpdateProfile:
    """Test cases for update_profile."""

    def test_requires_signed_in_user(self):
        store = IdentityStore(MemoryStorage())

        with pytest.raises(NoActiveSession) as exc_info:
            store.update_profile(name="Someone")

        assert exc_info.value.redirect_to == "/login"

    def test_merges_fields_and_persists(self, student):
        """Test that changed fields are merged and written through."""
        # Arrange
        storage = MemoryStorage()
        store = IdentityStore(storage)
        store.sign_in(student)

        # Act
        updated = store.update_profile({"phone": "+359888000111"}, technologies=["Python"])

        # Assert
        assert updated.phone == "+359888000111"
        assert updated.technologies == ["Python"]
        assert updated.name == "Ivan Petrov"
        assert updated.updated_at >= student.updated_at
        assert IdentityStore(storage).restore() == updated

    @pytest.mark.parametrize("field", ["id", "created_at"])
    def test_immutable_fields_rejected(self, student, field):
        store = IdentityStore(MemoryStorage())
        store.sign_in(student)

        with pytest.raises(FormValidationError) as exc_info:
            store.update_profile({field: "changed"})

        assert exc_info.value.field == field
        assert store.current == student

    def test_invalid_value_leaves_identity_unchanged(self, student):
        storage = MemoryStorage()
        store = IdentityStore(storage)
        store.sign_in(student)

        with pytest.raises(FormValidationError) as exc_info:
            store.update_profile(email="not-an-email")

        assert exc_info.value.field == "email"
        assert store.current == student
        assert IdentityStore(storage).restore() == student

    def test_unknown_field_rejected(self, student):
        store = IdentityStore(MemoryStorage())
        store.sign_in(student)

        with pytest.raises(FormValidationError):
            store.update_profile(favourite_colour="blue")
