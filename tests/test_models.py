"""
Tests for the record model.

Tests cover:
- Secret defaults, validation and canonical name
- Extra (unknown) fields being preserved
- Passphrase confirmation
- SecretSet mapping behaviour and key invariants
"""
import pytest
from pydantic import ValidationError

from credsafe.exceptions import ConfirmationMismatchError
from credsafe.models import (
    CURRENT_VERSION,
    LEGACY_VERSION,
    Secret,
    SecretSet,
    confirm_value,
)


# --- Test Secret ---

class TestSecret:
    """Tests for the Secret model."""

    def test_optional_fields_default_empty(self):
        secret = Secret(name="Bank")
        assert secret.description == ""
        assert secret.username == ""
        assert secret.passphrase == ""
        assert secret.url == ""
        assert secret.notes == ""

    def test_canonical_name_is_derived(self):
        assert Secret(name="My  Bank").canonical_name == "my bank"

    def test_canonical_name_not_serialized(self):
        assert "canonical_name" not in Secret(name="Bank").to_record()

    @pytest.mark.parametrize("name", ["", "   "])
    def test_blank_name_rejected(self, name):
        with pytest.raises(ValidationError):
            Secret(name=name)

    def test_name_cannot_be_reassigned(self):
        """Renaming in place would leave the record under a stale key."""
        secret = Secret(name="Bank")
        with pytest.raises(ValidationError):
            secret.name = "Savings"
        assert secret.canonical_name == "bank"

    def test_other_fields_assignable(self):
        secret = Secret(name="Bank")
        secret.username = "alice"
        assert secret.username == "alice"

    def test_to_record_omits_empty_fields(self):
        record = Secret(name="Bank", username="alice").to_record()
        assert record == {"name": "Bank", "username": "alice"}

    def test_notes_keep_line_breaks(self):
        notes = "line one\nline two\n\nline four"
        assert Secret(name="Bank", notes=notes).to_record()["notes"] == notes

    def test_null_optional_field_reads_as_empty(self):
        secret = Secret.model_validate({"name": "Bank", "url": None})
        assert secret.url == ""

    def test_extra_fields_preserved(self):
        secret = Secret.model_validate({"name": "Bank", "password": "old"})
        assert secret.model_extra == {"password": "old"}
        assert secret.to_record() == {"name": "Bank", "password": "old"}


# --- Test Confirmation ---

class TestConfirmValue:
    """Tests for twice-entered values."""

    def test_matching_entries_accepted(self):
        assert confirm_value("pw", "pw") == "pw"

    def test_mismatch_raises(self):
        with pytest.raises(ConfirmationMismatchError):
            confirm_value("pw", "PW")

    def test_mismatch_is_value_error(self):
        """Callers can treat a mismatch as an ordinary ValueError."""
        with pytest.raises(ValueError):
            confirm_value("pw", "pw ")


# --- Test SecretSet ---

class TestSecretSet:
    """Tests for the SecretSet mapping."""

    def test_empty_set(self):
        secret_set = SecretSet()
        assert len(secret_set) == 0
        assert secret_set.version == CURRENT_VERSION

    def test_from_secrets_keys_by_canonical_name(self):
        secret_set = SecretSet.from_secrets(Secret(name="Bank"), Secret(name="E Mail"))
        assert set(secret_set) == {"bank", "e mail"}

    def test_store_under_wrong_key_rejected(self):
        secret_set = SecretSet()
        with pytest.raises(ValueError):
            secret_set["other"] = Secret(name="Bank")

    def test_store_non_secret_rejected(self):
        secret_set = SecretSet()
        with pytest.raises(TypeError):
            secret_set["bank"] = {"name": "Bank"}

    def test_delete(self):
        secret_set = SecretSet.from_secrets(Secret(name="Bank"))
        del secret_set["bank"]
        assert "bank" not in secret_set

    def test_equality_ignores_version(self):
        a = SecretSet.from_secrets(Secret(name="Bank"))
        b = SecretSet.from_secrets(Secret(name="Bank"), version=LEGACY_VERSION)
        assert a == b

    def test_equality_with_dict(self):
        secret = Secret(name="Bank")
        assert SecretSet.from_secrets(secret) == {"bank": secret}

    def test_copy_is_independent(self):
        original = SecretSet.from_secrets(Secret(name="Bank", username="a"))
        clone = original.copy()
        clone["bank"].username = "b"
        del clone["bank"]
        assert original["bank"].username == "a"
