"""
Tests for the secret set codec.

Tests cover:
- Round trip of tagged payloads
- Deterministic output
- Reading legacy unmarked payloads
- Hard failures on malformed input
"""
import orjson
import pytest
from pydantic import ValidationError

from credsafe.exceptions import DecodeError
from credsafe.models import CURRENT_VERSION, LEGACY_VERSION, Secret, SecretSet
from credsafe.vault.codec import decode, encode


class TestEncode:
    """Tests for encode()."""

    def test_payload_is_tagged(self, secret_set):
        payload = orjson.loads(encode(secret_set))
        assert payload["version"] == CURRENT_VERSION
        assert set(payload["secrets"]) == {"bank account", "email", "wifi"}

    def test_empty_fields_omitted(self, secret_set):
        payload = orjson.loads(encode(secret_set))
        assert payload["secrets"]["wifi"] == {"name": "wifi"}

    def test_deterministic(self):
        """Insertion order does not change the output."""
        a = SecretSet.from_secrets(Secret(name="A"), Secret(name="B"))
        b = SecretSet.from_secrets(Secret(name="B"), Secret(name="A"))
        assert encode(a) == encode(b)


class TestDecode:
    """Tests for decode()."""

    def test_round_trip(self, secret_set):
        decoded = decode(encode(secret_set))
        assert decoded == secret_set
        assert decoded.version == CURRENT_VERSION

    def test_round_trip_empty(self):
        assert decode(encode(SecretSet())) == SecretSet()

    def test_round_trip_keeps_extra_fields(self):
        secret_set = SecretSet.from_secrets(
            Secret.model_validate({"name": "Bank", "password": "old"})
        )
        assert decode(encode(secret_set)) == secret_set

    def test_legacy_unmarked_payload(self):
        data = orjson.dumps({
            "bank": {"name": "Bank", "username": "alice", "password": "pw"},
        })
        decoded = decode(data)
        assert decoded.version == LEGACY_VERSION
        assert decoded["bank"].username == "alice"
        assert decoded["bank"].model_extra == {"password": "pw"}

    def test_legacy_secret_named_version(self):
        """A legacy map may hold a secret whose canonical name is 'version'."""
        data = orjson.dumps({
            "version": {"name": "Version"},
            "secrets": {"name": "Secrets"},
        })
        decoded = decode(data)
        assert decoded.version == LEGACY_VERSION
        assert set(decoded) == {"version", "secrets"}

    @pytest.mark.parametrize("data", [
        b"",
        b"\xff\xfe garbage",
        b"not json",
        b"[1, 2, 3]",
        b'"string"',
        b'{"version": 99, "secrets": {}}',
        b'{"version": 2, "secrets": []}',
        b'{"bank": "not a record"}',
        b'{"bank": {"username": "no name"}}',
        b'{"bank": {"name": ""}}',
        b'{"bank": {"name": "Bank", "username": 42}}',
        b'{"wrong key": {"name": "Bank"}}',
    ])
    def test_malformed_input_raises(self, data):
        with pytest.raises(DecodeError):
            decode(data)

    def test_truncated_payload_raises(self, secret_set):
        data = encode(secret_set)
        with pytest.raises(DecodeError):
            decode(data[:len(data) // 2])

    def test_in_place_rename_cannot_corrupt_payload(self):
        """A stored record cannot be renamed behind the set's back."""
        secret_set = SecretSet.from_secrets(Secret(name="Bank"))
        with pytest.raises(ValidationError):
            secret_set["bank"].name = "Savings"
        assert decode(encode(secret_set)) == secret_set

    def test_encode_rejects_stale_key(self):
        secret_set = SecretSet.from_secrets(Secret(name="Bank"))
        # bypass validation to simulate a record whose name drifted from its key
        secret_set["bank"].__dict__["name"] = "Savings"
        with pytest.raises(ValueError):
            encode(secret_set)
