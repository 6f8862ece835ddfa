"""
Vault Codec — Serialization of a whole SecretSet to and from bytes.

Current payload (version 2):
    {"version": 2, "secrets": {"<canonical name>": {<record fields>}}}
Legacy payload (version 1, unmarked):
    {"<canonical name>": {<record fields>}}

Empty optional fields are omitted on write and restored as empty strings on
read. Any structural anomaly is a hard DecodeError; nothing is recovered
partially.
"""
import logging
from typing import Any

import orjson
from pydantic import ValidationError

from ..exceptions import DecodeError
from ..models import CURRENT_VERSION, LEGACY_VERSION, Secret, SecretSet

logger = logging.getLogger("credsafe.vault")


def encode(secret_set: SecretSet) -> bytes:
    """Serialize the full secret set, always as the current tagged payload.

    Args:
        secret_set: Secrets to serialize.

    Returns:
        Deterministic orjson-encoded bytes (keys sorted).

    Raises:
        ValueError: A record is held under a key other than its canonical
            name, which :func:`decode` would reject.
    """
    records = {}
    for key, secret in secret_set.items():
        if secret.canonical_name != key:
            raise ValueError(
                f"Secret {secret.name!r} is stored under stale key {key!r}"
            )
        records[key] = secret.to_record()
    payload = {"version": CURRENT_VERSION, "secrets": records}
    return orjson.dumps(payload, option=orjson.OPT_SORT_KEYS)


def _is_tagged(parsed: dict) -> bool:
    # a legacy map holding a secret named "version" has a dict there, not an int
    return (
        set(parsed) == {"version", "secrets"}
        and isinstance(parsed["version"], int)
        and not isinstance(parsed["version"], bool)
    )


def _decode_record(key: Any, record: Any) -> Secret:
    if not isinstance(key, str) or not isinstance(record, dict):
        raise DecodeError(f"Malformed record under key {key!r}")
    try:
        secret = Secret.model_validate(record)
    except ValidationError as err:
        raise DecodeError(f"Invalid record under key {key!r}") from err
    if secret.canonical_name != key:
        raise DecodeError(
            f"Record key {key!r} does not match its canonical name"
        )
    return secret


def decode(data: bytes) -> SecretSet:
    """Rebuild a SecretSet from bytes written by :func:`encode` or a legacy release.

    Args:
        data: Decrypted payload bytes.

    Returns:
        SecretSet whose ``version`` reflects the payload layout.

    Raises:
        DecodeError: On any malformed input.
    """
    try:
        parsed = orjson.loads(data)
    except orjson.JSONDecodeError as err:
        raise DecodeError("Payload is not valid JSON") from err
    if not isinstance(parsed, dict):
        raise DecodeError("Payload must be a JSON object")

    if _is_tagged(parsed):
        version = parsed["version"]
        if version != CURRENT_VERSION:
            raise DecodeError(f"Unsupported payload version: {version}")
        records = parsed["secrets"]
        if not isinstance(records, dict):
            raise DecodeError("Payload 'secrets' must be a JSON object")
    else:
        version = LEGACY_VERSION
        records = parsed

    result = SecretSet(version=version)
    for key, record in records.items():
        result[key] = _decode_record(key, record)
    logger.debug("Decoded %d secret(s), payload version %d", len(result), version)
    return result
