"""
Vault Migration — Record schema upgrades and master passphrase changes.

Older releases stored the credential passphrase under a ``password`` field,
later renamed ``passphrase``. Those files carry no version marker, so the
old layout is recognised by sniffing record contents. Migration is never
automatic: the caller confirms it and saves the migrated set.

Security Note:
    Plaintext exists in memory only while the set is re-encrypted.
    Never log passphrases or record values.
"""
import logging

from ..models import CURRENT_VERSION, SecretSet
from .store import SecretStore

logger = logging.getLogger("credsafe.vault")

LEGACY_FIELD = "password"
CURRENT_FIELD = "passphrase"


def detect_legacy(secret_set: SecretSet) -> bool:
    """Report whether records still use the legacy field name.

    Args:
        secret_set: Freshly loaded set.

    Returns:
        True if any record carries the legacy field.
    """
    return any(
        LEGACY_FIELD in (secret.model_extra or {})
        for secret in secret_set.values()
    )


def migrate(secret_set: SecretSet) -> SecretSet:
    """Rename the legacy field on every record.

    The input set is not modified. A non-empty ``passphrase`` already on a
    record wins over the legacy value, which is dropped. Legacy values that
    are not strings are converted (``null`` reads as empty).

    Args:
        secret_set: Set loaded from a legacy file.

    Returns:
        New SecretSet at the current payload version, to be saved by the
        caller.
    """
    migrated = SecretSet(version=CURRENT_VERSION)
    renamed = 0
    for key, secret in secret_set.items():
        record = secret.model_dump()
        if LEGACY_FIELD in record:
            legacy = record.pop(LEGACY_FIELD)
            if not record[CURRENT_FIELD]:
                record[CURRENT_FIELD] = "" if legacy is None else str(legacy)
                renamed += 1
            else:
                logger.warning(
                    "Secret %r already has a %s, dropping legacy '%s'",
                    key, CURRENT_FIELD, LEGACY_FIELD,
                )
        migrated[key] = type(secret).model_validate(record)
    logger.info(
        "Migrated %d of %d secret(s) from '%s' to '%s'",
        renamed, len(secret_set), LEGACY_FIELD, CURRENT_FIELD,
    )
    return migrated


def change_passphrase(store: SecretStore, old: str, new: str) -> int:
    """Re-encrypt the whole store under a new master passphrase.

    Args:
        store: Store to re-encrypt.
        old: Current master passphrase.
        new: Replacement master passphrase.

    Returns:
        Number of secrets re-encrypted; 0 without writing anything when the
        store file does not exist yet.

    Raises:
        AuthOrFormatError: ``old`` does not open the store.
    """
    if not store.exists():
        logger.info("Store %s does not exist, nothing to re-encrypt", store.path)
        return 0
    secret_set = store.load(old)
    store.save(secret_set, new)
    logger.info(
        "Master passphrase changed for %s (%d secret(s))",
        store.path, len(secret_set),
    )
    return len(secret_set)
