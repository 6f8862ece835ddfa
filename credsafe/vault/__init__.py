"""Credsafe Vault — Encrypted whole-file storage of credential records.

Security Note (Threat Model):
    The master passphrase and every decrypted secret live in process memory
    while a command runs. There is no secure erase. Files written by older
    releases use a bare SHA-256 of the passphrase as the key, without salt
    or integrity check; they are readable but every save rewrites them in
    the current salted, authenticated envelope.
"""

from .store import (
    SecretStore,
    insert_new,
    replace_for_edit,
    remove,
    lookup,
    list_view,
)
from .migration import detect_legacy, migrate, change_passphrase
from .config import SafeConfig

__all__ = [
    "SecretStore",
    "insert_new",
    "replace_for_edit",
    "remove",
    "lookup",
    "list_view",
    "detect_legacy",
    "migrate",
    "change_passphrase",
    "SafeConfig",
]
