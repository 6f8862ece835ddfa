"""Credsafe: a local, single-user encrypted store for credentials."""
from .version import __version__
from .naming import canonicalize
from .models import Secret, SecretSet, confirm_value
from .session import Session
from .exceptions import (
    CredsafeError,
    StoreIOError,
    AuthOrFormatError,
    DuplicateNameError,
    SecretNotFoundError,
    ConfirmationMismatchError,
)
from .vault import (
    SecretStore,
    SafeConfig,
    insert_new,
    replace_for_edit,
    remove,
    lookup,
    list_view,
    detect_legacy,
    migrate,
    change_passphrase,
)

__all__ = [
    "__version__",
    "canonicalize",
    "Secret",
    "SecretSet",
    "confirm_value",
    "Session",
    "CredsafeError",
    "StoreIOError",
    "AuthOrFormatError",
    "DuplicateNameError",
    "SecretNotFoundError",
    "ConfirmationMismatchError",
    "SecretStore",
    "SafeConfig",
    "insert_new",
    "replace_for_edit",
    "remove",
    "lookup",
    "list_view",
    "detect_legacy",
    "migrate",
    "change_passphrase",
]
