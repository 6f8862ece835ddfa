"""Credsafe exceptions.

Store-level failures are raised as structured exceptions; the CLI decides
which ones are fatal. ``CipherError`` and ``DecodeError`` never reach the
user directly: the store collapses both into ``AuthOrFormatError``.
"""


class CredsafeError(Exception):
    """Base class for every credsafe error."""


class StoreIOError(CredsafeError):
    """The store file could not be read or written."""

    def __init__(self, path, err: OSError):
        self.path = path
        super().__init__(f"Cannot access store file {path}: {err}")


class AuthOrFormatError(CredsafeError):
    """Wrong master passphrase or corrupted store file.

    The two causes are indistinguishable by design of the file format.
    """

    def __init__(self, message: str = "wrong passphrase or corrupted file"):
        super().__init__(message)


class CipherError(CredsafeError):
    """The cipher layer rejected the ciphertext."""


class DecodeError(CredsafeError):
    """Decrypted bytes are not a valid secret set payload."""


class DuplicateNameError(CredsafeError, KeyError):
    """A secret with the same canonical name already exists."""

    def __init__(self, canonical_name: str):
        self.canonical_name = canonical_name
        super().__init__(canonical_name)

    def __str__(self) -> str:
        return f"A secret named {self.canonical_name!r} already exists"


class SecretNotFoundError(CredsafeError, KeyError):
    """No secret matches the requested canonical name."""

    def __init__(self, canonical_name: str):
        self.canonical_name = canonical_name
        super().__init__(canonical_name)

    def __str__(self) -> str:
        return f"No secret named {self.canonical_name!r}"


class ConfirmationMismatchError(CredsafeError, ValueError):
    """Two entries of a confirmed value did not match."""

    def __init__(self, field: str = "passphrase"):
        self.field = field
        super().__init__(f"The two {field} entries do not match")
