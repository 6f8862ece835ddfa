"""
SecretStore — Whole-file encrypted storage of a SecretSet.

Provides the public API of the store engine:
- ``SecretStore.load(passphrase)`` — read, decrypt and decode the whole set
- ``SecretStore.save(secret_set, passphrase)`` — encode, encrypt, replace file
- ``insert_new`` / ``replace_for_edit`` / ``remove`` / ``lookup`` — record
  operations on an in-memory set
- ``list_view`` — the one deterministic enumeration of a set

Every command is expected to run a full load-mutate-save cycle; the store
keeps no copy of the secret set between calls. Saves are last-writer-wins:
no locking is attempted.

Security Note:
    Never log passphrases, plaintext or ciphertext values. Only log paths,
    record counts and the failing stage of a load.
"""
import os
import logging
import tempfile
from pathlib import Path
from typing import Optional, Union

from ..exceptions import (
    AuthOrFormatError,
    CipherError,
    DecodeError,
    DuplicateNameError,
    SecretNotFoundError,
    StoreIOError,
)
from ..models import Secret, SecretSet
from ..naming import canonicalize
from .codec import decode, encode
from .config import DEFAULT_KDF_ITERATIONS
from .crypto import decrypt, encrypt

logger = logging.getLogger("credsafe.vault")

_FILE_MODE = 0o600


class SecretStore:
    """Encrypted secret set bound to one file path.

    The file is absent until the first ``save``; loading an absent file
    yields an empty set.
    """

    def __init__(
        self,
        path: Union[str, Path],
        kdf_iterations: int = DEFAULT_KDF_ITERATIONS,
    ):
        self._path = Path(path).expanduser()
        self._kdf_iterations = kdf_iterations

    def __repr__(self) -> str:
        return f"<SecretStore path={str(self._path)!r}>"

    @property
    def path(self) -> Path:
        return self._path

    def exists(self) -> bool:
        return self._path.exists()

    # ------------------------------------------------------------------
    # File helpers
    # ------------------------------------------------------------------

    def _read(self) -> Optional[bytes]:
        """Return the file contents, or None if the file does not exist."""
        try:
            return self._path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as err:
            raise StoreIOError(self._path, err) from err

    def _write_atomic(self, data: bytes) -> None:
        """Write to a sibling temporary file, then rename it into place."""
        directory = self._path.parent
        try:
            directory.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(
                prefix=f".{self._path.name}.", suffix=".tmp", dir=directory
            )
        except OSError as err:
            raise StoreIOError(self._path, err) from err
        try:
            with os.fdopen(fd, "wb") as fp:
                fp.write(data)
                fp.flush()
                os.fsync(fp.fileno())
            os.chmod(tmp, _FILE_MODE)
            os.replace(tmp, self._path)
        except OSError as err:
            try:
                os.unlink(tmp)
            except FileNotFoundError:
                pass
            raise StoreIOError(self._path, err) from err

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def load(self, passphrase: str) -> SecretSet:
        """Load the whole secret set.

        Args:
            passphrase: Master passphrase.

        Returns:
            Decoded SecretSet, or an empty one if the file does not exist.

        Raises:
            AuthOrFormatError: Wrong passphrase or corrupted file; the two
                causes are not distinguished.
            StoreIOError: The file exists but cannot be read.
        """
        ciphertext = self._read()
        if ciphertext is None:
            logger.info("Store %s does not exist yet, starting empty", self._path)
            return SecretSet()
        try:
            plaintext = decrypt(ciphertext, passphrase)
        except CipherError as err:
            logger.debug("Load of %s failed at decrypt stage: %s", self._path, err)
            raise AuthOrFormatError() from err
        try:
            secret_set = decode(plaintext)
        except DecodeError as err:
            logger.debug("Load of %s failed at decode stage: %s", self._path, err)
            raise AuthOrFormatError() from err
        logger.info(
            "Loaded %d secret(s) from %s", len(secret_set), self._path,
        )
        return secret_set

    def save(self, secret_set: SecretSet, passphrase: str) -> None:
        """Encrypt the entire set and replace the file with it.

        Args:
            secret_set: Full set to persist. Nothing is merged with the
                current file contents.
            passphrase: Master passphrase.

        Raises:
            StoreIOError: The file cannot be written.
        """
        ciphertext = encrypt(
            encode(secret_set), passphrase, self._kdf_iterations,
        )
        self._write_atomic(ciphertext)
        logger.info("Saved %d secret(s) to %s", len(secret_set), self._path)


# ----------------------------------------------------------------------
# Record operations
# ----------------------------------------------------------------------

def insert_new(secret_set: SecretSet, secret: Secret) -> None:
    """Add a secret whose canonical name is not in use yet.

    Raises:
        DuplicateNameError: The set is left unchanged.
    """
    key = secret.canonical_name
    if key in secret_set:
        raise DuplicateNameError(key)
    secret_set[key] = secret


def replace_for_edit(
    secret_set: SecretSet,
    old_canonical_name: str,
    new_secret: Secret,
) -> None:
    """Replace an existing secret, possibly under a new name.

    The old entry is removed first, so renaming a secret onto its own
    previous name never counts as a collision. A collision with a different
    secret raises after the removal: the old entry is then missing from the
    in-memory set and the caller must not save it.

    Raises:
        SecretNotFoundError: No entry under ``old_canonical_name``.
        DuplicateNameError: The new name belongs to another secret.
    """
    if old_canonical_name not in secret_set:
        raise SecretNotFoundError(old_canonical_name)
    del secret_set[old_canonical_name]
    insert_new(secret_set, new_secret)


def remove(secret_set: SecretSet, canonical_name: str) -> Secret:
    """Remove and return a secret.

    Raises:
        SecretNotFoundError: No entry under ``canonical_name``.
    """
    try:
        return secret_set.pop(canonical_name)
    except KeyError:
        raise SecretNotFoundError(canonical_name) from None


def lookup(secret_set: SecretSet, name: str) -> Secret:
    """Resolve a user-supplied display name to its secret."""
    key = canonicalize(name)
    try:
        return secret_set[key]
    except KeyError:
        raise SecretNotFoundError(key) from None


def list_view(secret_set: SecretSet) -> list[tuple[str, str]]:
    """Return ``(name, description)`` pairs sorted by canonical name."""
    return [
        (secret_set[key].name, secret_set[key].description)
        for key in sorted(secret_set)
    ]
