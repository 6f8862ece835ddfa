"""
Vault Crypto Core — Passphrase key derivation and envelope encryption.

Two envelopes are understood:
- Current (tagged): [b"CSAF"][version 1B][iterations 4B uint32 BE][salt 16B]
  [nonce 12B][AES-256-GCM payload + tag]. Key = PBKDF2-HMAC-SHA256 over the
  passphrase with a fresh per-file salt.
- Legacy (unmarked): [iv 16B][AES-256-CBC payload, PKCS7 padded]. Key =
  SHA-256(passphrase). No salt and no integrity check: a wrong passphrase
  usually yields garbage that only the codec rejects. Read-only in normal
  operation; every save writes the current envelope.

Security Note:
    Never log passphrases, plaintext or ciphertext values.
"""
import os
import struct
import logging

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes, padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from ..exceptions import CipherError
from .config import DEFAULT_KDF_ITERATIONS

logger = logging.getLogger("credsafe.vault")

MAGIC = b"CSAF"
ENVELOPE_VERSION = 2
KEY_LENGTH = 32  # AES-256
SALT_SIZE = 16
NONCE_SIZE = 12  # 96-bit GCM nonce
TAG_SIZE = 16
IV_SIZE = 16  # AES block size, legacy CBC

_HEADER = struct.Struct("!4sBI")  # magic, version, iterations
_MIN_CURRENT = _HEADER.size + SALT_SIZE + NONCE_SIZE + TAG_SIZE
_MIN_LEGACY = IV_SIZE * 2


# ---------------------------------------------------------------------------
# Key derivation
# ---------------------------------------------------------------------------

def derive_key(passphrase: str, salt: bytes, iterations: int) -> bytes:
    """Derive a 32-byte key from the master passphrase with PBKDF2-SHA256.

    Args:
        passphrase: Master passphrase.
        salt: Per-file random salt.
        iterations: PBKDF2 work factor, stored in the envelope header.

    Returns:
        32-byte derived key.
    """
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=KEY_LENGTH,
        salt=salt,
        iterations=iterations,
    )
    return kdf.derive(passphrase.encode("utf-8"))


def legacy_key(passphrase: str) -> bytes:
    """Return the legacy passphrase-as-key: a bare SHA-256 digest."""
    digest = hashes.Hash(hashes.SHA256())
    digest.update(passphrase.encode("utf-8"))
    return digest.finalize()


# ---------------------------------------------------------------------------
# Current envelope
# ---------------------------------------------------------------------------

def is_tagged(ciphertext: bytes) -> bool:
    """True when the blob starts with the current envelope magic."""
    return ciphertext[:len(MAGIC)] == MAGIC


def encrypt(
    plaintext: bytes,
    passphrase: str,
    iterations: int = DEFAULT_KDF_ITERATIONS
) -> bytes:
    """Encrypt plaintext under the master passphrase (current envelope).

    Args:
        plaintext: Serialized secret set.
        passphrase: Master passphrase.
        iterations: PBKDF2 work factor.

    Returns:
        Complete file contents.
    """
    salt = os.urandom(SALT_SIZE)
    nonce = os.urandom(NONCE_SIZE)
    key = derive_key(passphrase, salt, iterations)
    header = _HEADER.pack(MAGIC, ENVELOPE_VERSION, iterations)
    # the header is authenticated so the iteration count cannot be altered
    ct = AESGCM(key).encrypt(nonce, plaintext, header)
    return header + salt + nonce + ct


def _decrypt_tagged(ciphertext: bytes, passphrase: str) -> bytes:
    if len(ciphertext) < _MIN_CURRENT:
        raise CipherError(
            f"ciphertext too short: {len(ciphertext)} bytes "
            f"(minimum {_MIN_CURRENT})"
        )
    _, version, iterations = _HEADER.unpack_from(ciphertext)
    if version != ENVELOPE_VERSION:
        raise CipherError(f"Unsupported envelope version: {version}")
    if iterations < 1:
        raise CipherError("Invalid KDF iteration count in envelope header")
    offset = _HEADER.size
    salt = ciphertext[offset:offset + SALT_SIZE]
    offset += SALT_SIZE
    nonce = ciphertext[offset:offset + NONCE_SIZE]
    offset += NONCE_SIZE
    key = derive_key(passphrase, salt, iterations)
    try:
        return AESGCM(key).decrypt(
            nonce, ciphertext[offset:], ciphertext[:_HEADER.size]
        )
    except InvalidTag as err:
        raise CipherError("Authentication tag mismatch") from err


# ---------------------------------------------------------------------------
# Legacy envelope
# ---------------------------------------------------------------------------

def encrypt_legacy(plaintext: bytes, passphrase: str) -> bytes:
    """Encrypt with the legacy unmarked scheme.

    Only used to produce files readable by older releases.
    """
    iv = os.urandom(IV_SIZE)
    padder = padding.PKCS7(algorithms.AES.block_size).padder()
    padded = padder.update(plaintext) + padder.finalize()
    encryptor = Cipher(algorithms.AES(legacy_key(passphrase)), modes.CBC(iv)).encryptor()
    return iv + encryptor.update(padded) + encryptor.finalize()


def _decrypt_legacy(ciphertext: bytes, passphrase: str) -> bytes:
    if len(ciphertext) < _MIN_LEGACY or len(ciphertext) % IV_SIZE:
        raise CipherError(
            f"Legacy ciphertext has invalid length: {len(ciphertext)} bytes"
        )
    iv, body = ciphertext[:IV_SIZE], ciphertext[IV_SIZE:]
    decryptor = Cipher(algorithms.AES(legacy_key(passphrase)), modes.CBC(iv)).decryptor()
    padded = decryptor.update(body) + decryptor.finalize()
    unpadder = padding.PKCS7(algorithms.AES.block_size).unpadder()
    try:
        return unpadder.update(padded) + unpadder.finalize()
    except ValueError as err:
        raise CipherError("Invalid padding") from err


def decrypt(ciphertext: bytes, passphrase: str) -> bytes:
    """Decrypt file contents with the master passphrase.

    The envelope is selected by its magic header; blobs without it are read
    as legacy files.

    Args:
        ciphertext: Complete file contents.
        passphrase: Master passphrase.

    Returns:
        Decrypted plaintext bytes.

    Raises:
        CipherError: If the cipher layer rejects the input. A legacy blob
            decrypted with a wrong passphrase may still return garbage.
    """
    if is_tagged(ciphertext):
        return _decrypt_tagged(ciphertext, passphrase)
    logger.debug("No envelope header found, reading legacy ciphertext")
    return _decrypt_legacy(ciphertext, passphrase)
