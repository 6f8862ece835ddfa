"""
Vault Configuration — Store location, session timeout and KDF cost.

Reads settings from environment variables:
    CREDSAFE_PATH = <path to the store file>        (default ~/.credsafe)
    CREDSAFE_SESSION_TIMEOUT = <seconds>            (default 300)
    CREDSAFE_KDF_ITERATIONS = <PBKDF2 iterations>   (default 600000)

Security Note:
    Never log passphrases. Only log paths and numeric settings.
"""
import os
import logging
from pathlib import Path

from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger("credsafe.vault")

DEFAULT_STORE_NAME = ".credsafe"
DEFAULT_SESSION_TIMEOUT = 300
DEFAULT_KDF_ITERATIONS = 600_000
MIN_KDF_ITERATIONS = 1_000


def default_store_path() -> Path:
    """Return the default store file: a dotfile in the user's home."""
    return Path.home() / DEFAULT_STORE_NAME


class SafeConfig(BaseModel):
    """Validated credsafe configuration."""

    path: Path = Field(default_factory=default_store_path)
    session_timeout: int = Field(default=DEFAULT_SESSION_TIMEOUT, ge=1)
    kdf_iterations: int = Field(
        default=DEFAULT_KDF_ITERATIONS, ge=MIN_KDF_ITERATIONS, le=0xFFFFFFFF
    )

    @field_validator("path")
    @classmethod
    def expand_path(cls, v: Path) -> Path:
        """Expand ``~`` so the store path is never relative to a literal tilde."""
        return v.expanduser()

    @classmethod
    def from_env(cls, **overrides) -> "SafeConfig":
        """Create SafeConfig from environment, letting explicit values win.

        Args:
            overrides: Values that take precedence over the environment
                (e.g. a ``--file`` command-line option). ``None`` values are
                ignored.

        Returns:
            Populated SafeConfig instance.
        """
        values = {}
        if path := os.environ.get("CREDSAFE_PATH"):
            values["path"] = path
        if timeout := os.environ.get("CREDSAFE_SESSION_TIMEOUT"):
            values["session_timeout"] = timeout
        if iterations := os.environ.get("CREDSAFE_KDF_ITERATIONS"):
            values["kdf_iterations"] = iterations
        values.update({k: v for k, v in overrides.items() if v is not None})
        config = cls(**values)
        logger.debug(
            "Config: path=%s session_timeout=%d kdf_iterations=%d",
            config.path, config.session_timeout, config.kdf_iterations,
        )
        return config
