"""Canonical names: the lookup keys of a secret set."""
import re

_WHITESPACE = re.compile(r"\s+")


def canonicalize(name: str) -> str:
    """Map a display name to its canonical lookup key.

    Lowercases the name, drops a single trailing newline and collapses every
    whitespace run into one space. Callers must reject blank names first
    (see :func:`validate_name`).
    """
    name = name.lower()
    if name.endswith("\n"):
        name = name[:-1]
    return _WHITESPACE.sub(" ", name)


def validate_name(name: str) -> str:
    """Return ``name`` unchanged, or raise ValueError if it is blank."""
    if not name or not name.strip():
        raise ValueError("Secret name cannot be empty")
    return name
