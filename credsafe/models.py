"""Record model: a single Secret and the Secret Set keyed by canonical name."""
from typing import Optional
from collections.abc import Iterator, Mapping, MutableMapping

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .exceptions import ConfirmationMismatchError
from .naming import canonicalize, validate_name

# Payload versions understood by the codec.
LEGACY_VERSION = 1
CURRENT_VERSION = 2


class Secret(BaseModel):
    """One credential record.

    Optional fields default to the empty string. Fields unknown to this
    version (such as the legacy ``password`` field) are kept as extras so
    that a decoded record round-trips unchanged until it is migrated.
    """

    model_config = ConfigDict(extra="allow", validate_assignment=True)

    # the map key derives from name; rename only via replace_for_edit
    name: str = Field(frozen=True)
    description: str = ""
    username: str = ""
    passphrase: str = ""
    url: str = ""
    notes: str = ""

    @field_validator("name")
    @classmethod
    def check_name(cls, v: str) -> str:
        return validate_name(v)

    @field_validator(
        "description", "username", "passphrase", "url", "notes", mode="before"
    )
    @classmethod
    def null_as_empty(cls, v):
        return "" if v is None else v

    @property
    def canonical_name(self) -> str:
        return canonicalize(self.name)

    def to_record(self) -> dict:
        """Return the serializable fields, omitting empty optional ones."""
        return self.model_dump(exclude_defaults=True)


def confirm_value(first: str, second: str, field: str = "passphrase") -> str:
    """Accept a twice-entered value only if both entries match exactly.

    Raises:
        ConfirmationMismatchError: the caller is expected to prompt again.
    """
    if first != second:
        raise ConfirmationMismatchError(field)
    return first


class SecretSet(MutableMapping[str, Secret]):
    """Mapping of canonical name to Secret.

    Insertion order carries no meaning; use ``list_view`` from the store
    for a deterministic listing. A Secret can only be stored under its own
    canonical name.
    """

    def __init__(
        self,
        secrets: Optional[Mapping[str, Secret]] = None,
        version: int = CURRENT_VERSION
    ) -> None:
        self._data: dict[str, Secret] = {}
        self.version = version
        if secrets:
            for key, secret in secrets.items():
                self[key] = secret

    @classmethod
    def from_secrets(cls, *secrets: Secret, version: int = CURRENT_VERSION) -> "SecretSet":
        result = cls(version=version)
        for secret in secrets:
            result[secret.canonical_name] = secret
        return result

    def __repr__(self) -> str:
        return (
            f'<SecretSet [version:{self.version}] '
            f'names={sorted(self._data)!r}>'
        )

    def __len__(self) -> int:
        return len(self._data)

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __getitem__(self, key: str) -> Secret:
        return self._data[key]

    def __setitem__(self, key: str, value: Secret) -> None:
        if not isinstance(value, Secret):
            raise TypeError(f"Expected a Secret, got {type(value).__name__}")
        if key != value.canonical_name:
            raise ValueError(
                f"Secret {value.name!r} must be stored under "
                f"{value.canonical_name!r}, not {key!r}"
            )
        self._data[key] = value

    def __delitem__(self, key: str) -> None:
        del self._data[key]

    def __eq__(self, other: object) -> bool:
        if isinstance(other, SecretSet):
            return self._data == other._data
        if isinstance(other, Mapping):
            return self._data == dict(other)
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def copy(self) -> "SecretSet":
        return SecretSet(
            {key: secret.model_copy() for key, secret in self._data.items()},
            version=self.version
        )
