"""Shared fixtures for credsafe tests."""
import pytest

from credsafe.models import Secret, SecretSet
from credsafe.vault import SecretStore

# PBKDF2 cost kept low so the suite stays fast.
TEST_ITERATIONS = 1000
MASTER = "correct horse battery staple"


@pytest.fixture
def master():
    return MASTER


@pytest.fixture
def store_path(tmp_path):
    return tmp_path / "store.credsafe"


@pytest.fixture
def store(store_path):
    """A store whose file does not exist yet."""
    return SecretStore(store_path, kdf_iterations=TEST_ITERATIONS)


@pytest.fixture
def secret_set():
    """A small populated secret set."""
    return SecretSet.from_secrets(
        Secret(
            name="Bank Account",
            description="checking",
            username="alice",
            passphrase="s3cr3t",
            url="https://bank.example.com",
            notes="PIN hint: birthday\nsecurity question: pet",
        ),
        Secret(name="Email", username="alice@example.com", passphrase="hunter2"),
        Secret(name="wifi"),
    )
