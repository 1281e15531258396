"""Sealing of provider tokens at rest.

Tokens are stored only as Fernet ciphertext. Plaintext is produced on
demand inside :func:`revealed` and handed to exactly one provider call.
"""

from collections.abc import Iterator
from contextlib import contextmanager

from cryptography.fernet import Fernet, InvalidToken
from pydantic import BaseModel, ConfigDict

from sheepit.core.exceptions import SheepItError


class SecretKeyError(SheepItError):
    """The encryption key is missing or does not match the ciphertext."""


def _fernet(key: str) -> Fernet:
    if not key:
        raise SecretKeyError("ENCRYPTION_KEY not configured in environment")
    try:
        return Fernet(key.encode())
    except ValueError as e:
        raise SecretKeyError(f"Invalid encryption key: {e}") from e


def generate_key() -> str:
    """Create a new random Fernet key."""
    return Fernet.generate_key().decode()


class EncryptedSecret(BaseModel):
    """Opaque ciphertext of a provider token."""

    model_config = ConfigDict(frozen=True)

    ciphertext: str

    @classmethod
    def seal(cls, plaintext: str, key: str) -> "EncryptedSecret":
        """Encrypt a token for storage."""
        return cls(ciphertext=_fernet(key).encrypt(plaintext.encode()).decode())

    def open(self, key: str) -> str:
        """Decrypt the stored token."""
        try:
            return _fernet(key).decrypt(self.ciphertext.encode()).decode()
        except InvalidToken as e:
            raise SecretKeyError("Stored token cannot be decrypted with this key") from e

    def __repr__(self) -> str:
        return "EncryptedSecret(<sealed>)"


@contextmanager
def revealed(secret: EncryptedSecret, key: str) -> Iterator[str]:
    """Yield the plaintext token for the duration of one provider call."""
    plaintext = secret.open(key)
    try:
        yield plaintext
    finally:
        del plaintext
