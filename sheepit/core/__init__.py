"""Core functionality for SheepIt."""

from sheepit.core.exceptions import (
    ApiRequestError,
    IngestionError,
    InvalidStatusTransitionError,
    PreconditionError,
    ProjectNotFoundError,
    ProviderError,
    SheepItError,
    UnauthorizedError,
)
from sheepit.core.secrets import EncryptedSecret, SecretKeyError, revealed

__all__ = [
    "ApiRequestError",
    "SheepItError",
    "PreconditionError",
    "UnauthorizedError",
    "ProjectNotFoundError",
    "InvalidStatusTransitionError",
    "ProviderError",
    "IngestionError",
    "EncryptedSecret",
    "SecretKeyError",
    "revealed",
]
