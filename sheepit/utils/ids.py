"""Identifier generation."""

import secrets
import string

_ID_ALPHABET = string.ascii_letters + string.digits + "_-"
_SUBDOMAIN_ALPHABET = string.ascii_lowercase + string.digits


def generate_id(size: int = 21) -> str:
    """Random URL-safe identifier."""
    return "".join(secrets.choice(_ID_ALPHABET) for _ in range(size))


def generate_subdomain(size: int = 8) -> str:
    """Random lowercase label used as the default hosting name."""
    return "".join(secrets.choice(_SUBDOMAIN_ALPHABET) for _ in range(size))
