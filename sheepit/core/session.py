"""Per-request caller identity."""

from dataclasses import dataclass


@dataclass(frozen=True)
class SessionContext:
    """The authenticated caller, passed explicitly into every phase."""

    user_id: str
