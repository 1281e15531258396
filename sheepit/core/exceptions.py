"""Custom exceptions for SheepIt."""

from typing import Any


class SheepItError(Exception):
    """Base exception for SheepIt."""

    status_code = 500

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    @property
    def public_message(self) -> str:
        """Message safe to show to the end user."""
        return self.message


class PreconditionError(SheepItError):
    """A required link, credential or input is missing."""

    status_code = 400


class UnauthorizedError(SheepItError):
    """No known user behind the request."""

    status_code = 401

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message)


class ProjectNotFoundError(SheepItError):
    """Project not found."""

    status_code = 404

    def __init__(self, project_id: str):
        super().__init__(
            "Project not found",
            {"project_id": project_id},
        )


class InvalidStatusTransitionError(SheepItError):
    """A project status change outside the transition table."""

    status_code = 409

    def __init__(self, current: str, target: str):
        super().__init__(
            f"Cannot move project from '{current}' to '{target}'",
            {"current": current, "target": target},
        )


class ProviderError(SheepItError):
    """A GitHub, Vercel or Cloudflare call failed.

    Covers transport failures, non-2xx responses and unexpected response
    shapes. ``status`` and ``body`` are kept for server-side logs only.
    """

    status_code = 502

    def __init__(
        self,
        provider: str,
        operation: str,
        message: str,
        status: int | None = None,
        body: str | None = None,
    ):
        details: dict[str, Any] = {"provider": provider, "operation": operation}
        if status is not None:
            details["status"] = status
        if body:
            details["body"] = body[:2000]
        prefix = f"{provider} {operation} failed"
        text = f"{prefix}: {status} {message}" if status is not None else f"{prefix}: {message}"
        super().__init__(text, details)
        self.provider = provider
        self.operation = operation
        self.status = status
        self.body = body or ""

    @property
    def public_message(self) -> str:
        return f"{self.provider} request failed, please try again"

    @property
    def is_conflict_exists(self) -> bool:
        """GitHub's 422 response for a name that is already taken."""
        return self.status == 422 and "already exists" in self.body


class IngestionError(SheepItError):
    """Reading the selected folder failed; nothing was collected."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"Failed to read {path}: {reason}", {"path": path})
        self.path = path


class ApiRequestError(SheepItError):
    """The SheepIt API answered a client call with an error."""

    def __init__(self, status: int, message: str):
        super().__init__(message, {"status": status})
        self.status = status
