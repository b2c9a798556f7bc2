"""Error types for the webhook dispatch engine.

Exception Hierarchy:
    StorehookError (base)
    ├── HookSelectionError - Hook repository could not be queried
    ├── TemplateRenderError - Template failed to parse or evaluate
    └── HookNotFoundError - Referenced hook or history record is missing

Only HookSelectionError is meant to escape a dispatch call. Render and
transport failures are absorbed into history records and log lines.
"""

from typing import Any


class StorehookError(Exception):
    """Base exception for all storehook errors.

    Attributes:
        message: Human-readable error message.
        details: Additional error details.
    """

    def __init__(
        self,
        message: str,
        *,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for logging/API responses."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


class HookSelectionError(StorehookError):
    """Hooks for an event could not be loaded.

    Attributes:
        hook_type: Hook type that was being selected.
    """

    def __init__(
        self,
        message: str,
        *,
        hook_type: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details=details)
        self.hook_type = hook_type

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        base = super().to_dict()
        base["hook_type"] = self.hook_type
        return base


class TemplateRenderError(StorehookError):
    """A hook template could not be rendered.

    Attributes:
        template: The template source that failed (truncated).
    """

    def __init__(
        self,
        message: str,
        *,
        template: str = "",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details=details)
        self.template = template[:200]

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        base = super().to_dict()
        base["template"] = self.template
        return base


class HookNotFoundError(StorehookError):
    """A hook or history record referenced by id does not exist."""

    def __init__(self, message: str, *, resource_id: str) -> None:
        super().__init__(message, details={"resource_id": resource_id})
        self.resource_id = resource_id
