from __future__ import annotations

from typing import Any


class DirectoryError(Exception):
    """A request to the café directory failed."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ValidationFailed(DirectoryError):
    """The submission was rejected; ``details`` lists the offending fields."""

    def __init__(self, message: str, details: list[dict[str, Any]] | None = None) -> None:
        super().__init__(message, status_code=400)
        self.details = details or []

    def field_errors(self) -> dict[str, str]:
        """Map of field name -> first error message, for inline display."""
        errors: dict[str, str] = {}
        for item in self.details:
            loc = [str(part) for part in item.get("loc", []) if part != "body"]
            field = ".".join(loc) or "__all__"
            errors.setdefault(field, item.get("msg", "Invalid value"))
        return errors


class AuthenticationRequired(DirectoryError):
    """The caller must log in before retrying."""

    def __init__(self, message: str = "Not authenticated") -> None:
        super().__init__(message, status_code=401)
