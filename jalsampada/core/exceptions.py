"""
Core Exceptions

Custom exceptions for the Jalsampada forms service.
"""

from typing import Any


class FrappeAPIError(Exception):
    """
    Raised when the Frappe backend answers with a non-2xx status.

    The decoded response body is kept verbatim so callers can classify it
    (see services.errors.classify_error).

    Usage:
        try:
            await client.update_doc("WRD Village", name, payload)
        except FrappeAPIError as e:
            info = classify_error(e)
    """

    def __init__(self, status_code: int, body: Any = None, message: str | None = None):
        self.status_code = status_code
        self.body = body if body is not None else {}
        self.message = message or f"Frappe request failed with status {status_code}"
        super().__init__(self.message)

    @property
    def exc_type(self) -> str | None:
        """Frappe exception class name, e.g. DuplicateEntryError."""
        if isinstance(self.body, dict):
            return self.body.get("exc_type")
        return None


class FormValidationError(Exception):
    """
    Raised when client-side validation blocks a submission.

    Attributes:
        errors: Mapping of field name (or table.row.column path) to message
    """

    def __init__(self, errors: dict[str, str], message: str = "Form validation failed"):
        self.errors = errors
        self.message = message
        super().__init__(self.message)


class FormNotFoundError(Exception):
    """Raised when no layout is registered for a doctype slug."""

    def __init__(self, slug: str):
        self.slug = slug
        self.message = f"Form not found: {slug}"
        super().__init__(self.message)


class UnknownComponentError(Exception):
    """Raised when a Custom field names a component nobody registered."""

    def __init__(self, component: str, field_name: str):
        self.component = component
        self.field_name = field_name
        self.message = f"No custom component '{component}' registered for field '{field_name}'"
        super().__init__(self.message)


class InvalidStateError(Exception):
    """Raised when a page operation is called in the wrong lifecycle state."""

    def __init__(self, message: str = "Operation not allowed in current state"):
        self.message = message
        super().__init__(self.message)
