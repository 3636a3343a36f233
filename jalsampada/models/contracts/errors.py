"""
Error contract models.

Every failure surfaced to a caller is described by one ErrorInfo whose
``kind`` tells the caller how to present it.
"""

from pydantic import BaseModel, Field

from jalsampada.models.enums import ErrorKind


class RecordLink(BaseModel):
    """Link to a Frappe desk record found inside a server message"""
    label: str
    url: str
    doctype_slug: str | None = None
    name: str | None = None
    internal_path: str | None = Field(
        default=None, description="Route inside this app when the doctype is known")


class ErrorInfo(BaseModel):
    """Classified error"""
    kind: ErrorKind
    message: str
    detail: str | None = None
    status_code: int | None = None
    exc_type: str | None = None
    messages: list[str] = Field(default_factory=list)
    links: list[RecordLink] = Field(default_factory=list)
    field_errors: dict[str, str] = Field(default_factory=dict)
