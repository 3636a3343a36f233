"""
Record submission contract models.
"""

from typing import Any

from pydantic import BaseModel, Field

from jalsampada.models.contracts.errors import ErrorInfo
from jalsampada.models.enums import SaveOutcome


class SubmissionPayload(BaseModel):
    """Data sent to the record store, plus the dirty flag at submit time"""
    data: dict[str, Any] = Field(default_factory=dict)
    is_dirty: bool = False


class SaveResult(BaseModel):
    """Outcome of DocumentFormController.save()"""
    outcome: SaveOutcome
    message: str
    record: dict[str, Any] | None = None
    error: ErrorInfo | None = None
    redirect_url: str | None = None


class FormValuesRequest(BaseModel):
    """Request body carrying edited field values"""
    values: dict[str, Any] = Field(default_factory=dict, description="Field name to value")
    modified: str | None = Field(
        default=None, description="Revision the edits were made against (updates only)")


class LinkOptionsRequest(BaseModel):
    """Request body for a link field search"""
    values: dict[str, Any] = Field(
        default_factory=dict, description="Current form values used to resolve dependent filters")
    txt: str = Field(default="", description="Search text")


class LinkOption(BaseModel):
    """One selectable record for a Link field"""
    value: str
    label: str
    description: str | None = None


class DeleteResult(BaseModel):
    """Outcome of a record delete"""
    deleted: bool
    redirect_url: str | None = None


class FormSummary(BaseModel):
    """Registered form layout, as listed by the API"""
    slug: str
    doctype: str
    title: str
    module: str | None = None
