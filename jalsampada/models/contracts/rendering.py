"""
Rendered form models.

Output of FormRenderer: a serializable description of every control,
grouped by tab, with current values, validation errors and link filters.
"""

from typing import Any

from pydantic import BaseModel, Field

from jalsampada.models.contracts.forms import DeleteConfig, SelectOption
from jalsampada.models.enums import WidgetKind


class RenderedControl(BaseModel):
    """One bound input (or layout marker) in a rendered form"""
    name: str
    label: str
    field_type: str
    widget: WidgetKind
    value: Any | None = None
    required: bool = False
    error: str | None = None
    description: str | None = None
    placeholder: str | None = None
    bound: bool = Field(default=True, description="False for layout/action controls that hold no state")

    options: list[SelectOption] | None = None
    link_target: str | None = None
    link_filters: dict[str, Any] | None = None
    columns: list["RenderedControl"] | None = None
    min: float | None = None
    max: float | None = None
    step: float | None = None
    rows: int | None = None
    button_label: str | None = None
    action: str | None = None
    custom: dict[str, Any] | None = None


class RenderedTab(BaseModel):
    """A tab and its controls in render order"""
    name: str
    controls: list[RenderedControl] = Field(default_factory=list)


class RenderedForm(BaseModel):
    """Complete rendered form handed to the caller"""
    doctype: str
    title: str
    description: str | None = None
    submit_label: str
    cancel_label: str
    tabs: list[RenderedTab]
    is_dirty: bool = False
    errors: dict[str, str] = Field(default_factory=dict)
    delete_config: DeleteConfig | None = None
    modified: str | None = Field(
        default=None, description="Revision of the loaded record; send it back when updating")
    docstatus: int | None = None
