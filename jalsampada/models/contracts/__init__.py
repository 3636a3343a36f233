"""
Pydantic contracts for Jalsampada forms.
"""

from jalsampada.models.contracts.documents import (
    DeleteResult,
    FormSummary,
    FormValuesRequest,
    LinkOption,
    LinkOptionsRequest,
    SaveResult,
    SubmissionPayload,
)
from jalsampada.models.contracts.errors import ErrorInfo, RecordLink
from jalsampada.models.contracts.health import BasicHealthResponse
from jalsampada.models.contracts.forms import (
    ButtonField,
    CheckField,
    ColumnBreak,
    CustomField,
    DeleteConfig,
    FieldSchema,
    FilterMapping,
    FormDefinition,
    LinkField,
    NumberField,
    ReadOnlyField,
    SectionBreak,
    SelectField,
    SelectOption,
    TabbedLayout,
    TableField,
    TextField,
    data_fields,
    iter_fields,
    validate_unique_field_names,
)
from jalsampada.models.contracts.rendering import RenderedControl, RenderedForm, RenderedTab

__all__ = [
    "BasicHealthResponse",
    "ButtonField",
    "CheckField",
    "ColumnBreak",
    "CustomField",
    "DeleteConfig",
    "DeleteResult",
    "ErrorInfo",
    "FieldSchema",
    "FilterMapping",
    "FormDefinition",
    "FormSummary",
    "FormValuesRequest",
    "LinkField",
    "LinkOption",
    "LinkOptionsRequest",
    "NumberField",
    "ReadOnlyField",
    "RecordLink",
    "RenderedControl",
    "RenderedForm",
    "RenderedTab",
    "SaveResult",
    "SectionBreak",
    "SelectField",
    "SelectOption",
    "SubmissionPayload",
    "TabbedLayout",
    "TableField",
    "TextField",
    "data_fields",
    "iter_fields",
    "validate_unique_field_names",
]
