"""
Form contract models for Jalsampada.

A form is an ordered list of tabs, each an ordered list of field schemas.
Field schemas form a discriminated union on ``type``; every variant declares
whether it carries a submittable value, so layout-only entries (section and
column breaks, buttons, read-only displays) can be dropped from a payload
without comparing type strings.
"""

from typing import Annotated, Any, ClassVar, Iterator, Literal, Union

from pydantic import BaseModel, Field, field_validator, model_validator


# ==================== SHARED MODELS ====================


class SelectOption(BaseModel):
    """A fixed choice for Select fields"""
    label: str
    value: str


class FilterMapping(BaseModel):
    """
    Constrains a Link field's search to ``target_field = value_of(source_field)``.

    Example: a Taluka link filtered by the District picked in the same form
    uses ``{"source_field": "district", "target_field": "district"}``.
    """
    source_field: str = Field(..., min_length=1)
    target_field: str = Field(..., min_length=1)


class DeleteConfig(BaseModel):
    """Injected delete action for a record page"""
    doctype: str
    docname: str | None = None
    redirect_url: str = "/"


# ==================== FIELD SCHEMAS ====================


class _BaseField(BaseModel):
    """Attributes shared by all field schemas"""

    # Layout-only variants override this
    submits_value: ClassVar[bool] = True

    name: str = Field(..., min_length=1, description="Document field name")
    label: str | None = Field(default=None, description="Display label")
    required: bool = Field(default=False)
    default_value: Any | None = None
    description: str | None = Field(default=None, description="Help text shown under the input")
    placeholder: str | None = None

    @property
    def display_label(self) -> str:
        return self.label or self.name.replace("_", " ").strip().title()

    def empty_value(self) -> Any:
        """Value a fresh form holds when no default is configured."""
        return None


class TextField(_BaseField):
    """Free-form scalar input (text, dates, attachments, signatures)"""
    type: Literal[
        "Data",
        "Small Text",
        "Text",
        "Long Text",
        "Code",
        "Password",
        "Color",
        "Barcode",
        "Date",
        "DateTime",
        "Time",
        "Attach",
        "Signature",
        "Markdown Editor",
    ]
    pattern: str | None = Field(default=None, description="Regular expression the value must match")
    pattern_message: str | None = None
    rows: int | None = Field(default=None, ge=1)


class NumberField(_BaseField):
    """Numeric input with optional bounds"""
    type: Literal["Int", "Float", "Currency", "Percent", "Rating"]
    min: float | None = None
    max: float | None = None
    step: float | None = None

    @model_validator(mode="after")
    def apply_type_bounds(self):
        """Percent is 0-100 and Rating 0-5 unless configured otherwise"""
        if self.type == "Percent":
            if self.min is None:
                self.min = 0
            if self.max is None:
                self.max = 100
        elif self.type == "Rating":
            if self.min is None:
                self.min = 0
            if self.max is None:
                self.max = 5
        if self.min is not None and self.max is not None and self.min > self.max:
            raise ValueError(f"min must not exceed max for field '{self.name}'")
        return self


DURATION_PARTS = ("hours", "minutes", "seconds")


class DurationField(_BaseField):
    """
    Elapsed time edited as hours, minutes and seconds.

    The form holds ``{"hours": h, "minutes": m, "seconds": s}``; Frappe
    stores the total in seconds.
    """
    type: Literal["Duration"]

    def empty_value(self) -> Any:
        return {part: 0 for part in DURATION_PARTS}

    @staticmethod
    def from_seconds(total: float) -> dict[str, Any]:
        hours, rest = divmod(total, 3600)
        minutes, seconds = divmod(rest, 60)
        if float(seconds).is_integer():
            seconds = int(seconds)
        return {"hours": int(hours), "minutes": int(minutes), "seconds": seconds}

    @staticmethod
    def to_seconds(parts: dict[str, Any]) -> float:
        total = parts["hours"] * 3600 + parts["minutes"] * 60 + parts["seconds"]
        return int(total) if float(total).is_integer() else total


class CheckField(_BaseField):
    """Boolean checkbox, stored by Frappe as 0/1"""
    type: Literal["Check"]

    def empty_value(self) -> Any:
        return False


class SelectField(_BaseField):
    """Fixed-choice input"""
    type: Literal["Select"]
    options: list[SelectOption] = Field(default_factory=list)

    @field_validator("options", mode="before")
    @classmethod
    def parse_frappe_options(cls, value: Any) -> Any:
        """Accept Frappe's newline-separated option string or bare strings."""
        if isinstance(value, str):
            value = [line for line in value.splitlines() if line.strip()]
        if isinstance(value, list):
            return [
                {"label": item, "value": item} if isinstance(item, str) else item
                for item in value
            ]
        return value

    def allows(self, value: Any) -> bool:
        return any(option.value == value for option in self.options)


class LinkField(_BaseField):
    """Reference to another doctype's record, searched asynchronously"""
    type: Literal["Link"]
    link_target: str | None = Field(default=None, description="Target doctype")
    filter_mapping: list[FilterMapping] = Field(default_factory=list)

    @property
    def source_fields(self) -> list[str]:
        return [mapping.source_field for mapping in self.filter_mapping]


class TableField(_BaseField):
    """Child table edited as repeatable rows"""
    type: Literal["Table", "Table MultiSelect"]
    columns: list["FieldSchema"] = Field(default_factory=list)

    @field_validator("columns")
    @classmethod
    def validate_columns(cls, v):
        """Columns must be data-bearing and uniquely named"""
        names = [column.name for column in v]
        if len(names) != len(set(names)):
            raise ValueError("Column names must be unique")
        for column in v:
            if not column.submits_value:
                raise ValueError(f"Column '{column.name}' cannot be a {column.type}")
        return v

    def empty_value(self) -> Any:
        return []

    def blank_row(self) -> dict[str, Any]:
        return {column.name: column.empty_value() for column in self.columns}


class CustomField(_BaseField):
    """Field rendered by a caller-supplied component"""
    type: Literal["Custom"]
    component: str = Field(..., min_length=1, description="Registered component name")
    props: dict[str, Any] = Field(default_factory=dict)


class SectionBreak(_BaseField):
    """Starts a new titled section"""
    submits_value: ClassVar[bool] = False
    type: Literal["Section Break"]


class ColumnBreak(_BaseField):
    """Starts a new column within a section"""
    submits_value: ClassVar[bool] = False
    type: Literal["Column Break"]


class ButtonField(_BaseField):
    """Action button; the action name is resolved by the caller"""
    submits_value: ClassVar[bool] = False
    type: Literal["Button"]
    button_label: str | None = None
    action: str | None = None


class ReadOnlyField(_BaseField):
    """Displays a value without binding an input"""
    submits_value: ClassVar[bool] = False
    type: Literal["Read Only"]
    read_only_value: str | None = None


FieldSchema = Annotated[
    Union[
        TextField,
        NumberField,
        DurationField,
        CheckField,
        SelectField,
        LinkField,
        TableField,
        CustomField,
        SectionBreak,
        ColumnBreak,
        ButtonField,
        ReadOnlyField,
    ],
    Field(discriminator="type"),
]

TableField.model_rebuild()


# ==================== LAYOUT ====================


class TabbedLayout(BaseModel):
    """Named tab holding fields in render order"""
    name: str = Field(..., min_length=1)
    fields: list[FieldSchema] = Field(default_factory=list)


def iter_fields(tabs: list[TabbedLayout]) -> Iterator[FieldSchema]:
    """Yield every field of every tab, in render order."""
    for tab in tabs:
        yield from tab.fields


def data_fields(tabs: list[TabbedLayout]) -> list[FieldSchema]:
    """Fields that carry a submittable value."""
    return [field for field in iter_fields(tabs) if field.submits_value]


def validate_unique_field_names(tabs: list[TabbedLayout]) -> None:
    """Raise ValueError when a field name repeats anywhere in the layout."""
    seen: set[str] = set()
    for field in iter_fields(tabs):
        if field.name in seen:
            raise ValueError(f"Field names must be unique across tabs: '{field.name}'")
        seen.add(field.name)


class FormDefinition(BaseModel):
    """Complete form for one doctype (loaded from a .form.json file)"""
    doctype: str = Field(..., min_length=1, description="Frappe doctype name")
    module: str | None = Field(default=None, description="UI module the doctype belongs to")
    title: str = Field(default="Form")
    description: str | None = None
    submit_label: str = Field(default="Submit")
    cancel_label: str = Field(default="Cancel")
    tabs: list[TabbedLayout] = Field(..., min_length=1)
    delete_config: DeleteConfig | None = None

    @field_validator("tabs")
    @classmethod
    def validate_unique_names(cls, v):
        """Ensure field names are unique across all tabs"""
        validate_unique_field_names(v)
        return v

    def all_fields(self) -> list[FieldSchema]:
        return list(iter_fields(self.tabs))

    def get_field(self, name: str) -> FieldSchema | None:
        for field in iter_fields(self.tabs):
            if field.name == name:
                return field
        return None
