"""
Enums for Jalsampada forms.
"""

from enum import Enum


class FieldType(str, Enum):
    """Frappe field types understood by the form engine"""
    DATA = "Data"
    SMALL_TEXT = "Small Text"
    TEXT = "Text"
    LONG_TEXT = "Long Text"
    CODE = "Code"
    PASSWORD = "Password"
    COLOR = "Color"
    BARCODE = "Barcode"
    DATE = "Date"
    DATETIME = "DateTime"
    TIME = "Time"
    ATTACH = "Attach"
    SIGNATURE = "Signature"
    MARKDOWN_EDITOR = "Markdown Editor"
    INT = "Int"
    FLOAT = "Float"
    CURRENCY = "Currency"
    PERCENT = "Percent"
    RATING = "Rating"
    DURATION = "Duration"
    CHECK = "Check"
    SELECT = "Select"
    LINK = "Link"
    TABLE = "Table"
    TABLE_MULTISELECT = "Table MultiSelect"
    CUSTOM = "Custom"
    SECTION_BREAK = "Section Break"
    COLUMN_BREAK = "Column Break"
    READ_ONLY = "Read Only"
    BUTTON = "Button"


class WidgetKind(str, Enum):
    """Input control produced by the renderer for a field"""
    TEXT = "text"
    TEXTAREA = "textarea"
    PASSWORD = "password"
    COLOR = "color"
    DATE = "date"
    DATETIME = "datetime-local"
    TIME = "time"
    FILE = "file"
    SIGNATURE = "signature"
    NUMBER = "number"
    RATING = "rating"
    DURATION = "duration"
    CHECKBOX = "checkbox"
    SELECT = "select"
    LINK = "link"
    TABLE = "table"
    CUSTOM = "custom"
    SECTION = "section"
    COLUMN = "column"
    BUTTON = "button"
    READ_ONLY = "readonly"


class ErrorKind(str, Enum):
    """Classification of a failed form operation"""
    VALIDATION = "validation"
    CONFLICT = "conflict"
    AUTH = "auth"
    NETWORK = "network"
    UNKNOWN = "unknown"


class PageState(str, Enum):
    """Lifecycle of a record page"""
    IDLE = "idle"
    LOADING = "loading"
    LOADED = "loaded"
    EDITING = "editing"
    SAVING = "saving"
    SAVED = "saved"
    ERROR = "error"


class SaveOutcome(str, Enum):
    """Result of a save attempt"""
    SAVED = "saved"
    UNCHANGED = "unchanged"
    FAILED = "failed"
