"""
Form state.

Holds the current value of every data-bearing field next to the value it
was seeded with, so the dirty flag can be recomputed on every change.
Changing a field that other Link fields filter on clears those dependents
(and their dependents) to prevent stale pairings such as a Stage kept after
its Scheme changed.
"""

import copy
import logging
import re
from typing import Any

from jalsampada.core.exceptions import FormValidationError
from jalsampada.models.contracts.forms import (
    DURATION_PARTS,
    CheckField,
    DurationField,
    FieldSchema,
    NumberField,
    ReadOnlyField,
    SelectField,
    TabbedLayout,
    TableField,
    TextField,
    iter_fields,
    validate_unique_field_names,
)
from jalsampada.services.forms.filters import dependent_fields, is_empty

logger = logging.getLogger(__name__)

_TRUE_STRINGS = {"1", "true", "yes", "on"}


def _coerce_check(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_STRINGS
    return bool(value)


def _coerce_number(field: NumberField, value: Any) -> Any:
    """Parse numeric strings; anything unparseable is kept for validation to report."""
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return value
        if field.type == "Int" and number.is_integer():
            return int(number)
        return number
    return value


def _fmt(number: float) -> str:
    return str(int(number)) if float(number).is_integer() else str(number)


def _same(a: Any, b: Any) -> bool:
    """Equality where None and an empty string both mean 'unset'."""
    if (a is None or a == "") and (b is None or b == ""):
        return True
    return a == b


def normalize_value(field: FieldSchema, value: Any) -> Any:
    """Coerce a raw value (record or user input) to the field's in-form representation."""
    if isinstance(field, CheckField):
        return _coerce_check(value)
    if isinstance(field, NumberField):
        return _coerce_number(field, value)
    if isinstance(field, DurationField):
        return _coerce_duration(field, value)
    if isinstance(field, TableField):
        if value is None:
            return []
        if not isinstance(value, list):
            raise FormValidationError({field.name: f"{field.display_label} must be a list of rows"})
        return [_normalize_row(field, row) for row in value]
    return value


def _coerce_duration(field: DurationField, value: Any) -> Any:
    """
    Frappe's seconds become parts; missing parts become 0 and numeric
    strings are parsed. Other shapes are kept for validation to report.
    """
    if value is None or value == "":
        return field.empty_value()
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return DurationField.from_seconds(value)
    if not isinstance(value, dict):
        return value
    parts = {part: value.get(part) for part in DURATION_PARTS}
    for part, raw in parts.items():
        if raw is None:
            parts[part] = 0
        elif isinstance(raw, str):
            text = raw.strip()
            if not text:
                parts[part] = 0
                continue
            try:
                number = float(text)
            except ValueError:
                continue
            parts[part] = int(number) if number.is_integer() else number
    return parts


def _normalize_row(table: TableField, row: Any) -> dict[str, Any]:
    if not isinstance(row, dict):
        raise FormValidationError({table.name: f"Each row of {table.display_label} must be an object"})
    normalized = dict(row)
    for column in table.columns:
        if column.name in normalized:
            normalized[column.name] = normalize_value(column, normalized[column.name])
    return normalized


class FormState:
    """
    Current values of one form.

    Seeding order per field: value from ``initial`` (a loaded record), then
    the schema's ``default_value``, then the type's empty value (False for
    Check, [] for tables, zero parts for Duration, None otherwise).

    Example:
        >>> state = FormState(tabs, initial=record)
        >>> state.set_value("lis_name", "Mhaisal")
        ['stage']
        >>> state.is_dirty
        True
    """

    def __init__(self, tabs: list[TabbedLayout], initial: dict[str, Any] | None = None):
        validate_unique_field_names(tabs)
        self.tabs = tabs
        self._fields: dict[str, FieldSchema] = {field.name: field for field in iter_fields(tabs)}
        self.errors: dict[str, str] = {}
        self.reseed(initial)

    # ==================== SEEDING ====================

    def reseed(self, initial: dict[str, Any] | None = None) -> None:
        """Replace defaults and current values from a (re)loaded record."""
        initial = initial or {}
        self._defaults: dict[str, Any] = {}
        self._display: dict[str, Any] = {}

        for name, field in self._fields.items():
            if isinstance(field, ReadOnlyField):
                self._display[name] = initial.get(name, field.default_value)
                continue
            if not field.submits_value:
                continue
            if name in initial:
                seed = initial[name]
            elif field.default_value is not None:
                seed = field.default_value
            else:
                seed = field.empty_value()
            self._defaults[name] = normalize_value(field, seed)

        self._values: dict[str, Any] = copy.deepcopy(self._defaults)
        self.errors = {}

    def reset(self) -> None:
        """Discard edits and return to the seeded values."""
        self._values = copy.deepcopy(self._defaults)
        self.errors = {}

    # ==================== ACCESS ====================

    @property
    def fields(self) -> dict[str, FieldSchema]:
        return self._fields

    @property
    def values(self) -> dict[str, Any]:
        """Copy of the current data-field values."""
        return copy.deepcopy(self._values)

    @property
    def defaults(self) -> dict[str, Any]:
        return copy.deepcopy(self._defaults)

    def get_value(self, name: str) -> Any:
        if name in self._values:
            return self._values[name]
        return self._display.get(name)

    @property
    def is_dirty(self) -> bool:
        """True iff at least one field differs from its seeded default."""
        return bool(self.dirty_fields())

    def dirty_fields(self) -> list[str]:
        return [
            name for name, default in self._defaults.items()
            if not _same(self._values.get(name), default)
        ]

    # ==================== MUTATION ====================

    def _data_field(self, name: str) -> FieldSchema:
        field = self._fields.get(name)
        if field is None:
            raise KeyError(f"Unknown field: {name}")
        if not field.submits_value:
            raise ValueError(f"Field '{name}' is a {field.type} and holds no value")
        return field

    def set_value(self, name: str, value: Any) -> list[str]:
        """
        Set a field's value.

        Args:
            name: Field name
            value: New value (strings from inputs are coerced for Check/number fields)

        Returns:
            Names of dependent fields that were cleared by this change

        Raises:
            KeyError: If the field does not exist
            ValueError: If the field is layout-only
            FormValidationError: If a table value is not a list of row objects
        """
        field = self._data_field(name)
        new_value = normalize_value(field, value)
        old_value = self._values.get(name)
        self._values[name] = new_value
        self.errors.pop(name, None)

        if _same(old_value, new_value):
            return []

        cleared: list[str] = []
        self._clear_dependents(name, cleared, visited={name})
        if cleared:
            logger.debug(f"Change of '{name}' cleared dependent fields: {cleared}")
        return cleared

    def _clear_dependents(self, source: str, cleared: list[str], visited: set[str]) -> None:
        for dependent in dependent_fields(self._fields.values(), source):
            if dependent in visited:
                continue
            visited.add(dependent)
            if is_empty(self._values.get(dependent)):
                continue
            self._values[dependent] = None
            self.errors.pop(dependent, None)
            cleared.append(dependent)
            self._clear_dependents(dependent, cleared, visited)

    def apply_values(self, values: dict[str, Any]) -> list[str]:
        """
        Apply several edits in layout order.

        Keys that name unknown or layout-only fields are skipped. Values
        supplied explicitly win over dependent clearing triggered by an
        earlier field in the same batch.

        Returns:
            Names of fields cleared and not re-supplied
        """
        cleared: list[str] = []
        for name, field in self._fields.items():
            if name not in values:
                continue
            if not field.submits_value:
                logger.debug(f"Ignoring value for layout-only field '{name}'")
                continue
            cleared.extend(self.set_value(name, values[name]))

        unknown = set(values) - set(self._fields)
        if unknown:
            logger.debug(f"Ignoring values for unknown fields: {sorted(unknown)}")
        return [name for name in cleared if name not in values]

    def _table(self, name: str) -> TableField:
        field = self._data_field(name)
        if not isinstance(field, TableField):
            raise ValueError(f"Field '{name}' is not a table")
        return field

    def add_row(self, name: str, row: dict[str, Any] | None = None) -> int:
        """Append a row to a table field; returns the new row's index."""
        table = self._table(name)
        new_row = table.blank_row()
        new_row.update(_normalize_row(table, row or {}))
        rows = list(self._values.get(name) or [])
        rows.append(new_row)
        self._values[name] = rows
        return len(rows) - 1

    def remove_rows(self, name: str, indices: list[int]) -> None:
        """Remove rows by index from a table field."""
        self._table(name)
        drop = set(indices)
        rows = self._values.get(name) or []
        self._values[name] = [row for i, row in enumerate(rows) if i not in drop]

    def set_cell(self, name: str, index: int, column: str, value: Any) -> None:
        """Set one cell of a table row."""
        table = self._table(name)
        column_field = next((c for c in table.columns if c.name == column), None)
        if column_field is None:
            raise KeyError(f"Unknown column '{column}' in table '{name}'")
        rows = copy.deepcopy(self._values.get(name) or [])
        rows[index][column] = normalize_value(column_field, value)
        self._values[name] = rows

    # ==================== VALIDATION ====================

    def validate(self) -> dict[str, str]:
        """
        Run client-side validation over every data field.

        Returns:
            ``{field_or_cell_path: message}``; empty when the form is valid.
            The result is also stored on ``self.errors``.
        """
        errors: dict[str, str] = {}
        for name, field in self._fields.items():
            if not field.submits_value:
                continue
            _validate_value(field, self._values.get(name), name, errors)
        self.errors = errors
        return errors

    @property
    def is_valid(self) -> bool:
        return not self.validate()


def _validate_value(field: FieldSchema, value: Any, key: str, errors: dict[str, str]) -> None:
    label = field.display_label

    if field.required:
        if isinstance(field, CheckField):
            missing = not value
        elif isinstance(field, DurationField):
            missing = isinstance(value, dict) and not any(value.get(part) for part in DURATION_PARTS)
        else:
            missing = is_empty(value)
        if missing:
            errors[key] = f"{label} is required"
            return

    if isinstance(field, TableField):
        for index, row in enumerate(value or []):
            for column in field.columns:
                _validate_value(column, row.get(column.name), f"{key}.{index}.{column.name}", errors)
        return

    if isinstance(field, DurationField):
        _validate_duration(field, value, key, errors)
        return

    if is_empty(value):
        return

    if isinstance(field, NumberField):
        message = _number_error(field, value)
        if message:
            errors[key] = message
    elif isinstance(field, SelectField):
        if field.options and not field.allows(value):
            errors[key] = f"{label} must be one of the available options"
    elif isinstance(field, TextField) and field.pattern:
        if not isinstance(value, str) or re.search(field.pattern, value) is None:
            errors[key] = field.pattern_message or f"{label} format is invalid"


def _validate_duration(field: DurationField, value: Any, key: str, errors: dict[str, str]) -> None:
    """Each part is checked on its own; errors are keyed ``field.part``."""
    if not isinstance(value, dict):
        errors[key] = f"{field.display_label} must have hours, minutes and seconds"
        return
    for part in DURATION_PARTS:
        number = value.get(part)
        label = part.capitalize()
        if isinstance(number, bool) or not isinstance(number, (int, float)):
            errors[f"{key}.{part}"] = f"{label} must be a number"
        elif number < 0:
            errors[f"{key}.{part}"] = f"{label} must be >= 0"


def _number_error(field: NumberField, value: Any) -> str | None:
    label = field.display_label
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return f"{label} must be a number"
    if field.type == "Int" and not float(value).is_integer():
        return f"{label} must be a whole number"

    if field.type == "Percent":
        if (field.min is not None and value < field.min) or (field.max is not None and value > field.max):
            return f"Percent must be between {_fmt(field.min)} and {_fmt(field.max)}"
        return None

    if field.min is not None and value < field.min:
        return f"{label} must be >= {_fmt(field.min)}"
    if field.max is not None and value > field.max:
        return f"{label} must be <= {_fmt(field.max)}"
    return None
