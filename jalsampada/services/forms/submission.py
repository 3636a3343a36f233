"""
Submission pipeline.

Turns a FormState into the payload sent to the record store:
validates, drops layout-only fields, converts Check values to Frappe's 1/0
and Duration parts to seconds and, for updates, carries the loaded record's
revision metadata so the backend can reject writes based on a stale copy.

No network I/O happens here; the caller supplies the submit function.
"""

import logging
from typing import Any, Awaitable, Callable

from jalsampada.core.exceptions import FormValidationError
from jalsampada.models.contracts.documents import SubmissionPayload
from jalsampada.models.contracts.forms import (
    CheckField,
    DurationField,
    FieldSchema,
    FormDefinition,
    TableField,
)
from jalsampada.services.forms.state import FormState

logger = logging.getLogger(__name__)

# Record metadata Frappe checks on update
RECORD_META_FIELDS = ("modified", "docstatus")

SubmitFunction = Callable[[dict[str, Any], bool], Awaitable[Any]]


def _to_frappe_value(field: FieldSchema, value: Any) -> Any:
    if isinstance(field, CheckField):
        return 1 if value else 0
    if isinstance(field, DurationField):
        return DurationField.to_seconds(value)
    if isinstance(field, TableField):
        return [_row_to_frappe(field, row) for row in value or []]
    return value


def _row_to_frappe(table: TableField, row: dict[str, Any]) -> dict[str, Any]:
    converted = dict(row)
    for column in table.columns:
        if column.name in converted:
            converted[column.name] = _to_frappe_value(column, converted[column.name])
    return converted


def build_submission(
    state: FormState,
    record: dict[str, Any] | None = None,
) -> SubmissionPayload:
    """
    Build the payload for a submit.

    Args:
        state: Current form state
        record: The loaded record when updating; None when creating

    Returns:
        SubmissionPayload with the data and the dirty flag at submit time

    Raises:
        FormValidationError: If any field fails client-side validation
    """
    errors = state.validate()
    if errors:
        logger.info(f"Submission blocked by {len(errors)} validation error(s): {sorted(errors)}")
        raise FormValidationError(errors)

    values = state.values
    data: dict[str, Any] = {}
    for name, field in state.fields.items():
        if not field.submits_value:
            continue
        data[name] = _to_frappe_value(field, values.get(name))

    if record is not None:
        for meta in RECORD_META_FIELDS:
            if meta in record:
                data[meta] = record[meta]

    return SubmissionPayload(data=data, is_dirty=state.is_dirty)


async def submit_form(
    definition: FormDefinition,
    state: FormState,
    on_submit: SubmitFunction,
    record: dict[str, Any] | None = None,
) -> SubmissionPayload:
    """
    Validate, build the payload and hand it to ``on_submit(data, is_dirty)``.

    The caller decides what to do with a clean (not dirty) form; this
    function always invokes ``on_submit`` once validation passes.

    Raises:
        FormValidationError: If validation fails; ``on_submit`` is not called
    """
    payload = build_submission(state, record=record)
    logger.debug(f"Submitting {definition.doctype} (dirty={payload.is_dirty})")
    await on_submit(payload.data, payload.is_dirty)
    return payload
