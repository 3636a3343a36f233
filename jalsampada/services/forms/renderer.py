"""
Form renderer.

Interprets a FormDefinition against a FormState and produces a
RenderedForm: one control per field, grouped by tab, carrying the current
value, any validation error and, for Link fields, the filters the search
must apply. Layout entries become unbound markers.
"""

import logging
from typing import Any, Callable

from jalsampada.core.exceptions import UnknownComponentError
from jalsampada.models.contracts.forms import (
    ButtonField,
    CustomField,
    DurationField,
    FieldSchema,
    FormDefinition,
    LinkField,
    NumberField,
    ReadOnlyField,
    SelectField,
    TableField,
    TextField,
)
from jalsampada.models.contracts.rendering import RenderedControl, RenderedForm, RenderedTab
from jalsampada.models.enums import FieldType, WidgetKind
from jalsampada.services.forms.filters import build_link_filters
from jalsampada.services.forms.state import FormState

logger = logging.getLogger(__name__)

CustomComponent = Callable[[CustomField, Any], dict[str, Any]]

WIDGETS: dict[str, WidgetKind] = {
    FieldType.DATA.value: WidgetKind.TEXT,
    FieldType.SMALL_TEXT.value: WidgetKind.TEXT,
    FieldType.TEXT.value: WidgetKind.TEXT,
    FieldType.BARCODE.value: WidgetKind.TEXT,
    FieldType.LONG_TEXT.value: WidgetKind.TEXTAREA,
    FieldType.CODE.value: WidgetKind.TEXTAREA,
    FieldType.PASSWORD.value: WidgetKind.PASSWORD,
    FieldType.COLOR.value: WidgetKind.COLOR,
    FieldType.DATE.value: WidgetKind.DATE,
    FieldType.DATETIME.value: WidgetKind.DATETIME,
    FieldType.TIME.value: WidgetKind.TIME,
    FieldType.ATTACH.value: WidgetKind.FILE,
    FieldType.SIGNATURE.value: WidgetKind.SIGNATURE,
    FieldType.MARKDOWN_EDITOR.value: WidgetKind.TEXTAREA,
    FieldType.INT.value: WidgetKind.NUMBER,
    FieldType.FLOAT.value: WidgetKind.NUMBER,
    FieldType.CURRENCY.value: WidgetKind.NUMBER,
    FieldType.PERCENT.value: WidgetKind.NUMBER,
    FieldType.RATING.value: WidgetKind.RATING,
    FieldType.DURATION.value: WidgetKind.DURATION,
    FieldType.CHECK.value: WidgetKind.CHECKBOX,
    FieldType.SELECT.value: WidgetKind.SELECT,
    FieldType.LINK.value: WidgetKind.LINK,
    FieldType.TABLE.value: WidgetKind.TABLE,
    FieldType.TABLE_MULTISELECT.value: WidgetKind.TABLE,
    FieldType.CUSTOM.value: WidgetKind.CUSTOM,
    FieldType.SECTION_BREAK.value: WidgetKind.SECTION,
    FieldType.COLUMN_BREAK.value: WidgetKind.COLUMN,
    FieldType.BUTTON.value: WidgetKind.BUTTON,
    FieldType.READ_ONLY.value: WidgetKind.READ_ONLY,
}

# Default textarea heights
TEXTAREA_ROWS = {FieldType.CODE.value: 6}
DEFAULT_TEXTAREA_ROWS = 4


class FormRenderer:
    """
    Renders form definitions.

    Args:
        custom_components: Functions that render ``Custom`` fields, by
            component name. Each receives ``(field, value)`` and returns the
            payload placed on the control's ``custom`` attribute.
    """

    def __init__(self, custom_components: dict[str, CustomComponent] | None = None):
        self.custom_components: dict[str, CustomComponent] = dict(custom_components or {})

    def register(self, name: str, component: CustomComponent) -> None:
        self.custom_components[name] = component

    def render(
        self,
        definition: FormDefinition,
        state: FormState,
        record: dict[str, Any] | None = None,
    ) -> RenderedForm:
        """
        Render every tab of ``definition`` bound to ``state``.

        When ``record`` is given, its ``modified``/``docstatus`` are carried on
        the result so the caller can send them back with its update.
        """
        record = record or {}
        tabs = [
            RenderedTab(
                name=tab.name,
                controls=[self.render_field(field, state) for field in tab.fields],
            )
            for tab in definition.tabs
        ]
        return RenderedForm(
            doctype=definition.doctype,
            title=definition.title,
            description=definition.description,
            submit_label=definition.submit_label,
            cancel_label=definition.cancel_label,
            tabs=tabs,
            is_dirty=state.is_dirty,
            errors=dict(state.errors),
            delete_config=definition.delete_config,
            modified=record.get("modified"),
            docstatus=record.get("docstatus"),
        )

    def render_field(self, field: FieldSchema, state: FormState) -> RenderedControl:
        control = self._base_control(field)

        if not field.submits_value:
            control.bound = False
            if isinstance(field, ButtonField):
                control.button_label = field.button_label or field.display_label
                control.action = field.action
            elif isinstance(field, ReadOnlyField):
                control.value = field.read_only_value if field.read_only_value is not None else state.get_value(field.name)
            return control

        control.value = state.get_value(field.name)
        control.error = state.errors.get(field.name)

        if isinstance(field, LinkField):
            control.link_target = field.link_target
            control.link_filters = build_link_filters(field, state.get_value)
        elif isinstance(field, TableField):
            control.columns = [self._base_control(column) for column in field.columns]
        elif isinstance(field, CustomField):
            component = self.custom_components.get(field.component)
            if component is None:
                raise UnknownComponentError(field.component, field.name)
            control.custom = component(field, control.value)

        return control

    def _base_control(self, field: FieldSchema) -> RenderedControl:
        """Describe a field without binding it to state (also used for table columns)."""
        control = RenderedControl(
            name=field.name,
            label=field.display_label,
            field_type=field.type,
            widget=WIDGETS[field.type],
            required=field.required,
            description=field.description,
            placeholder=field.placeholder,
        )
        if isinstance(field, SelectField):
            control.options = list(field.options)
        elif isinstance(field, NumberField):
            control.min = field.min
            control.max = field.max
            control.step = field.step
        elif isinstance(field, DurationField):
            control.min = 0
        elif isinstance(field, TextField) and control.widget == WidgetKind.TEXTAREA:
            control.rows = field.rows or TEXTAREA_ROWS.get(field.type, DEFAULT_TEXTAREA_ROWS)
        elif isinstance(field, LinkField):
            control.link_target = field.link_target
        return control
