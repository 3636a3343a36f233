"""
Jalsampada Models

Pydantic contracts (layouts, rendered forms, payloads, errors):
    from jalsampada.models import FormDefinition, RenderedForm
    from jalsampada.models.contracts.forms import LinkField  # Granular access

Enums:
    from jalsampada.models import ErrorKind
    from jalsampada.models.enums import ErrorKind
"""

from jalsampada.models.contracts import *  # noqa: F401, F403

from jalsampada.models.enums import (
    ErrorKind,
    FieldType,
    PageState,
    SaveOutcome,
    WidgetKind,
)
