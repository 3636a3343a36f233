"""
Metadata-driven form engine.

    from jalsampada.services.forms import FormState, FormRenderer, build_submission
"""

from jalsampada.services.forms.filters import build_link_filters, dependent_fields
from jalsampada.services.forms.registry import FormRegistry
from jalsampada.services.forms.renderer import FormRenderer
from jalsampada.services.forms.state import FormState
from jalsampada.services.forms.submission import build_submission, submit_form

__all__ = [
    "FormRegistry",
    "FormRenderer",
    "FormState",
    "build_link_filters",
    "build_submission",
    "dependent_fields",
    "submit_form",
]
