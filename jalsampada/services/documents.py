"""
Document Form Controller

Drives one record page (create or edit) for any doctype with a registered
layout: loads the record, applies edits to a FormState, renders it, and
saves through the Frappe client.

Lifecycle::

    idle -> loading -> loaded | error
    loaded -> editing -> saving -> saved | editing (failed save keeps the error)

A controller belongs to a single caller; the HTTP layer builds one per
request.
"""

import logging
from typing import Any

import httpx

from jalsampada.core.exceptions import FormValidationError, FrappeAPIError, InvalidStateError
from jalsampada.frappe.client import FrappeClient
from jalsampada.models.contracts.documents import DeleteResult, LinkOption, SaveResult
from jalsampada.models.contracts.errors import ErrorInfo
from jalsampada.models.contracts.forms import FormDefinition, LinkField
from jalsampada.models.contracts.rendering import RenderedForm
from jalsampada.models.enums import PageState, SaveOutcome
from jalsampada.services.errors import classify_error, stale_revision_error
from jalsampada.services.forms.filters import build_link_filters, is_empty, to_frappe_filters
from jalsampada.services.forms.renderer import FormRenderer
from jalsampada.services.forms.state import FormState
from jalsampada.services.forms.submission import build_submission

logger = logging.getLogger(__name__)

# Failures the backend or the network can produce; anything else is a bug
BACKEND_ERRORS = (FrappeAPIError, httpx.TransportError)

EDITABLE_STATES = {PageState.LOADED, PageState.EDITING, PageState.SAVED}


class DocumentFormController:
    """
    Page controller for one document.

    Args:
        definition: Layout of the doctype
        client: Frappe client
        name: Document name when editing; None when creating
        renderer: Renderer to use (a default one is created otherwise)
        slug: Route slug of the doctype, used to build redirect URLs
        link_page_length: Maximum options returned by link_options()
    """

    def __init__(
        self,
        definition: FormDefinition,
        client: FrappeClient,
        name: str | None = None,
        renderer: FormRenderer | None = None,
        slug: str | None = None,
        link_page_length: int = 200,
    ):
        self.definition = definition
        self.client = client
        self.name = name
        self.renderer = renderer or FormRenderer()
        self.slug = slug
        self.link_page_length = link_page_length

        self.page_state = PageState.IDLE
        self.state: FormState | None = None
        self.record: dict[str, Any] | None = None
        self.error: ErrorInfo | None = None

    @property
    def is_new(self) -> bool:
        return self.name is None

    @property
    def doctype(self) -> str:
        return self.definition.doctype

    def _transition(self, new_state: PageState) -> None:
        if new_state != self.page_state:
            logger.info(
                f"{self.doctype} {self.name or '(new)'}: {self.page_state.value} -> {new_state.value}")
        self.page_state = new_state

    def _require_state(self) -> FormState:
        if self.state is None or self.page_state not in EDITABLE_STATES:
            raise InvalidStateError(
                f"Form for {self.doctype} is not editable while {self.page_state.value}")
        return self.state

    def record_path(self, name: str | None = None) -> str | None:
        """In-app route of a record page, when the doctype's module and slug are known."""
        if not self.definition.module or not self.slug:
            return None
        path = f"/{self.definition.module}/doctype/{self.slug}"
        return f"{path}/{name}" if name else path

    # ==================== LOADING ====================

    async def load(self) -> FormState:
        """
        Fetch the record (edit) or seed from defaults (create).

        Raises:
            FrappeAPIError | httpx.TransportError: After recording the
                classified error on ``self.error`` and moving to ``error``
        """
        if self.page_state in (PageState.LOADING, PageState.SAVING):
            raise InvalidStateError(f"Cannot load {self.doctype} while {self.page_state.value}")

        self._transition(PageState.LOADING)
        self.error = None

        if self.is_new:
            self.record = None
            self.state = FormState(self.definition.tabs)
            self._transition(PageState.LOADED)
            return self.state

        try:
            self.record = await self.client.get_doc(self.doctype, self.name)
        except BACKEND_ERRORS as e:
            self.error = classify_error(e)
            self._transition(PageState.ERROR)
            raise

        self.state = FormState(self.definition.tabs, initial=self.record)
        self._transition(PageState.LOADED)
        return self.state

    # ==================== EDITING ====================

    def edit(self, name: str, value: Any) -> list[str]:
        """Set one field; returns dependent fields that were cleared."""
        state = self._require_state()
        cleared = state.set_value(name, value)
        self._transition(PageState.EDITING)
        return cleared

    def apply(self, values: dict[str, Any]) -> list[str]:
        """Apply a batch of edits in layout order."""
        state = self._require_state()
        cleared = state.apply_values(values)
        self._transition(PageState.EDITING)
        return cleared

    def add_row(self, table: str, row: dict[str, Any] | None = None) -> int:
        state = self._require_state()
        index = state.add_row(table, row)
        self._transition(PageState.EDITING)
        return index

    def remove_rows(self, table: str, indices: list[int]) -> None:
        state = self._require_state()
        state.remove_rows(table, indices)
        self._transition(PageState.EDITING)

    def render(self) -> RenderedForm:
        if self.state is None:
            raise InvalidStateError(f"Form for {self.doctype} has not been loaded")
        return self.renderer.render(self.definition, self.state, record=self.record)

    # ==================== SAVING ====================

    async def save(self, modified: str | None = None) -> SaveResult:
        """
        Validate and persist the form.

        Validation failures and clean forms never reach the backend. Backend
        failures are classified and returned, never raised.

        Args:
            modified: Revision the caller's edits were based on. When it is
                not the loaded record's revision the save fails as a conflict
                without sending the update.
        """
        state = self._require_state()

        try:
            payload = build_submission(state, record=self.record)
        except FormValidationError as e:
            self.error = classify_error(e)
            self._transition(PageState.EDITING)
            return SaveResult(outcome=SaveOutcome.FAILED, message=self.error.message, error=self.error)

        current = (self.record or {}).get("modified")
        if not self.is_new and modified is not None and modified != current:
            logger.info(f"{self.doctype} {self.name}: edits based on {modified}, record is at {current}")
            self.error = stale_revision_error(modified, current)
            self._transition(PageState.EDITING)
            return SaveResult(outcome=SaveOutcome.FAILED, message=self.error.message, error=self.error)

        if not payload.is_dirty:
            return SaveResult(
                outcome=SaveOutcome.UNCHANGED,
                message="No changes to save.",
                record=self.record,
            )

        self._transition(PageState.SAVING)
        try:
            if self.is_new:
                saved = await self.client.insert_doc(self.doctype, payload.data)
            else:
                saved = await self.client.update_doc(self.doctype, self.name, payload.data)
        except BACKEND_ERRORS as e:
            self.error = classify_error(e)
            self._transition(PageState.EDITING)
            return SaveResult(outcome=SaveOutcome.FAILED, message=self.error.message, error=self.error)

        created = self.is_new
        self.record = saved
        self.name = saved.get("name", self.name)
        self.error = None
        state.reseed(saved)
        self._transition(PageState.SAVED)

        verb = "created" if created else "saved"
        return SaveResult(
            outcome=SaveOutcome.SAVED,
            message=f"{self.doctype} {verb} successfully!",
            record=saved,
            redirect_url=self.record_path(self.name),
        )

    async def delete(self) -> DeleteResult:
        """
        Delete the record named by the layout's delete_config.

        Raises:
            InvalidStateError: If the layout has no delete_config or no record is named
            FrappeAPIError | httpx.TransportError: After recording the classified error
        """
        config = self.definition.delete_config
        if config is None:
            raise InvalidStateError(f"Delete is not configured for {self.doctype}")
        docname = config.docname or self.name
        if not docname:
            raise InvalidStateError("No record to delete")

        try:
            await self.client.delete_doc(config.doctype, docname)
        except BACKEND_ERRORS as e:
            self.error = classify_error(e)
            raise

        logger.info(f"Deleted {config.doctype} {docname}")
        self.cancel()
        return DeleteResult(deleted=True, redirect_url=config.redirect_url)

    def cancel(self) -> None:
        """Discard the form and return to idle."""
        self.state = None
        self.record = None
        self.error = None
        self._transition(PageState.IDLE)

    # ==================== LINK SEARCH ====================

    async def link_options(self, field_name: str, txt: str = "") -> list[LinkOption]:
        """
        Search records for a Link field, honouring its dependent filters.

        The field's current value is always included so the control can
        display it even when it falls outside the search.

        Raises:
            KeyError: If the field does not exist
            ValueError: If the field is not a Link with a target doctype
        """
        if self.state is None:
            raise InvalidStateError(f"Form for {self.doctype} has not been loaded")

        field = self.definition.get_field(field_name)
        if field is None:
            raise KeyError(f"Unknown field: {field_name}")
        if not isinstance(field, LinkField) or not field.link_target:
            raise ValueError(f"Field '{field_name}' is not a Link field with a target doctype")

        filters = to_frappe_filters(build_link_filters(field, self.state.get_value))
        if txt:
            filters.append(["name", "like", f"%{txt}%"])

        rows = await self.client.get_list(
            field.link_target,
            fields=["name"],
            filters=filters or None,
            limit_page_length=self.link_page_length,
        )
        names = [row["name"] for row in rows if row.get("name")]

        current = self.state.get_value(field_name)
        if not is_empty(current) and current not in names:
            names.insert(0, current)

        return [LinkOption(value=name, label=name) for name in names]
