"""Unit tests for the submission pipeline."""

from unittest.mock import AsyncMock

import pytest

from jalsampada.core.exceptions import FormValidationError
from jalsampada.models.contracts.forms import TabbedLayout
from jalsampada.services.forms.state import FormState
from jalsampada.services.forms.submission import build_submission, submit_form


class TestBuildSubmission:
    """Tests for build_submission"""

    def test_layout_fields_never_submitted(self, sample_tabs, sample_record):
        state = FormState(sample_tabs, initial=sample_record)
        payload = build_submission(state, record=sample_record)
        for name in ("section_scheme", "column_flags", "status", "refresh"):
            assert name not in payload.data

    def test_check_sent_as_int(self, sample_tabs, sample_record):
        state = FormState(sample_tabs, initial=sample_record)
        state.set_value("is_active", False)
        payload = build_submission(state, record=sample_record)
        assert payload.data["is_active"] == 0
        assert payload.data["readings"][0]["verified"] == 0

    def test_check_in_new_row_sent_as_int(self, sample_tabs, sample_record):
        state = FormState(sample_tabs, initial=sample_record)
        state.add_row("readings", {"reading_date": "2024-02-01", "verified": True})
        payload = build_submission(state, record=sample_record)
        assert payload.data["readings"][1]["verified"] == 1

    def test_child_row_name_preserved(self, sample_tabs, sample_record):
        state = FormState(sample_tabs, initial=sample_record)
        payload = build_submission(state, record=sample_record)
        assert payload.data["readings"][0]["name"] == "row-1"

    def test_required_empty_district_blocked(self, sample_tabs):
        """Required district submitted as "" raises and builds no payload"""
        state = FormState(sample_tabs)
        state.set_value("district", "")
        with pytest.raises(FormValidationError) as exc_info:
            build_submission(state)
        assert exc_info.value.errors["district"] == "District is required"

    def test_update_carries_revision_metadata(self, sample_tabs, sample_record):
        """Editing one field yields the edit plus unchanged modified/docstatus"""
        state = FormState(sample_tabs, initial=sample_record)
        state.set_value("capacity", 12.5)

        payload = build_submission(state, record=sample_record)

        assert payload.is_dirty is True
        assert payload.data["capacity"] == 12.5
        assert payload.data["modified"] == "2024-01-01T00:00:00"
        assert payload.data["docstatus"] == 0

    def test_create_has_no_revision_metadata(self, sample_tabs):
        state = FormState(sample_tabs)
        state.set_value("district", "Sangli")
        payload = build_submission(state)
        assert "modified" not in payload.data
        assert "docstatus" not in payload.data

    def test_unedited_load_is_clean(self, sample_tabs, sample_record):
        state = FormState(sample_tabs, initial=sample_record)
        payload = build_submission(state, record=sample_record)
        assert payload.is_dirty is False

    def test_duration_sent_as_seconds(self):
        tabs = [TabbedLayout.model_validate({
            "name": "Resolution",
            "fields": [{"name": "resolution_time", "type": "Duration"}],
        })]
        state = FormState(tabs)
        state.set_value("resolution_time", {"hours": 2, "minutes": 15, "seconds": 30})
        payload = build_submission(state)
        assert payload.data["resolution_time"] == 8130


class TestSubmitForm:
    """Tests for submit_form"""

    async def test_calls_on_submit_with_payload(self, sample_definition, sample_tabs, sample_record):
        state = FormState(sample_tabs, initial=sample_record)
        state.set_value("district", "Satara")
        on_submit = AsyncMock()

        payload = await submit_form(sample_definition, state, on_submit, record=sample_record)

        on_submit.assert_awaited_once_with(payload.data, True)
        assert payload.data["district"] == "Satara"
        assert payload.data["taluka"] is None

    async def test_validation_failure_skips_on_submit(self, sample_definition, sample_tabs):
        state = FormState(sample_tabs)
        on_submit = AsyncMock()

        with pytest.raises(FormValidationError):
            await submit_form(sample_definition, state, on_submit)

        on_submit.assert_not_awaited()
