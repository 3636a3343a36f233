"""
Unit tests for DocumentFormController.

The Frappe client is an AsyncMock, so the tests can assert exactly which
backend calls a page operation makes (and which it must not make).
"""

import httpx
import pytest

from jalsampada.core.exceptions import FrappeAPIError, InvalidStateError
from jalsampada.models.enums import ErrorKind, PageState, SaveOutcome
from jalsampada.services.documents import DocumentFormController


@pytest.fixture
def edit_controller(sample_definition, mock_frappe_client, sample_record):
    mock_frappe_client.get_doc.return_value = sample_record
    return DocumentFormController(
        sample_definition, mock_frappe_client, name="PH-0001", slug="pump-house")


@pytest.fixture
def new_controller(sample_definition, mock_frappe_client):
    return DocumentFormController(sample_definition, mock_frappe_client, slug="pump-house")


class TestLoad:
    """Tests for loading records"""

    async def test_load_existing(self, edit_controller, mock_frappe_client):
        state = await edit_controller.load()

        mock_frappe_client.get_doc.assert_awaited_once_with("Pump House", "PH-0001")
        assert edit_controller.page_state == PageState.LOADED
        assert state.get_value("district") == "Sangli"

    async def test_load_new_makes_no_request(self, new_controller, mock_frappe_client):
        state = await new_controller.load()

        mock_frappe_client.get_doc.assert_not_awaited()
        assert new_controller.page_state == PageState.LOADED
        assert state.get_value("quantity") == 1

    async def test_load_not_found(self, edit_controller, mock_frappe_client):
        mock_frappe_client.get_doc.side_effect = FrappeAPIError(404, {"exc_type": "DoesNotExistError"})

        with pytest.raises(FrappeAPIError):
            await edit_controller.load()

        assert edit_controller.page_state == PageState.ERROR
        assert edit_controller.error.kind == ErrorKind.AUTH
        assert edit_controller.error.message == "Record not found"

    async def test_load_network_failure(self, edit_controller, mock_frappe_client):
        mock_frappe_client.get_doc.side_effect = httpx.ConnectError("refused")

        with pytest.raises(httpx.TransportError):
            await edit_controller.load()

        assert edit_controller.error.kind == ErrorKind.NETWORK

    async def test_edit_before_load(self, edit_controller):
        with pytest.raises(InvalidStateError):
            edit_controller.edit("district", "Satara")


class TestEditing:
    """Tests for edits through the controller"""

    async def test_edit_moves_to_editing(self, edit_controller):
        await edit_controller.load()
        cleared = edit_controller.edit("lis_name", "Takari")
        assert cleared == ["stage"]
        assert edit_controller.page_state == PageState.EDITING

    async def test_table_rows(self, edit_controller):
        await edit_controller.load()
        index = edit_controller.add_row("readings", {"reading_date": "2024-03-01"})
        edit_controller.remove_rows("readings", [0])
        rows = edit_controller.state.get_value("readings")
        assert index == 1
        assert [row["reading_date"] for row in rows] == ["2024-03-01"]

    async def test_render(self, edit_controller):
        await edit_controller.load()
        edit_controller.edit("capacity", 11)
        rendered = edit_controller.render()
        assert rendered.is_dirty is True

    def test_render_before_load(self, new_controller):
        with pytest.raises(InvalidStateError):
            new_controller.render()


class TestSave:
    """Tests for saving"""

    async def test_unchanged_makes_no_request(self, edit_controller, mock_frappe_client):
        """Load then save without edits never calls the backend"""
        await edit_controller.load()

        result = await edit_controller.save()

        assert result.outcome == SaveOutcome.UNCHANGED
        assert result.message == "No changes to save."
        mock_frappe_client.update_doc.assert_not_awaited()
        mock_frappe_client.insert_doc.assert_not_awaited()

    async def test_update_sends_edit_and_revision(self, edit_controller, mock_frappe_client, sample_record):
        mock_frappe_client.update_doc.return_value = {
            **sample_record, "capacity": 12.5, "modified": "2024-01-02T00:00:00"}
        await edit_controller.load()
        edit_controller.edit("capacity", 12.5)

        result = await edit_controller.save()

        doctype, name, data = mock_frappe_client.update_doc.await_args.args
        assert (doctype, name) == ("Pump House", "PH-0001")
        assert data["capacity"] == 12.5
        assert data["modified"] == "2024-01-01T00:00:00"
        assert data["docstatus"] == 0
        assert result.outcome == SaveOutcome.SAVED
        assert result.redirect_url == "/lis-management/doctype/pump-house/PH-0001"
        assert edit_controller.page_state == PageState.SAVED

    async def test_saved_record_becomes_baseline(self, edit_controller, mock_frappe_client, sample_record):
        mock_frappe_client.update_doc.return_value = {
            **sample_record, "capacity": 12.5, "modified": "2024-01-02T00:00:00"}
        await edit_controller.load()
        edit_controller.edit("capacity", 12.5)
        await edit_controller.save()

        assert edit_controller.state.is_dirty is False
        assert edit_controller.record["modified"] == "2024-01-02T00:00:00"

    async def test_create_inserts(self, new_controller, mock_frappe_client):
        mock_frappe_client.insert_doc.return_value = {"name": "PH-0002", "district": "Sangli"}
        await new_controller.load()
        new_controller.edit("district", "Sangli")

        result = await new_controller.save()

        doctype, data = mock_frappe_client.insert_doc.await_args.args
        assert doctype == "Pump House"
        assert data["district"] == "Sangli"
        assert "modified" not in data
        assert result.outcome == SaveOutcome.SAVED
        assert new_controller.name == "PH-0002"
        assert new_controller.is_new is False

    async def test_validation_failure_makes_no_request(self, edit_controller, mock_frappe_client):
        await edit_controller.load()
        edit_controller.edit("district", "")

        result = await edit_controller.save()

        assert result.outcome == SaveOutcome.FAILED
        assert result.error.kind == ErrorKind.VALIDATION
        assert result.error.field_errors == {"district": "District is required"}
        assert edit_controller.page_state == PageState.EDITING
        mock_frappe_client.update_doc.assert_not_awaited()

    async def test_conflict_returns_to_editing(self, edit_controller, mock_frappe_client):
        mock_frappe_client.update_doc.side_effect = FrappeAPIError(
            417, {"exc_type": "TimestampMismatchError"})
        await edit_controller.load()
        edit_controller.edit("capacity", 12.5)

        result = await edit_controller.save()

        assert result.outcome == SaveOutcome.FAILED
        assert result.error.kind == ErrorKind.CONFLICT
        assert edit_controller.page_state == PageState.EDITING
        assert edit_controller.error == result.error
        assert edit_controller.state.get_value("capacity") == 12.5

    async def test_stale_revision_refused(self, edit_controller, mock_frappe_client):
        """Edits made against an older revision are not sent"""
        await edit_controller.load()
        edit_controller.edit("capacity", 12.5)

        result = await edit_controller.save(modified="2023-12-31T00:00:00")

        assert result.outcome == SaveOutcome.FAILED
        assert result.error.kind == ErrorKind.CONFLICT
        assert result.error.message == "Document has been modified after you opened it"
        assert edit_controller.page_state == PageState.EDITING
        mock_frappe_client.update_doc.assert_not_awaited()

    async def test_matching_revision_saves(self, edit_controller, mock_frappe_client, sample_record):
        mock_frappe_client.update_doc.return_value = {**sample_record, "capacity": 12.5}
        await edit_controller.load()
        edit_controller.edit("capacity", 12.5)

        result = await edit_controller.save(modified="2024-01-01T00:00:00")

        assert result.outcome == SaveOutcome.SAVED
        mock_frappe_client.update_doc.assert_awaited_once()


class TestDelete:
    """Tests for delete and cancel"""

    async def test_delete_uses_config(self, edit_controller, mock_frappe_client):
        result = await edit_controller.delete()

        mock_frappe_client.delete_doc.assert_awaited_once_with("Pump House", "PH-0001")
        assert result.deleted is True
        assert result.redirect_url == "/lis-management/doctype/pump-house"
        assert edit_controller.page_state == PageState.IDLE

    async def test_delete_without_config(self, sample_definition, mock_frappe_client):
        definition = sample_definition.model_copy(update={"delete_config": None})
        controller = DocumentFormController(definition, mock_frappe_client, name="PH-0001")
        with pytest.raises(InvalidStateError):
            await controller.delete()

    async def test_delete_failure_classified(self, edit_controller, mock_frappe_client):
        mock_frappe_client.delete_doc.side_effect = FrappeAPIError(417, {"exc_type": "LinkExistsError"})
        with pytest.raises(FrappeAPIError):
            await edit_controller.delete()
        assert edit_controller.error.kind == ErrorKind.VALIDATION

    async def test_cancel(self, edit_controller):
        await edit_controller.load()
        edit_controller.edit("capacity", 1)
        edit_controller.cancel()
        assert edit_controller.page_state == PageState.IDLE
        assert edit_controller.state is None


class TestLinkOptions:
    """Tests for Link field searches"""

    async def test_filtered_by_source(self, edit_controller, mock_frappe_client):
        mock_frappe_client.get_list.return_value = [{"name": "Stage 1"}, {"name": "Stage 2"}]
        await edit_controller.load()

        options = await edit_controller.link_options("stage")

        mock_frappe_client.get_list.assert_awaited_once_with(
            "Stage No",
            fields=["name"],
            filters=[["lis_name", "=", "Mhaisal"]],
            limit_page_length=200,
        )
        assert [option.value for option in options] == ["Stage 1", "Stage 2"]

    async def test_current_value_injected(self, edit_controller, mock_frappe_client):
        mock_frappe_client.get_list.return_value = [{"name": "Stage 2"}]
        await edit_controller.load()

        options = await edit_controller.link_options("stage")

        assert [option.value for option in options] == ["Stage 1", "Stage 2"]

    async def test_search_text_and_no_source(self, new_controller, mock_frappe_client):
        mock_frappe_client.get_list.return_value = []
        await new_controller.load()

        await new_controller.link_options("stage", "Wak")

        kwargs = mock_frappe_client.get_list.await_args.kwargs
        assert kwargs["filters"] == [["name", "like", "%Wak%"]]

    async def test_unfiltered_when_source_empty(self, new_controller, mock_frappe_client):
        mock_frappe_client.get_list.return_value = []
        await new_controller.load()
        await new_controller.link_options("stage")
        assert mock_frappe_client.get_list.await_args.kwargs["filters"] is None

    async def test_not_a_link(self, edit_controller):
        await edit_controller.load()
        with pytest.raises(ValueError):
            await edit_controller.link_options("capacity")

    async def test_unknown_field(self, edit_controller):
        await edit_controller.load()
        with pytest.raises(KeyError):
            await edit_controller.link_options("nope")
