"""
Pytest fixtures for Jalsampada forms testing.

This module provides:
1. A sample form definition covering every field family
2. A loaded record for that form (with Frappe revision metadata)
3. A mocked Frappe client
"""

from typing import Any
from unittest.mock import AsyncMock

import pytest

from jalsampada.config import BUNDLED_FORMS_DIR
from jalsampada.frappe.client import FrappeClient
from jalsampada.models.contracts.forms import FormDefinition


SAMPLE_FORM: dict[str, Any] = {
    "doctype": "Pump House",
    "module": "lis-management",
    "title": "Pump House",
    "submit_label": "Save",
    "tabs": [
        {
            "name": "Details",
            "fields": [
                {"name": "district", "label": "District", "type": "Link",
                 "link_target": "WRD District", "required": True},
                {"name": "taluka", "label": "Taluka", "type": "Link", "link_target": "WRD Taluka",
                 "filter_mapping": [{"source_field": "district", "target_field": "district"}]},
                {"name": "section_scheme", "label": "Scheme", "type": "Section Break"},
                {"name": "lis_name", "label": "LIS Name", "type": "Link",
                 "link_target": "Lift Irrigation Scheme"},
                {"name": "stage", "label": "Stage", "type": "Link", "link_target": "Stage No",
                 "filter_mapping": [{"source_field": "lis_name", "target_field": "lis_name"}]},
                {"name": "column_flags", "type": "Column Break"},
                {"name": "is_active", "label": "Is Active", "type": "Check"},
                {"name": "status", "label": "Status", "type": "Read Only"},
                {"name": "refresh", "type": "Button", "button_label": "Refresh", "action": "refresh"},
            ],
        },
        {
            "name": "Readings",
            "fields": [
                {"name": "capacity", "label": "Capacity", "type": "Float", "min": 0},
                {"name": "efficiency", "label": "Efficiency", "type": "Percent"},
                {"name": "quantity", "label": "Quantity", "type": "Int", "min": 1, "default_value": 1},
                {"name": "category", "label": "Category", "type": "Select", "options": ["Pump", "Motor"]},
                {"name": "code", "label": "Code", "type": "Data",
                 "pattern": r"^[A-Z]{3}-\d+$", "pattern_message": "Code must look like PMP-1"},
                {"name": "notes", "label": "Notes", "type": "Long Text"},
                {
                    "name": "readings",
                    "label": "Readings",
                    "type": "Table",
                    "columns": [
                        {"name": "reading_date", "label": "Reading Date", "type": "Date", "required": True},
                        {"name": "value", "label": "Value", "type": "Float"},
                        {"name": "verified", "label": "Verified", "type": "Check"},
                    ],
                },
            ],
        },
    ],
    "delete_config": {"doctype": "Pump House", "redirect_url": "/lis-management/doctype/pump-house"},
}


@pytest.fixture
def sample_definition() -> FormDefinition:
    """Form definition exercising every field family"""
    return FormDefinition.model_validate(SAMPLE_FORM)


@pytest.fixture
def sample_tabs(sample_definition):
    return sample_definition.tabs


@pytest.fixture
def sample_record() -> dict[str, Any]:
    """A stored Pump House record as Frappe returns it"""
    return {
        "name": "PH-0001",
        "doctype": "Pump House",
        "modified": "2024-01-01T00:00:00",
        "docstatus": 0,
        "owner": "Administrator",
        "district": "Sangli",
        "taluka": "Miraj",
        "lis_name": "Mhaisal",
        "stage": "Stage 1",
        "is_active": 1,
        "status": "Working",
        "capacity": 10.5,
        "efficiency": 80,
        "quantity": 2,
        "category": "Pump",
        "code": "PMP-1",
        "notes": None,
        "readings": [
            {"name": "row-1", "reading_date": "2024-01-01", "value": 3.5, "verified": 0},
        ],
    }


@pytest.fixture
def forms_dir():
    """Directory of the layouts shipped with the package"""
    return BUNDLED_FORMS_DIR


@pytest.fixture
def mock_frappe_client():
    """Frappe client whose async methods are AsyncMocks"""
    client = AsyncMock(spec=FrappeClient)
    client.base_url = "https://erp.example.org"
    return client
