"""Unit tests for Link field dependent filters."""

from jalsampada.services.forms.filters import (
    build_link_filters,
    dependent_fields,
    is_empty,
    to_frappe_filters,
)


class TestBuildLinkFilters:
    def test_filter_from_source_value(self, sample_definition):
        values = {"lis_name": "Mhaisal"}
        field = sample_definition.get_field("stage")
        assert build_link_filters(field, values.get) == {"lis_name": "Mhaisal"}

    def test_empty_source_omitted(self, sample_definition):
        """An unset source gives an unfiltered search"""
        values = {"lis_name": ""}
        field = sample_definition.get_field("stage")
        assert build_link_filters(field, values.get) == {}

    def test_non_link_field(self, sample_definition):
        field = sample_definition.get_field("capacity")
        assert build_link_filters(field, lambda name: "x") == {}


class TestDependentFields:
    def test_direct_dependents(self, sample_definition):
        fields = sample_definition.all_fields()
        assert dependent_fields(fields, "lis_name") == ["stage"]
        assert dependent_fields(fields, "district") == ["taluka"]
        assert dependent_fields(fields, "capacity") == []


class TestHelpers:
    def test_is_empty(self):
        assert is_empty(None)
        assert is_empty("  ")
        assert is_empty([])
        assert not is_empty(0)
        assert not is_empty(False)
        assert not is_empty("x")

    def test_to_frappe_filters(self):
        assert to_frappe_filters({"district": "Sangli"}) == [["district", "=", "Sangli"]]
