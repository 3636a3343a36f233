"""
Link field dependent filters.

A Link field may declare filter mappings that constrain its search by the
current value of another field (e.g. Taluka filtered by District). This
module computes the active filters and finds which fields depend on a
given source field.
"""

from typing import Any, Callable, Iterable

from jalsampada.models.contracts.forms import FieldSchema, LinkField


def is_empty(value: Any) -> bool:
    """True for values a form treats as unset."""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, dict, set)):
        return len(value) == 0
    return False


def build_link_filters(field: FieldSchema, get_value: Callable[[str], Any]) -> dict[str, Any]:
    """
    Compute the search filters for a Link field.

    Args:
        field: Field schema (non-Link fields yield no filters)
        get_value: Returns the current value of a field by name

    Returns:
        ``{target_field: value}`` for every mapping whose source field is set.
        Mappings with an empty source are omitted, giving an unfiltered search.
    """
    if not isinstance(field, LinkField):
        return {}

    filters: dict[str, Any] = {}
    for mapping in field.filter_mapping:
        source_value = get_value(mapping.source_field)
        if not is_empty(source_value):
            filters[mapping.target_field] = source_value
    return filters


def dependent_fields(fields: Iterable[FieldSchema], source: str) -> list[str]:
    """Names of Link fields whose filters read ``source``, in layout order."""
    return [
        field.name
        for field in fields
        if isinstance(field, LinkField) and source in field.source_fields
    ]


def to_frappe_filters(filters: dict[str, Any]) -> list[list[Any]]:
    """Convert ``{field: value}`` into Frappe's ``[[field, "=", value]]`` form."""
    return [[name, "=", value] for name, value in filters.items()]
