"""
Frappe backend access.

    from jalsampada.frappe import get_client

    client = get_client()
    village = await client.get_doc("Village", "Mhaisal")
"""

from jalsampada.frappe.client import FrappeClient, get_client

__all__ = ["FrappeClient", "get_client"]
