"""
Frappe REST Client

Async HTTP client for the Frappe resource and method APIs.
Authenticates with an API key pair (``Authorization: token key:secret``).
"""

import json
import logging
from typing import Any
from urllib.parse import quote

import httpx

from jalsampada.config import get_settings
from jalsampada.core.exceptions import FrappeAPIError

logger = logging.getLogger(__name__)


def _quote(segment: str) -> str:
    return quote(str(segment), safe="")


class FrappeClient:
    """
    HTTP client for one Frappe site.

    Singleton pattern - use get_client() to get the process-wide instance.
    Tests construct it directly and pass a ``transport``.
    """

    _instance: "FrappeClient | None" = None

    def __init__(
        self,
        base_url: str,
        api_key: str,
        api_secret: str,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Initialize client.

        Args:
            base_url: Frappe site URL, e.g. https://erp.example.org
            api_key: API key of the service user
            api_secret: API secret of the service user
            timeout: Per-request timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        self.base_url = base_url.rstrip("/")
        self._http = httpx.AsyncClient(
            base_url=self.base_url,
            headers={
                "Authorization": f"token {api_key}:{api_secret}",
                "Accept": "application/json",
            },
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def get_instance(cls) -> "FrappeClient":
        """
        Get singleton client instance configured from settings.

        Raises:
            RuntimeError: If the API key pair is not configured
        """
        if cls._instance is None:
            settings = get_settings()
            if not settings.frappe_api_key or not settings.frappe_api_secret:
                raise RuntimeError(
                    "JALSAMPADA_FRAPPE_API_KEY and JALSAMPADA_FRAPPE_API_SECRET environment variables required.\n"
                    "Set them in your .env file or export them:\n"
                    "  export JALSAMPADA_FRAPPE_URL=https://your-frappe-site.org\n"
                    "  export JALSAMPADA_FRAPPE_API_KEY=xxxxxxxxxxxx\n"
                    "  export JALSAMPADA_FRAPPE_API_SECRET=xxxxxxxxxxxx"
                )
            cls._instance = cls(
                settings.frappe_url,
                settings.frappe_api_key,
                settings.frappe_api_secret,
                timeout=settings.request_timeout_seconds,
            )
        return cls._instance

    @classmethod
    async def reset_instance(cls) -> None:
        """Close and forget the singleton."""
        if cls._instance is not None:
            await cls._instance.close()
            cls._instance = None

    # ==================== TRANSPORT ====================

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        """
        Send a request and decode the JSON body.

        Raises:
            FrappeAPIError: On a non-2xx response
            httpx.TransportError: On connection failures and timeouts
        """
        logger.debug(f"Frappe {method} {path}")
        response = await self._http.request(method, path, **kwargs)

        if not response.is_success:
            try:
                body = response.json()
            except ValueError:
                body = response.text
            logger.warning(f"Frappe {method} {path} failed with status {response.status_code}")
            raise FrappeAPIError(response.status_code, body)

        if not response.content:
            return {}
        return response.json()

    @staticmethod
    def _resource_path(doctype: str, name: str | None = None) -> str:
        path = f"/api/resource/{_quote(doctype)}"
        if name is not None:
            path += f"/{_quote(name)}"
        return path

    # ==================== RESOURCE API ====================

    async def get_doc(self, doctype: str, name: str) -> dict[str, Any]:
        """Fetch one document."""
        payload = await self._request("GET", self._resource_path(doctype, name))
        return payload.get("data", {})

    async def insert_doc(self, doctype: str, data: dict[str, Any]) -> dict[str, Any]:
        """Create a document; returns the stored document."""
        payload = await self._request("POST", self._resource_path(doctype), json=data)
        return payload.get("data", {})

    async def update_doc(self, doctype: str, name: str, data: dict[str, Any]) -> dict[str, Any]:
        """Update a document; returns the stored document."""
        payload = await self._request("PUT", self._resource_path(doctype, name), json=data)
        return payload.get("data", {})

    async def delete_doc(self, doctype: str, name: str) -> None:
        await self._request("DELETE", self._resource_path(doctype, name))

    async def get_list(
        self,
        doctype: str,
        fields: list[str] | None = None,
        filters: list[list[Any]] | dict[str, Any] | None = None,
        limit_page_length: int | None = None,
        order_by: str | None = None,
        limit_start: int | None = None,
    ) -> list[dict[str, Any]]:
        """
        List documents of a doctype.

        Args:
            doctype: Doctype name
            fields: Columns to return (Frappe defaults to ``name`` only)
            filters: ``[[field, op, value], ...]`` or ``{field: value}``
            limit_page_length: Page size; 0 means no limit
            order_by: e.g. ``"modified desc"``
            limit_start: Offset for paging

        Returns:
            List of row dicts
        """
        params: dict[str, Any] = {}
        if fields is not None:
            params["fields"] = json.dumps(fields)
        if filters:
            params["filters"] = json.dumps(filters)
        if limit_page_length is not None:
            params["limit_page_length"] = limit_page_length
        if limit_start is not None:
            params["limit_start"] = limit_start
        if order_by:
            params["order_by"] = order_by

        payload = await self._request("GET", self._resource_path(doctype), params=params)
        return payload.get("data", [])

    # ==================== METHOD API ====================

    async def get_count(self, doctype: str, filters: list[list[Any]] | dict[str, Any] | None = None) -> int:
        params: dict[str, Any] = {"doctype": doctype}
        if filters:
            params["filters"] = json.dumps(filters)
        payload = await self._request("GET", "/api/method/frappe.client.get_count", params=params)
        return int(payload.get("message") or 0)

    async def search_link(
        self,
        doctype: str,
        txt: str = "",
        filters: dict[str, Any] | None = None,
        reference_doctype: str | None = None,
        page_length: int = 20,
    ) -> list[dict[str, Any]]:
        """
        Run Frappe's link search.

        Returns:
            ``[{"value": ..., "description": ...}, ...]``
        """
        params: dict[str, Any] = {"doctype": doctype, "txt": txt, "page_length": page_length}
        if filters:
            params["filters"] = json.dumps(filters)
        if reference_doctype:
            params["reference_doctype"] = reference_doctype
        payload = await self._request("GET", "/api/method/frappe.desk.search.search_link", params=params)
        # Older Frappe versions answer under "results"
        return payload.get("message") or payload.get("results") or []

    async def bulk_delete(self, doctype: str, names: list[str]) -> Any:
        """Delete several documents in one call (form-encoded ``items``)."""
        data = {"items": json.dumps(names), "doctype": doctype}
        payload = await self._request(
            "POST", "/api/method/frappe.desk.reportview.delete_items", data=data)
        return payload.get("message")

    async def rename_doc(self, doctype: str, docname: str, new_name: str) -> Any:
        """Rename a document, updating fields that link to it."""
        data = {
            "doctype": doctype,
            "docname": docname,
            "name": new_name,
            "enqueue": "true",
            "merge": "0",
        }
        payload = await self._request(
            "POST", "/api/method/frappe.model.rename_doc.update_document_title", data=data)
        return payload.get("message")

    async def close(self):
        """Close HTTP client."""
        await self._http.aclose()


def get_client() -> FrappeClient:
    """Get the singleton Frappe client."""
    return FrappeClient.get_instance()
