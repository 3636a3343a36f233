"""
Error classification.

Maps anything raised while loading, validating or saving a record onto an
ErrorInfo with one of five kinds (validation, conflict, auth, network,
unknown). Frappe error bodies are unpacked here: ``_server_messages`` is a
JSON list of JSON-encoded message objects, and messages often embed desk
links to the record that caused the failure.
"""

import json
import logging
import re
from typing import Any
from urllib.parse import unquote, urlsplit

import httpx

from jalsampada.core.exceptions import FormValidationError, FrappeAPIError
from jalsampada.models.contracts.errors import ErrorInfo, RecordLink
from jalsampada.models.enums import ErrorKind

logger = logging.getLogger(__name__)

# Frappe desk route slug -> UI module that hosts the doctype's pages
DOCTYPE_MODULE_MAP: dict[str, str] = {
    # LIS management
    "lift-irrigation-scheme": "lis-management",
    "stage-no": "lis-management",
    "lis-phases": "lis-management",
    "village": "lis-management",
    "taluka": "lis-management",
    "district": "lis-management",
    "asset": "lis-management",
    "asset-category": "lis-management",
    "equipement-capacity": "lis-management",
    "equipement-model": "lis-management",
    "equipment-make": "lis-management",
    "rating": "lis-management",
    # Operations
    "gate": "operations",
    "gate-operation-logbook": "operations",
    "logbook": "operations",
    "logsheet": "operations",
    "warehouse": "operations",
    "item": "operations",
    "repair-work-requirement": "operations",
    "spare-indent": "operations",
    "temperature": "operations",
    "lis-incident-record": "operations",
    # Admin
    "user": "admin",
    "session-default": "admin",
    # Attendance
    "employee": "attendance",
    # Tender
    "tender": "tender",
    "contractor": "tender",
    "draft-tender-paper": "tender",
    "expenditure": "tender",
    "fund-head": "tender",
    "prapan-suchi": "tender",
    "work-subtype": "tender",
    "work-type": "tender",
}

AUTH_EXC_TYPES = {"PermissionError"}
NOT_FOUND_EXC_TYPES = {"DoesNotExistError"}
CONFLICT_EXC_TYPES = {"DuplicateEntryError", "UniqueValidationError", "TimestampMismatchError"}
VALIDATION_EXC_TYPES = {"ValidationError", "MandatoryError", "LinkValidationError"}

CONFLICT_MESSAGES = {
    "DuplicateEntryError": "Duplicate Entry Error",
    "UniqueValidationError": "Duplicate Entry Error",
    "TimestampMismatchError": "Document has been modified after you opened it",
}

_LINK_RE = re.compile(r'<a\s+href="([^"]+)">([^<]+)</a>')
_TAG_RE = re.compile(r"<[^>]+>")


def strip_html(text: str) -> str:
    """Drop markup from a server message, keeping link labels."""
    return _TAG_RE.sub("", text).strip()


def parse_server_messages(body: Any) -> list[str]:
    """
    Extract human-readable messages from a Frappe error body.

    Tries ``_server_messages`` first, then ``exception``, then ``message``.
    Malformed entries are kept as raw text rather than dropped.
    """
    if isinstance(body, str):
        return [body] if body.strip() else []
    if not isinstance(body, dict):
        return []

    messages: list[str] = []
    raw = body.get("_server_messages")
    if raw:
        try:
            entries = json.loads(raw) if isinstance(raw, str) else raw
        except json.JSONDecodeError:
            entries = [raw]
        if not isinstance(entries, list):
            entries = [entries]
        for entry in entries:
            message = _entry_message(entry)
            if message:
                messages.append(message)

    if messages:
        return messages

    for key in ("exception", "message"):
        value = body.get(key)
        if isinstance(value, str) and value.strip():
            return [value]
    return []


def _entry_message(entry: Any) -> str | None:
    if isinstance(entry, str):
        try:
            decoded = json.loads(entry)
        except json.JSONDecodeError:
            return entry
        entry = decoded
    if isinstance(entry, dict):
        message = entry.get("message")
        return str(message) if message is not None else None
    if entry is None:
        return None
    return str(entry)


def extract_record_links(messages: list[str]) -> list[RecordLink]:
    """
    Find Frappe desk links in server messages.

    A link to ``.../app/{slug}/{name}`` whose slug is in DOCTYPE_MODULE_MAP
    also gets an ``internal_path`` of ``/{module}/doctype/{slug}/{name}``.
    """
    links: list[RecordLink] = []
    for message in messages:
        for url, label in _LINK_RE.findall(message):
            links.append(_record_link(url, label))
    return links


def _record_link(url: str, label: str) -> RecordLink:
    segments = [segment for segment in urlsplit(url).path.split("/") if segment]
    if "app" not in segments:
        return RecordLink(label=label, url=url)

    app_index = segments.index("app")
    if len(segments) <= app_index + 2:
        return RecordLink(label=label, url=url)

    slug = segments[app_index + 1]
    raw_name = segments[app_index + 2]
    module = DOCTYPE_MODULE_MAP.get(slug.lower())
    internal_path = f"/{module}/doctype/{slug}/{raw_name}" if module else None
    return RecordLink(
        label=label,
        url=url,
        doctype_slug=slug,
        name=unquote(raw_name),
        internal_path=internal_path,
    )


def classify_error(exc: BaseException) -> ErrorInfo:
    """
    Classify an exception for presentation.

    Args:
        exc: Anything raised by validation, the Frappe client or the transport

    Returns:
        ErrorInfo; never raises
    """
    if isinstance(exc, FormValidationError):
        return ErrorInfo(
            kind=ErrorKind.VALIDATION,
            message=exc.message,
            messages=list(exc.errors.values()),
            field_errors=dict(exc.errors),
        )

    if isinstance(exc, httpx.TransportError):
        return ErrorInfo(kind=ErrorKind.NETWORK, message="Network error", detail=str(exc) or None)

    if isinstance(exc, FrappeAPIError):
        return _classify_frappe_error(exc)

    logger.error(f"Unclassified error: {exc}", exc_info=exc)
    return ErrorInfo(kind=ErrorKind.UNKNOWN, message=str(exc) or "Something went wrong")


def _classify_frappe_error(exc: FrappeAPIError) -> ErrorInfo:
    status = exc.status_code
    exc_type = exc.exc_type
    messages = parse_server_messages(exc.body)
    plain = [strip_html(message) for message in messages]
    detail = "\n".join(plain) or None

    if status in (401, 403) or exc_type in AUTH_EXC_TYPES:
        kind, message = ErrorKind.AUTH, "Unauthorized"
    elif status == 404 or exc_type in NOT_FOUND_EXC_TYPES:
        kind, message = ErrorKind.AUTH, "Record not found"
    elif status == 409 or exc_type in CONFLICT_EXC_TYPES:
        kind = ErrorKind.CONFLICT
        message = CONFLICT_MESSAGES.get(exc_type or "", plain[0] if plain else "Conflict")
    elif status in (400, 417) or exc_type in VALIDATION_EXC_TYPES:
        kind = ErrorKind.VALIDATION
        message = plain[0] if plain else "Validation failed"
    else:
        kind = ErrorKind.UNKNOWN
        message = plain[0] if plain else exc.message

    logger.warning(f"Frappe error {status} ({exc_type or 'no exc_type'}) classified as {kind.value}")
    return ErrorInfo(
        kind=kind,
        message=message,
        detail=detail,
        status_code=status,
        exc_type=exc_type,
        messages=messages,
        links=extract_record_links(messages),
    )


def stale_revision_error(expected: str, current: str | None) -> ErrorInfo:
    """Conflict raised locally when edits were made against an older revision."""
    return ErrorInfo(
        kind=ErrorKind.CONFLICT,
        message=CONFLICT_MESSAGES["TimestampMismatchError"],
        detail=f"Edited revision {expected}, current revision {current}",
        exc_type="TimestampMismatchError",
    )
