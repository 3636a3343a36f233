"""
Forms Router

Record pages for every doctype with a registered layout:
render create/edit forms, save edits, delete records and search Link
field options. Each request builds its own DocumentFormController. Updates
re-fetch the record for dirty tracking; a caller that sends the revision its
edits were based on gets a 409 when the record has moved on since.
"""

import logging
from typing import Any

from fastapi import APIRouter, HTTPException, status

from jalsampada.core.dependencies import (
    FormRegistryDep,
    FormRendererDep,
    FrappeClientDep,
    SettingsDep,
)
from jalsampada.core.exceptions import FormNotFoundError, FormValidationError, InvalidStateError
from jalsampada.models.contracts.documents import (
    DeleteResult,
    FormSummary,
    FormValuesRequest,
    LinkOption,
    LinkOptionsRequest,
    SaveResult,
)
from jalsampada.models.contracts.errors import ErrorInfo
from jalsampada.models.contracts.rendering import RenderedForm
from jalsampada.models.enums import ErrorKind, SaveOutcome
from jalsampada.services.documents import BACKEND_ERRORS, DocumentFormController
from jalsampada.services.errors import classify_error

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/forms", tags=["Forms"])

ERROR_STATUS = {
    ErrorKind.VALIDATION: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.AUTH: status.HTTP_403_FORBIDDEN,
    ErrorKind.NETWORK: status.HTTP_502_BAD_GATEWAY,
    ErrorKind.UNKNOWN: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def error_response(info: ErrorInfo) -> HTTPException:
    """Build the HTTP error for a classified failure."""
    status_code = ERROR_STATUS[info.kind]
    if info.kind == ErrorKind.AUTH and (info.status_code == 404 or info.exc_type == "DoesNotExistError"):
        status_code = status.HTTP_404_NOT_FOUND
    return HTTPException(
        status_code=status_code,
        detail=info.model_dump(
            mode="json",
            include={"kind", "message", "detail", "messages", "links", "field_errors"},
        ),
    )


def _controller(
    slug: str,
    registry: FormRegistryDep,
    client: FrappeClientDep,
    renderer: FormRendererDep,
    settings: SettingsDep,
    name: str | None = None,
) -> DocumentFormController:
    try:
        definition = registry.get(slug)
    except FormNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    return DocumentFormController(
        definition,
        client,
        name=name,
        renderer=renderer,
        slug=slug,
        link_page_length=settings.link_page_length,
    )


async def _load(controller: DocumentFormController) -> None:
    try:
        await controller.load()
    except BACKEND_ERRORS:
        raise error_response(controller.error) from None


def _apply(controller: DocumentFormController, values: dict[str, Any]) -> None:
    try:
        controller.apply(values)
    except FormValidationError as e:
        raise error_response(classify_error(e)) from None


async def _save(controller: DocumentFormController, request: FormValuesRequest) -> SaveResult:
    _apply(controller, request.values)
    result = await controller.save(modified=request.modified)
    if result.outcome == SaveOutcome.FAILED:
        raise error_response(result.error)
    return result


@router.get(
    "",
    response_model=list[FormSummary],
    summary="List forms",
    description="List the doctypes that have a registered form layout",
)
async def list_forms(registry: FormRegistryDep) -> list[FormSummary]:
    summaries = []
    for slug in registry.slugs():
        definition = registry.get(slug)
        summaries.append(
            FormSummary(
                slug=slug,
                doctype=definition.doctype,
                title=definition.title,
                module=definition.module,
            )
        )
    return summaries


@router.get(
    "/{slug}/new",
    response_model=RenderedForm,
    summary="Render a create form",
)
async def new_form(
    slug: str,
    registry: FormRegistryDep,
    client: FrappeClientDep,
    renderer: FormRendererDep,
    settings: SettingsDep,
) -> RenderedForm:
    """Render an empty form seeded with layout defaults."""
    controller = _controller(slug, registry, client, renderer, settings)
    await _load(controller)
    return controller.render()


@router.get(
    "/{slug}/records/{name}",
    response_model=RenderedForm,
    summary="Render an edit form",
)
async def edit_form(
    slug: str,
    name: str,
    registry: FormRegistryDep,
    client: FrappeClientDep,
    renderer: FormRendererDep,
    settings: SettingsDep,
) -> RenderedForm:
    """Render the form bound to an existing record."""
    controller = _controller(slug, registry, client, renderer, settings, name=name)
    await _load(controller)
    return controller.render()


@router.post(
    "/{slug}/records",
    response_model=SaveResult,
    summary="Create a record",
)
async def create_record(
    slug: str,
    request: FormValuesRequest,
    registry: FormRegistryDep,
    client: FrappeClientDep,
    renderer: FormRendererDep,
    settings: SettingsDep,
) -> SaveResult:
    """
    Create a record from submitted values.

    Values are applied to a fresh form in layout order, validated, and
    inserted. A submission equal to the defaults is reported as unchanged.
    """
    controller = _controller(slug, registry, client, renderer, settings)
    await _load(controller)
    return await _save(controller, request)


@router.put(
    "/{slug}/records/{name}",
    response_model=SaveResult,
    summary="Update a record",
)
async def update_record(
    slug: str,
    name: str,
    request: FormValuesRequest,
    registry: FormRegistryDep,
    client: FrappeClientDep,
    renderer: FormRendererDep,
    settings: SettingsDep,
) -> SaveResult:
    """
    Update a record.

    The record is re-fetched and the submitted values applied on top. If
    nothing differs from the stored record, no update is sent. When the
    body carries ``modified`` and it is not the stored revision, the
    update is refused with 409.
    """
    controller = _controller(slug, registry, client, renderer, settings, name=name)
    await _load(controller)
    return await _save(controller, request)


@router.delete(
    "/{slug}/records/{name}",
    response_model=DeleteResult,
    summary="Delete a record",
)
async def delete_record(
    slug: str,
    name: str,
    registry: FormRegistryDep,
    client: FrappeClientDep,
    renderer: FormRendererDep,
    settings: SettingsDep,
) -> DeleteResult:
    controller = _controller(slug, registry, client, renderer, settings, name=name)
    try:
        return await controller.delete()
    except InvalidStateError as e:
        raise HTTPException(status_code=status.HTTP_405_METHOD_NOT_ALLOWED, detail=e.message)
    except BACKEND_ERRORS:
        raise error_response(controller.error) from None


@router.post(
    "/{slug}/link-options/{field}",
    response_model=list[LinkOption],
    summary="Search Link field options",
    description="Search the Link field's target doctype, filtered by the current form values",
)
async def link_options(
    slug: str,
    field: str,
    request: LinkOptionsRequest,
    registry: FormRegistryDep,
    client: FrappeClientDep,
    renderer: FormRendererDep,
    settings: SettingsDep,
) -> list[LinkOption]:
    controller = _controller(slug, registry, client, renderer, settings)
    await _load(controller)
    _apply(controller, request.values)
    try:
        return await controller.link_options(field, request.txt)
    except KeyError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Field not found: {field}")
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except BACKEND_ERRORS as e:
        raise error_response(classify_error(e)) from None
