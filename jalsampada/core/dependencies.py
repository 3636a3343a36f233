"""
FastAPI dependencies.

Provides the Frappe client, the form registry and the renderer to route
handlers. Tests replace them through ``app.dependency_overrides``.
"""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from jalsampada.config import Settings, get_settings
from jalsampada.frappe.client import FrappeClient, get_client
from jalsampada.services.forms.registry import FormRegistry
from jalsampada.services.forms.renderer import FormRenderer


def get_frappe_client() -> FrappeClient:
    return get_client()


@lru_cache
def get_form_registry() -> FormRegistry:
    """Registry loaded once from the configured forms directory."""
    return FormRegistry.from_directory(get_settings().forms_dir)


@lru_cache
def get_form_renderer() -> FormRenderer:
    return FormRenderer()


SettingsDep = Annotated[Settings, Depends(get_settings)]
FrappeClientDep = Annotated[FrappeClient, Depends(get_frappe_client)]
FormRegistryDep = Annotated[FormRegistry, Depends(get_form_registry)]
FormRendererDep = Annotated[FormRenderer, Depends(get_form_renderer)]
