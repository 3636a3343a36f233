"""
Form registry.

Loads doctype layouts from ``*.form.json`` files. Each file holds one
FormDefinition; its slug is the file name without ``.form.json``
(``stage-no.form.json`` -> ``stage-no``).
"""

import json
import logging
from pathlib import Path

from pydantic import ValidationError

from jalsampada.core.exceptions import FormNotFoundError
from jalsampada.models.contracts.forms import FormDefinition

logger = logging.getLogger(__name__)

FORM_FILE_SUFFIX = ".form.json"


def slug_for_path(path: Path) -> str:
    return path.name[: -len(FORM_FILE_SUFFIX)]


class FormRegistry:
    """In-memory index of form definitions by slug."""

    def __init__(self, definitions: dict[str, FormDefinition] | None = None):
        self._definitions: dict[str, FormDefinition] = dict(definitions or {})

    @classmethod
    def from_directory(cls, directory: Path) -> "FormRegistry":
        """
        Load every ``*.form.json`` in ``directory``.

        Args:
            directory: Folder holding layout files

        Returns:
            FormRegistry with one definition per file

        Raises:
            ValueError: If a file is not valid JSON or not a valid FormDefinition
        """
        registry = cls()
        for path in sorted(directory.glob(f"*{FORM_FILE_SUFFIX}")):
            registry.load_file(path)
        logger.info(f"Loaded {len(registry)} form definition(s) from {directory}")
        return registry

    def load_file(self, path: Path) -> FormDefinition:
        slug = slug_for_path(path)
        try:
            content = json.loads(path.read_text(encoding="utf-8"))
            definition = FormDefinition.model_validate(content)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in form file {path.name}: {e}") from e
        except ValidationError as e:
            raise ValueError(f"Invalid form definition in {path.name}: {e}") from e

        self.register(slug, definition)
        return definition

    def register(self, slug: str, definition: FormDefinition) -> None:
        if slug in self._definitions:
            logger.warning(f"Replacing form definition for '{slug}'")
        self._definitions[slug] = definition

    def get(self, slug: str) -> FormDefinition:
        """
        Get a form definition by slug.

        Raises:
            FormNotFoundError: If no definition is registered for the slug
        """
        definition = self._definitions.get(slug)
        if definition is None:
            raise FormNotFoundError(slug)
        return definition

    def slugs(self) -> list[str]:
        return sorted(self._definitions)

    def __contains__(self, slug: object) -> bool:
        return slug in self._definitions

    def __len__(self) -> int:
        return len(self._definitions)
