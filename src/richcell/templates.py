"""Named HTML snippet library persisted as a JSON document."""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Dict, List

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import StoreReadError, TemplateNotFoundError
from .io_utils import write_atomic_json
from .sanitizer import sanitize

logger = logging.getLogger(__name__)


class Template(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(..., min_length=1, max_length=200)
    html: str = ""

    @field_validator("name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("template name must not be blank")
        return stripped

    @field_validator("html")
    @classmethod
    def _sanitize_html(cls, value: str) -> str:
        return sanitize(value)


class TemplateDocument(BaseModel):
    model_config = ConfigDict(extra="forbid")

    templates: Dict[str, Template] = Field(default_factory=dict)


class TemplateLibrary:
    """Load, mutate and persist templates; every save rewrites the file."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self._document = self._load()

    def _load(self) -> TemplateDocument:
        if not self.path.exists():
            return TemplateDocument()
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
            return TemplateDocument.model_validate(raw)
        except (OSError, ValueError, ValidationError) as exc:
            raise StoreReadError(
                f"cannot load templates from {self.path}",
                details={"path": str(self.path), "cause": repr(exc)},
            ) from exc

    def _persist(self) -> None:
        write_atomic_json(self.path, self._document.model_dump(mode="json"))

    def list_names(self) -> List[str]:
        return sorted(self._document.templates)

    def get(self, name: str) -> Template:
        try:
            return self._document.templates[name.strip()]
        except KeyError:
            raise TemplateNotFoundError(name) from None

    def save(self, name: str, html: str) -> Template:
        template = Template(name=name, html=html)
        self._document.templates[template.name] = template
        self._persist()
        logger.info("template.saved", extra={"template": template.name})
        return template

    def delete(self, name: str) -> bool:
        removed = self._document.templates.pop(name.strip(), None)
        if removed is None:
            return False
        self._persist()
        logger.info("template.deleted", extra={"template": removed.name})
        return True


__all__ = ["Template", "TemplateDocument", "TemplateLibrary"]
