from __future__ import annotations

import logging
import threading
from collections.abc import Mapping
from typing import Any, Dict, List

from reelwright.errors import DuplicateTemplateError, TemplateNotFoundError
from reelwright.models.template import ChallengeTemplate
from reelwright.services.validation import as_mapping, build_template, validate_input

log = logging.getLogger(__name__)


class TemplateRegistry:
    """Append-only store of validated templates, keyed by id.

    There is no update or unregister: once registered, a template stays
    unchanged for the lifetime of the registry.  Writers serialise on a
    single lock; readers work on the dict directly.
    """

    def __init__(self) -> None:
        self._templates: Dict[str, ChallengeTemplate] = {}
        self._lock = threading.Lock()

    def register(self, template: ChallengeTemplate | Mapping[str, Any]) -> ChallengeTemplate:
        """Validate and store *template*, returning the stored model."""
        validate_input(template, "template", "object")
        template_id = as_mapping(template).get("id")

        with self._lock:
            if isinstance(template_id, str) and template_id in self._templates:
                raise DuplicateTemplateError(template_id)
            model = build_template(template)
            self._templates[model.id] = model

        log.info("Registered template %s (%s)", model.id, model.name)
        return model

    def get(self, template_id: str) -> ChallengeTemplate:
        validate_input(template_id, "template_id", "string")
        template = self._templates.get(template_id)
        if template is None:
            raise TemplateNotFoundError(template_id)
        return template

    def has(self, template_id: str) -> bool:
        validate_input(template_id, "template_id", "string")
        return template_id in self._templates

    def list(self) -> List[str]:
        """Registered ids in insertion order."""
        return list(self._templates)

    def __len__(self) -> int:
        return len(self._templates)
