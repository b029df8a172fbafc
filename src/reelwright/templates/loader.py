from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, TYPE_CHECKING

from reelwright.config import settings

if TYPE_CHECKING:
    from reelwright.services.engine import TemplateEngine

log = logging.getLogger(__name__)


class TemplateLoader:
    """Loads template definitions from ``<id>.json`` files.

    Raw file text is cached; every ``load`` parses a fresh dict so callers
    can edit what they get back without touching the cache.
    """

    def __init__(self, templates_dir: str | Path | None = None):
        self._dir = Path(templates_dir or settings.templates_dir)
        self._cache: dict[str, str] = {}

    @property
    def directory(self) -> Path:
        return self._dir

    def available(self) -> List[str]:
        """Template ids found in the directory, sorted."""
        if not self._dir.is_dir():
            return []
        return sorted(path.stem for path in self._dir.glob("*.json"))

    def load(self, template_id: str) -> Dict[str, Any]:
        """Load a raw template definition.

        Example::

            loader.load("find-key-escape-room")
        """
        if template_id not in self._cache:
            path = self._dir / f"{template_id}.json"
            self._cache[template_id] = path.read_text(encoding="utf-8")
        return json.loads(self._cache[template_id])


def register_builtin_templates(
    engine: TemplateEngine,
    loader: TemplateLoader | None = None,
) -> List[str]:
    """Register every bundled template not already known to *engine*."""
    loader = loader or TemplateLoader()
    registered: List[str] = []
    for template_id in loader.available():
        if engine.has_template(template_id):
            continue
        engine.register_template(loader.load(template_id))
        registered.append(template_id)
    log.info("Registered %d bundled template(s) from %s", len(registered), loader.directory)
    return registered
