"""Shared FastAPI dependencies."""

from __future__ import annotations

import logging
from typing import Optional

from reelwright.config import settings
from reelwright.services.engine import TemplateEngine
from reelwright.templates.loader import TemplateLoader, register_builtin_templates

log = logging.getLogger(__name__)

# --- Template Engine (singleton, holds templates and instances in memory) ---

_engine: Optional[TemplateEngine] = None


def get_engine() -> TemplateEngine:
    global _engine
    if _engine is None:
        _engine = TemplateEngine()
        if settings.preload_templates:
            register_builtin_templates(_engine, TemplateLoader())
        log.info("Template engine ready with %d template(s)", len(_engine.registry))
    return _engine
