from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends

from reelwright.api.dependencies import get_engine
from reelwright.services.engine import TemplateEngine

router = APIRouter(prefix="/api/templates", tags=["templates"])


@router.get("")
def list_templates(engine: TemplateEngine = Depends(get_engine)):
    """List registered template ids in registration order."""
    return {"templates": engine.get_available_templates()}


@router.post("", status_code=201)
def register_template(
    body: Dict[str, Any] = Body(...),
    engine: TemplateEngine = Depends(get_engine),
):
    """Register a new template definition."""
    template = engine.register_template(body)
    return template.model_dump()


@router.get("/{template_id}")
def get_template(template_id: str, engine: TemplateEngine = Depends(get_engine)):
    return engine.get_template(template_id).model_dump()


@router.get("/{template_id}/exists")
def template_exists(template_id: str, engine: TemplateEngine = Depends(get_engine)):
    return {"template_id": template_id, "exists": engine.has_template(template_id)}


@router.post("/{template_id}/validate")
def validate_customizations(
    template_id: str,
    body: Optional[Dict[str, Any]] = Body(default=None),
    engine: TemplateEngine = Depends(get_engine),
):
    """Check an override payload without creating an instance."""
    return {"valid": engine.validate_customizations(template_id, body or {})}
