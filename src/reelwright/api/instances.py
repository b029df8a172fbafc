from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel

from fastapi import APIRouter, Depends

from reelwright.api.dependencies import get_engine
from reelwright.services.engine import TemplateEngine

router = APIRouter(prefix="/api/instances", tags=["instances"])


class CreateInstanceRequest(BaseModel):
    # Override sections stay loosely typed so the engine reports every issue at once
    template_id: str
    challenge: Optional[Any] = None
    participants: Optional[Any] = None
    environment: Optional[Any] = None
    dialogue: Optional[Any] = None
    generation: Optional[Any] = None


@router.get("")
def list_instances(engine: TemplateEngine = Depends(get_engine)):
    return {"instances": engine.get_available_instances()}


@router.post("", status_code=201)
def create_instance(
    body: CreateInstanceRequest,
    engine: TemplateEngine = Depends(get_engine),
):
    """Create an instance of a template with optional overrides."""
    overrides = {
        key: value
        for key, value in body.model_dump(exclude={"template_id"}).items()
        if value is not None
    }
    instance = engine.create_instance(body.template_id, overrides)
    return instance.model_dump(mode="json", exclude_none=True)


@router.get("/{instance_id}")
def get_instance(instance_id: str, engine: TemplateEngine = Depends(get_engine)):
    return engine.get_instance(instance_id).model_dump(mode="json", exclude_none=True)


@router.delete("/{instance_id}")
def delete_instance(instance_id: str, engine: TemplateEngine = Depends(get_engine)):
    return {"instance_id": instance_id, "deleted": engine.delete_instance(instance_id)}


@router.get("/{instance_id}/resolved")
def get_resolved_template(instance_id: str, engine: TemplateEngine = Depends(get_engine)):
    """The template with this instance's overrides merged in."""
    return engine.resolve_instance(instance_id).model_dump()


@router.get("/{instance_id}/script")
def generate_script(instance_id: str, engine: TemplateEngine = Depends(get_engine)):
    """Render the instance as a text video script."""
    return {"instance_id": instance_id, "script": engine.generate_script(instance_id)}
