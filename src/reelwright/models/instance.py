from __future__ import annotations

from datetime import datetime, timezone
from typing import Dict, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from reelwright.models.template import DialogueElement, Participant, SegmentName

OutputFormat = Literal["mp4", "webm"]
Quality = Literal["high", "medium", "low"]


class ChallengePatch(BaseModel):
    """Partial challenge override; only explicitly set fields are merged."""

    model_config = ConfigDict(frozen=True)

    objective: Optional[str] = None
    target_objects: Optional[Tuple[str, ...]] = None
    rules: Optional[Tuple[str, ...]] = None
    success_condition: Optional[str] = None
    failure_consequence: Optional[str] = None
    is_customizable: Optional[bool] = None


class EnvironmentPatch(BaseModel):
    """Partial environment override; only explicitly set fields are merged."""

    model_config = ConfigDict(frozen=True)

    location: Optional[str] = None
    props: Optional[Tuple[str, ...]] = None
    constraints: Optional[Tuple[str, ...]] = None
    is_customizable: Optional[bool] = None


class GenerationSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    output_format: OutputFormat = "mp4"
    quality: Quality = "high"
    duration: Optional[float] = Field(
        default=None, gt=0, description="Overrides the template duration"
    )


class Customizations(BaseModel):
    """The override payload accepted by ``create_instance``.

    Participants and dialogue replace wholesale; challenge and environment
    merge field by field.
    """

    challenge: Optional[ChallengePatch] = None
    participants: Optional[Tuple[Participant, ...]] = None
    environment: Optional[EnvironmentPatch] = None
    dialogue: Optional[Dict[SegmentName, Tuple[DialogueElement, ...]]] = None
    generation: Optional[GenerationSettings] = None


class TemplateInstance(BaseModel):
    """A template reference plus the raw, unmerged overrides.

    Frozen; the dialogue mapping is the one mutable container, so the
    instance store only ever hands out copies.
    """

    model_config = ConfigDict(frozen=True)

    template_id: str
    instance_id: str
    customized_challenge: Optional[ChallengePatch] = None
    customized_participants: Optional[Tuple[Participant, ...]] = None
    customized_environment: Optional[EnvironmentPatch] = None
    customized_dialogue: Optional[Dict[SegmentName, Tuple[DialogueElement, ...]]] = None
    generation_settings: GenerationSettings = Field(default_factory=GenerationSettings)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
