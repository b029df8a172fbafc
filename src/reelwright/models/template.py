"""Template models: the reusable, timed, role-structured challenge definition.

A template is split into three fixed time windows (intro / gameplay /
conclusion).  Each window carries dialogue, actions and visual elements;
only dialogue ends up in the rendered text script, the rest is structural
data for editing tools.
"""

from __future__ import annotations

from typing import Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


Speaker = Literal["gamemaster", "player", "narrator"]
Role = Literal["gamemaster", "player"]
Difficulty = Literal["easy", "medium", "hard"]
SegmentName = Literal["intro", "gameplay", "conclusion"]

SEGMENT_NAMES: tuple[str, ...] = ("intro", "gameplay", "conclusion")
ROLES: tuple[str, ...] = ("gamemaster", "player")
DIFFICULTIES: tuple[str, ...] = ("easy", "medium", "hard")


def format_seconds(value: float) -> str:
    """Render a second count without a trailing ``.0`` for whole numbers."""
    if float(value).is_integer():
        return str(int(value))
    return str(value)


class _Record(BaseModel):
    # Sequences are tuples so nothing reachable from a record can change
    model_config = ConfigDict(frozen=True)


# ─── Segment content ────────────────────────────────────────────────────


class DialogueElement(_Record):
    """A spoken or on-screen line."""

    speaker: Speaker
    text: str
    timing: float = Field(default=0, description="Offset within the segment (seconds)")
    is_customizable: bool = True


class ActionElement(_Record):
    """A physical or gameplay action."""

    type: Literal["movement", "interaction", "consequence"]
    description: str
    participants: Tuple[str, ...] = Field(
        default_factory=tuple, description="Participant ids involved in the action"
    )
    timing: float = 0
    is_customizable: bool = True


class VisualElement(_Record):
    """A prop, environment shot or effect."""

    type: Literal["prop", "environment", "effect"]
    description: str
    timing: float = 0
    is_customizable: bool = True


class SegmentContent(_Record):
    dialogue: Tuple[DialogueElement, ...] = Field(default_factory=tuple)
    actions: Tuple[ActionElement, ...] = Field(default_factory=tuple)
    visual_elements: Tuple[VisualElement, ...] = Field(default_factory=tuple)


class TimeSegment(_Record):
    """One of the three named time windows of a template."""

    start_time: float = 0
    duration: float = Field(gt=0)
    content: SegmentContent = Field(default_factory=SegmentContent)


class Segments(_Record):
    intro: TimeSegment
    gameplay: TimeSegment
    conclusion: TimeSegment

    def get(self, name: str) -> TimeSegment:
        if name not in SEGMENT_NAMES:
            raise KeyError(name)
        return getattr(self, name)

    @property
    def total_duration(self) -> float:
        return self.intro.duration + self.gameplay.duration + self.conclusion.duration


# ─── Cast, challenge, setting ───────────────────────────────────────────


class Participant(_Record):
    id: str
    role: Role
    name: str
    equipment: Optional[Tuple[str, ...]] = None
    is_customizable: bool = True


class Challenge(_Record):
    objective: str
    target_objects: Tuple[str, ...] = Field(default_factory=tuple)
    rules: Tuple[str, ...] = Field(default_factory=tuple)
    success_condition: str
    failure_consequence: str
    is_customizable: bool = True


class Environment(_Record):
    location: str
    props: Tuple[str, ...] = Field(default_factory=tuple)
    constraints: Tuple[str, ...] = Field(default_factory=tuple)
    is_customizable: bool = True


# ─── Template ───────────────────────────────────────────────────────────


class TemplateMetadata(_Record):
    source_url: str = Field(..., description="Reference to the source video")
    duration: float = Field(..., gt=0, description="Total length in seconds")
    difficulty: Difficulty = "medium"
    min_participants: int = Field(ge=1)
    max_participants: int = Field(ge=1)


class CustomizationOptions(_Record):
    """Advisory permission flags for editing tools; not enforced by the engine."""

    allow_participant_change: bool = True
    allow_challenge_change: bool = True
    allow_environment_change: bool = True
    allow_dialogue_change: bool = True


class ChallengeTemplate(_Record):
    """A registered, immutable challenge definition."""

    id: str
    name: str
    description: str
    metadata: TemplateMetadata
    challenge: Challenge
    participants: Tuple[Participant, ...] = Field(min_length=1)
    environment: Environment
    segments: Segments
    customization_options: CustomizationOptions = Field(
        default_factory=CustomizationOptions
    )
