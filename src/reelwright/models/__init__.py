from reelwright.models.template import (
    SEGMENT_NAMES,
    ActionElement,
    Challenge,
    ChallengeTemplate,
    CustomizationOptions,
    DialogueElement,
    Environment,
    Participant,
    SegmentContent,
    Segments,
    TemplateMetadata,
    TimeSegment,
    VisualElement,
)
from reelwright.models.instance import (
    ChallengePatch,
    Customizations,
    EnvironmentPatch,
    GenerationSettings,
    TemplateInstance,
)

__all__ = [
    "SEGMENT_NAMES",
    "ActionElement",
    "Challenge",
    "ChallengeTemplate",
    "CustomizationOptions",
    "DialogueElement",
    "Environment",
    "Participant",
    "SegmentContent",
    "Segments",
    "TemplateMetadata",
    "TimeSegment",
    "VisualElement",
    "ChallengePatch",
    "Customizations",
    "EnvironmentPatch",
    "GenerationSettings",
    "TemplateInstance",
]
