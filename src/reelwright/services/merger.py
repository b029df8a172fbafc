"""Overlay merge: base template + instance overrides → resolved template.

The merge is deliberately asymmetric.  Challenge and environment overrides
merge field by field (only explicitly set fields win), while participant
lists and per-segment dialogue are replaced wholesale, since who takes part
and in what order is only meaningful as a complete set.
"""

from __future__ import annotations

from reelwright.models.instance import TemplateInstance
from reelwright.models.template import ChallengeTemplate


def resolve(template: ChallengeTemplate, instance: TemplateInstance) -> ChallengeTemplate:
    """Return a fresh template with *instance*'s overrides applied.

    ``model_dump`` yields new containers all the way down, so the resolved
    view never aliases the registered template.
    """
    data = template.model_dump()

    if instance.customized_challenge is not None:
        data["challenge"].update(instance.customized_challenge.model_dump(exclude_unset=True))

    if instance.customized_participants is not None:
        data["participants"] = [p.model_dump() for p in instance.customized_participants]

    if instance.customized_environment is not None:
        data["environment"].update(
            instance.customized_environment.model_dump(exclude_unset=True)
        )

    for segment_id, dialogue in (instance.customized_dialogue or {}).items():
        data["segments"][segment_id]["content"]["dialogue"] = [
            line.model_dump() for line in dialogue
        ]

    return ChallengeTemplate.model_validate(data)
