from __future__ import annotations

from typing import List

from reelwright.models.template import ChallengeTemplate, TimeSegment, format_seconds


def _dialogue_lines(segment: TimeSegment) -> List[str]:
    return [f'**{line.speaker}:** "{line.text}"' for line in segment.content.dialogue]


def render(resolved: ChallengeTemplate) -> str:
    """Render a resolved template as a markdown video script.

    Only dialogue is written out; actions and visual elements stay
    structural data.  Segment windows are laid end to end from zero.
    """
    segments = resolved.segments
    intro_end = segments.intro.duration
    gameplay_end = intro_end + segments.gameplay.duration
    conclusion_end = gameplay_end + segments.conclusion.duration

    parts = [
        f"# Video Script: {resolved.name}",
        "",
        f"## Challenge: {resolved.challenge.objective}",
        f"**Location:** {resolved.environment.location}",
        f"**Participants:** {len(resolved.participants)}",
        "",
        f"## Intro (0-{format_seconds(intro_end)}s)",
        *_dialogue_lines(segments.intro),
        "",
        f"## Gameplay ({format_seconds(intro_end)}-{format_seconds(gameplay_end)}s)",
        *_dialogue_lines(segments.gameplay),
        "",
        f"## Conclusion ({format_seconds(gameplay_end)}-{format_seconds(conclusion_end)}s)",
        *_dialogue_lines(segments.conclusion),
    ]
    return "\n".join(parts) + "\n"
