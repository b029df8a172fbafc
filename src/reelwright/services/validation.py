"""Structural validation for templates and customization payloads.

Every check accumulates human-readable issues rather than stopping at the
first problem, so a caller fixing a payload sees all violations in one
pass.  Hand-written checks run on the plain-mapping view of a payload;
building the typed pydantic model adds whatever shape errors those checks
do not already report on.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Callable, Iterable, List, Tuple, Type, TypeVar

from pydantic import AnyUrl, BaseModel, TypeAdapter, ValidationError

from reelwright.config import settings
from reelwright.errors import (
    CustomizationValidationError,
    InvalidInputError,
    TemplateValidationError,
)
from reelwright.models.instance import Customizations
from reelwright.models.template import (
    DIFFICULTIES,
    ROLES,
    SEGMENT_NAMES,
    ChallengeTemplate,
    format_seconds,
)

log = logging.getLogger(__name__)

_URL_ADAPTER = TypeAdapter(AnyUrl)

M = TypeVar("M", bound=BaseModel)

_CUSTOMIZATION_KEYS = ("challenge", "participants", "environment", "dialogue", "generation")

_CHALLENGE_TEXT_FIELDS = {
    "objective": "Objective",
    "success_condition": "Success condition",
    "failure_consequence": "Failure consequence",
}
_CHALLENGE_LIST_FIELDS = {"target_objects": "Target objects", "rules": "Rules"}

_ENVIRONMENT_TEXT_FIELDS = {"location": "Location"}
_ENVIRONMENT_LIST_FIELDS = {"props": "Props", "constraints": "Constraints"}

_OUTPUT_FORMATS = ("mp4", "webm")
_QUALITIES = ("high", "medium", "low")


# ─── Primitive checks ───────────────────────────────────────────────────


def _is_text(value: Any) -> bool:
    return isinstance(value, str) and value.strip() != ""


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_string_list(value: Any) -> bool:
    return isinstance(value, list) and all(isinstance(item, str) for item in value)


def kind_of(value: Any) -> str:
    """Name the kind of *value* the way error messages report it."""
    if value is None:
        return "null/undefined"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, str):
        return "string"
    if _is_number(value):
        return "number"
    if isinstance(value, list):
        return "array"
    if isinstance(value, (Mapping, BaseModel)):
        return "object"
    return type(value).__name__


def as_mapping(value: Any) -> Any:
    """Return the plain-mapping view of a pydantic model; other values pass through."""
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", exclude_unset=True)
    return value


def is_valid_url(url: Any) -> bool:
    if not isinstance(url, str) or not url:
        return False
    try:
        _URL_ADAPTER.validate_python(url)
    except ValidationError:
        return False
    return True


def validate_input(value: Any, name: str, expected: str) -> None:
    """Reject a caller-supplied argument of the wrong kind.

    *expected* is one of ``"string"`` (non-blank ``str``), ``"object"``
    (a mapping or pydantic model) or ``"array"`` (a ``list``).
    """
    if value is None:
        raise InvalidInputError(name, expected, "null/undefined")

    actual = kind_of(value)
    if expected == "string":
        if not isinstance(value, str):
            raise InvalidInputError(name, expected, actual)
        if not value.strip():
            raise InvalidInputError(name, "non-empty string", "empty string")
    elif expected == "object":
        if actual != "object":
            raise InvalidInputError(name, expected, actual)
    elif expected == "array":
        if not isinstance(value, list):
            raise InvalidInputError(name, expected, actual)
    else:
        raise ValueError(f"Unknown expected kind '{expected}'")


def pydantic_issues(
    exc: ValidationError,
    skip: Callable[[Tuple[Any, ...]], bool] | None = None,
) -> List[str]:
    """Flatten a pydantic ``ValidationError`` into issue strings.

    Errors whose location satisfies *skip* are left out.
    """
    issues: List[str] = []
    for error in exc.errors():
        loc = tuple(error["loc"])
        if skip is not None and skip(loc):
            continue
        location = ".".join(str(part) for part in loc)
        issue = f"{location}: {error['msg']}" if location else error["msg"]
        if issue not in issues:
            issues.append(issue)
    return issues


def _typed(model: Type[M], data: Any, covered: Callable[[Tuple[Any, ...]], bool]):
    """Build *model* from *data*; return ``(instance or None, extra issues)``.

    The extra issues are the model errors at locations the hand-written
    checks do not already report on.
    """
    if not isinstance(data, Mapping):
        return None, []
    try:
        return model.model_validate(data), []
    except ValidationError as exc:
        return None, pydantic_issues(exc, skip=covered)


def _extend(issues: List[str], extra: Iterable[str]) -> List[str]:
    for issue in extra:
        if issue not in issues:
            issues.append(issue)
    return issues


# ─── Participants ───────────────────────────────────────────────────────


def validate_participant(participant: Any) -> List[str]:
    participant = as_mapping(participant)
    if not isinstance(participant, Mapping):
        return ["Participant must be an object"]

    issues: List[str] = []
    if not _is_text(participant.get("id")):
        issues.append("Participant ID is required and must be a string")
    if not _is_text(participant.get("name")):
        issues.append("Participant name is required and must be a string")
    if participant.get("role") not in ROLES:
        issues.append('Participant role must be either "gamemaster" or "player"')

    equipment = participant.get("equipment")
    if equipment is not None and not _is_string_list(equipment):
        issues.append("Participant equipment must be an array of strings")
    return issues


def _roster_issues(participants: list, label: str) -> List[str]:
    """Per-participant issues plus duplicate ids, each prefixed by position."""
    issues: List[str] = []
    seen: set[str] = set()
    for index, participant in enumerate(participants, start=1):
        for issue in validate_participant(participant):
            issues.append(f"{label} {index}: {issue}")
        record = as_mapping(participant)
        pid = record.get("id") if isinstance(record, Mapping) else None
        if _is_text(pid):
            if pid in seen:
                issues.append(f"{label} {index}: Duplicate participant ID '{pid}'")
            seen.add(pid)
    return issues


def _count_gamemasters(participants: Iterable[Any]) -> int:
    count = 0
    for participant in participants:
        record = as_mapping(participant)
        if isinstance(record, Mapping) and record.get("role") == "gamemaster":
            count += 1
    return count


# ─── Partial records ────────────────────────────────────────────────────


def _partial_issues(
    record: Mapping,
    text_fields: dict[str, str],
    list_fields: dict[str, str],
) -> List[str]:
    issues: List[str] = []
    for key, label in text_fields.items():
        if key in record and not _is_text(record[key]):
            issues.append(f"{label} must be a non-empty string")
    for key, label in list_fields.items():
        if key in record and not _is_string_list(record[key]):
            issues.append(f"{label} must be an array of strings")
    if "is_customizable" in record and not isinstance(record["is_customizable"], bool):
        issues.append("Customizable flag must be a boolean")

    known = set(text_fields) | set(list_fields) | {"is_customizable"}
    for key in record:
        if key not in known:
            issues.append(f"Unknown field '{key}'")
    return issues


def validate_challenge(challenge: Mapping) -> List[str]:
    """Check every present field of a (partial) challenge."""
    return _partial_issues(challenge, _CHALLENGE_TEXT_FIELDS, _CHALLENGE_LIST_FIELDS)


def validate_environment(environment: Mapping) -> List[str]:
    """Check every present field of a (partial) environment."""
    return _partial_issues(environment, _ENVIRONMENT_TEXT_FIELDS, _ENVIRONMENT_LIST_FIELDS)


def validate_generation(generation: Mapping) -> List[str]:
    issues: List[str] = []
    if "output_format" in generation and generation["output_format"] not in _OUTPUT_FORMATS:
        issues.append(f"Output format must be one of: {', '.join(_OUTPUT_FORMATS)}")
    if "quality" in generation and generation["quality"] not in _QUALITIES:
        issues.append(f"Quality must be one of: {', '.join(_QUALITIES)}")
    duration = generation.get("duration")
    if duration is not None and (not _is_number(duration) or duration <= 0):
        issues.append("Duration must be a positive number")
    for key in generation:
        if key not in ("output_format", "quality", "duration"):
            issues.append(f"Unknown field '{key}'")
    return issues


# ─── Templates ──────────────────────────────────────────────────────────


def _metadata_issues(metadata: Mapping) -> List[str]:
    issues: List[str] = []
    if not is_valid_url(metadata.get("source_url")):
        issues.append("Source URL is required and must be a valid URL")

    duration = metadata.get("duration")
    if not _is_number(duration) or duration <= 0:
        issues.append("Duration must be a positive number")

    if "difficulty" in metadata and metadata["difficulty"] not in DIFFICULTIES:
        issues.append(f"Difficulty must be one of: {', '.join(DIFFICULTIES)}")

    minimum = metadata.get("min_participants")
    maximum = metadata.get("max_participants")
    if not _is_int(minimum):
        issues.append("Minimum participants must be an integer")
    elif minimum < 1:
        issues.append("Minimum participants must be at least 1")
    if not _is_int(maximum):
        issues.append("Maximum participants must be an integer")
    elif _is_int(minimum) and maximum < minimum:
        issues.append(
            "Maximum participants must be greater than or equal to minimum participants"
        )
    return issues


def _segment_issues(
    segments: Mapping, metadata: Mapping | None, tolerance: float
) -> List[str]:
    issues: List[str] = []
    durations: List[float] = []
    for name in SEGMENT_NAMES:
        segment = as_mapping(segments.get(name))
        if not isinstance(segment, Mapping):
            issues.append(f"Missing required segment: {name}")
            continue
        duration = segment.get("duration")
        if not _is_number(duration) or duration <= 0:
            issues.append(f"Segment '{name}' duration must be a positive number")
            continue
        durations.append(duration)

    expected = metadata.get("duration") if metadata is not None else None
    if len(durations) == len(SEGMENT_NAMES) and _is_number(expected):
        total = sum(durations)
        if abs(total - expected) > tolerance:
            issues.append(
                f"Segment durations ({format_seconds(total)}s) don't match "
                f"template duration ({format_seconds(expected)}s)"
            )
    return issues


def template_issues(template: Any, tolerance: float | None = None) -> List[str]:
    """Collect every structural problem with a template definition."""
    data = as_mapping(template)
    if not isinstance(data, Mapping):
        return ["Template must be an object"]
    if tolerance is None:
        tolerance = settings.segment_duration_tolerance

    issues: List[str] = []
    for key, label in (("id", "ID"), ("name", "name"), ("description", "description")):
        if not _is_text(data.get(key)):
            issues.append(f"Template {label} is required and must be a string")

    metadata = as_mapping(data.get("metadata"))
    if not isinstance(metadata, Mapping):
        issues.append("Template metadata is required")
        metadata = None
    else:
        issues.extend(_metadata_issues(metadata))

    participants = data.get("participants")
    if not isinstance(participants, list) or not participants:
        issues.append("Template must have at least one participant")
    else:
        gamemasters = _count_gamemasters(participants)
        if gamemasters == 0:
            issues.append("Template must have at least one gamemaster")
        elif gamemasters > 1:
            issues.append("Template should have only one gamemaster")
        issues.extend(_roster_issues(participants, "Participant"))

    segments = as_mapping(data.get("segments"))
    if not isinstance(segments, Mapping):
        issues.append("Template segments are required")
    else:
        issues.extend(_segment_issues(segments, metadata, tolerance))

    for key in ("challenge", "environment"):
        if not isinstance(as_mapping(data.get(key)), Mapping):
            issues.append(f"Template {key} is required")

    return issues


def _template_label(template: Any) -> str:
    data = as_mapping(template)
    if isinstance(data, Mapping) and _is_text(data.get("id")):
        return data["id"]
    return "unknown"


def _template_checked(loc: Tuple[Any, ...]) -> bool:
    """Whether ``template_issues`` already reports on model errors at *loc*."""
    if not loc:
        return False
    head = loc[0]
    if head in ("id", "name", "description", "metadata"):
        return True
    if len(loc) == 1:
        return head in ("participants", "segments", "challenge", "environment")
    if head == "participants":
        return len(loc) == 2 or loc[2] in ("id", "name", "role", "equipment")
    if head == "segments":
        return len(loc) == 2 or loc[2] == "duration"
    return False


def check_template(
    template: Any, tolerance: float | None = None
) -> Tuple[ChallengeTemplate | None, List[str]]:
    """Run every template check; return ``(model or None, issues)``."""
    issues = template_issues(template, tolerance)
    model, extra = _typed(ChallengeTemplate, as_mapping(template), _template_checked)
    return (model if not issues else None), _extend(issues, extra)


def _reject_template(template: Any, issues: List[str]) -> None:
    template_id = _template_label(template)
    log.warning("Template %s rejected with %d issue(s)", template_id, len(issues))
    raise TemplateValidationError(template_id, issues)


def validate_template(template: Any, tolerance: float | None = None) -> None:
    """Raise ``TemplateValidationError`` listing every problem, if any."""
    _, issues = check_template(template, tolerance)
    if issues:
        _reject_template(template, issues)


def build_template(template: Any) -> ChallengeTemplate:
    """Validate *template* and return it as an immutable model."""
    model, issues = check_template(template)
    if issues or model is None:
        _reject_template(template, issues)
    return model


# ─── Customizations ─────────────────────────────────────────────────────


def customization_issues(template: ChallengeTemplate, customizations: Any) -> List[str]:
    """Collect every problem with an override payload for *template*."""
    data = as_mapping(customizations)
    if not isinstance(data, Mapping):
        return ["Customizations must be an object"]

    issues: List[str] = []
    for key in data:
        if key not in _CUSTOMIZATION_KEYS:
            issues.append(f"Unknown customization field: {key}")

    participants = data.get("participants")
    if participants is not None:
        if not isinstance(participants, list):
            issues.append("Participants must be an array")
        else:
            count = len(participants)
            minimum = template.metadata.min_participants
            maximum = template.metadata.max_participants
            if count < minimum:
                issues.append(f"Too few participants: {count} (minimum: {minimum})")
            if count > maximum:
                issues.append(f"Too many participants: {count} (maximum: {maximum})")

            gamemasters = _count_gamemasters(participants)
            if gamemasters == 0:
                issues.append("At least one gamemaster is required")
            elif gamemasters > 1:
                issues.append("Only one gamemaster is allowed")
            issues.extend(_roster_issues(participants, "Custom participant"))

    for key, label, check in (
        ("challenge", "Challenge", validate_challenge),
        ("environment", "Environment", validate_environment),
        ("generation", "Generation", validate_generation),
    ):
        section = as_mapping(data.get(key))
        if section is None:
            continue
        if not isinstance(section, Mapping):
            issues.append(f"{label} customization must be an object")
            continue
        issues.extend(f"{label}: {issue}" for issue in check(section))

    dialogue = data.get("dialogue")
    if dialogue is not None:
        if not isinstance(dialogue, Mapping):
            issues.append("Dialogue customization must be an object")
        else:
            for segment_id in dialogue:
                if segment_id not in SEGMENT_NAMES:
                    issues.append(
                        f"Invalid dialogue segment: {segment_id}. "
                        "Must be 'intro', 'gameplay', or 'conclusion'"
                    )

    return issues


def _customization_checked(loc: Tuple[Any, ...]) -> bool:
    """Whether ``customization_issues`` already reports on model errors at *loc*."""
    if not loc:
        return False
    head = loc[0]
    if head in ("challenge", "environment", "generation"):
        return True
    if head == "participants":
        return len(loc) <= 2 or loc[2] in ("id", "name", "role", "equipment")
    if head == "dialogue":
        # Element shapes inside a known segment are left to the model
        return len(loc) == 1 or loc[1] not in SEGMENT_NAMES or "[key]" in loc
    return False


def check_customizations(
    template: ChallengeTemplate, customizations: Any
) -> Tuple[Customizations | None, List[str]]:
    """Run every override check; return ``(payload or None, issues)``."""
    issues = customization_issues(template, customizations)
    model, extra = _typed(Customizations, as_mapping(customizations), _customization_checked)
    return (model if not issues else None), _extend(issues, extra)


def _reject_customizations(template: ChallengeTemplate, issues: List[str]) -> None:
    log.warning(
        "Customizations for template %s rejected with %d issue(s)",
        template.id,
        len(issues),
    )
    raise CustomizationValidationError(template.id, issues)


def validate_customizations(template: ChallengeTemplate, customizations: Any) -> None:
    """Raise ``CustomizationValidationError`` listing every problem, if any."""
    _, issues = check_customizations(template, customizations)
    if issues:
        _reject_customizations(template, issues)


def build_customizations(template: ChallengeTemplate, customizations: Any) -> Customizations:
    """Validate *customizations* against *template* and return the typed payload."""
    model, issues = check_customizations(template, customizations)
    if issues or model is None:
        _reject_customizations(template, issues)
    return model
