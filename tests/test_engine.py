"""Behavioural tests for :class:`reelwright.services.engine.TemplateEngine`."""

from __future__ import annotations

from typing import Any

import pytest
from pydantic import ValidationError

from reelwright.errors import (
    CustomizationValidationError,
    InstanceNotFoundError,
    InvalidInputError,
    ScriptGenerationError,
    TemplateNotFoundError,
)
from reelwright.models import Customizations
from reelwright.services import engine as engine_module
from reelwright.services.engine import TemplateEngine
from reelwright.services.registry import TemplateRegistry

TEMPLATE_ID = "find-key-escape-room"
SEGMENT_HEADINGS = ("## Intro (0-3s)", "## Gameplay (3-30s)", "## Conclusion (30-35s)")


def _section(script: str, heading: str) -> str:
    """Return the lines between *heading* and the next blank line."""
    start = script.index(heading) + len(heading)
    return script[start:].split("\n\n", 1)[0]


# ─── Templates ──────────────────────────────────────────────────────────


def test_registered_template_is_available(engine: TemplateEngine) -> None:
    assert engine.has_template(TEMPLATE_ID)
    assert engine.get_available_templates() == [TEMPLATE_ID]
    assert engine.get_template(TEMPLATE_ID).name == "Find the Key Challenge"


def test_get_template_validates_input(engine: TemplateEngine) -> None:
    with pytest.raises(InvalidInputError):
        engine.get_template("")
    with pytest.raises(InvalidInputError):
        engine.get_template(None)  # type: ignore[arg-type]
    with pytest.raises(TemplateNotFoundError):
        engine.get_template("non-existent-template")


def test_fresh_engines_share_nothing(engine: TemplateEngine) -> None:
    other = TemplateEngine()

    assert other.get_available_templates() == []
    assert other.get_available_instances() == []


# ─── Instances ──────────────────────────────────────────────────────────


def test_create_instance_without_customizations(engine: TemplateEngine) -> None:
    instance = engine.create_instance(TEMPLATE_ID)

    assert instance.template_id == TEMPLATE_ID
    assert instance.instance_id.startswith("instance_")
    assert instance.generation_settings.output_format == "mp4"
    assert engine.get_instance(instance.instance_id).model_dump() == instance.model_dump()


def test_create_instance_with_customizations(engine: TemplateEngine, make_participants) -> None:
    instance = engine.create_instance(
        TEMPLATE_ID,
        {
            "challenge": {"objective": "Custom racing challenge"},
            "participants": make_participants(3),
            "environment": {"location": "racing track"},
        },
    )

    assert instance.customized_challenge.objective == "Custom racing challenge"
    assert len(instance.customized_participants) == 3
    assert instance.customized_environment.location == "racing track"


def test_create_instance_accepts_typed_customizations(engine: TemplateEngine) -> None:
    customizations = Customizations.model_validate({"environment": {"location": "study room"}})
    instance = engine.create_instance(TEMPLATE_ID, customizations)

    assert "**Location:** study room" in engine.generate_script(instance.instance_id)


def test_create_instance_errors(engine: TemplateEngine, make_participants) -> None:
    with pytest.raises(TemplateNotFoundError):
        engine.create_instance("non-existent-template")
    with pytest.raises(InvalidInputError):
        engine.create_instance(TEMPLATE_ID, None)  # type: ignore[arg-type]
    with pytest.raises(InvalidInputError):
        engine.create_instance(TEMPLATE_ID, "invalid")  # type: ignore[arg-type]
    with pytest.raises(CustomizationValidationError):
        engine.create_instance(TEMPLATE_ID, {"participants": make_participants(1)})

    assert engine.get_available_instances() == []


@pytest.mark.parametrize(
    ("count", "gamemasters", "accepted"),
    [(1, 1, False), (3, 1, True), (9, 1, False), (3, 0, False), (3, 2, False)],
)
def test_participant_bounds(
    engine: TemplateEngine, make_participants, count: int, gamemasters: int, accepted: bool
) -> None:
    overrides = {"participants": make_participants(count, gamemasters=gamemasters)}

    if accepted:
        engine.create_instance(TEMPLATE_ID, overrides)
    else:
        with pytest.raises(CustomizationValidationError):
            engine.create_instance(TEMPLATE_ID, overrides)


def test_instance_listing_and_deletion(engine: TemplateEngine) -> None:
    first = engine.create_instance(TEMPLATE_ID)
    second = engine.create_instance(TEMPLATE_ID)

    assert engine.get_available_instances() == [first.instance_id, second.instance_id]
    assert engine.delete_instance(first.instance_id) is True
    assert engine.delete_instance(first.instance_id) is False
    with pytest.raises(InstanceNotFoundError):
        engine.get_instance(first.instance_id)
    assert engine.get_available_instances() == [second.instance_id]


# ─── Script generation ──────────────────────────────────────────────────


def test_generate_script_for_base_template(engine: TemplateEngine) -> None:
    instance = engine.create_instance(TEMPLATE_ID)
    script = engine.generate_script(instance.instance_id)

    assert script.startswith("# Video Script: Find the Key Challenge\n")
    assert "## Challenge: Find the key" in script
    assert "**Participants:** 5" in script
    assert "Find the key. Escape the room. Good luck, boys!" in script
    for heading in SEGMENT_HEADINGS:
        assert heading in script


def test_generate_script_is_idempotent(engine: TemplateEngine) -> None:
    instance = engine.create_instance(
        TEMPLATE_ID, {"challenge": {"objective": "Solve the riddle first"}}
    )

    assert engine.generate_script(instance.instance_id) == engine.generate_script(
        instance.instance_id
    )


def test_override_isolation(engine: TemplateEngine) -> None:
    racing = engine.create_instance(
        TEMPLATE_ID,
        {"challenge": {"objective": "Reach the finish line first"}, "environment": {"location": "racing track"}},
    )
    puzzle = engine.create_instance(
        TEMPLATE_ID,
        {"challenge": {"objective": "Solve the riddle first"}, "environment": {"location": "study room"}},
    )

    racing_script = engine.generate_script(racing.instance_id)
    puzzle_script = engine.generate_script(puzzle.instance_id)

    assert "## Challenge: Reach the finish line first" in racing_script
    assert "Solve the riddle first" not in racing_script
    assert "## Challenge: Solve the riddle first" in puzzle_script
    assert "Reach the finish line first" not in puzzle_script
    # Non-dialogue overrides leave the timing structure alone
    for heading in SEGMENT_HEADINGS:
        assert heading in racing_script
        assert heading in puzzle_script


def test_dialogue_override_replaces_rather_than_appends(engine: TemplateEngine) -> None:
    instance = engine.create_instance(
        TEMPLATE_ID,
        {"dialogue": {"intro": [{"speaker": "gamemaster", "text": "Welcome to the race!", "timing": 0}]}},
    )
    script = engine.generate_script(instance.instance_id)

    intro = _section(script, "## Intro (0-3s)")
    assert intro.strip() == '**gamemaster:** "Welcome to the race!"'
    assert "Good luck, boys!" not in script
    # Untouched segments keep their base dialogue
    assert "Two keys left" in _section(script, "## Gameplay (3-30s)")


def test_participant_override_changes_count(engine: TemplateEngine, make_participants) -> None:
    instance = engine.create_instance(TEMPLATE_ID, {"participants": make_participants(3)})

    assert "**Participants:** 3" in engine.generate_script(instance.instance_id)


def test_generate_script_unknown_instance(engine: TemplateEngine) -> None:
    with pytest.raises(InstanceNotFoundError) as excinfo:
        engine.generate_script("does-not-exist")

    assert excinfo.value.code == "INSTANCE_NOT_FOUND"
    with pytest.raises(InvalidInputError):
        engine.generate_script("")


def test_generate_script_for_dangling_instance(engine: TemplateEngine) -> None:
    instance = engine.create_instance(TEMPLATE_ID)
    # Same instances, but a registry that has never seen the template
    detached = TemplateEngine(registry=TemplateRegistry(), instances=engine.instances)

    with pytest.raises(ScriptGenerationError) as excinfo:
        detached.generate_script(instance.instance_id)

    assert excinfo.value.instance_id == instance.instance_id
    assert f"Template '{TEMPLATE_ID}' no longer exists" in str(excinfo.value)
    assert isinstance(excinfo.value.__cause__, TemplateNotFoundError)


def test_render_failures_are_wrapped(
    engine: TemplateEngine, monkeypatch: pytest.MonkeyPatch
) -> None:
    instance = engine.create_instance(TEMPLATE_ID)

    def _broken_render(resolved: Any) -> str:
        raise KeyError("segments")

    monkeypatch.setattr(engine_module, "render", _broken_render)

    with pytest.raises(ScriptGenerationError) as excinfo:
        engine.generate_script(instance.instance_id)

    assert excinfo.value.code == "SCRIPT_GENERATION_FAILED"
    assert "segments" in excinfo.value.reason


def test_registered_template_cannot_be_changed_through_get(engine: TemplateEngine) -> None:
    instance = engine.create_instance(TEMPLATE_ID)
    before = engine.generate_script(instance.instance_id)

    template = engine.get_template(TEMPLATE_ID)
    with pytest.raises(AttributeError):
        template.segments.intro.content.dialogue.clear()  # type: ignore[attr-defined]
    with pytest.raises(AttributeError):
        template.challenge.rules.append("Extra rule")  # type: ignore[attr-defined]
    with pytest.raises(ValidationError):
        template.environment.location = "moon"  # type: ignore[misc]

    assert engine.generate_script(instance.instance_id) == before


def test_stored_instance_cannot_be_changed_by_callers(engine: TemplateEngine) -> None:
    line = {"speaker": "gamemaster", "text": "Welcome to the race!", "timing": 0}
    instance = engine.create_instance(
        TEMPLATE_ID,
        {"challenge": {"objective": "Race"}, "dialogue": {"intro": [line]}},
    )
    before = engine.generate_script(instance.instance_id)

    with pytest.raises(ValidationError):
        instance.customized_challenge.objective = "Cheat"  # type: ignore[union-attr,misc]
    fetched = engine.get_instance(instance.instance_id)
    fetched.customized_dialogue["intro"] = ()  # type: ignore[index]
    instance.customized_dialogue.clear()  # type: ignore[union-attr]

    assert engine.generate_script(instance.instance_id) == before
    assert "Welcome to the race!" in before


def test_resolve_instance_returns_merged_view(engine: TemplateEngine) -> None:
    instance = engine.create_instance(TEMPLATE_ID, {"environment": {"location": "kitchen"}})

    resolved = engine.resolve_instance(instance.instance_id)
    assert resolved.environment.location == "kitchen"
    assert engine.get_template(TEMPLATE_ID).environment.location == "enclosed room"


# ─── Boolean validation ─────────────────────────────────────────────────


def test_validate_customizations_returns_bool(engine: TemplateEngine, make_participants) -> None:
    assert engine.validate_customizations(TEMPLATE_ID, {}) is True
    assert engine.validate_customizations(TEMPLATE_ID, {"participants": make_participants(3)}) is True
    assert engine.validate_customizations(TEMPLATE_ID, {"participants": make_participants(1)}) is False
    assert engine.validate_customizations(TEMPLATE_ID, {"dialogue": {"outro": []}}) is False
    assert engine.validate_customizations("non-existent-template", {}) is False
    assert engine.validate_customizations(TEMPLATE_ID, None) is False  # type: ignore[arg-type]
    assert engine.validate_customizations("", {}) is False


def test_validate_customizations_does_not_create_instances(engine: TemplateEngine) -> None:
    engine.validate_customizations(TEMPLATE_ID, {"challenge": {"objective": "Race"}})

    assert engine.get_available_instances() == []


def _explode(*args: Any, **kwargs: Any) -> None:
    raise RuntimeError("lookup bug")


def test_unexpected_errors_propagate_by_default(
    engine: TemplateEngine, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr(engine_module, "build_customizations", _explode)

    with pytest.raises(RuntimeError):
        engine.validate_customizations(TEMPLATE_ID, {})


def test_permissive_validation_swallows_everything(
    template_payload: dict[str, Any], monkeypatch: pytest.MonkeyPatch
) -> None:
    engine = TemplateEngine(permissive_validation=True)
    engine.register_template(template_payload)
    monkeypatch.setattr(engine_module, "build_customizations", _explode)

    assert engine.validate_customizations(TEMPLATE_ID, {}) is False
