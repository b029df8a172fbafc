"""Test configuration for the reelwright project."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest

from reelwright.services.engine import TemplateEngine
from reelwright.templates.loader import TemplateLoader

TEMPLATE_ID = "find-key-escape-room"


@pytest.fixture()
def template_payload() -> dict[str, Any]:
    """A fresh, mutable copy of the bundled Find the Key template."""

    return TemplateLoader().load(TEMPLATE_ID)


@pytest.fixture()
def engine(template_payload: dict[str, Any]) -> TemplateEngine:
    """An engine with the bundled template registered."""

    engine = TemplateEngine()
    engine.register_template(template_payload)
    return engine


@pytest.fixture()
def make_participants() -> Callable[..., list[dict[str, Any]]]:
    """Factory for participant override lists.

    ``make_participants(3)`` gives one gamemaster followed by two players.
    """

    def _factory(count: int, *, gamemasters: int = 1) -> list[dict[str, Any]]:
        participants = []
        for index in range(count):
            role = "gamemaster" if index < gamemasters else "player"
            participants.append(
                {"id": f"{role}-{index}", "role": role, "name": f"{role.title()} {index}"}
            )
        return participants

    return _factory
