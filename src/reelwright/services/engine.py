"""Template engine: the public facade over registry, instances, merge and render.

    register_template ──► TemplateRegistry  (validate, append-only)
    create_instance   ──► InstanceStore     (validate overrides, issue id)
    generate_script   ──► merger.resolve ──► renderer.render

Instances refer to templates by id.  If the template has gone missing by
the time a script is generated, generation fails explicitly instead of
falling back to a stale copy.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any, List

from reelwright.config import settings
from reelwright.errors import (
    CustomizationValidationError,
    InvalidInputError,
    ScriptGenerationError,
    TemplateNotFoundError,
)
from reelwright.models.instance import Customizations, TemplateInstance
from reelwright.models.template import ChallengeTemplate
from reelwright.services.instances import InstanceStore
from reelwright.services.merger import resolve
from reelwright.services.registry import TemplateRegistry
from reelwright.services.renderer import render
from reelwright.services.validation import build_customizations, validate_input

log = logging.getLogger(__name__)

_NO_CUSTOMIZATIONS: Mapping[str, Any] = MappingProxyType({})

# Failures the boolean check reports as ``False``; anything else is a defect.
_EXPECTED_VALIDATION_ERRORS = (
    InvalidInputError,
    TemplateNotFoundError,
    CustomizationValidationError,
)


class TemplateEngine:
    """Register templates, create customized instances, render scripts."""

    def __init__(
        self,
        registry: TemplateRegistry | None = None,
        instances: InstanceStore | None = None,
        permissive_validation: bool | None = None,
    ):
        self._registry = registry or TemplateRegistry()
        self._instances = instances or InstanceStore()
        self._permissive = (
            settings.permissive_validation
            if permissive_validation is None
            else permissive_validation
        )

    @property
    def registry(self) -> TemplateRegistry:
        return self._registry

    @property
    def instances(self) -> InstanceStore:
        return self._instances

    # ── Templates ───────────────────────────────────────────────────────

    def register_template(
        self, template: ChallengeTemplate | Mapping[str, Any]
    ) -> ChallengeTemplate:
        return self._registry.register(template)

    def get_template(self, template_id: str) -> ChallengeTemplate:
        return self._registry.get(template_id)

    def has_template(self, template_id: str) -> bool:
        return self._registry.has(template_id)

    def get_available_templates(self) -> List[str]:
        return self._registry.list()

    # ── Instances ───────────────────────────────────────────────────────

    def create_instance(
        self,
        template_id: str,
        customizations: Customizations | Mapping[str, Any] = _NO_CUSTOMIZATIONS,
    ) -> TemplateInstance:
        """Validate *customizations* against the template and store an instance.

        Raises ``InvalidInputError``, ``TemplateNotFoundError`` or
        ``CustomizationValidationError``.
        """
        validate_input(template_id, "template_id", "string")
        validate_input(customizations, "customizations", "object")

        template = self._registry.get(template_id)
        overrides = build_customizations(template, customizations)
        return self._instances.create(template.id, overrides)

    def validate_customizations(
        self,
        template_id: str,
        customizations: Customizations | Mapping[str, Any],
    ) -> bool:
        """Non-raising variant of the checks ``create_instance`` performs.

        Validation failures return ``False``.  Unexpected errors propagate
        unless the engine runs with ``permissive_validation``, which turns
        every exception into ``False``.
        """
        try:
            validate_input(template_id, "template_id", "string")
            validate_input(customizations, "customizations", "object")
            template = self._registry.get(template_id)
            build_customizations(template, customizations)
        except _EXPECTED_VALIDATION_ERRORS as exc:
            log.debug("Customizations rejected: %s", exc)
            return False
        except Exception:
            if not self._permissive:
                raise
            log.warning("Unexpected error during customization check", exc_info=True)
            return False
        return True

    def get_instance(self, instance_id: str) -> TemplateInstance:
        return self._instances.get(instance_id)

    def delete_instance(self, instance_id: str) -> bool:
        return self._instances.delete(instance_id)

    def get_available_instances(self) -> List[str]:
        return self._instances.list()

    # ── Rendering ───────────────────────────────────────────────────────

    def resolve_instance(self, instance_id: str) -> ChallengeTemplate:
        """Return the fully merged template an instance renders from."""
        instance = self._instances.get(instance_id)
        try:
            template = self._registry.get(instance.template_id)
        except TemplateNotFoundError as exc:
            log.warning(
                "Instance %s refers to missing template %s",
                instance_id,
                instance.template_id,
            )
            raise ScriptGenerationError(
                instance_id, f"Template '{instance.template_id}' no longer exists"
            ) from exc

        try:
            return resolve(template, instance)
        except Exception as exc:
            log.warning("Merging instance %s failed: %s", instance_id, exc)
            raise ScriptGenerationError(
                instance_id, f"Failed to merge template customizations: {exc}"
            ) from exc

    def generate_script(self, instance_id: str) -> str:
        """Render the script for *instance_id*.

        Raises ``InvalidInputError``, ``InstanceNotFoundError`` or
        ``ScriptGenerationError``.
        """
        validate_input(instance_id, "instance_id", "string")
        resolved = self.resolve_instance(instance_id)
        try:
            return render(resolved)
        except Exception as exc:
            log.warning("Rendering instance %s failed: %s", instance_id, exc)
            raise ScriptGenerationError(
                instance_id, f"Failed to create video script: {exc}"
            ) from exc
