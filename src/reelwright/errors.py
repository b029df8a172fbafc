"""Error taxonomy for the template system.

Every error carries a stable machine-readable ``code`` next to its human
message so the HTTP layer (and any other caller) can branch without
parsing text.
"""

from __future__ import annotations

from typing import List, Sequence


class TemplateSystemError(Exception):
    """Base class for all template system failures."""

    code: str = "TEMPLATE_SYSTEM_ERROR"

    def __init__(self, message: str, code: str | None = None):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code


def _bullets(issues: Sequence[str]) -> str:
    return "\n".join(f"  • {issue}" for issue in issues)


class TemplateNotFoundError(TemplateSystemError):
    code = "TEMPLATE_NOT_FOUND"

    def __init__(self, template_id: str):
        self.template_id = template_id
        super().__init__(
            f"Template '{template_id}' not found. "
            "Available templates can be listed using get_available_templates()."
        )


class DuplicateTemplateError(TemplateSystemError):
    code = "DUPLICATE_TEMPLATE"

    def __init__(self, template_id: str):
        self.template_id = template_id
        super().__init__(
            f"Template '{template_id}' already exists. "
            "Templates are append-only; register it under a different ID."
        )


class TemplateValidationError(TemplateSystemError):
    """A template definition violates one or more structural invariants."""

    code = "TEMPLATE_VALIDATION_FAILED"

    def __init__(self, template_id: str, issues: Sequence[str]):
        self.template_id = template_id
        self.issues: List[str] = list(issues)
        super().__init__(
            f"Template '{template_id}' validation failed:\n{_bullets(self.issues)}"
        )


class CustomizationValidationError(TemplateSystemError):
    """An override payload is not acceptable for its template."""

    code = "CUSTOMIZATION_VALIDATION_FAILED"

    def __init__(self, template_id: str, issues: Sequence[str]):
        self.template_id = template_id
        self.issues: List[str] = list(issues)
        super().__init__(
            f"Customization validation failed for template '{template_id}':\n"
            f"{_bullets(self.issues)}"
        )


class InstanceNotFoundError(TemplateSystemError):
    code = "INSTANCE_NOT_FOUND"

    def __init__(self, instance_id: str):
        self.instance_id = instance_id
        super().__init__(
            f"Template instance '{instance_id}' not found. "
            "Instance may have been deleted or never created."
        )


class InvalidInputError(TemplateSystemError):
    code = "INVALID_INPUT"

    def __init__(self, parameter: str, expected: str, received: str):
        self.parameter = parameter
        self.expected = expected
        self.received = received
        super().__init__(
            f"Invalid input for parameter '{parameter}': "
            f"expected {expected}, received {received}."
        )


class ScriptGenerationError(TemplateSystemError):
    code = "SCRIPT_GENERATION_FAILED"

    def __init__(self, instance_id: str, reason: str):
        self.instance_id = instance_id
        self.reason = reason
        super().__init__(
            f"Failed to generate script for instance '{instance_id}': {reason}"
        )
