from __future__ import annotations

import logging
import threading
import uuid
from typing import Dict, List

from reelwright.config import settings
from reelwright.errors import InstanceNotFoundError
from reelwright.models.instance import Customizations, GenerationSettings, TemplateInstance
from reelwright.services.validation import validate_input

log = logging.getLogger(__name__)


class InstanceStore:
    """Owns created instances and issues their ids.

    Instances keep the raw, unmerged overrides and refer to their template
    by id only; merging happens at render time.  Callers always receive
    copies, so a stored instance never changes after creation.
    """

    def __init__(self, id_prefix: str | None = None):
        self._prefix = id_prefix or settings.instance_id_prefix
        self._instances: Dict[str, TemplateInstance] = {}
        self._lock = threading.Lock()

    def _new_id(self) -> str:
        while True:
            instance_id = f"{self._prefix}_{uuid.uuid4().hex[:12]}"
            if instance_id not in self._instances:
                return instance_id

    def create(self, template_id: str, customizations: Customizations) -> TemplateInstance:
        """Store a new instance of *template_id* carrying *customizations*."""
        generation = customizations.generation or GenerationSettings(
            output_format=settings.default_output_format,
            quality=settings.default_quality,
        )
        with self._lock:
            instance = TemplateInstance(
                template_id=template_id,
                instance_id=self._new_id(),
                customized_challenge=customizations.challenge,
                customized_participants=customizations.participants,
                customized_environment=customizations.environment,
                customized_dialogue=(
                    dict(customizations.dialogue)
                    if customizations.dialogue is not None
                    else None
                ),
                generation_settings=generation,
            )
            self._instances[instance.instance_id] = instance

        log.info("Created instance %s of template %s", instance.instance_id, template_id)
        return instance.model_copy(deep=True)

    def get(self, instance_id: str) -> TemplateInstance:
        validate_input(instance_id, "instance_id", "string")
        instance = self._instances.get(instance_id)
        if instance is None:
            raise InstanceNotFoundError(instance_id)
        return instance.model_copy(deep=True)

    def delete(self, instance_id: str) -> bool:
        """Remove an instance; ``False`` if there was nothing to remove."""
        validate_input(instance_id, "instance_id", "string")
        with self._lock:
            removed = self._instances.pop(instance_id, None)
        if removed is not None:
            log.info("Deleted instance %s", instance_id)
        return removed is not None

    def list(self) -> List[str]:
        return list(self._instances)

    def __len__(self) -> int:
        return len(self._instances)
