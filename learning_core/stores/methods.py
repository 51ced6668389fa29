# =============================================================================
# learning_core/stores/methods.py
# Learning method store
# =============================================================================

from __future__ import annotations
from typing import Any, Dict

from learning_core.data.mappers import METHOD_MAPPER, optional_text
from learning_core.errors import EntityValidationError
from learning_core.models.entities import LearningMethod
from .base_store import EntityStore


class MethodStore(EntityStore[LearningMethod]):
    label = "Learning method"
    noun = "method"
    required_fields = ("topic_id", "type", "title")

    def __init__(self, gateway, identity_provider, notifier=None, mapper=METHOD_MAPPER):
        super().__init__(gateway, mapper, identity_provider, notifier)

    def clean(self, values: Dict[str, Any], creating: bool) -> Dict[str, Any]:
        if "title" in values:
            values["title"] = str(values["title"]).strip()
        if "link" in values:
            values["link"] = optional_text(values["link"])

        if values.get("time_spent") is not None:
            try:
                hours = float(values["time_spent"])
            except (TypeError, ValueError):
                raise EntityValidationError(
                    f"Time spent must be a number, got {values['time_spent']!r}",
                    entity=self.label,
                    field="time_spent",
                )
            if hours < 0:
                raise EntityValidationError(
                    "Time spent cannot be negative", entity=self.label, field="time_spent",
                )
            values["time_spent"] = hours
        return values
