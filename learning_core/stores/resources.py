# =============================================================================
# learning_core/stores/resources.py
# Resource (links, books, notes) store
# =============================================================================

from __future__ import annotations
from typing import Any, Dict

from learning_core.data.mappers import RESOURCE_MAPPER, optional_text
from learning_core.models.entities import Resource
from .base_store import EntityStore


class ResourceStore(EntityStore[Resource]):
    label = "Resource"
    noun = "resource"
    required_fields = ("topic_id", "title")

    def __init__(self, gateway, identity_provider, notifier=None, mapper=RESOURCE_MAPPER):
        super().__init__(gateway, mapper, identity_provider, notifier)

    def clean(self, values: Dict[str, Any], creating: bool) -> Dict[str, Any]:
        if "title" in values:
            values["title"] = str(values["title"]).strip()
        if "tags" in values:
            values["tags"] = self.clean_tags(values["tags"])
        for name in ("url", "notes", "type"):
            if name in values:
                values[name] = optional_text(values[name])
        return values
