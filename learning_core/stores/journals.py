# =============================================================================
# learning_core/stores/journals.py
# Journal entry store
# =============================================================================

from __future__ import annotations
from typing import Any, Dict

from learning_core.data.mappers import JOURNAL_MAPPER, optional_text
from learning_core.models.entities import JournalEntry
from .base_store import EntityStore


class JournalStore(EntityStore[JournalEntry]):
    label = "Journal entry"
    noun = "journal entry"
    required_fields = ("topic_id", "content")

    def __init__(self, gateway, identity_provider, notifier=None, mapper=JOURNAL_MAPPER):
        super().__init__(gateway, mapper, identity_provider, notifier)

    def clean(self, values: Dict[str, Any], creating: bool) -> Dict[str, Any]:
        if "tags" in values:
            values["tags"] = self.clean_tags(values["tags"])
        if "category" in values:
            values["category"] = optional_text(values["category"])
        return values
