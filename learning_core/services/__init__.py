# =============================================================================
# learning_core/services/__init__.py
# Service layer for the learning tracker
# =============================================================================
"""
Service layer for the learning tracker.

Usage Example:
-------------
    from learning_core.services.learning_context import LearningContext
    from learning_core.services import filter_journals, tag_suggestions

    ctx = LearningContext(backend, auth)
    await ctx.start()

    entries = filter_journals(ctx.journals, tag="react", search="hooks")
    offered = tag_suggestions(collect_tags(ctx.journals, ctx.resources), entry.tags)

``LearningContext`` is imported from its module so that the stores can use
``ServiceResult`` without a circular import.
"""

from .base_service import ServiceResult, BaseService
from .queries import (
    collect_tags,
    tag_suggestions,
    filter_journals,
    filter_resources,
    topics_by_category,
    methods_for_topic,
)

__all__ = [
    "ServiceResult",
    "BaseService",
    "collect_tags",
    "tag_suggestions",
    "filter_journals",
    "filter_resources",
    "topics_by_category",
    "methods_for_topic",
]
