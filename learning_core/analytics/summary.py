# =============================================================================
# summary.py
# Dashboard figures: totals, topics by status, time spent per topic
# =============================================================================

from __future__ import annotations
import pandas as pd
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Sequence

from learning_core.models.entities import (
    ACTIVE_STATUSES,
    JournalEntry,
    LearningMethod,
    Resource,
    Topic,
    TopicStatus,
)

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)

TIME_COLUMNS = ["topic_id", "title", "status", "progress", "methods", "time_spent"]


@dataclass
class DashboardSummary:
    totals: Dict[str, int]
    status_groups: Dict[str, List[Topic]]
    time_by_topic: pd.DataFrame
    recent_journals: List[JournalEntry] = field(default_factory=list)
    average_progress: float = 0.0

    @property
    def status_counts(self) -> Dict[str, int]:
        return {status: len(topics) for status, topics in self.status_groups.items()}


def topics_frame(topics: Iterable[Topic]) -> pd.DataFrame:
    """One row per topic with the columns the dashboard needs."""
    rows = [
        {
            "topic_id": t.id,
            "title": t.title,
            "category_id": t.category_id,
            "status": t.status.value,
            "progress": t.progress,
            "updated_at": t.updated_at,
        }
        for t in topics
    ]
    return pd.DataFrame(rows, columns=["topic_id", "title", "category_id", "status", "progress", "updated_at"])


def methods_frame(methods: Iterable[LearningMethod]) -> pd.DataFrame:
    rows = [{"topic_id": m.topic_id, "time_spent": m.time_spent} for m in methods]
    df = pd.DataFrame(rows, columns=["topic_id", "time_spent"])
    df["time_spent"] = pd.to_numeric(df["time_spent"], errors="coerce").fillna(0.0)
    return df


def time_spent_by_topic(topics: Sequence[Topic], methods: Iterable[LearningMethod]) -> pd.DataFrame:
    """
    Total hours logged on each topic's learning methods.

    Parameters:
    -----------
    topics : Sequence[Topic]
        Topics to report on (topics without methods get 0 hours)
    methods : Iterable[LearningMethod]
        Methods whose ``time_spent`` is summed; missing values count as 0

    Returns:
    --------
    DataFrame with TIME_COLUMNS, most time spent first
    """
    topic_df = topics_frame(topics)
    if topic_df.empty:
        return pd.DataFrame(columns=TIME_COLUMNS)

    per_topic = (
        methods_frame(methods)
        .groupby("topic_id")
        .agg(methods=("time_spent", "size"), time_spent=("time_spent", "sum"))
        .reset_index()
    )

    merged = topic_df.merge(per_topic, on="topic_id", how="left")
    merged["methods"] = merged["methods"].fillna(0).astype(int)
    merged["time_spent"] = merged["time_spent"].fillna(0.0).astype(float)

    return (
        merged[TIME_COLUMNS]
        .sort_values(["time_spent", "title"], ascending=[False, True])
        .reset_index(drop=True)
    )


def group_by_status(topics: Iterable[Topic]) -> Dict[str, List[Topic]]:
    """Topics keyed by status label; the three current statuses are always present."""
    groups: Dict[str, List[Topic]] = {s.value: [] for s in ACTIVE_STATUSES}
    for topic in topics:
        groups.setdefault(TopicStatus.parse(topic.status).value, []).append(topic)
    return groups


def build_dashboard_summary(
    topics: Sequence[Topic],
    methods: Sequence[LearningMethod],
    journals: Sequence[JournalEntry],
    resources: Sequence[Resource],
    recent_limit: int = 3,
) -> DashboardSummary:
    """
    Compute the dashboard figures from store snapshots.

    Parameters:
    -----------
    topics, methods, journals, resources : Sequence
        Current collections (e.g. ``LearningContext.topics``)
    recent_limit : int
        How many journal entries to list as recent activity

    Returns:
    --------
    DashboardSummary
    """
    groups = group_by_status(topics)

    totals = {
        "topics": len(topics),
        "completed": len(groups[TopicStatus.COMPLETED.value]),
        "in_progress": len(groups[TopicStatus.IN_PROGRESS.value]),
        "methods": len(methods),
        "journals": len(journals),
        "resources": len(resources),
    }

    topic_df = topics_frame(topics)
    average = float(topic_df["progress"].mean()) if not topic_df.empty else 0.0

    recent = sorted(journals, key=lambda j: j.created_at or _EPOCH, reverse=True)[:recent_limit]

    return DashboardSummary(
        totals=totals,
        status_groups=groups,
        time_by_topic=time_spent_by_topic(topics, methods),
        recent_journals=recent,
        average_progress=round(average, 1),
    )
