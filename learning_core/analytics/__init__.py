from .summary import DashboardSummary, build_dashboard_summary, group_by_status, time_spent_by_topic

__all__ = ["DashboardSummary", "build_dashboard_summary", "group_by_status", "time_spent_by_topic"]
