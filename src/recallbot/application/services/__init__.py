"""Application services."""

from recallbot.application.services.context_builder import (
    ContextBuilder,
    deduplicate,
    evenly_spaced_sample,
    monthly_breakdown,
    remove_names,
    sanitize_query,
    skip_and_log,
    trim_to_budget,
)
from recallbot.application.services.follow_up_tracker import (
    FollowUpSettings,
    FollowUpTracker,
)
from recallbot.application.services.profile_refresher import (
    ProfileRefresher,
    ProfileRefreshResult,
)
from recallbot.application.services.user_directory import UserDirectory
from recallbot.application.services.window_sweeper import WindowSweeper

__all__ = [
    "ContextBuilder",
    "FollowUpSettings",
    "FollowUpTracker",
    "ProfileRefreshResult",
    "ProfileRefresher",
    "UserDirectory",
    "WindowSweeper",
    "deduplicate",
    "evenly_spaced_sample",
    "monthly_breakdown",
    "remove_names",
    "sanitize_query",
    "skip_and_log",
    "trim_to_budget",
]
