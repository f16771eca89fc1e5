"""Month-scoped feature usage counters for free-tier limits.

Counters live in LocalStorage under `usage_<feature>_<year>-<month>`, where
month is zero-based (January == 0). A new month starts from zero simply by
using a new key. This is best-effort single-writer accounting; any
authoritative quota has to be enforced server-side.
"""

import logging
from datetime import datetime
from typing import Callable

from local_storage import LocalStorage
from services.models import UsageFeature, UsageStats

logger = logging.getLogger(__name__)

USAGE_KEY_PREFIX = "usage_"


def month_key(moment: datetime) -> str:
    """Format the counter month key for a moment, e.g. "2026-9" for October."""
    return f"{moment.year}-{moment.month - 1}"


def _feature_name(feature: UsageFeature | str) -> str:
    return feature.value if isinstance(feature, UsageFeature) else feature


class UsageTracker:
    """Per-feature monthly counters with automatic cleanup of old months."""

    def __init__(
        self,
        storage: LocalStorage,
        clock: Callable[[], datetime] | None = None,
        retention_months: int = 3,
    ):
        self.storage = storage
        self._clock = clock or datetime.now
        self.retention_months = retention_months
        self.cleanup_old_data()

    def _storage_key(self, feature: UsageFeature | str) -> str:
        return f"{USAGE_KEY_PREFIX}{_feature_name(feature)}_{month_key(self._clock())}"

    def get_current_usage(self, feature: UsageFeature | str) -> int:
        """Get this month's count for a feature."""
        raw = self.storage.get_item(self._storage_key(feature))
        try:
            return int(raw or 0)
        except ValueError:
            return 0

    def increment_usage(self, feature: UsageFeature | str) -> int:
        """Add one use of a feature this month.

        Returns:
            The new count.
        """
        count = self.get_current_usage(feature) + 1
        self.storage.set_item(self._storage_key(feature), str(count))
        return count

    def get_remaining(self, feature: UsageFeature | str, limit: int) -> int:
        """Uses left this month under a limit (never negative)."""
        return max(0, limit - self.get_current_usage(feature))

    def has_reached_limit(self, feature: UsageFeature | str, limit: int) -> bool:
        return self.get_current_usage(feature) >= limit

    def get_all_usage_stats(self) -> UsageStats:
        """Counts for every tracked feature this month."""
        return UsageStats(
            month=month_key(self._clock()),
            counts={f.value: self.get_current_usage(f) for f in UsageFeature},
        )

    def reset_monthly_usage(self) -> None:
        """Clear this month's counters for every tracked feature."""
        for feature in UsageFeature:
            self.storage.remove_item(self._storage_key(feature))

    def cleanup_old_data(self) -> int:
        """Remove counters older than the retention window.

        Returns:
            Number of counters removed.
        """
        now = self._clock()
        current_index = now.year * 12 + (now.month - 1)
        removed = 0

        for key in self.storage.keys():
            if not key.startswith(USAGE_KEY_PREFIX):
                continue

            # Feature names never contain the trailing "_<year>-<month>".
            _, _, month_part = key.rpartition("_")
            try:
                year_str, month_str = month_part.split("-")
                key_index = int(year_str) * 12 + int(month_str)
            except ValueError:
                continue

            if current_index - key_index > self.retention_months:
                self.storage.remove_item(key)
                removed += 1

        if removed:
            logger.debug("Removed %d stale usage counters", removed)
        return removed
