"""Tests for UsageTracker."""

from datetime import datetime

from services.models import UsageFeature
from stores import UsageTracker
from stores.usage_tracker import month_key


class MutableClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


class TestMonthKey:

    def test_zero_based_month(self):
        assert month_key(datetime(2026, 1, 5)) == "2026-0"
        assert month_key(datetime(2026, 12, 31)) == "2026-11"


class TestCounting:

    def test_increment_and_read(self, storage, clock):
        tracker = UsageTracker(storage, clock=clock)

        assert tracker.get_current_usage(UsageFeature.RESUME_GENERATIONS) == 0
        assert tracker.increment_usage(UsageFeature.RESUME_GENERATIONS) == 1
        assert tracker.increment_usage("resumeGenerations") == 2
        assert tracker.get_current_usage(UsageFeature.RESUME_GENERATIONS) == 2

    def test_storage_key_format(self, storage, clock):
        tracker = UsageTracker(storage, clock=clock)
        tracker.increment_usage(UsageFeature.COVER_LETTER_GENERATIONS)

        assert storage.get_item("usage_coverLetterGenerations_2026-9") == "1"

    def test_limits(self, storage, clock):
        tracker = UsageTracker(storage, clock=clock)
        feature = UsageFeature.INTERVIEW_TOOLKIT_GENERATIONS

        assert not tracker.has_reached_limit(feature, 1)
        assert tracker.get_remaining(feature, 1) == 1

        tracker.increment_usage(feature)
        tracker.increment_usage(feature)

        assert tracker.has_reached_limit(feature, 1)
        assert tracker.get_remaining(feature, 1) == 0

    def test_new_month_starts_at_zero(self, storage):
        clock = MutableClock(datetime(2026, 10, 31))
        tracker = UsageTracker(storage, clock=clock)
        tracker.increment_usage(UsageFeature.RESUME_GENERATIONS)

        clock.now = datetime(2026, 11, 1)

        assert tracker.get_current_usage(UsageFeature.RESUME_GENERATIONS) == 0

    def test_unreadable_counter_is_zero(self, storage, clock):
        storage.set_item("usage_resumeGenerations_2026-9", "abc")
        tracker = UsageTracker(storage, clock=clock)
        assert tracker.get_current_usage(UsageFeature.RESUME_GENERATIONS) == 0

    def test_all_usage_stats(self, storage, clock):
        tracker = UsageTracker(storage, clock=clock)
        tracker.increment_usage(UsageFeature.HIGHLIGHT_GENERATIONS)

        stats = tracker.get_all_usage_stats()

        assert stats.month == "2026-9"
        assert stats.counts["highlightGenerations"] == 1
        assert stats.counts["resumeGenerations"] == 0
        assert set(stats.counts) == {f.value for f in UsageFeature}

    def test_reset_monthly_usage(self, storage, clock):
        tracker = UsageTracker(storage, clock=clock)
        tracker.increment_usage(UsageFeature.RESUME_GENERATIONS)

        tracker.reset_monthly_usage()

        assert tracker.get_current_usage(UsageFeature.RESUME_GENERATIONS) == 0


class TestCleanup:

    def test_removes_counters_older_than_retention(self, storage, clock):
        storage.set_item("usage_resumeGenerations_2026-9", "1")   # current
        storage.set_item("usage_resumeGenerations_2026-6", "2")   # 3 months back
        storage.set_item("usage_resumeGenerations_2026-5", "3")   # 4 months back
        storage.set_item("usage_coverLetterGenerations_2025-11", "4")
        storage.set_item("returnTo", "/dashboard")

        UsageTracker(storage, clock=clock)

        keys = set(storage.keys())
        assert "usage_resumeGenerations_2026-9" in keys
        assert "usage_resumeGenerations_2026-6" in keys
        assert "usage_resumeGenerations_2026-5" not in keys
        assert "usage_coverLetterGenerations_2025-11" not in keys
        assert "returnTo" in keys

    def test_cleanup_returns_count(self, storage, clock):
        tracker = UsageTracker(storage, clock=clock)
        storage.set_item("usage_resumeGenerations_2025-0", "1")
        storage.set_item("usage_malformed", "1")

        assert tracker.cleanup_old_data() == 1
        assert storage.get_item("usage_malformed") == "1"

    def test_year_boundary(self, storage):
        storage.set_item("usage_resumeGenerations_2025-10", "1")   # Nov 2025
        UsageTracker(storage, clock=lambda: datetime(2026, 1, 15))
        assert storage.get_item("usage_resumeGenerations_2025-10") == "1"
