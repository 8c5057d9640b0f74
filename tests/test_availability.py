"""Tests for resolving open windows and checking slot containment."""

from booking_engine.domain.availability import is_within_availability, resolve_windows
from booking_engine.domain.entities import DailyWindow, ScheduleException, WeeklyTemplateItem
from builders import build_schedule, utc

WEDNESDAY = utc(2025, 1, 1)


def _weekly_schedule(**overrides):
    return build_schedule(
        weekly_template=[
            WeeklyTemplateItem(weekday=3, windows=[DailyWindow("09:00", "12:00")]),
            WeeklyTemplateItem(weekday=3, windows=[DailyWindow("14:00", "18:00")]),
            WeeklyTemplateItem(weekday=4, windows=[DailyWindow("10:00", "11:00")]),
        ],
        **overrides,
    )


class TestResolveWindows:
    """Tests for the exception-overrides-template rule."""

    def test_template_windows_for_matching_weekday(self):
        """Test every template entry for the weekday contributes its windows."""
        windows = resolve_windows(_weekly_schedule(), WEDNESDAY)
        assert windows == [DailyWindow("09:00", "12:00"), DailyWindow("14:00", "18:00")]

    def test_no_template_for_weekday(self):
        assert resolve_windows(_weekly_schedule(), utc(2025, 1, 5)) == []

    def test_unavailable_exception_closes_day(self):
        schedule = _weekly_schedule(exceptions=[ScheduleException(date="2025-01-01", available=False)])
        assert resolve_windows(schedule, WEDNESDAY) == []

    def test_available_exception_replaces_template(self):
        """Test exception windows are used alone, never merged with the template."""
        schedule = _weekly_schedule(
            exceptions=[ScheduleException(date="2025-01-01", available=True, windows=[DailyWindow("20:00", "21:00")])]
        )
        assert resolve_windows(schedule, WEDNESDAY) == [DailyWindow("20:00", "21:00")]

    def test_available_exception_without_windows_is_closed(self):
        schedule = _weekly_schedule(exceptions=[ScheduleException(date="2025-01-01", available=True)])
        assert resolve_windows(schedule, WEDNESDAY) == []

    def test_exception_only_affects_its_date(self):
        schedule = _weekly_schedule(exceptions=[ScheduleException(date="2025-01-08", available=False)])
        assert len(resolve_windows(schedule, WEDNESDAY)) == 2

    def test_exception_opens_day_without_template(self):
        schedule = _weekly_schedule(
            exceptions=[ScheduleException(date="2025-01-05", available=True, windows=[DailyWindow("08:00", "09:00")])]
        )
        assert resolve_windows(schedule, utc(2025, 1, 5, 15)) == [DailyWindow("08:00", "09:00")]


class TestIsWithinAvailability:
    """Tests for single-window containment."""

    def test_inside_window(self):
        assert is_within_availability(_weekly_schedule(), utc(2025, 1, 1, 9, 0), utc(2025, 1, 1, 9, 30))

    def test_touching_window_edges(self):
        """Test a slot ending exactly at the window end is accepted."""
        assert is_within_availability(_weekly_schedule(), utc(2025, 1, 1, 11, 30), utc(2025, 1, 1, 12, 0))

    def test_past_window_end(self):
        assert not is_within_availability(_weekly_schedule(), utc(2025, 1, 1, 11, 45), utc(2025, 1, 1, 12, 15))

    def test_spanning_two_windows_rejected(self):
        """Test a slot covering the gap between two windows is rejected."""
        assert not is_within_availability(_weekly_schedule(), utc(2025, 1, 1, 11, 30), utc(2025, 1, 1, 14, 30))

    def test_adjacent_windows_are_not_joined(self):
        schedule = build_schedule(
            weekly_template=[
                WeeklyTemplateItem(weekday=3, windows=[DailyWindow("09:00", "10:00"), DailyWindow("10:00", "11:00")])
            ]
        )
        assert not is_within_availability(schedule, utc(2025, 1, 1, 9, 45), utc(2025, 1, 1, 10, 15))

    def test_closed_day(self):
        assert not is_within_availability(_weekly_schedule(), utc(2025, 1, 5, 10), utc(2025, 1, 5, 10, 30))

    def test_crossing_midnight_rejected(self):
        schedule = build_schedule(
            weekly_template=[WeeklyTemplateItem(weekday=3, windows=[DailyWindow("00:00", "24:00")])]
        )
        assert not is_within_availability(schedule, utc(2025, 1, 1, 23, 45), utc(2025, 1, 2, 0, 15))

    def test_ending_at_midnight_with_full_day_window(self):
        schedule = build_schedule(
            weekly_template=[WeeklyTemplateItem(weekday=3, windows=[DailyWindow("00:00", "24:00")])]
        )
        assert is_within_availability(schedule, utc(2025, 1, 1, 23, 30), utc(2025, 1, 2, 0, 0))

    def test_exception_windows_used_for_containment(self):
        schedule = _weekly_schedule(
            exceptions=[ScheduleException(date="2025-01-01", available=True, windows=[DailyWindow("20:00", "21:00")])]
        )
        assert not is_within_availability(schedule, utc(2025, 1, 1, 9, 0), utc(2025, 1, 1, 9, 30))
        assert is_within_availability(schedule, utc(2025, 1, 1, 20, 0), utc(2025, 1, 1, 20, 30))
