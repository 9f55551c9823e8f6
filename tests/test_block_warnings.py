"""Tests for upcoming block warnings."""
from datetime import datetime, timedelta, timezone

from courtflow.config import SelectionPolicy
from courtflow.models.block import Block
from courtflow.services.block_warnings import WARNING_BLOCKED, WARNING_LIMITED, get_upcoming_block_warning

NOW = datetime(2025, 6, 15, 10, 0, tzinfo=timezone.utc)


def _block_in(court, minutes, length=60, **kwargs):
    return Block(
        court_number=court,
        starts_at=NOW + timedelta(minutes=minutes),
        ends_at=NOW + timedelta(minutes=minutes + length),
        **kwargs,
    )


class TestGetUpcomingBlockWarning:
    def test_no_blocks(self):
        assert get_upcoming_block_warning(1, 60, [], NOW) is None
        assert get_upcoming_block_warning(1, 60, None, NOW) is None

    def test_imminent_block_is_blocking(self):
        warning = get_upcoming_block_warning(1, 60, [_block_in(1, 3, reason="Lesson")], NOW)
        assert warning.kind == WARNING_BLOCKED
        assert warning.minutes_until_block == 3
        assert warning.reason == "Lesson"
        assert warning.limited_duration is None

    def test_cutoff_is_inclusive(self):
        warning = get_upcoming_block_warning(1, 60, [_block_in(1, 5)], NOW)
        assert warning.kind == WARNING_BLOCKED

    def test_block_inside_session_limits_it(self):
        warning = get_upcoming_block_warning(1, 90, [_block_in(1, 30, reason="League")], NOW)
        assert warning.kind == WARNING_LIMITED
        assert warning.limited_duration == 30
        assert warning.original_duration == 90
        assert warning.starts_at == NOW + timedelta(minutes=30)

    def test_block_after_session_is_ignored(self):
        assert get_upcoming_block_warning(1, 60, [_block_in(1, 90)], NOW) is None

    def test_block_starting_at_session_end_is_ignored(self):
        assert get_upcoming_block_warning(1, 60, [_block_in(1, 60)], NOW) is None

    def test_zero_duration_reports_any_future_block(self):
        warning = get_upcoming_block_warning(1, 0, [_block_in(1, 240)], NOW)
        assert warning.kind == WARNING_LIMITED
        assert warning.minutes_until_block == 240
        assert warning.original_duration == 0

    def test_earliest_block_wins(self):
        blocks = [_block_in(1, 40, reason="Second"), _block_in(1, 20, reason="First")]
        warning = get_upcoming_block_warning(1, 90, blocks, NOW)
        assert warning.reason == "First"

    def test_ignores_other_courts_wet_and_started_blocks(self):
        blocks = [
            _block_in(2, 10),
            _block_in(1, 10, is_wet_court=True),
            _block_in(1, -10, length=30),
            Block(court_number=1),
        ]
        assert get_upcoming_block_warning(1, 60, blocks, NOW) is None

    def test_reason_falls_back_to_title_then_reserved(self):
        titled = get_upcoming_block_warning(1, 60, [_block_in(1, 30, title="Cardio Tennis")], NOW)
        assert titled.reason == "Cardio Tennis"
        bare = get_upcoming_block_warning(1, 60, [_block_in(1, 30)], NOW)
        assert bare.reason == "Reserved"

    def test_custom_cutoff(self):
        policy = SelectionPolicy(hard_cutoff_minutes=10)
        warning = get_upcoming_block_warning(1, 60, [_block_in(1, 8)], NOW, policy)
        assert warning.kind == WARNING_BLOCKED
