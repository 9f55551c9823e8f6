"""Tests for per-court display status."""
from datetime import datetime, timedelta, timezone

from courtflow.models.block import Block
from courtflow.models.court import Court, Session
from courtflow.services.availability import build_court_view
from courtflow.services.court_selection import compute_court_selection
from courtflow.services.court_statuses import (
    STATUS_BLOCKED,
    STATUS_FREE,
    STATUS_OCCUPIED,
    STATUS_OVERTIME,
    STATUS_WET,
    compute_court_statuses,
)

NOW = datetime(2025, 6, 15, 10, 0, tzinfo=timezone.utc)


def _at(minutes):
    return NOW + timedelta(minutes=minutes)


def _statuses(courts, active_blocks=(), upcoming_blocks=()):
    selection = compute_court_selection(courts, list(upcoming_blocks), NOW)
    return {s.court_number: s for s in compute_court_statuses(courts, list(active_blocks), selection, NOW)}


class TestStatusLabels:
    def test_free_court(self):
        status = _statuses([Court(number=1)])[1]
        assert status.status == STATUS_FREE
        assert status.selectable is True
        assert status.selectable_reason == "free"

    def test_occupied_court(self):
        court = build_court_view(1, Session(scheduled_end_at=_at(30)), [], NOW)
        status = _statuses([court])[1]
        assert status.status == STATUS_OCCUPIED
        assert status.selectable is False
        assert status.selectable_reason is None

    def test_overtime_court_offered_as_fallback(self):
        occupied = build_court_view(1, Session(scheduled_end_at=_at(30)), [], NOW)
        overtime = build_court_view(2, Session(scheduled_end_at=_at(-10)), [], NOW)
        statuses = _statuses([occupied, overtime])
        assert statuses[2].status == STATUS_OVERTIME
        assert statuses[2].is_overtime is True
        assert statuses[2].selectable is True
        assert statuses[2].selectable_reason == "overtime_fallback"

    def test_overtime_court_not_selectable_while_primary_free(self):
        overtime = build_court_view(2, Session(scheduled_end_at=_at(-10)), [], NOW)
        statuses = _statuses([Court(number=1), overtime])
        assert statuses[2].status == STATUS_OVERTIME
        assert statuses[2].selectable is False

    def test_tournament_past_end_is_overtime_but_never_selectable(self):
        occupied = build_court_view(1, Session(scheduled_end_at=_at(30)), [], NOW)
        tournament = build_court_view(2, Session(scheduled_end_at=_at(-10), is_tournament=True), [], NOW)
        status = _statuses([occupied, tournament])[2]
        assert status.status == STATUS_OVERTIME
        assert status.is_tournament is True
        assert status.selectable is False

    def test_tournament_flagged_past_end_without_overtime_flag(self):
        court = Court(
            number=3,
            is_available=False,
            is_tournament=True,
            session=Session(scheduled_end_at=_at(-10), is_tournament=True),
        )
        status = _statuses([court])[3]
        assert status.status == STATUS_OVERTIME

    def test_blocked_court_label_and_end(self):
        block = Block(court_number=1, starts_at=_at(-30), ends_at=_at(30), title="Junior Clinic")
        court = build_court_view(1, None, [block], NOW)
        status = _statuses([court], active_blocks=[block])[1]
        assert status.status == STATUS_BLOCKED
        assert status.is_blocked is True
        assert status.blocked_label == "Junior Clinic"
        assert status.blocked_until == _at(30)
        assert status.selectable is False

    def test_blocked_flag_without_block_data(self):
        status = _statuses([Court(number=1, is_available=False, is_blocked=True)])[1]
        assert status.status == STATUS_BLOCKED
        assert status.blocked_label == "Blocked"
        assert status.blocked_until is None

    def test_wet_beats_blocked(self):
        block = Block(court_number=4, starts_at=_at(-60), ends_at=_at(60), is_wet_court=True)
        court = build_court_view(4, None, [block], NOW)
        status = _statuses([court], active_blocks=[block])[4]
        assert status.status == STATUS_WET
        assert status.is_wet is True
        assert status.selectable is False

    def test_holes_skipped_and_empty_board(self):
        assert list(_statuses([None, Court(number=2)])) == [2]
        selection = compute_court_selection([], [], NOW)
        assert compute_court_statuses([], [], selection, NOW) == []

    def test_selectable_matches_selection(self):
        courts = [Court(number=1), Court(number=2), Court(number=8)]
        upcoming = [Block(court_number=2, starts_at=_at(3), ends_at=_at(60))]
        selection = compute_court_selection(courts, upcoming, NOW)
        statuses = compute_court_statuses(courts, [], selection, NOW)
        assert [s.court_number for s in statuses if s.selectable] == [sc.number for sc in selection.selectable_courts]
