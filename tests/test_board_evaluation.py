"""
Tests for the single-pass board evaluation and the wait-time estimator
boundary.
"""
import logging
from datetime import datetime, timedelta, timezone

from courtflow.models.board import BoardSnapshot
from courtflow.models.court import Court, Session
from courtflow.models.waitlist import Group, Player, WaitlistEntry
from courtflow.services.board_evaluation import evaluate_board
from courtflow.services.wait_estimates import build_estimator_request, estimates_by_entry

NOW = datetime(2025, 6, 15, 10, 0, tzinfo=timezone.utc)


def _entry(entry_id, players, position, deferred=False):
    group = Group(players=tuple(Player(name=f"{entry_id}-{i}") for i in range(players)))
    return WaitlistEntry(entry_id=entry_id, position=position, group=group, deferred=deferred)


def _snapshot(courts, waitlist=()):
    return BoardSnapshot(now=NOW, courts=tuple(courts), upcoming_blocks=(), waitlist=tuple(waitlist))


def _busy(number):
    return Court(number=number, is_available=False, session=Session(scheduled_end_at=NOW + timedelta(minutes=40)))


class TestEvaluateBoard:
    def test_all_views_share_one_pass(self):
        snapshot = _snapshot(
            [Court(number=1), _busy(2), Court(number=8)],
            [_entry("a", 4, 1), _entry("b", 2, 2)],
        )
        evaluation = evaluate_board(snapshot)
        assert evaluation.now == NOW
        assert evaluation.playable.playable_court_numbers == [1, 8]
        assert [sc.number for sc in evaluation.selection.selectable_courts] == [1, 8]
        assert [s.status for s in evaluation.statuses] == ["free", "occupied", "free"]
        assert [d.can_play_now for d in evaluation.cascade.decisions] == [True, True]
        assert evaluation.pass_through is None
        assert evaluation.allow_waitlist_join is False

    def test_pass_through_on_singles_only_board(self):
        snapshot = _snapshot(
            [_busy(1), Court(number=8)],
            [_entry("a", 4, 1), _entry("b", 4, 2), _entry("c", 2, 3)],
        )
        evaluation = evaluate_board(snapshot)
        assert evaluation.pass_through.entry_id == "c"

    def test_full_board_allows_join(self):
        evaluation = evaluate_board(_snapshot([_busy(1), _busy(2)]))
        assert evaluation.selection.selectable_courts == []
        assert evaluation.allow_waitlist_join is True

    def test_estimates_attached_by_entry(self):
        seen = {}

        def estimator(request):
            seen["request"] = request
            return [10, 25]

        snapshot = _snapshot(
            [_busy(1)],
            [_entry("a", 2, 1), _entry("d", 4, 2, deferred=True), _entry("b", 2, 3)],
        )
        evaluation = evaluate_board(snapshot, estimator=estimator)
        assert [e.entry_id for e in seen["request"].waitlist] == ["a", "b"]
        assert seen["request"].avg_game_minutes == 75
        assert [d.estimated_wait_minutes for d in evaluation.cascade.decisions] == [10, None, 25]

    def test_estimator_failure_is_logged_not_raised(self, caplog):
        def estimator(request):
            raise RuntimeError("history unavailable")

        snapshot = _snapshot([_busy(1)], [_entry("a", 2, 1)])
        with caplog.at_level(logging.ERROR, logger="courtflow.services.board_evaluation"):
            evaluation = evaluate_board(snapshot, estimator=estimator)

        assert evaluation.cascade.decisions[0].estimated_wait_minutes is None
        assert "Wait-time estimator failed" in caplog.text

    def test_estimator_not_called_for_empty_queue(self):
        def estimator(request):
            raise AssertionError("should not be called")

        evaluation = evaluate_board(_snapshot([Court(number=1)]), estimator=estimator)
        assert evaluation.cascade.decisions == []


class TestEstimatorRequest:
    def test_prefix_length(self):
        snapshot = _snapshot([], [_entry("a", 2, 1), _entry("b", 2, 2), _entry("c", 2, 3)])
        request = build_estimator_request(snapshot, 75, prefix_length=2)
        assert [e.entry_id for e in request.waitlist] == ["a", "b"]
        assert request.now == NOW

    def test_short_estimate_list_covers_prefix(self):
        snapshot = _snapshot([], [_entry("a", 2, 1), _entry("b", 2, 2)])
        request = build_estimator_request(snapshot, 75)
        assert estimates_by_entry(request, [12]) == {"a": 12}
        assert estimates_by_entry(request, None) == {}
