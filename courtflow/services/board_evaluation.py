"""
One decision pass over a board snapshot.

Every panel of every front end renders from a single BoardEvaluation so
that all of them see the same now and the same classification: playable
courts, selection, per-court status and the waitlist cascade are computed
here together, once.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from courtflow.config import DEFAULT_POLICY, SelectionPolicy
from courtflow.models.board import BoardSnapshot
from courtflow.services.court_selection import CourtSelection, compute_court_selection
from courtflow.services.court_statuses import CourtStatus, compute_court_statuses
from courtflow.services.playable_courts import PlayableCourts, compute_playable_courts
from courtflow.services.wait_estimates import (
    WaitTimeEstimator,
    build_estimator_request,
    estimates_by_entry,
)
from courtflow.services.waitlist_cascade import (
    WaitlistCascade,
    WaitlistDecision,
    attach_estimates,
    evaluate_waitlist,
    find_pass_through_entry,
    should_allow_waitlist_join,
)

logger = logging.getLogger(__name__)


@dataclass
class BoardEvaluation:
    now: datetime
    playable: PlayableCourts
    selection: CourtSelection
    statuses: List[CourtStatus] = field(default_factory=list)
    cascade: WaitlistCascade = field(default_factory=WaitlistCascade)
    pass_through: Optional[WaitlistDecision] = None
    allow_waitlist_join: bool = True


def evaluate_board(
    snapshot: BoardSnapshot,
    policy: Optional[SelectionPolicy] = None,
    estimator: Optional[WaitTimeEstimator] = None,
) -> BoardEvaluation:
    policy = policy or DEFAULT_POLICY
    now = snapshot.now
    all_blocks = snapshot.all_blocks

    playable = compute_playable_courts(snapshot.courts, all_blocks, now)
    selection = compute_court_selection(snapshot.courts, snapshot.upcoming_blocks, now, policy)
    statuses = compute_court_statuses(snapshot.courts, all_blocks, selection, now)
    cascade = evaluate_waitlist(selection, snapshot.waitlist)

    if estimator is not None and snapshot.waitlist:
        request = build_estimator_request(snapshot, policy.avg_game_minutes)
        try:
            etas = estimator(request)
        except Exception:
            # ETAs are decoration; the board still renders without them
            logger.exception("Wait-time estimator failed for %d queued groups", len(request.waitlist))
        else:
            cascade = attach_estimates(cascade, estimates_by_entry(request, etas))

    return BoardEvaluation(
        now=now,
        playable=playable,
        selection=selection,
        statuses=statuses,
        cascade=cascade,
        pass_through=find_pass_through_entry(cascade),
        allow_waitlist_join=should_allow_waitlist_join(selection),
    )
