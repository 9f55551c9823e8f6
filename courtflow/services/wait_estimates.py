"""
Boundary with the wait-time estimator.

The estimator projects ETAs from historical game length; this package only
lines the queue up for it and hands its answer back to the cascade. ETAs
are neither computed nor validated here.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional, Protocol, Tuple

from courtflow.models.block import Block
from courtflow.models.board import BoardSnapshot
from courtflow.models.court import Court
from courtflow.models.waitlist import WaitlistEntry
from courtflow.services.waitlist_cascade import active_entries


@dataclass(frozen=True)
class EstimatorRequest:
    courts: Tuple[Optional[Court], ...]
    waitlist: Tuple[WaitlistEntry, ...]
    blocks: Tuple[Block, ...]
    now: datetime
    avg_game_minutes: int


class WaitTimeEstimator(Protocol):
    def __call__(self, request: EstimatorRequest) -> List[int]:
        """Per-position ETA minutes, in request.waitlist order."""
        ...


def build_estimator_request(
    snapshot: BoardSnapshot,
    avg_game_minutes: int,
    prefix_length: Optional[int] = None,
) -> EstimatorRequest:
    """
    Queue handed to the estimator: groups still competing for any court, in
    position order, optionally cut to the first prefix_length.
    """
    queue = sorted(active_entries(snapshot.waitlist), key=lambda e: e.position)
    if prefix_length is not None:
        queue = queue[: max(prefix_length, 0)]
    return EstimatorRequest(
        courts=tuple(snapshot.courts),
        waitlist=tuple(queue),
        blocks=snapshot.all_blocks,
        now=snapshot.now,
        avg_game_minutes=avg_game_minutes,
    )


def estimates_by_entry(request: EstimatorRequest, etas: Optional[List[int]]) -> Dict[str, int]:
    """Key estimator output by entry id; a short list covers only its prefix."""
    if not etas:
        return {}
    return {entry.entry_id: int(eta) for entry, eta in zip(request.waitlist, etas)}
