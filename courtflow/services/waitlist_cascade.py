"""
Waitlist cascade: which queue positions may act ("you're up") right now.

Rules, evaluated front to back against one CourtSelection:
- position 0 acts iff at least one court is available to it;
- position 1 needs two courts when position 0 can act, else one
  (a front group that cannot use the only court does not use it up);
- position >= 2 acts iff nobody ahead can act and one court is available.

"Available" is the group's own count: full-time courts for a deferred
group, selectable courts otherwise. Deferred groups keep their place in
line; only their count differs. Until block data has loaded nobody is
called up, so every count is zero.
"""
import logging
from dataclasses import dataclass, field, replace
from typing import Iterable, List, Mapping, Optional, Sequence

from courtflow.models.waitlist import WaitlistEntry
from courtflow.services.court_selection import CourtSelection

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WaitlistDecision:
    entry_id: str
    index: int  # 0-based place in the evaluated queue
    position: int
    player_count: int
    deferred: bool
    available: int
    can_play_now: bool
    estimated_wait_minutes: Optional[int] = None


@dataclass
class WaitlistCascade:
    decisions: List[WaitlistDecision] = field(default_factory=list)

    @property
    def first_actionable(self) -> Optional[WaitlistDecision]:
        return next((d for d in self.decisions if d.can_play_now), None)

    @property
    def any_can_play(self) -> bool:
        return any(d.can_play_now for d in self.decisions)

    def can_play(self, idx: int) -> bool:
        if idx < 0 or idx >= len(self.decisions):
            return False
        return self.decisions[idx].can_play_now


def available_for_entry(selection: CourtSelection, entry: WaitlistEntry) -> int:
    if not selection.blocks_loaded:
        return 0
    if entry.deferred:
        return selection.count_full_time_for_group(entry.player_count)
    return selection.count_selectable_for_group(entry.player_count)


def _can_act(idx: int, available: int, ahead: Sequence[bool]) -> bool:
    if idx == 0:
        return available > 0
    if idx == 1:
        return available >= (2 if ahead[0] else 1)
    if any(ahead):
        return False
    return available >= 1


def evaluate_waitlist(
    selection: CourtSelection,
    waitlist: Optional[Sequence[WaitlistEntry]],
) -> WaitlistCascade:
    """
    One pass over the queue; each answer depends only on positions ahead,
    so earlier results are reused instead of re-evaluated.
    """
    cascade = WaitlistCascade()
    if not waitlist:
        return cascade

    ahead: List[bool] = []
    for idx, entry in enumerate(waitlist):
        available = available_for_entry(selection, entry)
        can_play = _can_act(idx, available, ahead)
        ahead.append(can_play)
        cascade.decisions.append(
            WaitlistDecision(
                entry_id=entry.entry_id,
                index=idx,
                position=entry.position,
                player_count=entry.player_count,
                deferred=entry.deferred,
                available=available,
                can_play_now=can_play,
            )
        )

    logger.debug(
        "waitlist cascade: %s",
        [(d.position, d.available, d.can_play_now) for d in cascade.decisions],
    )
    return cascade


def can_group_register_now(
    selection: CourtSelection,
    waitlist: Optional[Sequence[WaitlistEntry]],
    idx: int,
) -> bool:
    """Answer for a single 0-based queue index; out of range -> False."""
    if not waitlist or idx < 0 or idx >= len(waitlist):
        return False
    return evaluate_waitlist(selection, waitlist[: idx + 1]).can_play(idx)


def find_pass_through_entry(cascade: WaitlistCascade) -> Optional[WaitlistDecision]:
    """
    When neither of the first two groups can act, the first group further
    back that can (e.g. singles behind two doubles facing a singles-only
    court).
    """
    if cascade.can_play(0) or cascade.can_play(1):
        return None
    return next((d for d in cascade.decisions[2:] if d.can_play_now), None)


def attach_estimates(cascade: WaitlistCascade, estimates_by_entry: Optional[Mapping[str, int]]) -> WaitlistCascade:
    """Copy estimator ETAs onto decisions by entry id; entries without one stay unset."""
    if not estimates_by_entry:
        return cascade
    decisions = [
        replace(d, estimated_wait_minutes=int(estimates_by_entry[d.entry_id]))
        if d.entry_id in estimates_by_entry
        else d
        for d in cascade.decisions
    ]
    return WaitlistCascade(decisions=decisions)


def active_entries(waitlist: Optional[Iterable[WaitlistEntry]]) -> List[WaitlistEntry]:
    """Entries still competing for any court (not holding out for full-time)."""
    return [e for e in (waitlist or []) if not e.deferred]


def has_waiters(waitlist: Optional[Iterable[WaitlistEntry]]) -> bool:
    return any(not e.deferred for e in (waitlist or []))


def should_allow_waitlist_join(selection: CourtSelection) -> bool:
    """Joining the queue only makes sense when nothing can be selected."""
    return len(selection.selectable_courts) == 0
