"""
Selection policy: which courts a registering group may take right now.

This is the one implementation every front end calls (kiosk court
selection, waitlist "you're up" CTAs, status board colouring). Nothing else
in the codebase decides primary vs. overtime-fallback.

1. Primary courts: available and not blocked.
2. Fallback overtime courts: overtime, not blocked, not tournament
   (a tournament's end time says nothing about when the court frees up).
3. Each primary court is checked against its nearest future block:
   - starts within HARD_CUTOFF_MINUTES -> dropped from selectable_courts
   - starts within MIN_USEFUL_MINUTES  -> selectable, is_usable=False
4. Overtime courts are offered only when no usable primary court is left.
5. Group-size queries filter the selectable list; "full-time" further
   requires the court to last a whole session plus buffer.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Sequence

from courtflow.config import DEFAULT_POLICY, SelectionPolicy
from courtflow.models.block import Block
from courtflow.models.court import Court
from courtflow.services.group_rules import is_court_eligible_for_group
from courtflow.services.playable_courts import CourtEligibility
from courtflow.utils.time_windows import minutes_until

logger = logging.getLogger(__name__)

REASON_FREE = "free"
REASON_OVERTIME_FALLBACK = "overtime_fallback"
REASON_NOT_AVAILABLE = "not_available"


@dataclass(frozen=True)
class SelectableCourt:
    number: int
    reason: str  # free | overtime_fallback
    minutes_available: Optional[int] = None  # None = no known end (no block ahead, or overtime)
    # Minutes to the next block on this court; for overtime courts this is
    # known even though minutes_available is not.
    next_block_minutes: Optional[int] = None
    is_usable: bool = True


@dataclass
class CourtSelection:
    primary_courts: List[Court] = field(default_factory=list)
    fallback_overtime_courts: List[Court] = field(default_factory=list)
    showing_overtime_courts: bool = False
    selectable_courts: List[SelectableCourt] = field(default_factory=list)
    eligibility_by_court_number: Dict[int, CourtEligibility] = field(default_factory=dict)
    blocks_loaded: bool = True
    policy: SelectionPolicy = DEFAULT_POLICY

    @property
    def usable_courts(self) -> List[SelectableCourt]:
        return [sc for sc in self.selectable_courts if sc.is_usable]

    def get_selectable_for_group(self, player_count: int) -> List[SelectableCourt]:
        """Courts this group may tap, singles-only courts filtered by size."""
        return [
            sc
            for sc in self.selectable_courts
            if is_court_eligible_for_group(sc.number, player_count, policy=self.policy)
        ]

    def get_full_time_for_group(self, player_count: int) -> List[SelectableCourt]:
        """Courts that will stay free for this group's whole session."""
        needed = self.policy.full_time_minutes(player_count)
        return [
            sc
            for sc in self.get_selectable_for_group(player_count)
            if sc.next_block_minutes is None or sc.next_block_minutes >= needed
        ]

    def count_selectable_for_group(self, player_count: int) -> int:
        return len(self.get_selectable_for_group(player_count))

    def count_full_time_for_group(self, player_count: int) -> int:
        return len(self.get_full_time_for_group(player_count))

    def is_eligible(self, court_number: int) -> bool:
        entry = self.eligibility_by_court_number.get(court_number)
        return bool(entry and entry.eligible)


def _next_block_starts(
    blocks: Iterable[Block],
    now: datetime,
) -> Dict[int, datetime]:
    """Earliest future block start per court number."""
    nearest: Dict[int, datetime] = {}
    for block in blocks:
        if block.starts_at is None or block.starts_at <= now:
            continue
        current = nearest.get(block.court_number)
        if current is None or block.starts_at < current:
            nearest[block.court_number] = block.starts_at
    return nearest


def compute_court_selection(
    courts: Optional[Sequence[Optional[Court]]],
    upcoming_blocks: Optional[Iterable[Block]],
    now: datetime,
    policy: Optional[SelectionPolicy] = None,
) -> CourtSelection:
    """
    Build the selection result for one board snapshot.

    upcoming_blocks=None means block data has not loaded yet. Courts are
    classified as if no block were scheduled; blocks_loaded=False tells the
    waitlist cascade to hold its "you're up" answer until the data arrives.
    """
    policy = policy or DEFAULT_POLICY
    if not courts:
        return CourtSelection(policy=policy)

    known = [c for c in courts if c is not None]
    primary = [c for c in known if c.is_available and not c.is_blocked]
    fallback = [c for c in known if c.is_overtime and not c.is_blocked and not c.is_tournament]

    blocks_loaded = upcoming_blocks is not None
    next_starts = _next_block_starts(upcoming_blocks or [], now)

    primary_selectable: List[SelectableCourt] = []
    for court in primary:
        starts_at = next_starts.get(court.number)
        if starts_at is None:
            primary_selectable.append(
                SelectableCourt(number=court.number, reason=REASON_FREE)
            )
            continue
        minutes = minutes_until(now, starts_at)
        if minutes <= policy.hard_cutoff_minutes:
            continue
        primary_selectable.append(
            SelectableCourt(
                number=court.number,
                reason=REASON_FREE,
                minutes_available=minutes,
                next_block_minutes=minutes,
                is_usable=minutes >= policy.min_useful_minutes,
            )
        )

    has_usable_primary = any(sc.is_usable for sc in primary_selectable)
    showing_overtime = not has_usable_primary and len(fallback) > 0

    selectable = list(primary_selectable)
    if showing_overtime:
        for court in fallback:
            starts_at = next_starts.get(court.number)
            selectable.append(
                SelectableCourt(
                    number=court.number,
                    reason=REASON_OVERTIME_FALLBACK,
                    minutes_available=None,  # overtime has no predictable end
                    next_block_minutes=None if starts_at is None else minutes_until(now, starts_at),
                    is_usable=True,
                )
            )

    primary_numbers = {c.number for c in primary}
    fallback_numbers = {c.number for c in fallback}
    eligibility: Dict[int, CourtEligibility] = {}
    for court in known:
        is_primary = court.number in primary_numbers
        is_fallback = court.number in fallback_numbers
        eligibility[court.number] = CourtEligibility(
            eligible=is_primary or (showing_overtime and is_fallback),
            reason=None if (is_primary or is_fallback) else REASON_NOT_AVAILABLE,
        )

    logger.debug(
        "court selection: primary=%s fallback=%s selectable=%s showing_overtime=%s",
        sorted(primary_numbers),
        sorted(fallback_numbers),
        [sc.number for sc in selectable],
        showing_overtime,
    )

    return CourtSelection(
        primary_courts=primary,
        fallback_overtime_courts=fallback,
        showing_overtime_courts=showing_overtime,
        selectable_courts=selectable,
        eligibility_by_court_number=eligibility,
        blocks_loaded=blocks_loaded,
        policy=policy,
    )
