"""
Playable courts across the whole board, as-is.

Used by the status board and by "tap to register" gating. Group size
restrictions do not apply here; they belong to court_selection.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Sequence

from courtflow.models.block import Block
from courtflow.models.court import Court
from courtflow.services.availability import is_blocked, is_occupied

REASON_BLOCKED = "blocked"
REASON_OCCUPIED = "occupied"


@dataclass(frozen=True)
class CourtEligibility:
    eligible: bool
    reason: Optional[str] = None


@dataclass
class PlayableCourts:
    playable_court_numbers: List[int] = field(default_factory=list)
    eligibility_by_court_number: Dict[int, CourtEligibility] = field(default_factory=dict)

    @property
    def count(self) -> int:
        return len(self.playable_court_numbers)


def compute_playable_courts(
    courts: Optional[Sequence[Optional[Court]]],
    blocks: Optional[Iterable[Block]],
    now: datetime,
) -> PlayableCourts:
    if not courts:
        return PlayableCourts()

    blocks = list(blocks or [])
    result = PlayableCourts()
    for index, court in enumerate(courts):
        if court is None:
            continue
        number = court.number or index + 1
        occupied = is_occupied(court, now)
        blocked = is_blocked(number, blocks, now)
        if not occupied and not blocked:
            result.playable_court_numbers.append(number)
            result.eligibility_by_court_number[number] = CourtEligibility(True)
            continue
        reason = REASON_BLOCKED if blocked or court.is_blocked else REASON_OCCUPIED
        result.eligibility_by_court_number[number] = CourtEligibility(False, reason)
    return result


def count_playable_courts(courts, blocks, now: datetime) -> int:
    return compute_playable_courts(courts, blocks, now).count


def list_playable_courts(courts, blocks, now: datetime) -> List[int]:
    return compute_playable_courts(courts, blocks, now).playable_court_numbers
