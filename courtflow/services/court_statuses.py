"""
Per-court display status for the status board and admin grid.

The label is presentation only (wet > blocked > overtime > occupied > free).
Whether a court is selectable comes straight from CourtSelection; this
module never decides it on its own.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, List, Optional, Sequence

from courtflow.models.block import Block
from courtflow.models.court import Court
from courtflow.services.availability import is_block_active, is_blocked, is_session_overtime, is_wet
from courtflow.services.court_selection import CourtSelection

STATUS_FREE = "free"
STATUS_OCCUPIED = "occupied"
STATUS_OVERTIME = "overtime"
STATUS_BLOCKED = "blocked"
STATUS_WET = "wet"


@dataclass(frozen=True)
class CourtStatus:
    court_number: int
    status: str
    selectable: bool
    selectable_reason: Optional[str] = None
    is_wet: bool = False
    is_blocked: bool = False
    is_overtime: bool = False
    is_tournament: bool = False
    blocked_label: Optional[str] = None
    blocked_until: Optional[datetime] = None


def _active_block(court_number: int, blocks: Sequence[Block], now: datetime) -> Optional[Block]:
    for block in blocks:
        if block.court_number == court_number and not block.is_wet_court and is_block_active(block, now):
            return block
    return None


def _status_label(court: Court, wet: bool, blocked: bool, now: datetime) -> str:
    if wet:
        return STATUS_WET
    if blocked:
        return STATUS_BLOCKED
    if court.is_overtime:
        return STATUS_OVERTIME
    if court.session is not None:
        # Tournament courts past their end show as overtime but are never offered
        if court.is_tournament and is_session_overtime(court.session, now):
            return STATUS_OVERTIME
        return STATUS_OCCUPIED
    return STATUS_FREE


def compute_court_statuses(
    courts: Optional[Sequence[Optional[Court]]],
    active_blocks: Optional[Iterable[Block]],
    selection: CourtSelection,
    now: datetime,
) -> List[CourtStatus]:
    if not courts:
        return []

    blocks = list(active_blocks or [])
    selectable_by_number = {sc.number: sc for sc in selection.selectable_courts}

    out: List[CourtStatus] = []
    for court in courts:
        if court is None:
            continue
        number = court.number
        wet = is_wet(number, blocks, now)
        blocked = court.is_blocked or is_blocked(number, blocks, now)
        status = _status_label(court, wet, blocked, now)

        selectable_court = selectable_by_number.get(number)
        selectable = selectable_court is not None and not blocked

        active = _active_block(number, blocks, now) if status == STATUS_BLOCKED else None
        out.append(
            CourtStatus(
                court_number=number,
                status=status,
                selectable=selectable,
                selectable_reason=selectable_court.reason if selectable else None,
                is_wet=wet,
                is_blocked=blocked,
                is_overtime=status == STATUS_OVERTIME,
                is_tournament=court.is_tournament,
                blocked_label=active.label if active else ("Blocked" if status == STATUS_BLOCKED else None),
                blocked_until=active.ends_at if active else None,
            )
        )
    return out
