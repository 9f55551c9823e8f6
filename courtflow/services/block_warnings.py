"""
Upcoming block warnings shown before a group commits to a court.

- "blocked": the next block starts within HARD_CUTOFF_MINUTES; do not register.
- "limited": the block cuts the intended session short.
Wet-court blocks are handled by the wet-court flow and ignored here.
"""
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable, Optional

from courtflow.config import DEFAULT_POLICY, SelectionPolicy
from courtflow.models.block import Block
from courtflow.utils.time_windows import minutes_until

WARNING_BLOCKED = "blocked"
WARNING_LIMITED = "limited"


@dataclass(frozen=True)
class BlockWarning:
    kind: str  # blocked | limited
    reason: str
    starts_at: datetime
    minutes_until_block: int
    limited_duration: Optional[int] = None
    original_duration: Optional[int] = None


def get_upcoming_block_warning(
    court_number: int,
    duration_minutes: int,
    blocks: Optional[Iterable[Block]],
    now: datetime,
    policy: Optional[SelectionPolicy] = None,
) -> Optional[BlockWarning]:
    """
    Warning for the earliest future block that interferes with a session of
    duration_minutes starting now. duration_minutes=0 reports any future block.
    """
    policy = policy or DEFAULT_POLICY
    session_end = now + timedelta(minutes=max(duration_minutes, 0))

    candidates = []
    for block in blocks or []:
        if block.court_number != court_number or block.is_wet_court:
            continue
        if block.starts_at is None or block.ends_at is None:
            continue
        if block.starts_at <= now or block.ends_at <= now:
            continue
        if duration_minutes > 0 and block.starts_at >= session_end:
            continue
        candidates.append(block)

    if not candidates:
        return None

    upcoming = min(candidates, key=lambda b: b.starts_at)
    minutes = minutes_until(now, upcoming.starts_at)
    reason = upcoming.reason or upcoming.title or "Reserved"

    if minutes <= policy.hard_cutoff_minutes:
        return BlockWarning(
            kind=WARNING_BLOCKED,
            reason=reason,
            starts_at=upcoming.starts_at,
            minutes_until_block=minutes,
        )

    if duration_minutes == 0 or minutes < duration_minutes:
        return BlockWarning(
            kind=WARNING_LIMITED,
            reason=reason,
            starts_at=upcoming.starts_at,
            minutes_until_block=minutes,
            limited_duration=minutes,
            original_duration=duration_minutes,
        )

    return None
