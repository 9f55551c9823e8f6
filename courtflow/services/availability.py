"""
Availability classifier: single source of truth for whether one court is
playable at one instant.

A court is playable iff
1. it has no active session (a session at or past its scheduled end is
   overtime and does not count as occupying the court), and
2. no block covers now (wet-court blocks are blocks, so they are covered).

Pure functions. A session missing its end is never overtime; a block
missing a time bound is taken as in effect. Nothing here raises.
"""
from datetime import datetime
from typing import Iterable, Optional

from courtflow.models.block import Block
from courtflow.models.court import Court, Session
from courtflow.utils.time_windows import is_active_interval


def is_session_overtime(session: Optional[Session], now: datetime) -> bool:
    """Past (or exactly at) its scheduled end and not yet closed."""
    if session is None or session.scheduled_end_at is None:
        return False
    if session.actual_end_at is not None:
        return False
    return session.scheduled_end_at <= now


def is_occupied(court: Optional[Court], now: datetime) -> bool:
    """True only for a court held by a live, non-overtime session."""
    if court is None or court.session is None:
        return False
    if court.is_overtime:
        return False
    session = court.session
    if session.actual_end_at is not None:
        return False
    if session.scheduled_end_at is not None and session.scheduled_end_at <= now:
        return False
    return True


def is_block_active(block: Block, now: datetime) -> bool:
    if block.starts_at is None or block.ends_at is None:
        # Legacy rows missing a bound are only ever sent while in effect
        return True
    return is_active_interval(now, block.starts_at, block.ends_at)


def is_blocked(court_number: int, blocks: Optional[Iterable[Block]], now: datetime) -> bool:
    if not blocks:
        return False
    return any(b.court_number == court_number and is_block_active(b, now) for b in blocks)


def is_wet(court_number: int, blocks: Optional[Iterable[Block]], now: datetime) -> bool:
    if not blocks:
        return False
    return any(
        b.court_number == court_number and b.is_wet_court and is_block_active(b, now)
        for b in blocks
    )


def is_playable_now(
    court: Optional[Court],
    court_number: int,
    blocks: Optional[Iterable[Block]],
    now: datetime,
) -> bool:
    if is_occupied(court, now):
        return False
    if is_blocked(court_number, blocks, now):
        return False
    return True


def build_court_view(
    number: int,
    session: Optional[Session],
    blocks: Optional[Iterable[Block]],
    now: datetime,
) -> Court:
    """Derive the Court flags from raw session and block facts."""
    blocks = list(blocks or [])
    has_live_session = session is not None and session.actual_end_at is None
    blocked = is_blocked(number, blocks, now)
    return Court(
        number=number,
        is_available=not has_live_session and not blocked,
        is_blocked=blocked,
        is_overtime=has_live_session and is_session_overtime(session, now),
        is_tournament=bool(session and session.is_tournament),
        session=session if has_live_session else None,
    )
