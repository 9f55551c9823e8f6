from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class Session:
    """An occupation of one court by one group."""

    scheduled_end_at: Optional[datetime] = None  # None -> never overtime
    started_at: Optional[datetime] = None
    is_tournament: bool = False
    actual_end_at: Optional[datetime] = None
    session_id: Optional[str] = None


@dataclass(frozen=True)
class Court:
    """
    Point-in-time view of one numbered court.

    Recomputed from session/block facts on every evaluation; never stored.
    """

    number: int
    is_available: bool = True
    is_blocked: bool = False
    is_overtime: bool = False
    is_tournament: bool = False
    session: Optional[Session] = None
