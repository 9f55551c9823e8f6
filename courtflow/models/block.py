from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class Block:
    """A reserved [starts_at, ends_at) interval on one court."""

    court_number: int
    starts_at: Optional[datetime] = None
    ends_at: Optional[datetime] = None
    is_wet_court: bool = False
    reason: Optional[str] = None
    title: Optional[str] = None
    block_id: Optional[str] = None

    @property
    def label(self) -> str:
        return self.title or self.reason or ("WET COURT" if self.is_wet_court else "Blocked")
