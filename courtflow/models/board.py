from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Tuple

from courtflow.models.block import Block
from courtflow.models.court import Court
from courtflow.models.waitlist import WaitlistEntry


@dataclass(frozen=True)
class BoardSnapshot:
    """
    Everything one decision needs, stamped against a single authoritative now.

    courts keeps index positions: a None entry is a hole in the board, not a
    court, and every consumer skips it.
    upcoming_blocks is None when block data has not been loaded yet.
    """

    now: datetime
    courts: Tuple[Optional[Court], ...] = ()
    active_blocks: Tuple[Block, ...] = ()
    upcoming_blocks: Optional[Tuple[Block, ...]] = ()
    waitlist: Tuple[WaitlistEntry, ...] = ()

    @property
    def all_blocks(self) -> Tuple[Block, ...]:
        return tuple(self.active_blocks) + tuple(self.upcoming_blocks or ())
