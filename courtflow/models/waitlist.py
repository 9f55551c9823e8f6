from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Tuple


@dataclass(frozen=True)
class Player:
    name: str
    member_id: Optional[str] = None
    is_guest: bool = False


@dataclass(frozen=True)
class Group:
    players: Tuple[Player, ...] = ()

    @property
    def player_count(self) -> int:
        return len(self.players)


@dataclass(frozen=True)
class WaitlistEntry:
    entry_id: str
    position: int  # 1-based, insertion order
    group: Group = field(default_factory=Group)
    deferred: bool = False  # holding out for a full-time court
    joined_at: Optional[datetime] = None

    @property
    def player_count(self) -> int:
        return self.group.player_count
