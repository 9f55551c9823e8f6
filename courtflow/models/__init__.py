from courtflow.models.block import Block
from courtflow.models.board import BoardSnapshot
from courtflow.models.court import Court, Session
from courtflow.models.waitlist import Group, Player, WaitlistEntry

__all__ = [
    "Block",
    "BoardSnapshot",
    "Court",
    "Group",
    "Player",
    "Session",
    "WaitlistEntry",
]
