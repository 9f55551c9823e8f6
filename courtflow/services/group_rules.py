"""
Group size rules: singles/doubles, session length, singles-only courts and
basic group validation.
"""
from dataclasses import dataclass
from typing import Any, Iterable, Optional, Sequence

from courtflow.config import DEFAULT_POLICY, SelectionPolicy

MAX_GROUP_SIZE = 4


@dataclass(frozen=True)
class GroupValidation:
    valid: bool
    error: Optional[str] = None


def group_type_for(player_count: int, policy: SelectionPolicy = DEFAULT_POLICY) -> str:
    return "doubles" if player_count >= policy.doubles_min_players else "singles"


def session_duration_minutes(player_count: int, policy: SelectionPolicy = DEFAULT_POLICY) -> int:
    return policy.session_minutes(player_count)


def is_court_eligible_for_group(
    court_number: int,
    player_count: int,
    singles_only_courts: Optional[Iterable[int]] = None,
    policy: SelectionPolicy = DEFAULT_POLICY,
) -> bool:
    """Singles-only courts turn away groups big enough to be doubles."""
    restricted = policy.singles_only_courts if singles_only_courts is None else set(singles_only_courts)
    if court_number in restricted and player_count >= policy.doubles_min_players:
        return False
    return True


def _player_name(player: Any) -> Optional[str]:
    if isinstance(player, str):
        return player
    if isinstance(player, dict):
        return player.get("displayName") or player.get("name")
    return getattr(player, "name", None)


def _player_id(player: Any) -> Optional[str]:
    if isinstance(player, str):
        return None
    if isinstance(player, dict):
        return player.get("memberId") or player.get("id")
    return getattr(player, "member_id", None)


def _player_key(player: Any) -> str:
    member_id = _player_id(player)
    if member_id:
        return f"id:{member_id}"
    return f"name:{_player_name(player).strip().lower()}"


def validate_group(players: Optional[Sequence[Any]]) -> GroupValidation:
    """
    Check that a group can join the queue.

    Accepts Player objects, {"name"/"displayName", "memberId"/"id"} dicts or
    bare names. Players without an id are told apart by normalized name.
    """
    if players is None or isinstance(players, (str, bytes)):
        return GroupValidation(False, "Group must be a list of players")
    if len(players) == 0:
        return GroupValidation(False, "Group cannot be empty")
    if len(players) > MAX_GROUP_SIZE:
        return GroupValidation(False, f"Group cannot have more than {MAX_GROUP_SIZE} players")

    keys = []
    for i, player in enumerate(players, start=1):
        if player is None:
            return GroupValidation(False, f"Player {i} is invalid")
        name = _player_name(player)
        if not isinstance(name, str) or not name.strip():
            return GroupValidation(False, f"Player {i} must have a valid name")
        keys.append(_player_key(player))

    if len(set(keys)) != len(keys):
        return GroupValidation(False, "Duplicate players are not allowed in the same group")
    return GroupValidation(True)
