"""
Canonical normalizer for board snapshots.

The snapshot provider sends camelCase mappings with a handful of legacy
aliases. Everything past this module works on the frozen dataclasses in
courtflow.models, so aliases are resolved here and nowhere else.

Never raises for mappings shaped like a board; unreadable pieces are
dropped or defaulted.
"""
import logging
from datetime import datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from courtflow.models.block import Block
from courtflow.models.board import BoardSnapshot
from courtflow.models.court import Court, Session
from courtflow.models.waitlist import Group, Player, WaitlistEntry
from courtflow.services.availability import build_court_view
from courtflow.utils.time_windows import parse_instant

logger = logging.getLogger(__name__)

SESSION_END_KEYS = ("scheduledEndAt", "scheduled_end_at", "endTime", "endsAt", "ends_at")
SESSION_START_KEYS = ("startedAt", "started_at", "startTime")
BLOCK_START_KEYS = ("startsAt", "startTime", "start", "starts_at")
BLOCK_END_KEYS = ("endsAt", "endTime", "end", "ends_at")
COURT_NUMBER_KEYS = ("number", "courtNumber", "court_number")
BLOCK_COURT_KEYS = ("courtNumber", "court", "court_number", "number")


def _first(raw: Mapping[str, Any], keys: Iterable[str]) -> Any:
    for key in keys:
        value = raw.get(key)
        if value not in (None, ""):
            return value
    return None


def _as_int(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _flag(raw: Mapping[str, Any], *keys: str) -> Optional[bool]:
    for key in keys:
        if key in raw and raw[key] is not None:
            return bool(raw[key])
    return None


def normalize_session(raw: Any) -> Optional[Session]:
    if not isinstance(raw, Mapping):
        return None
    return Session(
        scheduled_end_at=parse_instant(_first(raw, SESSION_END_KEYS)),
        started_at=parse_instant(_first(raw, SESSION_START_KEYS)),
        is_tournament=bool(raw.get("isTournament") or raw.get("is_tournament")),
        actual_end_at=parse_instant(_first(raw, ("actualEndAt", "actual_end_at"))),
        session_id=str(raw["id"]) if raw.get("id") is not None else None,
    )


def normalize_block(raw: Any) -> Optional[Block]:
    """
    Map a raw block to a Block.

    Returns None for blocks that name no court, or whose times are present
    but unreadable (such a block is never active). A block missing one or
    both times is kept; the classifier treats it as active.
    """
    if isinstance(raw, Block):
        return raw
    if not isinstance(raw, Mapping):
        return None
    court_number = _as_int(_first(raw, BLOCK_COURT_KEYS))
    if not court_number:
        return None

    raw_start = _first(raw, BLOCK_START_KEYS)
    raw_end = _first(raw, BLOCK_END_KEYS)
    starts_at = parse_instant(raw_start)
    ends_at = parse_instant(raw_end)
    if (raw_start is not None and starts_at is None) or (raw_end is not None and ends_at is None):
        logger.debug("Dropping block on court %s with unreadable times", court_number)
        return None

    return Block(
        court_number=court_number,
        starts_at=starts_at,
        ends_at=ends_at,
        is_wet_court=bool(raw.get("isWetCourt") or raw.get("is_wet_court")),
        reason=raw.get("reason") or raw.get("blockType"),
        title=raw.get("title") or raw.get("label") or raw.get("templateName"),
        block_id=str(raw["id"]) if raw.get("id") is not None else None,
    )


def normalize_blocks(raw_blocks: Any) -> Tuple[Block, ...]:
    if not raw_blocks:
        return ()
    blocks = (normalize_block(b) for b in raw_blocks)
    return tuple(b for b in blocks if b is not None)


def normalize_court(
    raw: Any,
    index: int,
    blocks: Iterable[Block],
    now: datetime,
) -> Optional[Court]:
    """
    Map a raw court (index 0 = court 1) to a Court view.

    Flags the provider already computed (isAvailable, isBlocked, isOvertime,
    isTournament) win; anything missing is derived from the session and the
    blocks at now.
    """
    if isinstance(raw, Court):
        return raw
    if not isinstance(raw, Mapping):
        return None

    number = _as_int(_first(raw, COURT_NUMBER_KEYS)) or index + 1
    session = normalize_session(raw.get("session"))
    derived = build_court_view(number, session, blocks, now)

    is_blocked = _flag(raw, "isBlocked", "is_blocked")
    is_overtime = _flag(raw, "isOvertime", "is_overtime")
    is_tournament = _flag(raw, "isTournament", "is_tournament")
    is_available = _flag(raw, "isAvailable", "is_available")

    return Court(
        number=number,
        is_available=derived.is_available if is_available is None else is_available,
        is_blocked=derived.is_blocked if is_blocked is None else is_blocked,
        is_overtime=derived.is_overtime if is_overtime is None else is_overtime,
        is_tournament=derived.is_tournament if is_tournament is None else is_tournament,
        session=session,
    )


def normalize_courts(raw_courts: Any, blocks: Iterable[Block], now: datetime) -> Tuple[Optional[Court], ...]:
    if not raw_courts:
        return ()
    blocks = list(blocks)
    return tuple(normalize_court(raw, i, blocks, now) for i, raw in enumerate(raw_courts))


def _normalize_player(raw: Any) -> Optional[Player]:
    if isinstance(raw, Player):
        return raw
    if isinstance(raw, str):
        return Player(name=raw)
    if not isinstance(raw, Mapping):
        return None
    name = raw.get("displayName") or raw.get("name") or ""
    member_id = raw.get("memberId") or raw.get("member_id") or raw.get("id")
    return Player(
        name=str(name),
        member_id=str(member_id) if member_id is not None else None,
        is_guest=bool(raw.get("isGuest") or raw.get("is_guest")),
    )


def normalize_group(raw: Mapping[str, Any]) -> Group:
    """Players come from group.players, falling back to top-level players."""
    group = raw.get("group")
    raw_players = None
    if isinstance(group, Mapping):
        raw_players = group.get("players")
    if raw_players is None:
        raw_players = raw.get("players")
    players = (_normalize_player(p) for p in (raw_players or []))
    return Group(players=tuple(p for p in players if p is not None))


def normalize_waitlist_entry(raw: Any, index: int) -> Optional[WaitlistEntry]:
    if isinstance(raw, WaitlistEntry):
        return raw
    if not isinstance(raw, Mapping):
        return None
    entry_id = raw.get("id") or raw.get("entryId") or raw.get("entry_id") or f"entry-{index + 1}"
    position = _as_int(raw.get("position") if raw.get("position") is not None else raw.get("queuePosition"))
    return WaitlistEntry(
        entry_id=str(entry_id),
        position=position if position else index + 1,
        group=normalize_group(raw),
        deferred=bool(raw.get("deferred") or False),
        joined_at=parse_instant(_first(raw, ("joinedAt", "joined_at", "createdAt"))),
    )


def normalize_waitlist(raw_waitlist: Any) -> Tuple[WaitlistEntry, ...]:
    """Entries in queue order (by position, insertion order breaking ties)."""
    if not raw_waitlist:
        return ()
    entries: List[WaitlistEntry] = []
    for i, raw in enumerate(raw_waitlist):
        entry = normalize_waitlist_entry(raw, i)
        if entry is not None:
            entries.append(entry)
    return tuple(sorted(entries, key=lambda e: e.position))


def normalize_board(raw: Mapping[str, Any], now: Any = None) -> BoardSnapshot:
    """
    Build a BoardSnapshot from a provider payload.

    now comes from the argument, else serverNow/now in the payload. The
    caller must supply one of them; the engine never reads a clock.
    """
    now_dt = parse_instant(now) or parse_instant(raw.get("serverNow") or raw.get("now"))
    if now_dt is None:
        raise ValueError("Board snapshot requires a readable 'now'")

    active_blocks = normalize_blocks(raw.get("activeBlocks") or raw.get("courtBlocks") or raw.get("blocks"))
    raw_upcoming = raw.get("upcomingBlocks", ())
    upcoming_blocks = None if raw_upcoming is None else normalize_blocks(raw_upcoming)
    all_blocks = active_blocks + (upcoming_blocks or ())

    return BoardSnapshot(
        now=now_dt,
        courts=normalize_courts(raw.get("courts"), all_blocks, now_dt),
        active_blocks=active_blocks,
        upcoming_blocks=upcoming_blocks,
        waitlist=normalize_waitlist(raw.get("waitlist")),
    )


def snapshot_summary(snapshot: BoardSnapshot) -> Dict[str, Any]:
    return {
        "now": snapshot.now.isoformat(),
        "courts": sum(1 for c in snapshot.courts if c is not None),
        "active_blocks": len(snapshot.active_blocks),
        "upcoming_blocks": None if snapshot.upcoming_blocks is None else len(snapshot.upcoming_blocks),
        "waitlist": len(snapshot.waitlist),
    }
