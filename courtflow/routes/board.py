"""
Read-only board endpoints.

Used by the registration kiosk, admin console and status board. Each call
carries the full snapshot (including the authoritative now) and nothing is
stored; these routes only adapt HTTP to the services layer.
"""
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, ConfigDict, Field

from courtflow.config import SelectionPolicy, get_policy
from courtflow.models.board import BoardSnapshot
from courtflow.services.block_warnings import get_upcoming_block_warning
from courtflow.services.board_evaluation import evaluate_board
from courtflow.services.court_selection import CourtSelection, compute_court_selection
from courtflow.services.group_rules import group_type_for, validate_group
from courtflow.services.playable_courts import PlayableCourts, compute_playable_courts
from courtflow.services.waitlist_cascade import WaitlistDecision, evaluate_waitlist
from courtflow.utils.normalize import normalize_board, snapshot_summary

logger = logging.getLogger(__name__)

router = APIRouter()


# ── Request models ───────────────────────────────────────────────────────

class BoardSnapshotIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    now: Optional[Union[str, int, float]] = None
    server_now: Optional[Union[str, int, float]] = Field(default=None, alias="serverNow")
    courts: List[Optional[Dict[str, Any]]] = []
    active_blocks: List[Dict[str, Any]] = Field(default_factory=list, alias="activeBlocks")
    # null = block schedule not loaded yet
    upcoming_blocks: Optional[List[Dict[str, Any]]] = Field(default_factory=list, alias="upcomingBlocks")
    waitlist: List[Dict[str, Any]] = []


class BlockWarningRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    board: BoardSnapshotIn
    court_number: int = Field(alias="courtNumber")
    duration_minutes: Optional[int] = Field(default=None, alias="durationMinutes")
    player_count: Optional[int] = Field(default=None, alias="playerCount")


class GroupValidateRequest(BaseModel):
    players: List[Any]


# ── Response models ──────────────────────────────────────────────────────

class EligibilityItem(BaseModel):
    eligible: bool
    reason: Optional[str] = None


class PlayableCourtsResponse(BaseModel):
    count: int
    playable_court_numbers: List[int]
    eligibility_by_court_number: Dict[int, EligibilityItem]


class SelectableCourtItem(BaseModel):
    number: int
    reason: str
    minutes_available: Optional[int] = None
    is_usable: bool


class CourtSelectionResponse(BaseModel):
    primary_courts: List[int]
    fallback_overtime_courts: List[int]
    showing_overtime_courts: bool
    selectable_courts: List[SelectableCourtItem]
    eligibility_by_court_number: Dict[int, EligibilityItem]
    player_count: Optional[int] = None
    selectable_for_group: Optional[List[int]] = None
    full_time_for_group: Optional[List[int]] = None


class CourtStatusItem(BaseModel):
    court_number: int
    status: str  # free | occupied | overtime | blocked | wet
    selectable: bool
    selectable_reason: Optional[str] = None
    is_wet: bool
    is_blocked: bool
    is_overtime: bool
    is_tournament: bool
    blocked_label: Optional[str] = None
    blocked_until: Optional[datetime] = None


class WaitlistDecisionItem(BaseModel):
    entry_id: str
    position: int
    player_count: int
    group_type: str
    deferred: bool
    available: int
    can_play_now: bool
    estimated_wait_minutes: Optional[int] = None


class BoardEvaluationResponse(BaseModel):
    now: datetime
    playable: PlayableCourtsResponse
    selection: CourtSelectionResponse
    statuses: List[CourtStatusItem]
    waitlist: List[WaitlistDecisionItem]
    pass_through_entry_id: Optional[str] = None
    allow_waitlist_join: bool


class CanPlayResponse(BaseModel):
    index: int
    entry_id: str
    can_play_now: bool
    available: int


class BlockWarningResponse(BaseModel):
    court_number: int
    warning: Optional[Dict[str, Any]] = None


class GroupValidateResponse(BaseModel):
    valid: bool
    error: Optional[str] = None
    group_type: Optional[str] = None


# ── Helpers ──────────────────────────────────────────────────────────────

def _load_snapshot(body: BoardSnapshotIn, policy: SelectionPolicy) -> BoardSnapshot:
    if len(body.courts) > policy.total_courts:
        raise HTTPException(
            status_code=422,
            detail=f"Board has {len(body.courts)} courts; at most {policy.total_courts} are configured",
        )
    raw = body.model_dump(by_alias=True)
    try:
        snapshot = normalize_board(raw)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    logger.debug("board snapshot: %s", snapshot_summary(snapshot))
    return snapshot


def _eligibility_map(eligibility) -> Dict[int, EligibilityItem]:
    return {n: EligibilityItem(eligible=e.eligible, reason=e.reason) for n, e in eligibility.items()}


def _playable_response(playable: PlayableCourts) -> PlayableCourtsResponse:
    return PlayableCourtsResponse(
        count=playable.count,
        playable_court_numbers=playable.playable_court_numbers,
        eligibility_by_court_number=_eligibility_map(playable.eligibility_by_court_number),
    )


def _selection_response(selection: CourtSelection, player_count: Optional[int] = None) -> CourtSelectionResponse:
    response = CourtSelectionResponse(
        primary_courts=[c.number for c in selection.primary_courts],
        fallback_overtime_courts=[c.number for c in selection.fallback_overtime_courts],
        showing_overtime_courts=selection.showing_overtime_courts,
        selectable_courts=[
            SelectableCourtItem(
                number=sc.number,
                reason=sc.reason,
                minutes_available=sc.minutes_available,
                is_usable=sc.is_usable,
            )
            for sc in selection.selectable_courts
        ],
        eligibility_by_court_number=_eligibility_map(selection.eligibility_by_court_number),
    )
    if player_count is not None:
        response.player_count = player_count
        response.selectable_for_group = [sc.number for sc in selection.get_selectable_for_group(player_count)]
        response.full_time_for_group = [sc.number for sc in selection.get_full_time_for_group(player_count)]
    return response


def _decision_item(d: WaitlistDecision, policy: SelectionPolicy) -> WaitlistDecisionItem:
    return WaitlistDecisionItem(
        entry_id=d.entry_id,
        position=d.position,
        player_count=d.player_count,
        group_type=group_type_for(d.player_count, policy),
        deferred=d.deferred,
        available=d.available,
        can_play_now=d.can_play_now,
        estimated_wait_minutes=d.estimated_wait_minutes,
    )


# ── Endpoints ────────────────────────────────────────────────────────────

@router.post("/board/evaluate", response_model=BoardEvaluationResponse)
def evaluate_board_endpoint(body: BoardSnapshotIn, policy: SelectionPolicy = Depends(get_policy)):
    """Everything a front end renders, computed once against the snapshot's now."""
    snapshot = _load_snapshot(body, policy)
    evaluation = evaluate_board(snapshot, policy)
    return BoardEvaluationResponse(
        now=evaluation.now,
        playable=_playable_response(evaluation.playable),
        selection=_selection_response(evaluation.selection),
        statuses=[CourtStatusItem(**vars(s)) for s in evaluation.statuses],
        waitlist=[_decision_item(d, policy) for d in evaluation.cascade.decisions],
        pass_through_entry_id=evaluation.pass_through.entry_id if evaluation.pass_through else None,
        allow_waitlist_join=evaluation.allow_waitlist_join,
    )


@router.post("/board/playable", response_model=PlayableCourtsResponse)
def playable_courts_endpoint(body: BoardSnapshotIn, policy: SelectionPolicy = Depends(get_policy)):
    snapshot = _load_snapshot(body, policy)
    return _playable_response(compute_playable_courts(snapshot.courts, snapshot.all_blocks, snapshot.now))


@router.post("/board/selection", response_model=CourtSelectionResponse)
def court_selection_endpoint(
    body: BoardSnapshotIn,
    player_count: Optional[int] = Query(default=None, ge=1, le=4),
    policy: SelectionPolicy = Depends(get_policy),
):
    snapshot = _load_snapshot(body, policy)
    selection = compute_court_selection(snapshot.courts, snapshot.upcoming_blocks, snapshot.now, policy)
    return _selection_response(selection, player_count)


@router.post("/board/waitlist/{idx}/can-play", response_model=CanPlayResponse)
def can_play_endpoint(idx: int, body: BoardSnapshotIn, policy: SelectionPolicy = Depends(get_policy)):
    snapshot = _load_snapshot(body, policy)
    if idx < 0 or idx >= len(snapshot.waitlist):
        raise HTTPException(
            status_code=422,
            detail=f"Waitlist index {idx} out of range (queue length {len(snapshot.waitlist)})",
        )
    selection = compute_court_selection(snapshot.courts, snapshot.upcoming_blocks, snapshot.now, policy)
    decision = evaluate_waitlist(selection, snapshot.waitlist[: idx + 1]).decisions[idx]
    return CanPlayResponse(
        index=idx,
        entry_id=decision.entry_id,
        can_play_now=decision.can_play_now,
        available=decision.available,
    )


@router.post("/board/block-warning", response_model=BlockWarningResponse)
def block_warning_endpoint(body: BlockWarningRequest, policy: SelectionPolicy = Depends(get_policy)):
    """Warn before a group commits to a court whose next block is close."""
    snapshot = _load_snapshot(body.board, policy)
    if body.duration_minutes is not None:
        duration = body.duration_minutes
    elif body.player_count is not None:
        duration = policy.session_minutes(body.player_count)
    else:
        duration = policy.singles_session_minutes
    if duration < 0:
        raise HTTPException(status_code=422, detail="durationMinutes must be >= 0")

    warning = get_upcoming_block_warning(body.court_number, duration, snapshot.all_blocks, snapshot.now, policy)
    return BlockWarningResponse(
        court_number=body.court_number,
        warning=vars(warning) if warning else None,
    )


@router.post("/groups/validate", response_model=GroupValidateResponse)
def validate_group_endpoint(body: GroupValidateRequest, policy: SelectionPolicy = Depends(get_policy)):
    result = validate_group(body.players)
    if not result.valid:
        logger.info("Rejected group: %s", result.error)
        return GroupValidateResponse(valid=False, error=result.error)
    return GroupValidateResponse(valid=True, group_type=group_type_for(len(body.players), policy))
