"""
Engine-wide policy constants.

Values are read from the environment (and a local .env file) once, at the
edge. The engine itself only ever sees a SelectionPolicy passed in by the
caller; it never reads the environment.
"""
import os
from dataclasses import dataclass, field
from functools import lru_cache
from typing import FrozenSet, List, Optional

from dotenv import load_dotenv

load_dotenv()

# ============================================================================
# Defaults
# ============================================================================

TOTAL_COURTS = 12
SINGLES_ONLY_COURTS = frozenset({8})

# A primary court whose next block starts sooner than this is still
# selectable, but not usable for a real session.
MIN_USEFUL_MINUTES = 20

# A primary court whose next block starts at or before this many minutes
# from now is dropped from the selectable list entirely.
# Kept separate from MIN_USEFUL_MINUTES pending product clarification.
HARD_CUTOFF_MINUTES = 5

FULL_TIME_BUFFER_MINUTES = 5
SINGLES_SESSION_MINUTES = 60
DOUBLES_SESSION_MINUTES = 90
DOUBLES_MIN_PLAYERS = 4
AVG_GAME_MINUTES = 75


@dataclass(frozen=True)
class SelectionPolicy:
    total_courts: int = TOTAL_COURTS
    singles_only_courts: FrozenSet[int] = field(default_factory=lambda: SINGLES_ONLY_COURTS)
    min_useful_minutes: int = MIN_USEFUL_MINUTES
    hard_cutoff_minutes: int = HARD_CUTOFF_MINUTES
    full_time_buffer_minutes: int = FULL_TIME_BUFFER_MINUTES
    singles_session_minutes: int = SINGLES_SESSION_MINUTES
    doubles_session_minutes: int = DOUBLES_SESSION_MINUTES
    doubles_min_players: int = DOUBLES_MIN_PLAYERS
    avg_game_minutes: int = AVG_GAME_MINUTES

    def session_minutes(self, player_count: int) -> int:
        if player_count >= self.doubles_min_players:
            return self.doubles_session_minutes
        return self.singles_session_minutes

    def full_time_minutes(self, player_count: int) -> int:
        """Minutes a court must stay free for a complete session plus buffer."""
        return self.session_minutes(player_count) + self.full_time_buffer_minutes


DEFAULT_POLICY = SelectionPolicy()


def _env_int(name: str, default: int, minimum: int = 0) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw.strip())
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")
    if value < minimum:
        raise ValueError(f"{name} must be >= {minimum}, got {value}")
    return value


def _env_court_set(name: str, default: FrozenSet[int]) -> FrozenSet[int]:
    raw = os.getenv(name)
    if raw is None:
        return default
    numbers: List[int] = []
    for part in raw.split(","):
        part = part.strip()
        if not part:
            continue
        try:
            numbers.append(int(part))
        except ValueError:
            raise ValueError(f"{name} must be a comma-separated list of court numbers, got {raw!r}")
    return frozenset(numbers)


def load_policy() -> SelectionPolicy:
    """Build a SelectionPolicy from COURTFLOW_* environment variables."""
    return SelectionPolicy(
        total_courts=_env_int("COURTFLOW_TOTAL_COURTS", TOTAL_COURTS, minimum=1),
        singles_only_courts=_env_court_set("COURTFLOW_SINGLES_ONLY_COURTS", SINGLES_ONLY_COURTS),
        min_useful_minutes=_env_int("COURTFLOW_MIN_USEFUL_MINUTES", MIN_USEFUL_MINUTES),
        hard_cutoff_minutes=_env_int("COURTFLOW_HARD_CUTOFF_MINUTES", HARD_CUTOFF_MINUTES),
        full_time_buffer_minutes=_env_int("COURTFLOW_FULL_TIME_BUFFER_MINUTES", FULL_TIME_BUFFER_MINUTES),
        singles_session_minutes=_env_int("COURTFLOW_SINGLES_MINUTES", SINGLES_SESSION_MINUTES, minimum=1),
        doubles_session_minutes=_env_int("COURTFLOW_DOUBLES_MINUTES", DOUBLES_SESSION_MINUTES, minimum=1),
        avg_game_minutes=_env_int("COURTFLOW_AVG_GAME_MINUTES", AVG_GAME_MINUTES, minimum=1),
    )


LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


def cors_origins() -> List[str]:
    origins = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]
    extra: Optional[str] = os.getenv("CORS_ORIGINS", "")
    if extra:
        origins.extend(o.strip() for o in extra.split(",") if o.strip())
    return origins


@lru_cache(maxsize=1)
def get_policy() -> SelectionPolicy:
    """FastAPI dependency: the process-wide policy, read from env once."""
    return load_policy()
