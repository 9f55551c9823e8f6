import logging
import os
import subprocess

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from courtflow import __version__
from courtflow.config import LOG_LEVEL, cors_origins, get_policy
from courtflow.logging_config import setup_logging
from courtflow.routes import board

logger = logging.getLogger(__name__)

app = FastAPI(title="Courtflow Availability API", version=__version__)


def get_build_info() -> str:
    """Deployed build id: COURTFLOW_BUILD, else the checkout's short hash, else the version."""
    build = os.getenv("COURTFLOW_BUILD")
    if build:
        return build
    try:
        head = subprocess.check_output(
            ["git", "rev-parse", "--short", "HEAD"],
            cwd=os.path.dirname(os.path.abspath(__file__)),
            stderr=subprocess.DEVNULL,
            text=True,
            timeout=2,
        ).strip()
    except (OSError, subprocess.SubprocessError):
        head = ""
    return head or f"v{__version__}"


BUILD_HASH = get_build_info()

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Read-only board decisions (kiosk, admin console, status board)
app.include_router(board.router, prefix="/api", tags=["board"])


@app.on_event("startup")
def on_startup():
    setup_logging(LOG_LEVEL)
    policy = get_policy()
    logger.info(
        "Courtflow %s (build %s): %d courts, singles-only=%s, min useful=%dm, hard cutoff=%dm",
        __version__,
        BUILD_HASH,
        policy.total_courts,
        sorted(policy.singles_only_courts),
        policy.min_useful_minutes,
        policy.hard_cutoff_minutes,
    )


@app.get("/api/health")
def health_check():
    """Diagnostic endpoint to verify which code is running"""
    return {"app_name": "Courtflow Availability API", "build_hash": BUILD_HASH, "status": "healthy"}
