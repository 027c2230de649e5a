"""
Configuration constants for graphstep.

All paths, pacing values, and tunable parameters are defined here.
Values can be overridden from the environment (or a .env file in the
project root) - never hardcode secrets.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

# =============================================================================
# Path Configuration
# =============================================================================

# Project root is parent of graphstep/
PROJECT_ROOT = Path(__file__).parent.parent

load_dotenv(PROJECT_ROOT / ".env")

# Directory for saved graph files (json / msgpack)
GRAPHS_DIR = Path(os.environ.get("GRAPHSTEP_GRAPHS_DIR", PROJECT_ROOT / "graphs"))

# =============================================================================
# Stepping Configuration
# =============================================================================

# Default delay after each visited node in auto mode (milliseconds)
DEFAULT_PACING_MS = int(os.environ.get("GRAPHSTEP_PACING_MS", "300"))

# Pacing slider bounds - keeps animations visible without stalling
MIN_PACING_MS = 10
MAX_PACING_MS = 2000

# Relaxation steps pause for a fraction of the visit pacing:
# delay = max(MIN_RELAX_PACING_MS, pacing // RELAX_PACING_DIVISOR)
RELAX_PACING_DIVISOR = 3
MIN_RELAX_PACING_MS = 40

# Prim steps use a fixed pace unless the caller overrides it
PRIM_PACING_MS = 300

# Mode used when a caller does not pick one ("auto" or "manual")
DEFAULT_STEP_MODE = os.environ.get("GRAPHSTEP_STEP_MODE", "manual")

# =============================================================================
# Web Configuration
# =============================================================================

SECRET_KEY = os.environ.get("SECRET_KEY", "graphstep-dev-key")
PORT = int(os.environ.get("PORT", "7860"))

# Seconds to wait for a background run to wind down on cancel / shutdown
RUN_JOIN_TIMEOUT = 5.0

# =============================================================================
# Logging Configuration
# =============================================================================

# Log level (DEBUG, INFO, WARNING, ERROR)
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATEFMT = "%H:%M:%S"

# =============================================================================
# Validation Helpers
# =============================================================================

def clamp_pacing(pacing_ms: float | None) -> int:
    """Clamp a pacing value to the supported range (None -> default)."""
    if pacing_ms is None:
        return DEFAULT_PACING_MS
    return int(max(MIN_PACING_MS, min(MAX_PACING_MS, pacing_ms)))


def relax_pacing(pacing_ms: int) -> int:
    """Delay used after a relaxation step for a given visit pacing (0 stays 0)."""
    if pacing_ms <= 0:
        return 0
    return max(MIN_RELAX_PACING_MS, pacing_ms // RELAX_PACING_DIVISOR)
