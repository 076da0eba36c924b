"""
Configuration defaults for speedreader.
Bounds, timing constants and environment overrides live here.
"""

import logging
import os
from pathlib import Path

prog_version = "0.1.0"

package_dir = Path(__file__).resolve().parent
data_dir = package_dir / "data"
demo_text_path = data_dir / "demo.txt"

logger = logging.getLogger(__name__)


def env_int(name: str, default: int) -> int:
    """Read an integer environment override, keeping the default on a bad value."""
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"Ignoring non-numeric {name}={raw!r}, using {default}")
        return default


debug_mode = os.environ.get("SPEEDREADER_DEBUG", "").lower() in ("1", "true", "yes")

# Speed (words per minute)
MIN_SPEED_WPM = 1
MAX_SPEED_WPM = 1000
DEFAULT_SPEED_WPM = max(MIN_SPEED_WPM, min(MAX_SPEED_WPM, env_int("SPEEDREADER_DEFAULT_WPM", 200)))

# Font size is a display concern, only clamped here
MIN_FONT_SIZE = 20.0
MAX_FONT_SIZE = 200.0
DEFAULT_FONT_SIZE = 48.0

# Timing
DEFAULT_AVG_WORD_LENGTH = 5.0
FALLBACK_WORD_DURATION_MS = 1000
VARIABLE_TIMING_MIN_MULTIPLIER = 0.75
VARIABLE_TIMING_MAX_MULTIPLIER = 1.25

# Ramp
RAMP_INTERVAL_MS = 4000
RAMP_STEP_WPM = 15
RAMP_START_WPM = 100

# Demo session
DEMO_RAMP_TARGET_WPM = 300

# EPUB
EPUB_CONTAINER_PATH = "META-INF/container.xml"
EPUB_SPINE_SEPARATOR = "\n"

LOG_FORMAT = '[%(asctime)s] %(levelname)s | %(message)s'
LOG_DATEFMT = '%H:%M:%S'


def configure_logging(verbose: bool = False):
    """Configure root logging for a host application embedding speedreader."""
    level = logging.DEBUG if (verbose or debug_mode) else logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT, datefmt=LOG_DATEFMT)
    logging.getLogger().setLevel(level)
