import json
import logging
import os
from dataclasses import asdict, dataclass, fields

from sorters import AlgorithmKind

logger = logging.getLogger(__name__)

# ============================================================
# ===================== USER SETTINGS ========================
# ============================================================

WINDOW_WIDTH  = 1280
WINDOW_HEIGHT = 1000
FPS_IDLE      = 60

BACKGROUND_COLOR = (10, 12, 20)
ACTIVE_COLOR     = (255, 50, 50)
MARK_COLOR       = (255, 0, 255)
SETTLED_COLOR    = (255, 255, 255)
PROGRESS_BG      = (40, 40, 50)
PROGRESS_FILL    = (0, 255, 100)
PROGRESS_HEIGHT  = 25
BAR_BOTTOM_GAP   = 30
BAR_SPACING      = 1

TEXT_COLOR   = (255, 255, 255)
LABEL_COLOR  = (100, 255, 255)
SHADOW_COLOR = (0, 0, 0)
TEXT_SIZE    = 26
LINE_HEIGHT  = 34

SAMPLE_RATE = 44100
CHUNK_SIZE  = 512
#
# HARMONIC_BLEND — amount of 2nd harmonic mixed into the tone.
#   0.0 = pure sine. A little adds warmth without buzz.
HARMONIC_BLEND = 0.08

# JSON file saved next to the script with the user's tunables
_SCRIPT_DIR   = os.path.dirname(os.path.abspath(__file__))
SETTINGS_JSON = os.path.join(_SCRIPT_DIR, "stepsorter_settings.json")


@dataclass
class Settings:
    size: int               = 150
    value_low: int          = 5
    value_high: int         = 104
    delay_ms: int           = 0
    shuffle_delay_ms: int   = 1
    merge_copy_extra_ms: int = 2
    sound: bool             = True
    volume: float           = 0.05
    tone_base_hz: float     = 200.0
    tone_hz_per_unit: float = 8.0
    algorithm: str          = "bubble"
    seed: int | None        = None

    def validate(self):
        """Raise TypeError / ValueError / KeyError for values the app cannot run with."""
        for name in ("size", "value_low", "value_high", "delay_ms",
                     "shuffle_delay_ms", "merge_copy_extra_ms"):
            v = getattr(self, name)
            if isinstance(v, bool) or not isinstance(v, int):
                raise TypeError(f"{name} must be an integer, got {v!r}")
            if v < 0:
                raise ValueError(f"{name} must be >= 0, got {v}")
        if not 1 <= self.value_low <= self.value_high:
            raise ValueError(f"bad value range [{self.value_low}, {self.value_high}]")
        if self.seed is not None and (isinstance(self.seed, bool) or not isinstance(self.seed, int)):
            raise TypeError(f"seed must be an integer or null, got {self.seed!r}")
        AlgorithmKind.from_key(self.algorithm)
        return self

    def tone_frequency(self, value: int) -> float:
        """Pitch for a bar value; 0 (or less) means silence."""
        if value <= 0:
            return 0.0
        return self.tone_base_hz + value * self.tone_hz_per_unit

# ============================================================
# ==================== LOAD / SAVE JSON ======================
# ============================================================


def load_settings(path: str = SETTINGS_JSON) -> Settings:
    """
    Overlay the JSON object at ``path`` on the defaults.

    A missing file gives the defaults. A broken file, one with keys we do
    not know, or one whose values fail ``Settings.validate`` is reported
    and ignored as a whole.
    """
    if not os.path.exists(path):
        return Settings()
    try:
        with open(path) as f:
            raw = json.load(f)
    except (OSError, ValueError) as e:
        logger.warning("Ignoring settings file %s: %s", path, e)
        return Settings()
    if not isinstance(raw, dict):
        logger.warning("Ignoring settings file %s: expected a JSON object", path)
        return Settings()

    known   = {f.name for f in fields(Settings)}
    unknown = sorted(set(raw) - known)
    if unknown:
        logger.warning("Ignoring settings file %s: unknown keys %s", path, ", ".join(unknown))
        return Settings()
    try:
        settings = Settings(**raw).validate()
    except (TypeError, ValueError, KeyError) as e:
        logger.warning("Ignoring settings file %s: %s", path, e)
        return Settings()
    logger.debug("Loaded settings from %s", path)
    return settings


def save_settings(settings: Settings, path: str = SETTINGS_JSON):
    with open(path, "w") as f:
        json.dump(asdict(settings), f, indent=2)
    logger.info("Saved settings to %s", path)
