import enum
import logging
import random
import threading
import time
from dataclasses import dataclass, replace

from sorters import (
    INDEX_KINDS,
    AlgorithmKind,
    adjacent_sorted_fraction,
    focus_indices,
    initial_state,
    step,
)

logger = logging.getLogger(__name__)

NUM_BARS   = 150
VALUE_LOW  = 5
VALUE_HIGH = 104


class Phase(enum.Enum):
    IDLE      = "idle"
    SHUFFLING = "shuffling"
    STEPPING  = "stepping"
    SORTED    = "sorted"


@dataclass
class Metrics:
    comparisons: int = 0
    swaps: int = 0
    elapsed_ms: float = 0.0


@dataclass(frozen=True)
class StepSnapshot:
    sequence: tuple
    kind: AlgorithmKind
    phase: Phase
    highlighted: frozenset
    marked: frozenset
    settled: frozenset
    is_sorted: bool
    is_shuffling: bool
    progress: float
    metrics: Metrics

# ============================================================
# ===================== SOUND MAILBOX ========================
# ============================================================


class SoundMailbox:
    """
    Single-slot, last-write-wins channel from the sorting loop to the
    audio thread. Holds the most recently touched bar value; 0 is silence.
    """

    def __init__(self):
        self._value = 0
        self._lock  = threading.Lock()

    def publish(self, value: int):
        with self._lock:
            self._value = int(value)

    def read(self) -> int:
        with self._lock:
            return self._value

# ============================================================
# ==================== PROGRESS ESTIMATE =====================
# ============================================================


class ProgressEstimator:
    def __init__(self):
        self.raw      = 0.0
        self.max_seen = 0.0

    def reset(self):
        self.raw = self.max_seen = 0.0

    def update(self, kind, seq, state, is_sorted, comparisons) -> float:
        if is_sorted:
            raw = 1.0
        elif state is None:
            raw = 0.0
        elif kind in INDEX_KINDS:
            raw = state.i / len(seq)
        else:
            raw = adjacent_sorted_fraction(seq)
        self.raw = max(0.0, min(1.0, raw))
        if self.raw > self.max_seen:
            self.max_seen = self.raw
        # a run that has not compared anything yet starts from zero
        if comparisons == 0 and not is_sorted:
            self.max_seen = 0.0
        return self.max_seen

# ============================================================
# ===================== SORT CONTROLLER ======================
# ============================================================


class SortController:
    """
    Owns the sequence being sorted and drives it one step per ``tick()``.

    ``reset`` starts a new run (fresh data or an in-place reshuffle),
    ``tick`` advances exactly one shuffle swap or one algorithm step and
    returns a StepSnapshot for the renderer. Nothing here sleeps; pacing
    belongs to whoever calls ``tick``.
    """

    def __init__(self, size=NUM_BARS, value_low=VALUE_LOW, value_high=VALUE_HIGH,
                 rng: random.Random | None = None, mailbox: SoundMailbox | None = None):
        if size < 0:
            raise ValueError(f"size must be >= 0, got {size}")
        if not 1 <= value_low <= value_high:
            raise ValueError(f"bad value range [{value_low}, {value_high}]")
        self.size       = size
        self.value_low  = value_low
        self.value_high = value_high
        self.rng        = rng or random.Random()
        self.mailbox    = mailbox or SoundMailbox()

        self.kind     = AlgorithmKind.BUBBLE
        self.phase    = Phase.IDLE
        self.data     = []
        self.state    = None
        self.metrics  = Metrics()
        self.progress = ProgressEstimator()
        self.shuffle_i = 0

    @property
    def is_sorted(self) -> bool:
        return self.phase is Phase.SORTED

    @property
    def is_shuffling(self) -> bool:
        return self.phase is Phase.SHUFFLING

    def latest_sonification_value(self) -> int:
        return self.mailbox.read()

    # ---- lifecycle ----

    def reset(self, kind: AlgorithmKind, regenerate: bool = True):
        self.kind = kind
        self.mailbox.publish(0)
        self.metrics = Metrics()
        self.progress.reset()
        self.state = None
        if regenerate:
            self.data = [self.rng.randint(self.value_low, self.value_high)
                         for _ in range(self.size)]
            logger.debug("reset %s with %d fresh values", kind, len(self.data))
            self._prepare()
        else:
            logger.debug("reset %s, reshuffling %d values", kind, len(self.data))
            self.shuffle_i = 0
            self.phase = Phase.SHUFFLING

    def load(self, values, kind: AlgorithmKind | None = None):
        """Sort ``values`` (bar heights) instead of random data."""
        values = list(values)
        for v in values:
            if isinstance(v, bool) or not isinstance(v, int) or not 1 <= v <= self.value_high:
                raise ValueError(f"bar value {v!r} outside [1, {self.value_high}]")
        if kind is not None:
            self.kind = kind
        self.data = values
        self.mailbox.publish(0)
        self._prepare()

    def _prepare(self):
        self.metrics = Metrics()
        self.progress.reset()
        if len(self.data) <= 1:
            self.state = None
            self._finish()
            return
        self.state = initial_state(self.kind, self.data)
        self.phase = Phase.STEPPING

    def _finish(self):
        self.phase = Phase.SORTED
        logger.info("%s sorted %d values: %d comparisons, %d swaps, %.3f ms",
                    self.kind.display_name, len(self.data), self.metrics.comparisons,
                    self.metrics.swaps, self.metrics.elapsed_ms)

    # ---- stepping ----

    def tick(self) -> StepSnapshot:
        if self.phase is Phase.SHUFFLING:
            self._shuffle_step()
        elif self.phase is Phase.STEPPING:
            self._sort_step()
        elif self.phase is Phase.SORTED:
            self.mailbox.publish(0)
        return self.snapshot()

    def _shuffle_step(self):
        n = len(self.data)
        sound = 0
        if self.shuffle_i < n:
            r = self.rng.randrange(n)
            d = self.data
            d[self.shuffle_i], d[r] = d[r], d[self.shuffle_i]
            sound = d[self.shuffle_i]
            self.shuffle_i += 1
        self.mailbox.publish(sound)
        if self.shuffle_i >= n:
            self._prepare()

    def _sort_step(self):
        start = time.perf_counter()
        out = step(self.kind, self.data, self.state)
        self.metrics.elapsed_ms += (time.perf_counter() - start) * 1000.0

        self.metrics.comparisons += out.comparisons
        self.metrics.swaps       += out.swaps
        self.mailbox.publish(out.sound)
        if out.done:
            self._finish()

    def snapshot(self) -> StepSnapshot:
        seq = self.data
        if self.phase is Phase.STEPPING:
            hi, mk, st = focus_indices(self.kind, seq, self.state)
        elif self.phase is Phase.SHUFFLING and self.shuffle_i < len(seq):
            hi, mk, st = frozenset((self.shuffle_i,)), frozenset(), frozenset()
        else:
            hi = mk = st = frozenset()

        progress = 0.0
        if self.phase is not Phase.SHUFFLING:
            progress = self.progress.update(self.kind, seq, self.state,
                                            self.is_sorted, self.metrics.comparisons)
        return StepSnapshot(
            sequence=tuple(seq), kind=self.kind, phase=self.phase,
            highlighted=hi, marked=mk, settled=st,
            is_sorted=self.is_sorted, is_shuffling=self.is_shuffling,
            progress=progress, metrics=replace(self.metrics),
        )

    @property
    def merge_copying(self) -> bool:
        """True while a merge is writing values back (the driver paces this slower)."""
        return (self.phase is Phase.STEPPING and self.kind is AlgorithmKind.MERGE
                and self.state.copying)
