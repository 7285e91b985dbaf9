import enum
from dataclasses import dataclass, field

# ============================================================
# ===================== ALGORITHM KINDS ======================
# ============================================================


class AlgorithmKind(enum.Enum):
    BUBBLE    = ("bubble",    "Bubble Sort",    "O(N^2) - Slow",
                 "Swaps adjacent elements repeatedly.")
    SELECTION = ("selection", "Selection Sort", "O(N^2) - Slow",
                 "Finds the smallest item and moves it.")
    INSERTION = ("insertion", "Insertion Sort", "O(N^2) - OK for small lists",
                 "Builds sorted array one item at a time.")
    QUICK     = ("quick",     "Quick Sort",     "O(N log N) - Fast",
                 "Divides list around a pivot point.")
    MERGE     = ("merge",     "Merge Sort",     "O(N log N) - Stable",
                 "Divides list in half, sorts, and merges.")

    def __init__(self, key, display_name, complexity, description):
        self.key          = key
        self.display_name = display_name
        self.complexity   = complexity
        self.description  = description

    @classmethod
    def from_key(cls, key: str) -> "AlgorithmKind":
        for kind in cls:
            if kind.key == key:
                return kind
        raise KeyError(f"Unknown key: {key}")


# Algorithms whose progress is a single advancing outer index
INDEX_KINDS = (AlgorithmKind.BUBBLE, AlgorithmKind.SELECTION, AlgorithmKind.INSERTION)

# ============================================================
# ===================== ALGORITHM STATE ======================
# ============================================================


@dataclass
class BubbleState:
    i: int = 0
    j: int = 0


@dataclass
class SelectionState:
    i: int = 0
    j: int = 1
    min_idx: int = 0


@dataclass
class InsertionState:
    i: int = 1
    j: int = 1


@dataclass
class QuickState:
    """
    Explicit-stack Lomuto quicksort.

    Attributes
    ----------
    stack          : list  — pending (low, high) ranges, popped from the end
    low, high      : int   — range currently being partitioned
    i              : int   — right edge of the "less than pivot" block
    j              : int   — scan cursor; the pivot lives at ``high``
    partition_mode : bool  — True while a range is being partitioned
    """
    stack: list = field(default_factory=list)
    low: int = 0
    high: int = 0
    i: int = 0
    j: int = 0
    partition_mode: bool = False


@dataclass
class MergeState:
    """
    Bottom-up mergesort over runs of ``run_size``.

    ``scratch`` holds a copy of ``[l, r]`` taken when a merge starts; the
    merge then writes back into the sequence one element per step.
    """
    scratch: list = field(default_factory=list)
    run_size: int = 1
    left_start: int = 0
    l: int = 0
    m: int = 0
    r: int = 0
    i: int = 0
    j: int = 0
    k: int = 0
    copying: bool = False


@dataclass
class StepOutcome:
    comparisons: int = 0
    swaps: int = 0
    sound: int = 0
    done: bool = False


def initial_state(kind: AlgorithmKind, seq: list):
    """Fresh state for ``kind`` positioned at the start of a run over ``seq``."""
    if kind is AlgorithmKind.BUBBLE:
        return BubbleState()
    if kind is AlgorithmKind.SELECTION:
        return SelectionState()
    if kind is AlgorithmKind.INSERTION:
        return InsertionState()
    if kind is AlgorithmKind.QUICK:
        return QuickState(stack=[(0, len(seq) - 1)])
    if kind is AlgorithmKind.MERGE:
        return MergeState(scratch=list(seq))
    raise KeyError(f"Unknown kind: {kind}")

# ============================================================
# ====================== STEP FUNCTIONS ======================
# ============================================================
#
# Every step function advances its algorithm by one primitive operation:
# at most one comparison and at most one swap/write. The sequence and the
# state are updated in place; the returned StepOutcome carries the metric
# deltas, the value to sonify and whether the run just finished.
# Callers guarantee len(seq) >= 2.


def bubble_step(seq, st: BubbleState) -> StepOutcome:
    n = len(seq)
    out = StepOutcome(comparisons=1, sound=seq[st.j + 1])
    if seq[st.j] > seq[st.j + 1]:
        seq[st.j], seq[st.j + 1] = seq[st.j + 1], seq[st.j]
        out.swaps = 1
    st.j += 1
    if st.j >= n - 1 - st.i:
        st.j = 0
        st.i += 1
        if st.i >= n - 1:
            out.done = True
    return out


def selection_step(seq, st: SelectionState) -> StepOutcome:
    n = len(seq)
    out = StepOutcome(comparisons=1, sound=seq[st.j])
    if seq[st.j] < seq[st.min_idx]:
        st.min_idx = st.j
    st.j += 1
    if st.j >= n:
        seq[st.i], seq[st.min_idx] = seq[st.min_idx], seq[st.i]
        out.swaps = 1
        st.i += 1
        st.j = st.i + 1
        st.min_idx = st.i
        if st.i >= n - 1:
            out.done = True
    return out


def insertion_step(seq, st: InsertionState) -> StepOutcome:
    n = len(seq)
    out = StepOutcome(sound=seq[st.j])
    if st.j > 0:
        out.comparisons = 1
        if seq[st.j] < seq[st.j - 1]:
            seq[st.j], seq[st.j - 1] = seq[st.j - 1], seq[st.j]
            out.swaps = 1
            st.j -= 1
            return out
    st.i += 1
    st.j = st.i
    if st.i >= n:
        out.done = True
    return out


def quick_step(seq, st: QuickState) -> StepOutcome:
    if not st.partition_mode:
        if not st.stack:
            return StepOutcome(done=True)
        st.low, st.high = st.stack.pop()
        st.i = st.low - 1
        st.j = st.low
        st.partition_mode = True
        return StepOutcome()

    out = StepOutcome(sound=seq[st.j])
    if st.j < st.high:
        out.comparisons = 1
        if seq[st.j] < seq[st.high]:
            st.i += 1
            seq[st.i], seq[st.j] = seq[st.j], seq[st.i]
            out.swaps = 1
        st.j += 1
        return out

    # j reached the pivot: drop it between the two halves
    p = st.i + 1
    seq[p], seq[st.high] = seq[st.high], seq[p]
    out.swaps = 1
    if p + 1 < st.high:
        st.stack.append((p + 1, st.high))
    if st.low < p - 1:
        st.stack.append((st.low, p - 1))
    st.partition_mode = False
    return out


def merge_step(seq, st: MergeState) -> StepOutcome:
    n = len(seq)
    if not st.copying:
        if st.run_size >= n:
            return StepOutcome(done=True)
        if st.left_start >= n - 1:
            st.run_size *= 2
            st.left_start = 0
            return StepOutcome()
        st.l = st.left_start
        st.m = min(st.l + st.run_size - 1, n - 1)
        st.r = min(st.l + 2 * st.run_size - 1, n - 1)
        st.scratch[st.l:st.r + 1] = seq[st.l:st.r + 1]
        st.i, st.j, st.k = st.l, st.m + 1, st.l
        st.copying = True
        return StepOutcome()

    if st.k > st.r:
        st.copying = False
        st.left_start += 2 * st.run_size
        return StepOutcome()

    # ties take the left element (stable)
    if st.i <= st.m and (st.j > st.r or st.scratch[st.i] <= st.scratch[st.j]):
        value = st.scratch[st.i]; st.i += 1
    else:
        value = st.scratch[st.j]; st.j += 1
    seq[st.k] = value
    st.k += 1
    return StepOutcome(comparisons=1, swaps=1, sound=value)


STEPPERS = {
    AlgorithmKind.BUBBLE:    bubble_step,
    AlgorithmKind.SELECTION: selection_step,
    AlgorithmKind.INSERTION: insertion_step,
    AlgorithmKind.QUICK:     quick_step,
    AlgorithmKind.MERGE:     merge_step,
}


def step(kind: AlgorithmKind, seq, state) -> StepOutcome:
    return STEPPERS[kind](seq, state)

# ============================================================
# ==================== SNAPSHOT HELPERS ======================
# ============================================================


def focus_indices(kind, seq, state):
    """
    Indices the renderer should call out for ``state``.

    Returns (highlighted, marked, settled) as frozensets: the comparison or
    write focus, the pivot / running minimum, and the bars already in their
    final place.
    """
    n = len(seq)
    hi, mk, st = set(), set(), set()
    if kind is AlgorithmKind.BUBBLE:
        hi.update((state.j, state.j + 1))
        st.update(range(max(0, n - state.i), n))
    elif kind is AlgorithmKind.SELECTION:
        hi.add(state.j)
        mk.add(state.min_idx)
        st.update(range(min(state.i, n)))
    elif kind is AlgorithmKind.INSERTION:
        hi.add(state.j)
    elif kind is AlgorithmKind.QUICK:
        if state.partition_mode:
            hi.add(state.j)
            mk.add(state.high)
    elif kind is AlgorithmKind.MERGE:
        if state.copying and state.k > state.l:
            hi.add(state.k - 1)
    return tuple(frozenset(x for x in s if 0 <= x < n) for s in (hi, mk, st))


def adjacent_sorted_fraction(seq) -> float:
    """Fraction of neighbouring pairs already in non-decreasing order."""
    if len(seq) < 2:
        return 1.0
    good = sum(1 for a, b in zip(seq, seq[1:]) if a <= b)
    return good / (len(seq) - 1)
