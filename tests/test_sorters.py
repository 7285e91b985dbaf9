import math
import random

import pytest

from sorters import (
    AlgorithmKind,
    BubbleState,
    InsertionState,
    MergeState,
    QuickState,
    adjacent_sorted_fraction,
    bubble_step,
    focus_indices,
    initial_state,
    insertion_step,
    merge_step,
    quick_step,
    step,
)


def run_to_end(kind, values, limit=100_000):
    seq = list(values)
    st = initial_state(kind, seq)
    comparisons = swaps = steps = 0
    while True:
        out = step(kind, seq, st)
        assert out.comparisons <= 1 and out.swaps <= 1
        comparisons += out.comparisons
        swaps += out.swaps
        steps += 1
        assert steps < limit
        if out.done:
            return seq, comparisons, swaps


@pytest.mark.parametrize("kind", list(AlgorithmKind))
@pytest.mark.parametrize("values", [
    [2, 1],
    [1, 2],
    [5, 3, 4, 1, 2],
    [7, 7, 7, 7],
    [9, 8, 7, 6, 5, 4, 3, 2, 1],
    [3, 1, 3, 1, 2, 2, 5],
])
def test_sorts_and_keeps_multiset(kind, values):
    seq, _, _ = run_to_end(kind, values)
    assert seq == sorted(values)


@pytest.mark.parametrize("kind", list(AlgorithmKind))
def test_random_inputs(kind):
    rng = random.Random(1234)
    for n in (2, 3, 10, 33, 64):
        values = [rng.randint(5, 104) for _ in range(n)]
        seq, _, _ = run_to_end(kind, values)
        assert seq == sorted(values)


@pytest.mark.parametrize("kind", [AlgorithmKind.BUBBLE, AlgorithmKind.SELECTION,
                                  AlgorithmKind.INSERTION])
@pytest.mark.parametrize("values", [
    list(range(20, 0, -1)),
    list(range(1, 21)),
    [4, 4, 1, 9, 2, 2, 8, 3, 3, 7],
])
def test_quadratic_comparison_bound(kind, values):
    _, comparisons, _ = run_to_end(kind, values)
    n = len(values)
    assert comparisons <= n * (n - 1) // 2


def test_bubble_scenario():
    seq = [5, 3, 4, 1, 2]
    st = BubbleState()
    expected = [[3, 5, 4, 1, 2], [3, 4, 5, 1, 2], [3, 4, 1, 5, 2], [3, 4, 1, 2, 5]]
    for want in expected:
        out = bubble_step(seq, st)
        assert out.swaps == 1
        assert seq == want
    assert (st.i, st.j) == (1, 0)

    seq, comparisons, swaps = run_to_end(AlgorithmKind.BUBBLE, [5, 3, 4, 1, 2])
    assert seq == [1, 2, 3, 4, 5]
    assert comparisons == 10
    # bubble sort swaps once per inversion
    assert swaps == 8


def test_bubble_sound_is_right_element_before_swap():
    seq = [9, 4]
    out = bubble_step(seq, BubbleState())
    assert out.sound == 4
    assert seq == [4, 9]
    assert out.done


def test_insertion_counts_no_comparison_at_left_edge():
    seq = [2, 1, 3]
    st = InsertionState()
    out = insertion_step(seq, st)          # compare (1, 2) -> swap, j=0
    assert (out.comparisons, out.swaps) == (1, 1)
    assert st.j == 0
    out = insertion_step(seq, st)          # j == 0: only advance
    assert out.comparisons == 0
    assert (st.i, st.j) == (2, 2)


def test_quick_partition_invariant():
    rng = random.Random(7)
    values = [rng.randint(5, 104) for _ in range(60)]
    seq = list(values)
    st = initial_state(AlgorithmKind.QUICK, seq)
    partitions = 0
    while True:
        was_partitioning = st.partition_mode
        low, high = st.low, st.high
        out = quick_step(seq, st)
        if out.done:
            break
        if was_partitioning and not st.partition_mode:
            partitions += 1
            p = st.i + 1
            assert all(seq[x] <= seq[p] for x in range(low, p))
            assert all(seq[p] <= seq[x] for x in range(p + 1, high + 1))
    assert partitions > 0
    assert seq == sorted(values)


def test_quick_never_stacks_degenerate_ranges():
    rng = random.Random(11)
    seq = [rng.randint(5, 104) for _ in range(40)]
    st = initial_state(AlgorithmKind.QUICK, seq)
    while not quick_step(seq, st).done:
        assert all(lo < hi for lo, hi in st.stack)


def test_quick_is_deterministic():
    values = [8, 3, 9, 1, 7, 2, 6]
    a = run_to_end(AlgorithmKind.QUICK, values)
    b = run_to_end(AlgorithmKind.QUICK, values)
    assert a == b


def test_quick_pop_step_is_silent():
    seq = [3, 1, 2]
    st = QuickState(stack=[(0, 2)])
    out = quick_step(seq, st)
    assert out.sound == 0 and out.comparisons == 0
    assert st.partition_mode and (st.i, st.j) == (-1, 0)


def test_merge_scenario():
    seq = [4, 1, 3, 2]
    st = MergeState(scratch=list(seq))
    snapshots = {}
    while True:
        size = st.run_size
        out = merge_step(seq, st)
        if out.done:
            break
        if st.run_size != size:
            snapshots[size] = list(seq)
    assert snapshots == {1: [1, 4, 2, 3], 2: [1, 2, 3, 4]}
    assert st.run_size == 4


@pytest.mark.parametrize("n", [2, 3, 4, 5, 7, 8, 9, 16, 31, 100])
def test_merge_pass_count_and_runs(n):
    rng = random.Random(n)
    seq = [rng.randint(5, 104) for _ in range(n)]
    st = initial_state(AlgorithmKind.MERGE, seq)
    passes = 0
    while True:
        size = st.run_size
        out = merge_step(seq, st)
        if out.done:
            break
        if st.run_size != size:
            passes += 1
            block = 2 * size
            for start in range(0, n, block):
                chunk = seq[start:start + block]
                assert chunk == sorted(chunk)
    assert passes == math.ceil(math.log2(n))


def test_merge_is_stable_on_ties():
    seq = [5, 5]
    st = MergeState(scratch=[0, 0])
    merge_step(seq, st)                    # copy [0, 1] into scratch
    assert st.scratch == [5, 5]
    out = merge_step(seq, st)
    assert st.i == 1 and st.j == 1         # took the left element first
    assert out.sound == 5


def test_merge_publishes_written_value():
    seq = [4, 1]
    st = MergeState(scratch=list(seq))
    assert merge_step(seq, st).sound == 0  # copy into scratch
    out = merge_step(seq, st)
    assert out.sound == 1 and seq[0] == 1
    assert (out.comparisons, out.swaps) == (1, 1)


def test_focus_indices():
    seq = [1, 2, 3, 4, 5]
    hi, mk, st = focus_indices(AlgorithmKind.BUBBLE, seq, BubbleState(i=2, j=1))
    assert hi == {1, 2}
    assert mk == frozenset()
    assert st == {3, 4}

    hi, mk, st = focus_indices(AlgorithmKind.QUICK, seq,
                               QuickState(low=0, high=4, j=2, partition_mode=True))
    assert hi == {2} and mk == {4}


def test_adjacent_sorted_fraction():
    assert adjacent_sorted_fraction([1, 2, 3]) == 1.0
    assert adjacent_sorted_fraction([3, 2, 1]) == 0.0
    assert adjacent_sorted_fraction([1, 3, 2, 4, 5]) == 0.75
    assert adjacent_sorted_fraction([7]) == 1.0


def test_from_key():
    assert AlgorithmKind.from_key("merge") is AlgorithmKind.MERGE
    with pytest.raises(KeyError):
        AlgorithmKind.from_key("bogo")
