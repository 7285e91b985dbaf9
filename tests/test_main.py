import pygame
import pytest

import settings as cfg
from controller import Metrics, Phase, StepSnapshot
from main import KEY_TO_KIND, bar_color, overlay_text, value_to_color
from sorters import AlgorithmKind


def make_snap(kind=AlgorithmKind.BUBBLE, phase=Phase.STEPPING, highlighted=(), marked=(),
              settled=(), metrics=None, sequence=(10, 20, 30, 40)):
    return StepSnapshot(
        sequence=tuple(sequence), kind=kind, phase=phase,
        highlighted=frozenset(highlighted), marked=frozenset(marked),
        settled=frozenset(settled),
        is_sorted=phase is Phase.SORTED, is_shuffling=phase is Phase.SHUFFLING,
        progress=0.0, metrics=metrics or Metrics(),
    )


@pytest.mark.parametrize("kind", list(AlgorithmKind))
def test_sorted_bars_are_all_white(kind):
    snap = make_snap(kind, Phase.SORTED, highlighted={1}, marked={2})
    for k, v in enumerate(snap.sequence):
        assert bar_color(k, v, snap, 104) == cfg.SETTLED_COLOR


@pytest.mark.parametrize("kind, color", [
    (AlgorithmKind.BUBBLE,    cfg.ACTIVE_COLOR),
    (AlgorithmKind.SELECTION, cfg.ACTIVE_COLOR),
    (AlgorithmKind.INSERTION, cfg.ACTIVE_COLOR),
    (AlgorithmKind.QUICK,     cfg.ACTIVE_COLOR),
    (AlgorithmKind.MERGE,     cfg.SETTLED_COLOR),
])
def test_highlight_color_per_kind(kind, color):
    snap = make_snap(kind, highlighted={1})
    assert bar_color(1, 20, snap, 104) == color


def test_shuffle_cursor_is_red():
    snap = make_snap(phase=Phase.SHUFFLING, highlighted={2})
    assert bar_color(2, 30, snap, 104) == cfg.ACTIVE_COLOR


def test_marked_wins_over_highlighted():
    snap = make_snap(AlgorithmKind.QUICK, highlighted={3}, marked={3})
    assert bar_color(3, 40, snap, 104) == cfg.MARK_COLOR


def test_settled_and_plain_bars():
    snap = make_snap(AlgorithmKind.BUBBLE, highlighted={0, 1}, settled={3})
    assert bar_color(3, 40, snap, 104) == cfg.SETTLED_COLOR
    assert bar_color(2, 30, snap, 104) == value_to_color(30, 104)


def test_value_to_color_is_blue_gradient():
    assert value_to_color(0, 100) == (30, 30, 150)
    assert value_to_color(100, 100) == (130, 230, 255)


def test_overlay_while_shuffling():
    snap = make_snap(phase=Phase.SHUFFLING, metrics=Metrics(comparisons=9))
    assert overlay_text(snap, 3) == "STATUS: Shuffling..."


def test_overlay_while_sorting():
    snap = make_snap(AlgorithmKind.QUICK,
                     metrics=Metrics(comparisons=12, swaps=5, elapsed_ms=1.23456))
    lines = overlay_text(snap, 7).split("\n")
    assert lines[0] == "ALGORITHM:  Quick Sort"
    assert lines[1] == "COMPLEXITY: O(N log N) - Fast"
    assert lines[3] == ""
    assert "Comparisons:  12" in lines
    assert "Swaps:        5" in lines
    assert "Real CPU Time:1.235ms" in lines
    assert lines[-1] == "Delay Added:  7ms"


def test_number_keys_pick_kinds_in_order():
    keys = [pygame.K_1, pygame.K_2, pygame.K_3, pygame.K_4, pygame.K_5]
    assert [KEY_TO_KIND[k] for k in keys] == list(AlgorithmKind)
    assert len(KEY_TO_KIND) == 5
