import random

import pytest

from anpr_focus.domain.Models.rect import Rect
from anpr_focus.domain.Services.geometry import (
    centered_rect,
    clamp_to_bounds,
    expand_horizontally,
    round_half_up,
    trim_vertically,
)


@pytest.mark.parametrize("value, expected", [(2.5, 3), (0.5, 1), (1.49, 1), (144.5, 145)])
def test_round_half_up(value, expected):
    assert round_half_up(value) == expected


def test_clamp_to_bounds_pulls_rect_inside():
    assert clamp_to_bounds(Rect(-10, -5, 500, 400), 100, 80) == Rect(0, 0, 100, 80)


def test_clamp_to_bounds_outside_rect_keeps_one_pixel():
    assert clamp_to_bounds(Rect(120, 90, 130, 95), 100, 80) == Rect(99, 79, 100, 80)


def test_clamp_to_bounds_degenerate_rect_is_never_empty():
    assert clamp_to_bounds(Rect(50, 50, 50, 50), 100, 100) == Rect(50, 50, 51, 51)


def test_clamp_to_bounds_random_rects_stay_valid():
    rng = random.Random(7)
    for _ in range(500):
        max_w = rng.randint(1, 300)
        max_h = rng.randint(1, 300)
        coords = [rng.randint(-400, 400) for _ in range(4)]
        rect = clamp_to_bounds(Rect(*coords), max_w, max_h)

        assert 0 <= rect.left < rect.right <= max_w
        assert 0 <= rect.top < rect.bottom <= max_h
        assert rect.width >= 1 and rect.height >= 1


def test_centered_rect_covers_fraction():
    assert centered_rect(200, 100, 0.85) == Rect(15, 7, 185, 92)


def test_centered_rect_small_frame_uses_whole_image():
    assert centered_rect(50, 40, 0.85) == Rect(0, 0, 50, 40)


def test_expand_horizontally_keeps_center_and_band():
    assert expand_horizontally(Rect(40, 10, 60, 20), 200) == Rect(37, 10, 63, 20)


def test_expand_horizontally_shifts_away_from_left_edge():
    # alto 20 -> ancho mínimo 40 por la proporción de placa
    assert expand_horizontally(Rect(0, 0, 20, 20), 100) == Rect(0, 0, 40, 20)


def test_expand_horizontally_never_exceeds_container():
    rect = expand_horizontally(Rect(90, 0, 100, 30), 100)
    assert rect.right == 100
    assert rect.left >= 0
    assert (rect.top, rect.bottom) == (0, 30)


def test_trim_vertically_shrinks_around_center():
    assert trim_vertically(Rect(0, 0, 100, 200), 300) == Rect(0, 15, 100, 185)


def test_trim_vertically_respects_min_crop_size():
    assert trim_vertically(Rect(0, 0, 10, 70), 100) == Rect(0, 3, 10, 67)


def test_trim_vertically_returns_none_at_minimum():
    assert trim_vertically(Rect(0, 0, 100, 64), 300) is None
