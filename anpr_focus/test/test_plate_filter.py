import math

import pytest

from anpr_focus.domain.Models.rect import Rect
from anpr_focus.domain.Models.text_line import TextDetection, TextLine
from anpr_focus.domain.Services.plate_filter import PlateFilter, compute_center_distance

from anpr_focus.test.fakes import line


def detection(*lines):
    return TextDetection.from_lines(list(lines))


def box_at(text, cx, cy, half_w=10, half_h=4):
    return line(text, cx - half_w, cy - half_h, cx + half_w, cy + half_h)


@pytest.fixture
def plate_filter(normalizer):
    return PlateFilter(normalizer, min_vertical_fraction=0.3, min_horizontal_fraction=0.3)


# ---------------------------------------------------------
#  compute_algorithm_result
# ---------------------------------------------------------
def test_priority_pass_skips_noise_words_regardless_of_position(normalizer):
    plate_filter = PlateFilter(normalizer, noise_words=["STATE"])
    result = plate_filter.compute_algorithm_result(
        detection(box_at("STATE", 50, 50), box_at("ABC1234", 10, 90)), 100, 100
    )
    assert result == "ABC1234"


def test_default_noise_dictionary_holds_state_names(plate_filter):
    result = plate_filter.compute_algorithm_result(
        detection(box_at("TEXAS", 50, 50), box_at("ABC1234", 90, 10)), 100, 100
    )
    assert result == "ABC1234"


def test_priority_pass_prefers_most_centered(plate_filter):
    result = plate_filter.compute_algorithm_result(
        detection(box_at("FAR123", 10, 10), box_at("MID456", 45, 55)), 100, 100
    )
    assert result == "MID456"


def test_priority_pass_returns_trimmed_unsanitized_text(plate_filter):
    result = plate_filter.compute_algorithm_result(detection(box_at("  ab-1234 ", 50, 50)), 100, 100)
    assert result == "ab-1234"


def test_band_fallback_terminates_on_first_candidate(plate_filter):
    result = plate_filter.compute_algorithm_result(
        detection(box_at("ABCDEFGH1", 30, 50), box_at("ZYXWVUT99", 70, 50)), 100, 100
    )
    assert result == "ABCDEFGH1"


def test_band_fallback_single_text_in_band(plate_filter):
    result = plate_filter.compute_algorithm_result(
        detection(box_at("OTHERTEXT1", 50, 5), box_at("LONGTEXT99", 50, 50)), 100, 100
    )
    assert result == "LONGTEXT99"


def test_band_fallback_empty_band_returns_first_candidate(plate_filter):
    result = plate_filter.compute_algorithm_result(
        detection(box_at("AB", 50, 5), box_at("CD", 50, 95)), 100, 100
    )
    assert result == "AB"


def test_algorithm_result_without_candidates(plate_filter):
    assert plate_filter.compute_algorithm_result(detection(), 100, 100) is None
    assert plate_filter.compute_algorithm_result(detection(TextLine("ABC123")), 100, 100) is None


def test_algorithm_result_with_unknown_frame_size(plate_filter):
    det = detection(box_at("ABC123", 50, 50))
    assert plate_filter.compute_algorithm_result(det, 0, 100) == "ABC123"
    assert plate_filter.compute_algorithm_result(TextDetection(), 100, 0) is None


# ---------------------------------------------------------
#  filter_visible_text
# ---------------------------------------------------------
def test_visible_text_keeps_lines_inside_window(plate_filter):
    plate_filter.update_vertical_fraction(0.5)
    det = detection(box_at("ABC123", 50, 50), box_at("TOP", 50, 10), box_at("XYZ", 20, 60))

    assert plate_filter.filter_visible_text(det, 100, 100) == "ABC123\nXYZ"


def test_visible_text_none_when_window_is_empty(plate_filter):
    plate_filter.update_vertical_fraction(0.3)
    assert plate_filter.filter_visible_text(detection(box_at("TOP", 50, 5)), 100, 100) is None


def test_window_fraction_is_clamped(plate_filter):
    plate_filter.update_vertical_fraction(0.1)
    plate_filter.update_horizontal_fraction(1.5)
    assert plate_filter.vertical_fraction == 0.3
    assert plate_filter.horizontal_fraction == 1.0


def test_image_window_maps_through_fill_crop(plate_filter):
    plate_filter.update_preview_size(100, 100)
    window = plate_filter.compute_image_window(200, 100)

    assert window.left == pytest.approx(0.25)
    assert window.right == pytest.approx(0.75)
    assert (window.top, window.bottom) == (pytest.approx(0.0), pytest.approx(1.0))


def test_image_window_without_preview_uses_fractions(plate_filter):
    plate_filter.update_horizontal_fraction(0.5)
    window = plate_filter.compute_image_window(200, 100)
    assert (window.left, window.right) == (pytest.approx(0.25), pytest.approx(0.75))


def test_center_distance():
    assert compute_center_distance(Rect(40, 40, 60, 60), 100, 100) == 0.0
    assert compute_center_distance(Rect(0, 0, 0, 0), 100, 100) == pytest.approx(math.sqrt(0.5))
