"""Tests for scoring - THS weights, legacy formula, colour thresholds, final score choice."""

from teaminsight.core.domain_types import StatusColor
from teaminsight.core.scoring import (
    compute_legacy_score,
    compute_team_health_score,
    round_half_up,
    score_to_color,
    select_final_score,
)


def _components(pe, cs, rd, cr):
    return {
        "participationEquity": {"score": pe},
        "constructiveSentiment": {"score": cs},
        "reflectiveDepth": {"score": rd},
        "conflictResolution": {"score": cr},
    }


def test_legacy_score_best_case_is_exactly_100():
    assert compute_legacy_score(10, 0, 10) == 100


def test_legacy_score_worst_case_is_exactly_0():
    assert compute_legacy_score(0, 10, 0) == 0


def test_legacy_score_midpoint():
    # (5*0.45 + 5*0.4 + 5*0.15) * 10 = 50
    assert compute_legacy_score(5, 5, 5) == 50


def test_legacy_score_clamped_for_out_of_range_inputs():
    assert compute_legacy_score(20, -10, 20) == 100
    assert compute_legacy_score(-5, 20, -5) == 0


def test_ths_weighted_sum():
    # 0.25*80 + 0.15*60 + 0.40*90 + 0.20*70 = 20 + 9 + 36 + 14 = 79
    assert compute_team_health_score(_components(80, 60, 90, 70)) == 79


def test_ths_uniform_components_equal_that_score():
    assert compute_team_health_score(_components(50, 50, 50, 50)) == 50


def test_ths_missing_component_counts_as_zero():
    components = _components(100, 100, 100, 100)
    del components["reflectiveDepth"]
    assert compute_team_health_score(components) == 60


def test_round_half_up_rounds_point_five_up():
    assert round_half_up(2.5) == 3
    assert round_half_up(3.5) == 4
    assert round_half_up(2.49) == 2


def test_color_at_green_min_is_green():
    assert score_to_color(75, 75, 45) == StatusColor.GREEN


def test_color_at_red_max_is_red():
    assert score_to_color(45, 75, 45) == StatusColor.RED


def test_color_strictly_between_is_yellow():
    assert score_to_color(46, 75, 45) == StatusColor.YELLOW
    assert score_to_color(74.9, 75, 45) == StatusColor.YELLOW


def test_color_green_wins_when_thresholds_overlap():
    assert score_to_color(50, 40, 60) == StatusColor.GREEN


def test_final_score_prefers_positive_ths():
    assert select_final_score(82, 40) == 82


def test_final_score_falls_back_to_legacy_when_ths_absent_or_zero():
    assert select_final_score(None, 40) == 40
    assert select_final_score(0, 40) == 40
