"""Tests for the pure scoring engine (budget, percentages, ranking)."""
import random

import pytest

from pattern_analysis.db.enums import Pattern, Region
from pattern_analysis.services import scoring_engine
from pattern_analysis.services.errors import ScoreValidationError
from pattern_analysis.services.scoring_engine import (
    MAX_POINTS,
    compute_percentages,
    empty_grid,
    rank_patterns,
    recompute,
    region_sum,
    set_point,
)


def _totals(**values) -> dict[Pattern, int]:
    totals = {p: 0 for p in Pattern}
    for name, value in values.items():
        totals[Pattern(name)] = value
    return totals


def _random_grid(seed: int):
    rng = random.Random(seed)
    grid = empty_grid()
    for _ in range(40):
        grid, _write = set_point(
            grid, rng.choice(list(Pattern)), rng.choice(list(Region)), rng.randint(0, MAX_POINTS)
        )
    return grid


# =============================================================================
# Empty matrix
# =============================================================================

def test_empty_matrix_is_valid_unscored_state():
    derived = recompute(empty_grid())

    assert all(v == 0 for v in derived.totals.values())
    assert all(v == 0 for v in derived.percentages.values())
    assert derived.rank_labels == ("", "", "")
    assert derived.grand_total == 0
    assert derived.ranked() == [("", 0), ("", 0), ("", 0)]


# =============================================================================
# Point budget
# =============================================================================

def test_write_is_clamped_to_what_is_left_in_the_region():
    grid = empty_grid()
    grid, _ = set_point(grid, Pattern.CRIATIVO, Region.HEAD, 6)
    grid, _ = set_point(grid, Pattern.CONECTIVO, Region.HEAD, 3)

    grid, write = set_point(grid, Pattern.FORTE, Region.HEAD, 5)

    assert write.clamped is True
    assert write.requested_value == 5
    assert write.applied_value == 1
    assert grid[(Pattern.FORTE, Region.HEAD)] == 1
    assert region_sum(grid, Region.HEAD) == 10


def test_rewriting_a_cell_does_not_count_its_old_value():
    grid = empty_grid()
    grid, _ = set_point(grid, Pattern.CRIATIVO, Region.EYES, 6)
    grid, _ = set_point(grid, Pattern.LIDER, Region.EYES, 4)

    grid, lowered = set_point(grid, Pattern.CRIATIVO, Region.EYES, 2)
    assert lowered.clamped is False
    assert lowered.applied_value == 2

    grid, raised = set_point(grid, Pattern.CRIATIVO, Region.EYES, 9)
    assert raised.clamped is True
    assert raised.applied_value == 6
    assert region_sum(grid, Region.EYES) == 10


def test_full_region_clamps_to_zero():
    grid = empty_grid()
    grid, _ = set_point(grid, Pattern.FORTE, Region.LEGS, 10)

    grid, write = set_point(grid, Pattern.COMPETITIVO, Region.LEGS, 3)

    assert write.applied_value == 0
    assert write.clamped is True


def test_other_regions_are_unaffected_by_a_write():
    grid = empty_grid()
    grid, _ = set_point(grid, Pattern.FORTE, Region.LEGS, 10)
    grid, write = set_point(grid, Pattern.FORTE, Region.TORSO, 10)

    assert write.clamped is False
    assert grid[(Pattern.FORTE, Region.TORSO)] == 10


def test_set_point_does_not_mutate_input_grid():
    grid = empty_grid()
    updated, _ = set_point(grid, Pattern.CRIATIVO, Region.MOUTH, 4)

    assert grid[(Pattern.CRIATIVO, Region.MOUTH)] == 0
    assert updated[(Pattern.CRIATIVO, Region.MOUTH)] == 4


@pytest.mark.parametrize("seed", range(25))
def test_region_budget_holds_after_any_sequence_of_writes(seed):
    grid = _random_grid(seed)
    for region in Region:
        assert region_sum(grid, region) <= MAX_POINTS


# =============================================================================
# Validation
# =============================================================================

@pytest.mark.parametrize("value", [-1, 11, 100])
def test_out_of_range_values_are_rejected_not_clamped(value):
    with pytest.raises(ScoreValidationError) as exc_info:
        set_point(empty_grid(), Pattern.CRIATIVO, Region.HEAD, value)
    assert exc_info.value.code == "validation_error"
    assert exc_info.value.extra["field"] == "value"


@pytest.mark.parametrize("value", [True, 3.5, "5", None])
def test_non_integer_values_are_rejected(value):
    with pytest.raises(ScoreValidationError):
        scoring_engine.validate_value(value)


def test_unknown_pattern_and_region_keys_are_rejected():
    with pytest.raises(ScoreValidationError) as pattern_error:
        set_point(empty_grid(), "bogus", Region.HEAD, 1)
    assert pattern_error.value.extra["field"] == "pattern"

    with pytest.raises(ScoreValidationError) as region_error:
        set_point(empty_grid(), Pattern.FORTE, "elbow", 1)
    assert region_error.value.extra["field"] == "region"


def test_keys_accept_labels_and_values():
    assert scoring_engine.parse_pattern("FORTE") is Pattern.FORTE
    assert scoring_engine.parse_pattern("Líder") is Pattern.LIDER
    assert scoring_engine.parse_region("HEAD") is Region.HEAD
    assert scoring_engine.parse_region(" waist ") is Region.WAIST


# =============================================================================
# Percentages and ranking
# =============================================================================

def test_ties_are_broken_by_pattern_order():
    totals = _totals(criativo=30, conectivo=20, forte=20, lider=20, competitivo=10)

    percentages = compute_percentages(totals)

    assert [percentages[p] for p in Pattern] == [30, 20, 20, 20, 10]
    assert rank_patterns(percentages) == ("CRIATIVO", "CONECTIVO", "FORTE")


def test_largest_remainder_makes_percentages_sum_to_100():
    percentages = compute_percentages(_totals(criativo=1, conectivo=1, forte=1))

    # Equal remainders: the extra point goes to the first pattern in order
    assert percentages[Pattern.CRIATIVO] == 34
    assert percentages[Pattern.CONECTIVO] == 33
    assert percentages[Pattern.FORTE] == 33
    assert sum(percentages.values()) == 100


def test_largest_remainder_prefers_bigger_fraction():
    percentages = compute_percentages(_totals(criativo=2, conectivo=1))

    assert percentages[Pattern.CRIATIVO] == 67
    assert percentages[Pattern.CONECTIVO] == 33


def test_only_nonzero_patterns_get_a_rank_label():
    derived = recompute({**empty_grid(), (Pattern.LIDER, Region.TORSO): 5})

    assert derived.percentages[Pattern.LIDER] == 100
    assert derived.rank_labels == ("LIDER", "", "")
    assert derived.ranked() == [("LIDER", 100), ("", 0), ("", 0)]


def test_recompute_from_a_realistic_grid():
    grid = empty_grid()
    writes = [
        (Pattern.CONECTIVO, Region.HEAD, 6), (Pattern.FORTE, Region.HEAD, 4),
        (Pattern.CONECTIVO, Region.EYES, 7), (Pattern.CRIATIVO, Region.EYES, 3),
        (Pattern.FORTE, Region.MOUTH, 5), (Pattern.CONECTIVO, Region.MOUTH, 5),
        (Pattern.LIDER, Region.TORSO, 8), (Pattern.FORTE, Region.TORSO, 2),
        (Pattern.CONECTIVO, Region.WAIST, 4), (Pattern.COMPETITIVO, Region.WAIST, 6),
        (Pattern.FORTE, Region.LEGS, 10),
    ]
    for pattern, region, value in writes:
        grid, _ = set_point(grid, pattern, region, value)

    derived = recompute(grid)

    assert derived.totals == {
        Pattern.CRIATIVO: 3,
        Pattern.CONECTIVO: 22,
        Pattern.FORTE: 21,
        Pattern.LIDER: 8,
        Pattern.COMPETITIVO: 6,
    }
    assert derived.grand_total == 60
    assert sum(derived.percentages.values()) == 100
    assert derived.rank_labels == ("CONECTIVO", "FORTE", "LIDER")


@pytest.mark.parametrize("seed", range(25))
def test_percentages_sum_to_0_or_100(seed):
    derived = recompute(_random_grid(seed))
    expected = 100 if derived.grand_total > 0 else 0
    assert sum(derived.percentages.values()) == expected


@pytest.mark.parametrize("seed", range(10))
def test_recompute_is_idempotent(seed):
    grid = _random_grid(seed)
    assert recompute(grid) == recompute(dict(grid))
