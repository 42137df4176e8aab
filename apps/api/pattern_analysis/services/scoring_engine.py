"""Pure scoring engine: point budget, totals, percentages and ranking.

Nothing here touches the database. score_matrix_service loads a grid from a
ScoreMatrix row, calls into this module and writes the results back in the
same transaction.

Ranking rules:
- percentage(p) uses largest-remainder rounding so the five percentages sum
  to exactly 100 whenever any point is allocated (0 for all otherwise).
  Leftover points go to the largest fractional remainders; equal remainders
  are resolved in Pattern declaration order.
- Patterns are ranked by percentage, descending, with ties broken by Pattern
  declaration order (CRIATIVO, CONECTIVO, FORTE, LIDER, COMPETITIVO).
- Only patterns with a percentage above zero receive a rank label; unfilled
  ranks are empty strings.
"""

from dataclasses import dataclass, field
from typing import Mapping

from pattern_analysis.db.enums import Pattern, Region
from pattern_analysis.services.errors import ScoreValidationError

MAX_POINTS = 10  # per cell and per region budget
RANK_SLOTS = 3

PATTERN_ORDER: tuple[Pattern, ...] = tuple(Pattern)
REGION_ORDER: tuple[Region, ...] = tuple(Region)

PointGrid = dict[tuple[Pattern, Region], int]


@dataclass(frozen=True)
class PointWrite:
    """Outcome of a single point write."""

    pattern: Pattern
    region: Region
    requested_value: int
    applied_value: int

    @property
    def clamped(self) -> bool:
        return self.applied_value != self.requested_value


@dataclass(frozen=True)
class DerivedScores:
    """Everything recompute() derives from a point grid."""

    totals: dict[Pattern, int]
    percentages: dict[Pattern, int]
    primary: str = ""
    secondary: str = ""
    tertiary: str = ""
    grand_total: int = field(default=0)

    @property
    def rank_labels(self) -> tuple[str, str, str]:
        return (self.primary, self.secondary, self.tertiary)

    def ranked(self) -> list[tuple[str, int]]:
        """(label, percentage) for each rank slot; empty slots give ("", 0)."""
        pairs = []
        for label in self.rank_labels:
            if label:
                pairs.append((label, self.percentages[Pattern.from_label(label)]))
            else:
                pairs.append(("", 0))
        return pairs


# =============================================================================
# Validation
# =============================================================================

def parse_pattern(value: Pattern | str) -> Pattern:
    """Resolve a pattern key ("forte", "FORTE", Pattern.FORTE)."""
    if isinstance(value, Pattern):
        return value
    try:
        return Pattern.from_label(str(value))
    except ValueError:
        raise ScoreValidationError(f"Unknown pattern '{value}'", field="pattern")


def parse_region(value: Region | str) -> Region:
    """Resolve a region key ("head", "HEAD", Region.HEAD)."""
    if isinstance(value, Region):
        return value
    try:
        return Region(str(value).strip().lower())
    except ValueError:
        raise ScoreValidationError(f"Unknown region '{value}'", field="region")


def validate_value(value: int) -> int:
    """Reject anything that is not an integer in [0, MAX_POINTS]."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise ScoreValidationError(f"Point value must be an integer, got {value!r}", field="value")
    if value < 0 or value > MAX_POINTS:
        raise ScoreValidationError(
            f"Point value must be between 0 and {MAX_POINTS}, got {value}", field="value"
        )
    return value


# =============================================================================
# Point budget
# =============================================================================

def empty_grid() -> PointGrid:
    return {(p, r): 0 for p in PATTERN_ORDER for r in REGION_ORDER}


def region_sum(grid: Mapping[tuple[Pattern, Region], int], region: Region,
               exclude: Pattern | None = None) -> int:
    return sum(grid.get((p, region), 0) for p in PATTERN_ORDER if p is not exclude)


def clamp_point(
    grid: Mapping[tuple[Pattern, Region], int],
    pattern: Pattern | str,
    region: Region | str,
    value: int,
) -> PointWrite:
    """
    Work out what a write of `value` would actually store.

    The incoming value is reduced to whatever is left of the region's
    budget once the other four patterns are counted. Out-of-range values
    are rejected, not clamped.
    """
    pattern = parse_pattern(pattern)
    region = parse_region(region)
    value = validate_value(value)

    remaining = max(MAX_POINTS - region_sum(grid, region, exclude=pattern), 0)
    return PointWrite(
        pattern=pattern,
        region=region,
        requested_value=value,
        applied_value=min(value, remaining),
    )


def set_point(
    grid: Mapping[tuple[Pattern, Region], int],
    pattern: Pattern | str,
    region: Region | str,
    value: int,
) -> tuple[PointGrid, PointWrite]:
    """Return a new grid with the (clamped) value written, plus the write outcome."""
    write = clamp_point(grid, pattern, region, value)
    updated = dict(grid)
    updated[(write.pattern, write.region)] = write.applied_value
    return updated, write


# =============================================================================
# Recompute
# =============================================================================

def compute_totals(grid: Mapping[tuple[Pattern, Region], int]) -> dict[Pattern, int]:
    return {p: sum(grid.get((p, r), 0) for r in REGION_ORDER) for p in PATTERN_ORDER}


def compute_percentages(totals: Mapping[Pattern, int]) -> dict[Pattern, int]:
    """Largest-remainder percentages; all zero when nothing is allocated."""
    grand_total = sum(totals.values())
    if grand_total <= 0:
        return {p: 0 for p in PATTERN_ORDER}

    floors = {p: (100 * totals[p]) // grand_total for p in PATTERN_ORDER}
    remainders = {p: (100 * totals[p]) % grand_total for p in PATTERN_ORDER}
    leftover = 100 - sum(floors.values())

    by_remainder = sorted(
        PATTERN_ORDER,
        key=lambda p: (-remainders[p], PATTERN_ORDER.index(p)),
    )
    for p in by_remainder[:leftover]:
        floors[p] += 1
    return floors


def rank_patterns(percentages: Mapping[Pattern, int]) -> tuple[str, str, str]:
    """Top three labels by percentage; ties fall back to declaration order."""
    ordered = sorted(
        PATTERN_ORDER,
        key=lambda p: (-percentages[p], PATTERN_ORDER.index(p)),
    )
    labels = [p.label if percentages[p] > 0 else "" for p in ordered[:RANK_SLOTS]]
    return labels[0], labels[1], labels[2]


def recompute(grid: Mapping[tuple[Pattern, Region], int]) -> DerivedScores:
    """Derive totals, percentages and rank labels from a point grid."""
    totals = compute_totals(grid)
    percentages = compute_percentages(totals)
    primary, secondary, tertiary = rank_patterns(percentages)
    return DerivedScores(
        totals=totals,
        percentages=percentages,
        primary=primary,
        secondary=secondary,
        tertiary=tertiary,
        grand_total=sum(totals.values()),
    )
