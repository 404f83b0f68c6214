"""
Fantasy scoring and comparison for the NBA Player Compare MCP Server.

This module is the whole computational core. Given two player stat lines
it validates them, scores them, picks category and overall winners and
derives the chart data the dashboard is drawn from.

Architecture decisions:
  1. Everything here is synchronous and pure. No I/O, no caching, no state
     kept between calls, so concurrent tool calls can't interfere.

  2. Scores are kept unrounded for winner logic and rounded only for
     display, so two players can't "tie" because of display rounding.

  3. The scoring weights are a plain table (DEFAULT_WEIGHTS) that callers
     can partially override per request instead of editing code.

Typical use:
    dashboard = compare(jokic_stats, embiid_stats, season="2023-24")
    dashboard.winner_name   # -> "Joel Embiid"
"""

import os
import math
import logging
from decimal import Decimal, Context, ROUND_HALF_UP
from typing import Optional, List, Dict, Any, Mapping, Tuple

from pydantic import ValidationError as PydanticValidationError

from models import (
    StatRecord, FantasyScore, CategoryResult, RadarPoint, HeadToHeadPoint,
    Dashboard, Outcome, FieldIssue, ValidationError, REQUIRED_FIELDS,
)

logger = logging.getLogger("nba_player_compare.scoring")

# ─────────────────────────────────────────────────────────────
# Constants
# ─────────────────────────────────────────────────────────────

# Season label used when a request doesn't name one
DEFAULT_SEASON = os.getenv("NBA_COMPARE_SEASON", "2024-25")

FIRST_LABEL = "player1"
SECOND_LABEL = "player2"

# Weight per stat. Turnovers cost a point each.
DEFAULT_WEIGHTS: Dict[str, float] = {
    "ppg": 1.0,
    "rpg": 1.2,
    "apg": 1.5,
    "spg": 3.0,
    "bpg": 3.0,
    "three_pm": 1.0,
    "tov": -1.0,
}

# Display stats in breakdown order: key -> (label, suffix)
CATEGORIES: Dict[str, Tuple[str, str]] = {
    "ppg": ("Points", ""),
    "rpg": ("Rebounds", ""),
    "apg": ("Assists", ""),
    "spg": ("Steals", ""),
    "bpg": ("Blocks", ""),
    "three_pm": ("3-Pointers", ""),
    "fg_pct": ("FG%", "%"),
    "ft_pct": ("FT%", "%"),
    "tov": ("Turnovers", ""),
}

LOWER_IS_BETTER = {"tov"}

# Counting stats charted on the radar and the bar chart, with bar labels
CHART_STATS: Dict[str, str] = {
    "ppg": "PTS",
    "rpg": "REB",
    "apg": "AST",
    "spg": "STL",
    "bpg": "BLK",
    "three_pm": "3PM",
}

# The larger value sits at 1/1.2 of the radar's radius
RADAR_HEADROOM = 1.2


# ─────────────────────────────────────────────────────────────
# Validation
# ─────────────────────────────────────────────────────────────

def _check_record(data: Any, label: str) -> Tuple[Optional[StatRecord], List[FieldIssue]]:
    if isinstance(data, StatRecord):
        return data, []

    if not isinstance(data, Mapping):
        return None, [FieldIssue(label, "*", f"{label} must be an object of player stats")]

    missing = [field for field in REQUIRED_FIELDS if data.get(field) is None]
    if missing:
        return None, [
            FieldIssue(label, field, f"{label} is missing required field: {field}")
            for field in missing
        ]

    try:
        return StatRecord.model_validate(dict(data)), []
    except PydanticValidationError as e:
        issues = []
        for error in e.errors():
            field = str(error["loc"][0]) if error["loc"] else "*"
            issues.append(FieldIssue(label, field, f"{label}.{field} is invalid: {error['msg']}"))
        return None, issues


def validate_record(data: Any, label: str = FIRST_LABEL) -> StatRecord:
    """Validate one raw player mapping into a StatRecord.

    Raises:
        ValidationError: naming ``label`` and every missing or bad field.
    """
    record, issues = _check_record(data, label)
    if issues:
        raise ValidationError(issues)
    return record


def validate_pair(data1: Any, data2: Any) -> Tuple[StatRecord, StatRecord]:
    """Validate both records, reporting problems from both at once."""
    first, issues1 = _check_record(data1, FIRST_LABEL)
    second, issues2 = _check_record(data2, SECOND_LABEL)
    issues = issues1 + issues2
    if issues:
        raise ValidationError(issues)
    return first, second


def resolve_weights(overrides: Optional[Mapping[str, Any]] = None) -> Dict[str, float]:
    """Merge per-request weight overrides onto DEFAULT_WEIGHTS."""
    weights = dict(DEFAULT_WEIGHTS)
    if not overrides:
        return weights

    issues = []
    for stat, raw in overrides.items():
        if stat not in DEFAULT_WEIGHTS:
            issues.append(FieldIssue("weights", stat, f"weights has unknown stat: {stat}"))
            continue
        try:
            weight = float(raw)
        except (TypeError, ValueError):
            issues.append(FieldIssue("weights", stat, f"weights.{stat} must be a number"))
            continue
        if not math.isfinite(weight):
            issues.append(FieldIssue("weights", stat, f"weights.{stat} must be finite"))
            continue
        weights[stat] = weight

    if issues:
        raise ValidationError(issues)
    return weights


# ─────────────────────────────────────────────────────────────
# Scoring
# ─────────────────────────────────────────────────────────────

def fantasy_score(record: StatRecord, weights: Optional[Mapping[str, float]] = None) -> float:
    """Weighted fantasy value of one stat line, unrounded."""
    if weights is None:
        weights = DEFAULT_WEIGHTS
    return sum(getattr(record, stat) * weight for stat, weight in weights.items())


def round_score(value: float) -> float:
    """Round half-up to one decimal.

    Float noise is stripped first so 59.57999999999999 and 59.58 round alike.
    Non-finite values come back unchanged.
    """
    if not math.isfinite(value):
        return value
    exact = Decimal(repr(value))
    # Room for every integer digit plus the 9 decimals kept while cleaning
    context = Context(prec=max(exact.adjusted(), 0) + 12, rounding=ROUND_HALF_UP)
    cleaned = exact.quantize(Decimal("1e-9"), context=context)
    return float(cleaned.quantize(Decimal("0.1"), context=context))


def score_player(record: StatRecord, weights: Optional[Mapping[str, float]] = None) -> FantasyScore:
    value = fantasy_score(record, weights)
    return FantasyScore(value=value, display=round_score(value))


# ─────────────────────────────────────────────────────────────
# Comparison
# ─────────────────────────────────────────────────────────────

def compare_category(category: str, first: StatRecord, second: StatRecord) -> Outcome:
    """Decide which record has the better value for one display stat.

    Bigger is better everywhere except turnovers, where fewer wins.
    """
    if category not in CATEGORIES:
        raise ValueError(f"Unknown category: {category}")

    a = getattr(first, category)
    b = getattr(second, category)
    if a == b:
        return Outcome.TIE

    first_better = a < b if category in LOWER_IS_BETTER else a > b
    return Outcome.FIRST if first_better else Outcome.SECOND


def overall_winner(score1: float, score2: float) -> Outcome:
    """Overall winner from unrounded scores. An exact tie stays a tie."""
    if score1 > score2:
        return Outcome.FIRST
    if score2 > score1:
        return Outcome.SECOND
    return Outcome.TIE


# ─────────────────────────────────────────────────────────────
# Dashboard data
# ─────────────────────────────────────────────────────────────

def _normalize(value: float, ceiling: float) -> float:
    return value / ceiling * 100 if ceiling > 0 else 0.0


def build_radar(first: StatRecord, second: StatRecord) -> List[RadarPoint]:
    points = []
    for stat in CHART_STATS:
        a = getattr(first, stat)
        b = getattr(second, stat)
        ceiling = max(a, b) * RADAR_HEADROOM
        points.append(RadarPoint(
            stat=stat,
            category=stat.upper().replace("_", " "),
            first=_normalize(a, ceiling),
            second=_normalize(b, ceiling),
            first_raw=a,
            second_raw=b,
        ))
    return points


def build_head_to_head(first: StatRecord, second: StatRecord) -> List[HeadToHeadPoint]:
    return [
        HeadToHeadPoint(
            stat=stat,
            label=label,
            first=getattr(first, stat),
            second=getattr(second, stat),
        )
        for stat, label in CHART_STATS.items()
    ]


def build_category_results(first: StatRecord, second: StatRecord) -> List[CategoryResult]:
    return [
        CategoryResult(
            stat=stat,
            label=label,
            first=getattr(first, stat),
            second=getattr(second, stat),
            winner=compare_category(stat, first, second),
            suffix=suffix,
        )
        for stat, (label, suffix) in CATEGORIES.items()
    ]


def build_dashboard(
    first: StatRecord,
    second: StatRecord,
    season: str = DEFAULT_SEASON,
    weights: Optional[Mapping[str, float]] = None,
) -> Dashboard:
    """Derive the full dashboard from two already-validated records."""
    weights = dict(weights) if weights is not None else dict(DEFAULT_WEIGHTS)
    score1 = score_player(first, weights)
    score2 = score_player(second, weights)

    return Dashboard(
        season=season,
        player1=first,
        player2=second,
        score1=score1,
        score2=score2,
        winner=overall_winner(score1.value, score2.value),
        radar=build_radar(first, second),
        head_to_head=build_head_to_head(first, second),
        categories=build_category_results(first, second),
        weights=weights,
    )


def compare(
    record1: Any,
    record2: Any,
    season: Optional[str] = None,
    weights: Optional[Mapping[str, Any]] = None,
) -> Dashboard:
    """Validate, score and compare two players.

    Args:
        record1: First player's stats (mapping or StatRecord).
        record2: Second player's stats (mapping or StatRecord).
        season: Season label; blank or None falls back to DEFAULT_SEASON.
        weights: Optional partial overrides of DEFAULT_WEIGHTS.

    Returns:
        Dashboard: complete dashboard data for the renderer.

    Raises:
        ValidationError: if either record (or the weights) is invalid.
            Nothing is scored in that case.
    """
    first, second = validate_pair(record1, record2)
    resolved = resolve_weights(weights)
    season = season.strip() if season and season.strip() else DEFAULT_SEASON

    overflowed = [
        FieldIssue("weights", "*", f"{label} fantasy score is not finite under these weights")
        for label, record in ((FIRST_LABEL, first), (SECOND_LABEL, second))
        if not math.isfinite(fantasy_score(record, resolved))
    ]
    if overflowed:
        raise ValidationError(overflowed)

    dashboard = build_dashboard(first, second, season, resolved)
    logger.debug(
        f"{first.name} {dashboard.score1.formatted} vs "
        f"{second.name} {dashboard.score2.formatted} ({season}): {dashboard.winner.value}"
    )
    return dashboard
