"""
Pydantic models for the NBA Player Compare MCP Server.

These models define both sides of the compare_nba_players tool:
  1. The input schema FastMCP publishes to clients (ComparePlayersInput)
  2. The validated stat line for one player (StatRecord)
  3. The derived dashboard data handed to whatever renders the artifact

Stat lines and dashboard data are frozen once built. A comparison is
computed fresh for every request and nothing is persisted between calls.
"""

from typing import Optional, List, Dict, Any, NamedTuple, Tuple
from enum import Enum
from pydantic import BaseModel, Field, ConfigDict


# Content type declared on the JSON artifact so the host knows how to render it
DASHBOARD_CONTENT_TYPE = "application/vnd.nba-compare.dashboard+json"

# Stats every player record must carry before it can be scored
REQUIRED_FIELDS = (
    "name", "ppg", "rpg", "apg", "spg", "bpg",
    "fg_pct", "ft_pct", "three_pm", "tov", "gp",
)


# ─────────────────────────────────────────────────────────────
# Errors
# ─────────────────────────────────────────────────────────────

class FieldIssue(NamedTuple):
    """One problem found on one input record."""
    record: str
    field: str
    message: str


class ValidationError(ValueError):
    """Raised when either player record is missing or carries a bad field.

    Both records are always checked, so ``issues`` can hold problems from
    player1 and player2 at once. ``record`` and ``field`` point at the first.
    """

    def __init__(self, issues: List[FieldIssue]):
        if not issues:
            raise ValueError("ValidationError needs at least one issue")
        self.issues = list(issues)
        self.record = self.issues[0].record
        self.field = self.issues[0].field
        super().__init__("; ".join(issue.message for issue in self.issues))


# ─────────────────────────────────────────────────────────────
# Shared Enums
# ─────────────────────────────────────────────────────────────

class Outcome(str, Enum):
    """Which of the two records comes out ahead."""
    FIRST = "first"
    SECOND = "second"
    TIE = "tie"


class ResponseFormat(str, Enum):
    """Output format for tool responses.

    - JSON: the dashboard artifact, ready for a renderer
    - MARKDOWN: human-readable breakdown for chat UIs
    """
    JSON = "json"
    MARKDOWN = "markdown"


# ─────────────────────────────────────────────────────────────
# Player data
# ─────────────────────────────────────────────────────────────

class StatRecord(BaseModel):
    """One player's per-game averages for a season."""
    model_config = ConfigDict(
        str_strip_whitespace=True,
        frozen=True,
        extra="ignore",
        allow_inf_nan=False,
    )

    name: str = Field(..., description="Player full name (e.g. 'Nikola Jokic')", min_length=1)
    team: Optional[str] = Field(default=None, description="Team abbreviation (e.g. 'DEN', 'LAL')")
    position: Optional[str] = Field(default=None, description="Position (PG, SG, SF, PF, C)")
    ppg: float = Field(..., description="Points per game", ge=0)
    rpg: float = Field(..., description="Rebounds per game", ge=0)
    apg: float = Field(..., description="Assists per game", ge=0)
    spg: float = Field(..., description="Steals per game", ge=0)
    bpg: float = Field(..., description="Blocks per game", ge=0)
    fg_pct: float = Field(..., description="Field goal percentage (0-100, e.g. 58.3)", ge=0, le=100)
    ft_pct: float = Field(..., description="Free throw percentage (0-100, e.g. 81.7)", ge=0, le=100)
    three_pm: float = Field(..., description="Three-pointers made per game", ge=0)
    tov: float = Field(..., description="Turnovers per game", ge=0)
    gp: int = Field(..., description="Games played", ge=0)


# ─────────────────────────────────────────────────────────────
# Derived dashboard data
# ─────────────────────────────────────────────────────────────

class FantasyScore(BaseModel):
    """A fantasy score kept both exact (for winner logic) and rounded (for display)."""
    model_config = ConfigDict(frozen=True)

    value: float
    display: float

    @property
    def formatted(self) -> str:
        return f"{self.display:.1f}"


class CategoryResult(BaseModel):
    """Head-to-head result for one display stat."""
    model_config = ConfigDict(frozen=True)

    stat: str
    label: str
    first: float
    second: float
    winner: Outcome
    suffix: str = ""


class RadarPoint(BaseModel):
    """One spoke of the radar chart: normalized 0-100 values plus the raw ones."""
    model_config = ConfigDict(frozen=True)

    stat: str
    category: str
    first: float
    second: float
    first_raw: float
    second_raw: float


class HeadToHeadPoint(BaseModel):
    """One bar pair of the per-game chart."""
    model_config = ConfigDict(frozen=True)

    stat: str
    label: str
    first: float
    second: float


class Dashboard(BaseModel):
    """Everything a renderer needs to draw the comparison, and nothing partial."""
    model_config = ConfigDict(frozen=True)

    season: str
    player1: StatRecord
    player2: StatRecord
    score1: FantasyScore
    score2: FantasyScore
    winner: Outcome
    radar: List[RadarPoint]
    head_to_head: List[HeadToHeadPoint]
    categories: List[CategoryResult]
    weights: Dict[str, float]

    @property
    def winner_name(self) -> Optional[str]:
        if self.winner == Outcome.FIRST:
            return self.player1.name
        if self.winner == Outcome.SECOND:
            return self.player2.name
        return None

    def series_keys(self) -> Tuple[str, str]:
        """Chart series keys, one per player.

        Charts key their series by player name, so a repeated name on the
        second record gets a suffix instead of overwriting the first.
        """
        first, second = self.player1.name, self.player2.name
        if first == second:
            second = f"{second} (2)"
        return first, second

    def to_artifact(self) -> Dict[str, Any]:
        """Build the JSON artifact: chart rows keyed by player name."""
        key1, key2 = self.series_keys()
        return {
            "content_type": DASHBOARD_CONTENT_TYPE,
            "season": self.season,
            "players": {
                "player1": self.player1.model_dump(),
                "player2": self.player2.model_dump(),
            },
            "scores": {
                "player1": self.score1.formatted,
                "player2": self.score2.formatted,
            },
            "winner": {
                "outcome": self.winner.value,
                "name": self.winner_name,
            },
            "radar": [
                {
                    "category": point.category,
                    key1: point.first,
                    key2: point.second,
                    "p1Raw": point.first_raw,
                    "p2Raw": point.second_raw,
                }
                for point in self.radar
            ],
            "head_to_head": [
                {"stat": point.label, key1: point.first, key2: point.second}
                for point in self.head_to_head
            ],
            "categories": [
                {
                    "stat": result.stat,
                    "label": result.label,
                    "player1": result.first,
                    "player2": result.second,
                    "winner": result.winner.value,
                }
                for result in self.categories
            ],
            "weights": dict(self.weights),
        }


# ─────────────────────────────────────────────────────────────
# Tool Inputs
# ─────────────────────────────────────────────────────────────

def _stat_record_schema() -> Dict[str, Any]:
    """Field-by-field schema for a player object, published to clients.

    The runtime type stays a plain dict so a missing stat reaches the
    comparison's own check, which names the record and the field.
    """
    schema = StatRecord.model_json_schema()
    return {
        "properties": schema["properties"],
        "required": list(REQUIRED_FIELDS),
    }


class ComparePlayersInput(BaseModel):
    """Input for the head-to-head fantasy basketball comparison."""
    model_config = ConfigDict(str_strip_whitespace=True, validate_assignment=True)

    player1: Dict[str, Any] = Field(
        ...,
        description="First player's per-game stats",
        json_schema_extra=_stat_record_schema()
    )
    player2: Dict[str, Any] = Field(
        ...,
        description="Second player's per-game stats",
        json_schema_extra=_stat_record_schema()
    )
    season: Optional[str] = Field(
        default=None,
        description="Season label shown in the header, e.g. '2024-25'. Defaults to the current season.",
        max_length=20
    )
    weights: Optional[Dict[str, float]] = Field(
        default=None,
        description=(
            "Optional scoring weight overrides keyed by stat "
            "(ppg, rpg, apg, spg, bpg, three_pm, tov). Unlisted stats keep their default weight."
        )
    )
    response_format: ResponseFormat = Field(
        default=ResponseFormat.JSON,
        description="Output format: 'json' for the dashboard artifact or 'markdown' for a readable report"
    )
