import asyncio
import json

import pytest

from models import (
    ComparePlayersInput, DASHBOARD_CONTENT_TYPE, REQUIRED_FIELDS, ResponseFormat, ValidationError,
)
from server import (
    build_parser,
    compare_nba_players,
    mcp,
    nba_player_comparison,
    scoring_weights_resource,
    stat_categories_resource,
)


def _jokic() -> dict:
    return {
        "name": "Nikola Jokic", "team": "DEN", "position": "C",
        "ppg": 26.4, "rpg": 12.4, "apg": 9.0, "spg": 1.4, "bpg": 0.9,
        "fg_pct": 58.3, "ft_pct": 81.7, "three_pm": 0.9, "tov": 3.0, "gp": 79,
    }


def _embiid() -> dict:
    return {
        "name": "Joel Embiid", "team": "PHI", "position": "C",
        "ppg": 34.7, "rpg": 11.0, "apg": 5.6, "spg": 1.2, "bpg": 1.7,
        "fg_pct": 52.9, "ft_pct": 88.3, "three_pm": 1.3, "tov": 3.4, "gp": 66,
    }


class _StubContext:
    """Stands in for the FastMCP request context outside a live session."""

    def __init__(self):
        self.messages = []

    async def info(self, message):
        self.messages.append(message)


def _run(params: ComparePlayersInput, ctx=None) -> str:
    return asyncio.run(compare_nba_players(params, ctx or _StubContext()))


def test_tool_and_prompt_registered():
    assert "compare_nba_players" in mcp._tool_manager._tools
    assert "nba_player_comparison" in mcp._prompt_manager._prompts


def test_json_artifact():
    result = json.loads(_run(ComparePlayersInput(player1=_jokic(), player2=_embiid(), season="2023-24")))

    assert result["content_type"] == DASHBOARD_CONTENT_TYPE
    assert result["season"] == "2023-24"
    assert result["winner"]["name"] == "Joel Embiid"
    assert result["scores"] == {"player1": "59.6", "player2": "62.9"}
    assert len(result["radar"]) == 6
    assert len(result["head_to_head"]) == 6
    assert result["players"]["player1"]["gp"] == 79


def test_markdown_report():
    text = _run(ComparePlayersInput(
        player1=_jokic(),
        player2=_embiid(),
        response_format=ResponseFormat.MARKDOWN,
    ))

    assert text.startswith("## Fantasy Basketball Comparison")
    assert "| Points | 26.4 | **34.7** |" in text
    assert "| FG% | **58.3%** | 52.9% |" in text
    assert "| Turnovers | **3** | 3.4 |" in text
    assert "Categories won: Nikola Jokic 5 | Joel Embiid 4" in text
    assert "### 🏆 Joel Embiid wins!" in text
    assert "PTS×1 | REB×1.2 | AST×1.5 | STL×3 | BLK×3 | 3PM×1 | TOV×−1" in text


def test_markdown_tie():
    text = _run(ComparePlayersInput(
        player1=_jokic(),
        player2=_jokic(),
        response_format=ResponseFormat.MARKDOWN,
    ))
    assert "Dead even at 59.6" in text
    assert "wins!" not in text


def test_weight_overrides_flow_through():
    result = json.loads(_run(ComparePlayersInput(
        player1=_jokic(),
        player2=_embiid(),
        weights={"apg": 5.0},
    )))
    assert result["weights"]["apg"] == 5.0
    assert result["winner"]["name"] == "Nikola Jokic"


def test_missing_field_rejected_without_artifact():
    player2 = _embiid()
    del player2["bpg"]

    with pytest.raises(ValidationError) as excinfo:
        _run(ComparePlayersInput(player1=_jokic(), player2=player2))

    assert excinfo.value.record == "player2"
    assert excinfo.value.field == "bpg"


def test_non_finite_weight_reported_as_weights_issue():
    with pytest.raises(ValidationError) as excinfo:
        _run(ComparePlayersInput(player1=_jokic(), player2=_embiid(), weights={"ppg": float("nan")}))

    assert excinfo.value.record == "weights"
    assert excinfo.value.field == "ppg"


def test_overflowing_weights_rejected():
    with pytest.raises(ValidationError) as excinfo:
        _run(ComparePlayersInput(player1=_jokic(), player2=_embiid(), weights={"ppg": 1e308, "rpg": 1e308}))
    assert excinfo.value.record == "weights"


def test_scoring_weights_resource():
    data = json.loads(asyncio.run(scoring_weights_resource()))
    assert data["weights"]["tov"] == -1.0
    assert data["formula"].startswith("PTS×1")


def test_stat_categories_resource():
    data = json.loads(asyncio.run(stat_categories_resource()))
    by_stat = {c["stat"]: c for c in data["categories"]}
    assert len(by_stat) == 9
    assert by_stat["tov"]["better"] == "lower"
    assert by_stat["ppg"]["better"] == "higher"
    assert by_stat["fg_pct"]["charted"] is False
    assert "gp" in data["required_fields"]


def test_comparison_prompt():
    text = nba_player_comparison("Nikola Jokic", "Joel Embiid", "2023-24")
    assert "compare_nba_players" in text
    assert "Nikola Jokic" in text
    assert "2023-24" in text


def test_tool_schema_lists_player_fields():
    schema = mcp._tool_manager._tools["compare_nba_players"].parameters
    assert "ctx" not in schema["properties"]

    inputs = schema["$defs"]["ComparePlayersInput"]["properties"]
    for key in ("player1", "player2"):
        player = inputs[key]
        assert player["type"] == "object"
        assert player["required"] == list(REQUIRED_FIELDS)
        assert set(REQUIRED_FIELDS) <= set(player["properties"])
        assert "team" in player["properties"]
        assert player["properties"]["ppg"]["description"] == "Points per game"


def test_summary_sent_to_client():
    ctx = _StubContext()
    _run(ComparePlayersInput(player1=_jokic(), player2=_embiid(), season="2023-24"), ctx)
    assert ctx.messages == ["Compared Nikola Jokic (59.6) vs Joel Embiid (62.9) for 2023-24"]


def test_parser_defaults_to_stdio(monkeypatch):
    monkeypatch.delenv("PORT", raising=False)
    args = build_parser().parse_args([])
    assert args.transport == "stdio"
    assert args.port == 8000
    assert args.host == "0.0.0.0"


def test_parser_port_env_switches_to_http(monkeypatch):
    monkeypatch.setenv("PORT", "9100")
    args = build_parser().parse_args([])
    assert args.transport == "http"
    assert args.port == 9100

    args = build_parser().parse_args(["--transport", "stdio", "--port", "7000"])
    assert args.transport == "stdio"
    assert args.port == 7000
