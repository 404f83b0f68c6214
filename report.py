"""
Output formatting for comparison dashboards.

The tool can answer in two shapes:
  - JSON: the dashboard artifact a renderer turns into charts
  - Markdown: the same sections as the visual dashboard, as text
"""

import json
from typing import List

from models import Dashboard, StatRecord, FantasyScore, Outcome

# Short stat names for the weight legend in the winner banner
WEIGHT_LABELS = {
    "ppg": "PTS",
    "rpg": "REB",
    "apg": "AST",
    "spg": "STL",
    "bpg": "BLK",
    "three_pm": "3PM",
    "tov": "TOV",
}


def format_json(dashboard: Dashboard) -> str:
    return json.dumps(dashboard.to_artifact(), indent=2)


def format_weight_legend(weights: dict) -> str:
    """Render weights like 'PTS×1 | REB×1.2 | ... | TOV×−1'."""
    parts = []
    for stat, weight in weights.items():
        text = f"{weight:g}".replace("-", "−")
        parts.append(f"{WEIGHT_LABELS.get(stat, stat.upper())}×{text}")
    return " | ".join(parts)


def _player_card(player: StatRecord, score: FantasyScore) -> List[str]:
    return [
        f"### {player.name}",
        f"{player.team or '—'} · {player.position or '—'} · {player.gp} games played",
        f"**Fantasy Score:** {score.formatted}",
        "",
    ]


def _mark(value: float, suffix: str, won: bool) -> str:
    text = f"{value:g}{suffix}"
    return f"**{text}**" if won else text


def format_markdown(dashboard: Dashboard) -> str:
    """Readable version of the dashboard: cards, breakdown and verdict."""
    p1, p2 = dashboard.player1, dashboard.player2

    lines = [
        "## Fantasy Basketball Comparison",
        f"*{dashboard.season} Season Stats*",
        "",
    ]
    lines.extend(_player_card(p1, dashboard.score1))
    lines.extend(_player_card(p2, dashboard.score2))

    lines.extend([
        "### Detailed Breakdown",
        f"| Stat | {p1.name} | {p2.name} |",
        "|---|---:|---:|",
    ])
    for result in dashboard.categories:
        lines.append(
            f"| {result.label} "
            f"| {_mark(result.first, result.suffix, result.winner == Outcome.FIRST)} "
            f"| {_mark(result.second, result.suffix, result.winner == Outcome.SECOND)} |"
        )

    wins1 = sum(1 for r in dashboard.categories if r.winner == Outcome.FIRST)
    wins2 = sum(1 for r in dashboard.categories if r.winner == Outcome.SECOND)
    lines.extend([
        "",
        f"Categories won: {p1.name} {wins1} | {p2.name} {wins2}",
        "",
    ])

    if dashboard.winner == Outcome.TIE:
        lines.append(f"### 🤝 Dead even at {dashboard.score1.formatted}")
    else:
        lines.append(f"### 🏆 {dashboard.winner_name} wins!")
    lines.append(
        "Better overall fantasy value · weighted: "
        f"{format_weight_legend(dashboard.weights)}"
    )

    return "\n".join(lines)
