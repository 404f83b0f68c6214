#!/usr/bin/env python3
"""
NBA Player Compare MCP Server — nba_player_compare

Exposes a fantasy basketball head-to-head comparison to any MCP-compatible
client (Claude Desktop, Dify, a custom agent).

=== WHAT THE SERVER OFFERS ===

1. TOOL: compare_nba_players
   Takes per-game stats for two players and returns dashboard data:
   fantasy scores, category winners, radar and bar chart series and the
   overall winner. The agent supplies the stats (from a web lookup or the
   user); this server never fetches them itself.

2. RESOURCES
   scoring://weights   the fantasy formula and its default weights
   stats://categories  the compared stats, their labels and polarity

3. PROMPT: nba_player_comparison
   A recipe telling the agent to gather both stat lines, then call the tool.

Every call is computed from scratch: no database, no cache, no shared
state, so there is no lifespan setup.

=== RUNNING THE SERVER ===

Local (STDIO transport, e.g. claude_desktop_config.json):
    python server.py

Network (Streamable HTTP transport):
    python server.py --transport http --port 8000
"""

import os
import json
import logging
import argparse

from mcp.server.fastmcp import FastMCP, Context
from mcp.server.fastmcp.server import TransportSecuritySettings

from models import ComparePlayersInput, ResponseFormat, ValidationError
from scoring import (
    compare, DEFAULT_SEASON, DEFAULT_WEIGHTS, CATEGORIES, CHART_STATS,
    LOWER_IS_BETTER, REQUIRED_FIELDS,
)
from report import format_json, format_markdown, format_weight_legend

# ─────────────────────────────────────────────────────────────
# Configuration
# ─────────────────────────────────────────────────────────────

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s [%(name)s] %(levelname)s: %(message)s"
)
logger = logging.getLogger("nba_player_compare")


# ─────────────────────────────────────────────────────────────
# Server Initialization
# ─────────────────────────────────────────────────────────────

mcp = FastMCP(
    "nba_player_compare",
    json_response=True,
    # Proxies (ngrok, Railway, Render) forward requests with a different Host header
    transport_security=TransportSecuritySettings(
        enable_dns_rebinding_protection=False
    )
)


# ═════════════════════════════════════════════════════════════
# TOOLS
# ═════════════════════════════════════════════════════════════


@mcp.tool(
    name="compare_nba_players",
    annotations={
        "title": "Compare Two NBA Players (Fantasy)",
        "readOnlyHint": True,
        "destructiveHint": False,
        "idempotentHint": True,
        "openWorldHint": False
    }
)
async def compare_nba_players(params: ComparePlayersInput, ctx: Context) -> str:
    """Generate a fantasy basketball comparison dashboard for two NBA players.

    Accepts per-game stats for two players and returns the data for a
    side-by-side dashboard: radar chart, per-game bar chart, stat breakdown
    with category winners, fantasy scores and a winner declaration.

    Fantasy score = PTS×1 + REB×1.2 + AST×1.5 + STL×3 + BLK×3 + 3PM×1 − TOV×1.
    The overall winner is decided by fantasy score, not by categories won.

    Args:
        params (ComparePlayersInput): Validated input containing:
            - player1 (dict): name, ppg, rpg, apg, spg, bpg, fg_pct, ft_pct,
              three_pm, tov, gp (team, position optional)
            - player2 (dict): same fields as player1
            - season (Optional[str]): Season label, e.g. '2024-25'
            - weights (Optional[dict]): Per-stat weight overrides
            - response_format: 'json' (dashboard artifact) or 'markdown'

    Returns:
        str: Dashboard artifact JSON or a markdown report.

    Raises:
        ValidationError: a record is missing a stat or carries a bad value.
            The message names the record (player1/player2) and the field.
    """
    try:
        dashboard = compare(
            params.player1,
            params.player2,
            season=params.season,
            weights=params.weights,
        )
    except ValidationError as e:
        logger.warning(f"Rejected comparison: {e}")
        raise

    summary = (
        f"Compared {dashboard.player1.name} ({dashboard.score1.formatted}) vs "
        f"{dashboard.player2.name} ({dashboard.score2.formatted}) for {dashboard.season}"
    )
    logger.info(summary)
    await ctx.info(summary)

    if params.response_format == ResponseFormat.MARKDOWN:
        return format_markdown(dashboard)
    return format_json(dashboard)


# ═════════════════════════════════════════════════════════════
# MCP RESOURCES
# ═════════════════════════════════════════════════════════════


@mcp.resource("scoring://weights")
async def scoring_weights_resource() -> str:
    """Default fantasy scoring weights and the formula they form."""
    return json.dumps({
        "weights": DEFAULT_WEIGHTS,
        "formula": format_weight_legend(DEFAULT_WEIGHTS),
        "default_season": DEFAULT_SEASON,
    }, indent=2)


@mcp.resource("stats://categories")
async def stat_categories_resource() -> str:
    """List the compared stats, their labels and which direction wins."""
    return json.dumps({
        "required_fields": list(REQUIRED_FIELDS),
        "categories": [
            {
                "stat": stat,
                "label": label,
                "better": "lower" if stat in LOWER_IS_BETTER else "higher",
                "charted": stat in CHART_STATS,
            }
            for stat, (label, _) in CATEGORIES.items()
        ],
    }, indent=2)


# ═════════════════════════════════════════════════════════════
# MCP PROMPTS
# ═════════════════════════════════════════════════════════════


@mcp.prompt()
def nba_player_comparison(player_a: str, player_b: str, season: str = DEFAULT_SEASON) -> str:
    """Generate a structured fantasy basketball comparison prompt."""
    return f"""You are a fantasy basketball analyst. Compare these two players
for the {season} season:

**PLAYER 1:** {player_a}
**PLAYER 2:** {player_b}

1. Look up each player's {season} per-game averages: points, rebounds,
   assists, steals, blocks, FG%, FT%, three-pointers made, turnovers and
   games played (plus team and position if available).
2. Call compare_nba_players with both stat lines and season "{season}".
3. Present the returned dashboard to the user.

Then summarize:
- Who wins on fantasy score, and by how much
- Which categories each player wins
- Any caveats (games played, injuries, small samples)"""


# ═════════════════════════════════════════════════════════════
# SERVER ENTRY POINT
# ═════════════════════════════════════════════════════════════

def build_parser() -> argparse.ArgumentParser:
    """Command-line options; PORT in the environment implies HTTP (Railway/Render)."""
    parser = argparse.ArgumentParser(description="NBA Player Compare MCP Server")
    port = os.getenv("PORT")

    parser.add_argument(
        "--transport",
        choices=["stdio", "http"],
        default="http" if port else "stdio",
        help="Transport method: 'stdio' for local use, 'http' for network access"
    )
    parser.add_argument(
        "--port",
        type=int,
        default=int(port or "8000"),
        help="Port for HTTP transport (default: 8000, or PORT env var)"
    )
    parser.add_argument(
        "--host",
        default="0.0.0.0",
        help="Host for HTTP transport (default: 0.0.0.0)"
    )
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)

    if args.transport == "stdio":
        logger.info("Starting with STDIO transport")
        mcp.run(transport="stdio")
        return

    logger.info(f"Starting with Streamable HTTP transport on {args.host}:{args.port}")
    # FastMCP takes host and port from its settings, not from run()
    mcp.settings.host = args.host
    mcp.settings.port = args.port
    mcp.run(transport="streamable-http")


if __name__ == "__main__":
    main()
