"""FastMCP server exposing the mention resolver as MCP tools.

Tools:
  - rewrite_mentions(text, era)  — replace {{mentions}} with Wowhead links
  - resolve_entity(name, era)    — resolve one name (optionally "type:Name")

All tool calls share one process-wide resolver, replaced via set_resolver()
in tests.

Usage:
    uv run python -m wow_oracle.mcp_server
"""

from mcp.server.fastmcp import FastMCP

from wow_oracle.config import load_config
from wow_oracle.links import MentionResolver, parse_mention

mcp = FastMCP("wow-oracle-links")

_resolver: MentionResolver | None = None


def set_resolver(resolver: MentionResolver) -> None:
    """Replace the active resolver (used in tests)."""
    global _resolver
    _resolver = resolver


def get_resolver() -> MentionResolver:
    """Return the active resolver, building one from config on first use."""
    global _resolver
    if _resolver is None:
        _resolver = MentionResolver.from_config(load_config())
    return _resolver


@mcp.tool()
async def rewrite_mentions(text: str, era: str = "Classic") -> str:
    """Replace every {{mention}} in text with a markdown Wowhead link for the era."""
    return await get_resolver().rewrite_mentions(text, era)


@mcp.tool()
async def resolve_entity(name: str, era: str = "Classic") -> dict:
    """Resolve one entity name (e.g. "spell:Shadow Mastery") to a Wowhead URL."""
    parsed = parse_mention(name)
    if not parsed.clean_name:
        raise ValueError("name is required")
    url = await get_resolver().resolve(parsed, era)
    return {
        "name": parsed.clean_name,
        "type_hint": parsed.type_hint,
        "era": era,
        "url": url,
    }


if __name__ == "__main__":
    from dotenv import load_dotenv
    load_dotenv()
    mcp.run()
