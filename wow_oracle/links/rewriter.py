"""Substitute resolved links for every mention occurrence."""

from __future__ import annotations

from collections.abc import Callable, Mapping

from .mentions import parse_mention, scan_mentions


def apply_links(
    text: str,
    links: Mapping[str, str],
    fallback_url: Callable[[str], str],
) -> str:
    """Replace each {{mention}} with [clean_name](url).

    links maps a mention's raw inner text to its URL. Mentions missing from
    links get fallback_url(clean_name). Text outside mentions is untouched.
    """
    parts: list[str] = []
    pos = 0
    for mention in scan_mentions(text):
        parsed = parse_mention(mention.raw)
        url = links.get(mention.raw) or fallback_url(parsed.clean_name)
        parts.append(text[pos:mention.start])
        parts.append(f"[{parsed.clean_name}]({url})")
        pos = mention.end
    parts.append(text[pos:])
    return "".join(parts)
