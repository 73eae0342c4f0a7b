"""Mention tokenizer: delimiter scan, then type-prefix parse.

Stage 1 (scan_mentions) finds {{...}} spans in LLM output. Stage 2
(parse_mention) splits an optional type hint from the display name:

  {{Thrall}}                  → clean_name="Thrall", type_hint=None
  {{spell:Shadow Mastery}}    → clean_name="Shadow Mastery", type_hint="spell"
  {{Thrall: Son of Durotan}}  → clean_name="Thrall: Son of Durotan", type_hint=None

Malformed input stays literal text: an unterminated "{{", an empty mention,
and a mention broken by a newline are never yielded.
"""

from __future__ import annotations

from collections.abc import Iterator

from pydantic import BaseModel, ConfigDict

OPEN = "{{"
CLOSE = "}}"

TYPE_TOKENS = ("item", "spell", "quest", "npc", "object", "achievement")


class Mention(BaseModel):
    """One delimited span in the source text."""

    model_config = ConfigDict(frozen=True)

    raw: str    # inner text, type prefix included
    start: int  # offset of the opening delimiter
    end: int    # offset just past the closing delimiter
    index: int  # occurrence index within the scan


class ParsedMention(BaseModel):
    model_config = ConfigDict(frozen=True)

    clean_name: str
    type_hint: str | None = None


def scan_mentions(text: str) -> Iterator[Mention]:
    """Yield mentions left to right, non-overlapping, non-greedy.

    The first CLOSE after an OPEN ends the mention; nested delimiters are not
    balanced. Each call starts a fresh scan.
    """
    pos = 0
    index = 0
    while True:
        start = text.find(OPEN, pos)
        if start == -1:
            return
        inner_start = start + len(OPEN)
        close = text.find(CLOSE, inner_start)
        if close == -1:
            return  # unterminated: rest of the text is literal
        raw = text[inner_start:close]
        if "\n" in raw:
            # Resume just after this OPEN; a later OPEN on the next line may
            # still start a valid mention.
            pos = inner_start
            continue
        if not raw.strip():
            pos = close + len(CLOSE)
            continue
        end = close + len(CLOSE)
        yield Mention(raw=raw, start=start, end=end, index=index)
        index += 1
        pos = end


def parse_mention(raw: str) -> ParsedMention:
    """Split a mention's inner text into (clean_name, type_hint).

    Only an exact, case-insensitive match of the text before the first colon
    against TYPE_TOKENS counts as a hint.
    """
    text = raw.strip()
    prefix, sep, rest = text.partition(":")
    if sep and prefix.lower() in TYPE_TOKENS:
        name = rest.strip()
        if name:
            return ParsedMention(clean_name=name, type_hint=prefix.lower())
    return ParsedMention(clean_name=text)
