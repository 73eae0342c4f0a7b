"""Oracle chat turn, starter suggestions and fact-checking.

Chat turn:
  1. Render ORACLE_PROMPT with era, history and the user message.
  2. Call the LLM (stage "oracle").
  3. Split the trailing ---SUGGESTIONS--- block into follow-up questions.
  4. Rewrite {{mentions}} in the answer into era-scoped Wowhead links.

Result format: {"message": "...", "followups": ["...", ...]}
"""

import json
import logging
import re
from typing import Any

from wow_oracle.links import MentionResolver
from wow_oracle.llm import LLM
from wow_oracle.prompts import (
    ORACLE_PROMPT,
    SUGGESTIONS_PROMPT,
    VERIFY_PROMPT,
    build_chat_context,
    render_prompt,
)

logger = logging.getLogger(__name__)

SILENT_ORACLE = "The Oracle is silent."
UNVERIFIED = "Could not verify."
MAX_FOLLOWUPS = 3
SUGGESTION_COUNT = 4

FALLBACK_SUGGESTIONS = [
    "Best gold farming spot?",
    "Explain the lore",
    "Best leveling route?",
    "BiS trinkets guide",
]

# Models drift on the delimiter ("--- SUGGESTIONS ---", "---SUGGESTIONS--- -")
_SUGGESTIONS_SPLIT = re.compile(r"\n?\s*-{2,}\s*SUGGESTIONS\s*-[-\s]*", re.IGNORECASE)


def _parse_json_list(text: str) -> list[str] | None:
    """Parse a JSON array of strings from LLM output, stripping markdown fences."""
    cleaned = text.strip()
    if cleaned.startswith("```"):
        lines = cleaned.split("\n")
        lines = [l for l in lines[1:] if not l.strip().startswith("```")]
        cleaned = "\n".join(lines).strip()
    start, end = cleaned.find("["), cleaned.rfind("]")
    if start == -1 or end < start:
        return None
    try:
        data = json.loads(cleaned[start:end + 1])
    except json.JSONDecodeError as e:
        logger.warning(f"Suggestion output is not valid JSON: {e}")
        return None
    if not isinstance(data, list):
        return None
    items = [s.strip() for s in data if isinstance(s, str) and s.strip()]
    return items or None


def split_followups(text: str) -> tuple[str, list[str]]:
    """Split an oracle answer into (body, follow-up questions)."""
    parts = _SUGGESTIONS_SPLIT.split(text, maxsplit=1)
    if len(parts) == 1:
        return text.strip(), []
    body, tail = parts
    followups = _parse_json_list(tail) or []
    return body.strip(), followups[:MAX_FOLLOWUPS]


async def run_chat(
    message: str,
    era: str,
    history: list[dict[str, str]],
    llm: LLM,
    resolver: MentionResolver,
) -> dict[str, Any]:
    """Answer one user message. LLMError and PromptError propagate to the caller."""
    prompt = render_prompt(ORACLE_PROMPT, build_chat_context(era, message, history))
    raw = await llm("oracle", prompt)

    body, followups = split_followups(raw)
    if not body:
        return {"message": SILENT_ORACLE, "followups": followups}

    linked = await resolver.rewrite_mentions(body, era)
    return {"message": linked, "followups": followups}


async def suggest_questions(era: str, llm: LLM) -> list[str]:
    """Starter questions for an era. Falls back to a fixed list on any failure."""
    prompt = render_prompt(SUGGESTIONS_PROMPT, {"era": era, "count": SUGGESTION_COUNT})
    try:
        raw = await llm("suggestions", prompt)
    except Exception as e:
        logger.warning("suggestion generation failed: %s", e)
        return list(FALLBACK_SUGGESTIONS)
    suggestions = _parse_json_list(raw)
    if not suggestions:
        return list(FALLBACK_SUGGESTIONS)
    return suggestions[:SUGGESTION_COUNT]


async def verify_message(message: str, era: str, llm: LLM) -> str:
    """Fact-check an earlier answer. LLMError propagates to the caller."""
    prompt = render_prompt(VERIFY_PROMPT, {"era": era, "message": message})
    verdict = await llm("verify", prompt)
    return verdict.strip() or UNVERIFIED
