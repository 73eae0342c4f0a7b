"""Handlebars prompt templates for the oracle, fact-checker and suggestions.

Mention syntax examples contain literal "{{", so they are passed in as
context values (mention_examples) and rendered with triple-stash instead of
being written into the templates.
"""

from collections.abc import Callable
from typing import Any

import pybars

from wow_oracle.links.mentions import CLOSE, OPEN

_compiler = pybars.Compiler()
_cache: dict[str, Callable] = {}

SUGGESTIONS_DELIMITER = "---SUGGESTIONS---"


class PromptError(Exception):
    """Raised when a Handlebars template fails to compile or render."""


def render_prompt(template_str: str, context: dict[str, Any]) -> str:
    """Compile and render a Handlebars template with the given context.

    Templates are cached by source string to avoid recompilation.
    """
    try:
        compiled = _cache.get(template_str)
        if compiled is None:
            compiled = _compiler.compile(template_str)
            _cache[template_str] = compiled
        return str(compiled(context))
    except Exception as e:
        raise PromptError(f"Template error: {e}") from e


# ── Templates ────────────────────────────────────────────


ORACLE_PROMPT = """You are a kind and helpful World of Warcraft expert assistant. You know every version of the game: Anniversary realms, Classic (Vanilla), The Burning Crusade (TBC), Wrath of the Lich King (WotLK) and Retail.

Your personality:
- Speak with a friendly tone.
- Be helpful but concise. No fluff, no greetings. Answer the question directly.
- Use WoW terminology naturally, but explain it when a beginner would need it.
- Mention specific items, quests, dungeons, raids or strategies when relevant.
- Focus on the content of the current era.

IMPORTANT - Game database mentions:
Whenever you name an item, spell, quest, NPC, object or achievement, wrap its exact in-game name in double braces. Add a type prefix when the name could mean more than one thing:
{{#each mention_examples}}
- {{{this}}}
{{/each}}
Do NOT write URLs or IDs yourself. Links are added automatically for the current era.

CRITICAL - Item categorization:
Before listing ANY item under a gear slot, check that the item really belongs to that slot. It is better to list a slightly weaker item in the CORRECT slot than a best-in-slot item in the WRONG slot.

If you don't know something specific, say so instead of making it up.

At the very end of your response, provide 3 short follow-up questions the user could ask next, as a JSON array after the line "{{delimiter}}".
Example:
[Your answer...]
{{delimiter}}
["Where can I farm that?", "What stats should I prioritize?", "Show me the talent build"]

[Current Era: {{era}}]
{{#if history}}

Conversation so far:
{{#each history}}
{{speaker}}: {{{text}}}
{{/each}}
{{/if}}

User Question: {{{message}}}
"""

VERIFY_PROMPT = """You are a World of Warcraft fact-checker.
Your ONLY job is to verify the accuracy of the provided game information, checking for:
1. Item slot mismatches (critical): is any item listed under the wrong equipment slot?
2. Era accuracy: is the item, quest or spell actually available in the given era?
3. Hallucinations: does the item or mechanic actually exist?

If there are errors, point them out clearly and concisely.
If the information is accurate, say "Verified: Information appears accurate."

Format your response as:
- **Status**: [ACCURATE / CONTAINS ERRORS]
- **Correction**: [If errors were found, explain them here.]

[Context Era: {{era}}]

Text to Verify:
{{{message}}}
"""

SUGGESTIONS_PROMPT = """Generate {{count}} short, diverse and interesting questions a user might ask a World of Warcraft expert specifically about the "{{era}}" era.
Cover content relevant to this era (lore, gear, raids, gold farming, PvP).
Keep each one under 10 words.
Return ONLY a raw JSON array of strings, e.g. ["Question 1", "Question 2"]
"""


MENTION_EXAMPLES = [
    f"{OPEN}Thunderfury, Blessed Blade of the Windseeker{CLOSE}",
    f"{OPEN}item:Onyxia Hide Backpack{CLOSE}",
    f"{OPEN}spell:Shadow Mastery{CLOSE}",
    f"{OPEN}quest:The Scepter of the Shifting Sands{CLOSE}",
    f"{OPEN}npc:Thrall{CLOSE}",
]


def build_chat_context(
    era: str,
    message: str,
    history: list[dict[str, str]] | None = None,
) -> dict[str, Any]:
    """Assemble template variables for ORACLE_PROMPT.

    history entries are {"role": "user"|"assistant", "content": ...}.
    """
    turns = []
    for msg in history or []:
        turns.append({
            "speaker": "User" if msg.get("role") == "user" else "Oracle",
            "text": msg.get("content", ""),
        })
    return {
        "era": era,
        "message": message,
        "history": turns,
        "mention_examples": MENTION_EXAMPLES,
        "delimiter": SUGGESTIONS_DELIMITER,
    }
