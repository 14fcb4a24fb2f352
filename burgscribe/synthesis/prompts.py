"""Prompt hardening shared by every lore generator."""

from __future__ import annotations

import random
import string
from typing import Dict, Optional

JSON_FORMATTING_RULES = """

CRITICAL FORMATTING RULES:
- Use only standard ASCII characters in JSON output
- Use straight quotes (") only, never smart quotes (“ ”)
- In descriptions, use apostrophes (') instead of quotes for dialogue
- Avoid special characters, unicode, or control characters
- Keep descriptions simple with basic punctuation only
- No quotation marks within string values
- No line breaks within string values - use spaces instead
- Example: "description": "A tavern where locals say its the best in town"

OUTPUT ONLY VALID JSON WITH NO ADDITIONAL TEXT OR COMMENTARY.
"""

PROSE_GUIDELINES = """

FORMATTING GUIDELINES:
- Use clear, descriptive language
- Keep responses focused and immersive
- Use present tense for descriptions
- Avoid overly complex or flowery language
- Make descriptions practical and grounded
"""


def json_safe_prompt(base_prompt: str) -> str:
    """Append the JSON formatting rules to a generator prompt."""
    return base_prompt + JSON_FORMATTING_RULES


def safe_prompt(base_prompt: str) -> str:
    """Append the prose guidelines used for free-text generation."""
    return base_prompt + PROSE_GUIDELINES


def entropy_key(rng: Optional[random.Random] = None) -> str:
    """Short random token appended to prompts so repeated calls diverge."""
    rng = rng or random
    return "".join(rng.choice(string.ascii_lowercase + string.digits) for _ in range(5))


def species_block(species: Dict[str, int]) -> str:
    return "\n".join(f"- {race}: {pct}%" for race, pct in species.items())


__all__ = ["entropy_key", "json_safe_prompt", "safe_prompt", "species_block"]
