"""Tavern and inn generation."""

from __future__ import annotations

import logging
import re
from typing import Iterable, List, Optional, Set

from burgscribe.exceptions import BurgscribeError, SchemaError
from burgscribe.generators.base_generator import LoreGenerator
from burgscribe.generators.fallback_generators import DEFAULT_TAVERN_STYLE, fallback_tavern
from burgscribe.models.lore_schemas import Settlement, Tavern
from burgscribe.synthesis.prompts import safe_prompt
from burgscribe.utils.emergency_extraction import ContentKind
from burgscribe.utils.enhanced_logging import log_event

_MARKDOWN_FIELDS = {
    "name": re.compile(r".*\*\*Tavern name:\*\*\s*"),
    "innkeeper": re.compile(r".*\*\*Innkeeper name:\*\*\s*"),
    "signature": re.compile(r".*\*\*Signature drink or tradition:\*\*\s*"),
}


def parse_markdown_tavern(text: str, style: Optional[str] = None) -> Tavern:
    """Read the ``- **Tavern name:** ...`` list format back into a :class:`Tavern`.

    The first plain line longer than 20 characters is taken as the description.
    """
    fields = {"signature": "Unknown", "description": "A tavern of uncertain character."}
    description_found = False
    for line in (raw.strip() for raw in text.splitlines()):
        if not line:
            continue
        for key, pattern in _MARKDOWN_FIELDS.items():
            if pattern.match(line):
                fields[key] = pattern.sub("", line, count=1).strip()
                break
        else:
            if "**" not in line and len(line) > 20 and not description_found:
                fields["description"] = line
                description_found = True
    if not fields.get("name"):
        raise SchemaError("Tavern markdown did not contain a tavern name")
    fields.setdefault("innkeeper", "Unknown")
    return LoreGenerator.validate(Tavern, {"type": style, **fields})


class TavernGenerator(LoreGenerator):
    """Generates taverns in batches, falling back to one-at-a-time requests."""

    def _batch_prompt(self, settlement: Settlement, tavern_types: List[str]) -> str:
        culture = self.culture_fields(settlement)
        first_type = tavern_types[0] if tavern_types else "tavern"
        return f"""
Create {len(tavern_types)} different taverns/inns in the town of {settlement.burg}, located in the province of {settlement.province}.
Each tavern must have a distinct name, innkeeper, and description that fits the cultural and demographic tone.
NO DUPLICATE NAMES - each tavern must be completely unique.

Naming Style: {culture['namebase']}
Cultural Summary: {culture['summary']}
Species Demographics:
{culture['species']}

CRITICAL: Respond with ONLY valid JSON in this exact format:
```json
{{
  "taverns": [
    {{
      "type": "{first_type}",
      "name": "[Unique tavern name]",
      "innkeeper": "[Innkeeper name]",
      "signature": "[Signature drink or tradition]",
      "description": "[Atmospheric description in present tense]"
    }}
  ]
}}
```

Tavern types to generate: {', '.join(tavern_types)}

Generate exactly {len(tavern_types)} taverns. Avoid generic names like "The Prancing Pony" or "Red Dragon Inn."
Create unique, culturally appropriate names. Use present tense. Each tavern should feel distinct in atmosphere and clientele.
No additional text outside the JSON code block.

Entropy Key: {self.entropy()}
""".strip()

    def _complete_taverns(self, entries: List[object]) -> List[Tavern]:
        taverns: List[Tavern] = []
        for entry in entries:
            try:
                taverns.append(self.validate(Tavern, entry))
            except SchemaError as exc:
                log_event(self.logger, logging.WARNING, "Dropping incomplete tavern", tavern=repr(entry)[:200], error=str(exc))
        if not taverns:
            raise SchemaError("Batch reply held no complete tavern")
        return taverns

    async def generate_taverns_batch(self, settlement: Settlement, tavern_types: Iterable[str]) -> List[Tavern]:
        types = list(tavern_types)
        if not types:
            return []
        self.logger.info("Generating %d taverns for %s: %s", len(types), settlement.burg, ", ".join(types))

        try:
            data = await self.request_json(self._batch_prompt(settlement, types), ContentKind.TAVERNS_BATCH)
            return self._complete_taverns(self.require_list(data, "taverns"))
        except BurgscribeError as exc:
            self.using_fallback("Batch tavern", settlement, exc, types=", ".join(types))

        results: List[Tavern] = []
        used_names: Set[str] = set()
        for style in types:
            tavern = await self.generate_single_tavern(settlement, style, used_names)
            if tavern.name in used_names:
                log_event(self.logger, logging.WARNING, "Skipping duplicate tavern name", name=tavern.name)
                continue
            used_names.add(tavern.name)
            results.append(tavern)
        return results

    async def generate_single_tavern(
        self,
        settlement: Settlement,
        style: str,
        used_names: Iterable[str] = (),
    ) -> Tavern:
        """Ask for one tavern as a markdown list; never raises."""
        avoid = sorted(used_names)
        avoid_line = f"Avoid these already used names: {', '.join(avoid)}." if avoid else ""
        prompt = f"""
Create a tavern in the city of {settlement.burg}.
Style: {style} (e.g. noble, seedy dive, adventurer hub, dock-side).
Naming Style: {self.culture(settlement).namebase}
{avoid_line}

Format as a single-spaced markdown list:
- **Tavern name:** [Unique tavern name]
- **Innkeeper name:** [Innkeeper name]
- **Signature drink or tradition:** [Signature drink or tradition]

[2-3 sentence atmospheric description using present tense. No royal references.]

Make it immersive and unique.
""".strip()

        try:
            response = await self.client.generate_text(safe_prompt(prompt))
            return parse_markdown_tavern(response, style)
        except BurgscribeError as exc:
            self.using_fallback("Single tavern", settlement, exc, style=style)
            return fallback_tavern(settlement, style, self.rng)

    async def generate_tavern(self, settlement: Settlement, style: str = DEFAULT_TAVERN_STYLE) -> Tavern:
        culture = self.culture_fields(settlement)
        prompt = f"""
Create a tavern for {settlement.burg} with style: {style}

Cultural Context:
Naming Style: {culture['namebase']}
Cultural Summary: {culture['summary']}
Species Demographics:
{culture['species']}
Settlement: {settlement.burg}

CRITICAL: Respond with ONLY valid JSON:
```json
{{
  "tavern": {{
    "name": "[name of tavern or inn]",
    "innkeeper": "[Generated Name]",
    "signature": "[Description of dish or drink]",
    "description": "[Detailed immersive narrative description without quotes or special characters]"
  }}
}}
```

Use {culture['namebase']} owner naming convention. Keep all text simple and avoid quotation marks in descriptions. No additional text. English only.
Entropy Key: {self.entropy()}"""

        try:
            data = await self.request_json(prompt, ContentKind.TAVERN)
            section = self.require_section(data, "tavern")
            if isinstance(section, dict):
                section = {"type": style, **section}
            return self.validate(Tavern, section)
        except BurgscribeError as exc:
            self.using_fallback("Tavern", settlement, exc, style=style)
            return fallback_tavern(settlement, style, self.rng)


__all__ = ["TavernGenerator", "parse_markdown_tavern"]
