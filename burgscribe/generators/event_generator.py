"""Historical, random and founding events for a settlement."""

from __future__ import annotations

from typing import List, Optional

from burgscribe.exceptions import BurgscribeError
from burgscribe.generators.base_generator import LoreGenerator
from burgscribe.generators.fallback_generators import fallback_events
from burgscribe.models.lore_schemas import FoundingEvent, HistoricalEvent, RandomEvent, Settlement
from burgscribe.utils.emergency_extraction import ContentKind

# Labels without an emergency extraction profile.
RANDOM_EVENT_CALLER = "random_event"
FOUNDING_EVENT_CALLER = "founding_event"

FORGOTTEN_EVENT = "A forgotten event occurred, but no records survive."


class EventGenerator(LoreGenerator):

    async def generate_events(
        self,
        settlement: Settlement,
        count: int = 8,
        founding_year: Optional[int] = None,
    ) -> List[HistoricalEvent]:
        """Generate ``count`` dated events between founding and the current year."""
        current_year = self.current_year
        if founding_year is None:
            founding_year = current_year - 500
        namebase = self.culture(settlement).namebase

        prompt = f"""
Generate {count} historical events for {settlement.burg}.

Context:
- Settlement: {settlement.burg}
- Province: {settlement.province}
- Founded: {founding_year} MR
- Current Year: {current_year} MR
- Cultural Style: {namebase}

CRITICAL: Respond with ONLY valid JSON:
```json
{{
  "events": [
    {{
      "year": {founding_year},
      "description": "{settlement.burg} was founded by {settlement.culture or 'local'} settlers seeking fertile farmland along the river."
    }},
    {{
      "year": {founding_year + 50},
      "description": "The Great Bridge was completed, connecting the eastern and western districts."
    }}
  ]
}}
```

Generate {count} events spread between {founding_year} and {current_year} MR.
Include founding as first event. Focus on civic/cultural events.
Use {namebase} cultural context.

IMPORTANT: Year values must be numbers only, do NOT include "MR" in the JSON.
No additional text. English only.
Entropy Key: {self.entropy()}"""

        try:
            data = await self.request_json(prompt, ContentKind.EVENTS)
            return [self.validate(HistoricalEvent, entry) for entry in self.require_list(data, "events")]
        except BurgscribeError as exc:
            self.using_fallback("Events", settlement, exc, count=count)
            return fallback_events(settlement, count, founding_year, current_year=current_year, rng=self.rng)

    async def generate_random_event(self, settlement: Settlement) -> RandomEvent:
        culture = self.culture_fields(settlement)
        prompt = f"""
Create a short historical event that occurred in the settlement of {settlement.burg}, located in the province of {settlement.province}.

Naming Style: {culture['namebase']}
Cultural Summary: {culture['summary']}
Species Demographics:
{culture['species']}

The event should be mundane, civic, or cultural. No prophecy, world-ending disasters, or legendary heroes.
Examples: a festival founding, a natural disaster, a dispute, a guild scandal, a building collapse, a settlement change.

CRITICAL: Respond with ONLY valid JSON:
```json
{{
  "event": {{
    "description": "A one-sentence description of the event. Do NOT include a date.",
    "type": "cultural|civic|economic|natural|social|conflict",
    "impact": "minor|moderate|significant",
    "involves_people": false,
    "involves_building": false,
    "involves_trade": false
  }}
}}
```

No additional text. English only.
Entropy Key: {self.entropy()}"""

        try:
            data = await self.request_json(prompt, RANDOM_EVENT_CALLER)
            return self.validate(RandomEvent, self.require_section(data, "event"))
        except BurgscribeError as exc:
            self.using_fallback("Random event", settlement, exc)
            return RandomEvent(description=FORGOTTEN_EVENT)

    async def generate_founding_event(self, settlement: Settlement) -> FoundingEvent:
        culture = self.culture_fields(settlement)
        prompt = f"""
Create a founding event for the settlement of {settlement.burg}, located in the province of {settlement.province}.

Naming Style: {culture['namebase']}
Cultural Summary: {culture['summary']}
Species Demographics:
{culture['species']}

The founding should be appropriate to the settlement's culture and location. Consider reasons like:
- Strategic location (crossroads, river ford, mountain pass)
- Resource discovery (mines, fertile land, fresh water)
- Refuge or safety (fleeing conflict, natural disaster)
- Trade opportunity (port, caravan route)
- Religious significance (shrine, pilgrimage site)

CRITICAL: Respond with ONLY valid JSON:
```json
{{
  "founding": {{
    "description": "A one-sentence description of the founding. Do NOT include a date.",
    "reason": "strategic|resource|refuge|trade|religious|other",
    "founders": "Description of who founded it"
  }}
}}
```

Keep it grounded and realistic. Avoid legendary heroes or epic prophecies.
No additional text. English only.
Entropy Key: {self.entropy()}"""

        try:
            data = await self.request_json(prompt, FOUNDING_EVENT_CALLER)
            return self.validate(FoundingEvent, self.require_section(data, "founding"))
        except BurgscribeError as exc:
            self.using_fallback("Founding event", settlement, exc)
            return FoundingEvent(
                description=f"{settlement.burg} was founded by early settlers seeking opportunity in the region.",
            )


__all__ = ["EventGenerator", "FORGOTTEN_EVENT"]
