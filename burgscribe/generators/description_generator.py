"""Settlement and capital city descriptions."""

from __future__ import annotations

from typing import Optional

from burgscribe.data.cultures import biome_description
from burgscribe.exceptions import BurgscribeError
from burgscribe.generators.base_generator import LoreGenerator
from burgscribe.generators.fallback_generators import fallback_burg_description, fallback_capital_description
from burgscribe.models.lore_schemas import GeoClassification, Settlement, SettlementDescription, TownQuality

# Labels without an emergency extraction profile.
BURG_DESCRIPTION_CALLER = "burg_description"
CAPITAL_DESCRIPTION_CALLER = "capital_description"


def _rated(score: int, good: str, poor: str, middling: str) -> str:
    if score >= 4:
        return good
    if score <= 2:
        return poor
    return middling


def quality_narrative(quality: TownQuality) -> str:
    """One sentence per visitor rating, for steering the description's tone."""
    return " ".join(
        [
            _rated(
                quality.residents,
                "Residents are known for their warmth and helpfulness.",
                "Locals are often wary or unfriendly toward outsiders.",
                "The town has a mix of friendly and indifferent residents.",
            ),
            _rated(
                quality.services,
                "Most services and supplies are readily available.",
                "Finding specialized services or goods is difficult here.",
                "Basic services exist, but advanced facilities are limited.",
            ),
            _rated(
                quality.comfort,
                "Visitors enjoy clean inns, good food, and a cozy atmosphere.",
                "Travelers struggle to find decent food or shelter.",
                "Accommodations are functional, if modest.",
            ),
        ]
    )


def port_context(settlement: Settlement) -> str:
    return "The city is a seaport." if settlement.port else ""


class DescriptionGenerator(LoreGenerator):
    """Writes the opening paragraph for a settlement or a capital city."""

    def _context(self, settlement: Settlement, geo: GeoClassification) -> str:
        culture = self.culture_fields(settlement)
        return f"""Context:
- Naming Style: {culture['namebase']}
- Cultural Context: {culture['summary']}
- Geographic Setting: {geo.primary_geography}
- Climate: {geo.primary_climate}
- Biome: {geo.primary_biome}
- Population: {settlement.population:,}
- Environmental Setting: {biome_description(geo.primary_biome)}
{port_context(settlement)}"""

    async def _describe(self, prompt: str, caller: str) -> str:
        data = await self.request_json(prompt, caller)
        return self.validate(SettlementDescription, self.require_section(data, "description")).text

    async def generate_burg_description(
        self,
        settlement: Settlement,
        geo: Optional[GeoClassification] = None,
        quality: Optional[TownQuality] = None,
    ) -> str:
        geo = geo or GeoClassification.for_settlement(settlement)
        quality = quality or TownQuality()
        biome = geo.primary_biome
        prompt = f"""
Generate a detailed description of {settlement.burg}.

{self._context(settlement, geo)}
{quality_narrative(quality)}

CRITICAL: Respond with ONLY valid JSON:
```json
{{
  "description": {{
    "text": "[Detailed immersive paragraph description of the settlement that reflects its {biome} biome setting]"
  }}
}}
```

Create an immersive paragraph using present tense. Describe how the settlement fits into and adapts to its {biome} environment. Include sensory details appropriate to this biome (sounds, smells, visual elements). Do not offer to expand on the description.
No additional text. English only.
Entropy Key: {self.entropy()}"""

        try:
            text = await self._describe(prompt, BURG_DESCRIPTION_CALLER)
        except BurgscribeError as exc:
            self.using_fallback("Burg description", settlement, exc, biome=biome)
            return fallback_burg_description(settlement, geo)
        self.logger.info("Generated %s burg description for %s", biome, settlement.burg)
        return text

    async def generate_capital_description(
        self,
        settlement: Settlement,
        geo: Optional[GeoClassification] = None,
    ) -> str:
        geo = geo or GeoClassification.for_settlement(settlement)
        biome = geo.primary_biome
        prompt = f"""
Generate a detailed description of {settlement.burg}, capital city of {settlement.state}.

{self._context(settlement, geo)}

CRITICAL: Respond with ONLY valid JSON:
```json
{{
  "description": {{
    "text": "[Detailed immersive paragraph description of the capital city that reflects its {biome} biome setting and political importance]"
  }}
}}
```

Create a grounded immersive paragraph using present tense. Describe how this capital city dominates and adapts to its {biome} environment. Include architectural and urban elements that reflect both the biome and its status as a seat of power. Do not list languages or offer to expand on the description.
No additional text. English only.
Entropy Key: {self.entropy()}"""

        try:
            text = await self._describe(prompt, CAPITAL_DESCRIPTION_CALLER)
        except BurgscribeError as exc:
            self.using_fallback("Capital description", settlement, exc, biome=biome)
            return fallback_capital_description(settlement, geo)
        self.logger.info("Generated %s capital description for %s", biome, settlement.burg)
        return text

    async def generate_description(
        self,
        settlement: Settlement,
        geo: Optional[GeoClassification] = None,
        quality: Optional[TownQuality] = None,
    ) -> str:
        """Capital description for capitals, burg description otherwise."""
        if settlement.capital:
            return await self.generate_capital_description(settlement, geo)
        return await self.generate_burg_description(settlement, geo, quality)


__all__ = [
    "BURG_DESCRIPTION_CALLER",
    "CAPITAL_DESCRIPTION_CALLER",
    "DescriptionGenerator",
    "port_context",
    "quality_narrative",
]
