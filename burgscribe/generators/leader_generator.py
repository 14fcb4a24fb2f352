"""Settlement leader generation."""

from __future__ import annotations

from typing import Any

from burgscribe.exceptions import BurgscribeError
from burgscribe.generators.base_generator import LoreGenerator
from burgscribe.generators.fallback_generators import fallback_leader
from burgscribe.models.lore_schemas import Leader, Settlement
from burgscribe.utils.emergency_extraction import ContentKind


def _unwrap_leader(data: Any) -> Any:
    # The prompt asks for the bare object; emergency extraction and some
    # models wrap it under "leader".
    if isinstance(data, dict) and isinstance(data.get("leader"), dict):
        return data["leader"]
    return data


class LeaderGenerator(LoreGenerator):

    async def generate_leader(self, settlement: Settlement, city_size: str, city_age: str) -> Leader:
        culture = self.culture_fields(settlement)
        self.logger.info("Generating leader for %s (culture %s)", settlement.burg, settlement.culture or "unknown")
        prompt = f"""
Generate the current leader for the {city_age} {city_size} settlement of {settlement.burg}.

Naming Style: {culture['namebase']}
Cultural Context: {culture['summary']}
Species Demographics:
{culture['species']}

The leader should have a name and title appropriate to their species and the naming style.
Avoid royal or noble tropes. Choose a civic title like mayor, councilor, reeve, steward, or captain.

Respond with ONLY a JSON object in this exact format:
{{
  "name": "Full Name Here",
  "title": "Title Here",
  "description": "Short paragraph describing their leadership style and one memorable policy, scandal, or accomplishment. Make it immersive and guidebook-like."
}}

Do not include any other text, explanations, or formatting. Just the JSON object.
Entropy Key: {self.entropy()}"""

        try:
            data = await self.request_json(prompt, ContentKind.LEADER)
            leader = self.validate(Leader, _unwrap_leader(data))
        except BurgscribeError as exc:
            self.using_fallback("Leader", settlement, exc)
            return fallback_leader(settlement, self.rng)

        self.logger.info("Generated leader %s (%s)", leader.name, leader.title)
        return leader


__all__ = ["LeaderGenerator"]
