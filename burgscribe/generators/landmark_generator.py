"""Minor landmark generation."""

from __future__ import annotations

from typing import Iterable

from burgscribe.exceptions import BurgscribeError
from burgscribe.generators.base_generator import LoreGenerator
from burgscribe.generators.fallback_generators import fallback_landmark
from burgscribe.models.lore_schemas import Landmark, Settlement
from burgscribe.utils.emergency_extraction import ContentKind


class LandmarkGenerator(LoreGenerator):

    async def generate_landmark(
        self,
        settlement: Settlement,
        hint: str = "",
        previous_names: Iterable[str] = (),
    ) -> Landmark:
        """Generate one landmark, steering away from ``previous_names``."""
        previous = list(previous_names)
        context_lines = [
            f"- Culture Heritage: {self.culture(settlement).namebase}",
            f"- Settlement: {settlement.burg}",
        ]
        if hint:
            context_lines.append(f"- Historical Context: {hint}")
        exclude = f"Avoid these already used names: {', '.join(previous)}" if previous else ""
        context = "\n".join(context_lines)

        prompt = f"""
Create a minor landmark for {settlement.burg}.

Cultural Context:
{context}
{exclude}

CRITICAL: Respond with ONLY valid JSON:
```json
{{
  "landmark": {{
    "name": "[English name of landmark]",
    "description": "[Detailed immersive description of the landmark, its appearance, history, and significance]"
  }}
}}
```

Focus on grounded landmarks like wells, stones, gates, trees, or monuments.
Immersive details about the landmark's appearance, history, and significance. English only.
No additional text. Do not ask about additional details (e.g. Would you like me to:).
Entropy Key: {self.entropy()}"""

        try:
            data = await self.request_json(prompt, ContentKind.LANDMARK)
            return self.validate(Landmark, self.require_section(data, "landmark"))
        except BurgscribeError as exc:
            self.using_fallback("Landmark", settlement, exc)
            return fallback_landmark(settlement, self.rng)


__all__ = ["LandmarkGenerator"]
