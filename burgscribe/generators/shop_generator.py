"""Shop generation, grouped by shop type."""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List

from burgscribe.data.cultures import biome_shop_context
from burgscribe.exceptions import BurgscribeError, SchemaError
from burgscribe.generators.base_generator import LoreGenerator
from burgscribe.generators.fallback_generators import fallback_shop
from burgscribe.models.lore_schemas import Settlement, Shop
from burgscribe.utils.emergency_extraction import ContentKind
from burgscribe.utils.enhanced_logging import log_event

ShopsByType = Dict[str, List[Shop]]


class ShopGenerator(LoreGenerator):

    def _prompt(self, settlement: Settlement, shop_types: List[str]) -> str:
        culture = self.culture_fields(settlement)
        return f"""
Create {len(shop_types)} shops for the town of {settlement.burg} in {settlement.province}.

Cultural Context:
- Naming Style: {culture['namebase']}
- Cultural Summary: {culture['summary']}
- Species Demographics:
{culture['species']}

Environmental Context:
- Biome: {settlement.biome}
- Environmental Notes: {biome_shop_context(settlement.biome)}

Shop types to generate: {', '.join(shop_types)}

CRITICAL: Respond with ONLY valid JSON in this exact format:
```json
{{
  "shops": [
    {{
      "type": "[shop type]",
      "name": "[distinctive shop name]",
      "owner": "[Owner Name]",
      "description": "[Detailed paragraph describing the shop, its atmosphere, and how it adapts to the {settlement.biome} environment]"
    }}
  ]
}}
```

Generate exactly {len(shop_types)} shops. Use {culture['namebase']} heritage for owner naming. Do not reuse names.
Not every shop name should include the owner name. No additional text outside the JSON code block.
Entropy Key: {self.entropy()}"""

    def _group(self, entries: List[object]) -> ShopsByType:
        grouped: ShopsByType = {}
        for entry in entries:
            try:
                shop = self.validate(Shop, entry)
            except SchemaError as exc:
                log_event(self.logger, logging.WARNING, "Dropping incomplete shop", shop=repr(entry)[:200], error=str(exc))
                continue
            grouped.setdefault(shop.type, []).append(shop)
        return grouped

    async def generate_shops_batch(self, settlement: Settlement, shop_types: Iterable[str]) -> ShopsByType:
        """Return generated shops keyed by type.

        Entries missing any required field are dropped. If the request or the
        parse fails outright, one fallback shop per requested type is returned.
        """
        types = list(shop_types)
        if not types:
            return {}

        try:
            data = await self.request_json(self._prompt(settlement, types), ContentKind.SHOPS)
            return self._group(self.require_list(data, "shops"))
        except BurgscribeError as exc:
            self.using_fallback("Shop", settlement, exc, types=", ".join(types))

        grouped: ShopsByType = {}
        for shop_type in types:
            shop = fallback_shop(shop_type, settlement, self.rng)
            grouped.setdefault(shop.type, []).append(shop)
        return grouped


__all__ = ["ShopGenerator", "ShopsByType"]
