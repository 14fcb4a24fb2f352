"""Civic features, temples and bonus landmarks."""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from burgscribe.data.cultures import pick_deity
from burgscribe.exceptions import BurgscribeError
from burgscribe.generators.base_generator import LoreGenerator
from burgscribe.generators.fallback_generators import fallback_civic_feature, fallback_feature
from burgscribe.generators.landmark_generator import LandmarkGenerator
from burgscribe.models.lore_schemas import Feature, Landmark, Leader, Settlement
from burgscribe.utils.enhanced_logging import log_event

# Labels without an emergency extraction profile.
FEATURE_CALLER = "feature"
CIVIC_FEATURE_CALLER = "civic_feature"


def civic_feature_context(key: str, settlement: Settlement, leader: Optional[Leader] = None) -> str:
    """Describe what the civic feature ``key`` is, for the prompt."""
    burg = settlement.burg
    ruler = f"{leader.title} {leader.name}" if leader else "leader"
    lowered = key.lower()
    if lowered == "citadel":
        if settlement.capital:
            return (
                f"grand citadel of {burg}, a fortified palace or administrative center serving as the seat "
                f"of power for the {settlement.state} and its {ruler}"
            )
        return f"castle of {burg}, a fortified stronghold or keep where the guards and the {ruler} live and work"
    if lowered == "walls":
        return f"walls surrounding {burg}, such as stone ramparts or wooden palisades used for defense or identity"
    if lowered == "port":
        return f"seaport district of {burg}, including docks, piers, and ship traffic along the waterfront"
    if lowered == "shanty town":
        return f"shanty-town on the outskirts of {burg}, composed of improvised shelters and working-class dwellings"
    if lowered == "plaza":
        return f"market plaza or central square of {burg}, used for festivals, markets, or public gatherings"
    return f"{lowered} of {burg}"


def _landmark_feature(landmark: Landmark) -> Feature:
    # Stray braces and quotes survive emergency extraction now and then.
    cleaned = landmark.description.replace("{", "").replace("}", "").rstrip().rstrip('"').strip()
    return Feature(name=landmark.name, description=cleaned or landmark.description)


class FeatureGenerator(LoreGenerator):
    """Describes a settlement's civic features and adds a few bonus landmarks."""

    async def _request_feature(self, prompt: str, caller: str) -> Feature:
        data = await self.request_json(prompt, caller)
        return self.validate(Feature, self.require_section(data, "feature"))

    async def generate_feature(self, settlement: Settlement, feature: str, religion: str = "") -> Feature:
        """Name and describe ``feature``; temples are dedicated to a deity of ``religion``."""
        namebase = self.culture(settlement).namebase
        if feature.lower() == "temple":
            deity = pick_deity(religion, self.rng)
            prompt = f"""
Describe a temple in the settlement of {settlement.burg}, dedicated to {deity.name}, deity of {deity.domain}.

Context:
- Naming Style: {namebase}
- Deity: {deity.name}
- Domain: {deity.domain}
- Tone: {deity.tone}

CRITICAL: Respond with ONLY valid JSON:
```json
{{
  "feature": {{
    "name": "[Temple Name]",
    "description": "[Description of the temple, its architecture, rituals, cultural role]"
  }}
}}
```

The description should reflect the {deity.tone} tone of the worship.
Avoid describing royalty or hero-worship. Clearly mention the deity's name in the description.
No additional text. English only.
Entropy Key: {self.entropy()}"""
        else:
            prompt = f"""
Describe and create a name for the {feature.lower()} in the town of {settlement.burg}.

Context:
- Settlement: {settlement.burg}
- Feature Type: {feature}
- Naming Style: {namebase}

CRITICAL: Respond with ONLY valid JSON:
```json
{{
  "feature": {{
    "name": "[Feature Name]",
    "description": "[2-3 immersive sentences about the feature]"
  }}
}}
```

Keep the tone grounded and non-epic. Do not include the feature type in the response.
No additional text. English only.
Entropy Key: {self.entropy()}"""

        try:
            return await self._request_feature(prompt, FEATURE_CALLER)
        except BurgscribeError as exc:
            self.using_fallback("Feature", settlement, exc, feature=feature)
            return fallback_feature(feature)

    async def generate_civic_feature(self, settlement: Settlement, key: str, key_description: str) -> Feature:
        prompt = f"""
Create a grounded civic feature related to the {key_description}.

Context:
- Settlement: {settlement.burg}
- Feature Type: {key}
- Description Context: {key_description}

CRITICAL: Respond with ONLY valid JSON:
```json
{{
  "feature": {{
    "name": "[Feature name, e.g. Castle {settlement.burg} or named for a famous family, adjective Port or wharf]",
    "description": "[One paragraph describing the location, sounds, smells, or unique cultural quirks associated with it]"
  }}
}}
```

Do not refer to nobles or kings. Include immersive details. Avoid generic medieval descriptions.
Do not add shops or taverns, just the feature itself.
No additional text. English only.
Entropy Key: {self.entropy()}"""

        try:
            return await self._request_feature(prompt, CIVIC_FEATURE_CALLER)
        except BurgscribeError as exc:
            self.using_fallback("Civic feature", settlement, exc, feature=key)
            return fallback_civic_feature(key, settlement)

    async def generate_feature_descriptions(
        self,
        settlement: Settlement,
        *,
        leader: Optional[Leader] = None,
        event_hints: Sequence[str] = (),
    ) -> List[Feature]:
        """Describe every civic feature the settlement has, then add bonus landmarks.

        Larger settlements get more landmarks: between one and the settlement's
        population modifier. Each landmark is steered by a random event hint and
        away from the names already used.
        """
        features: List[Feature] = []
        for key in settlement.civic_features:
            if key == "Temple":
                features.append(await self.generate_feature(settlement, key, settlement.religion))
            else:
                context = civic_feature_context(key, settlement, leader)
                features.append(await self.generate_civic_feature(settlement, key, context))

        bonus_count = int(self.rng.random() * settlement.pop_modifier) + 1
        log_event(
            self.logger,
            logging.INFO,
            "Generating bonus landmarks",
            burg=settlement.burg,
            count=bonus_count,
            civic_features=len(features),
        )
        landmarks = LandmarkGenerator(self.client, rng=self.rng, logger=self.logger)
        used_names: List[str] = []
        for _ in range(bonus_count):
            hint = self.rng.choice(event_hints) if event_hints else ""
            landmark = await landmarks.generate_landmark(settlement, hint, used_names)
            used_names.append(landmark.name)
            features.append(_landmark_feature(landmark))
        return features


__all__ = [
    "CIVIC_FEATURE_CALLER",
    "FEATURE_CALLER",
    "FeatureGenerator",
    "civic_feature_context",
]
