"""Deterministic-with-a-seed content used when the model cannot deliver.

Every helper takes an optional ``random.Random`` so tests can pin the output.
"""

from __future__ import annotations

import random
from typing import List, Optional

from burgscribe.data.cultures import culture_profile, name_pattern
from burgscribe.models.lore_schemas import (
    Feature,
    GeoClassification,
    HistoricalEvent,
    Landmark,
    Leader,
    Settlement,
    Shop,
    Tavern,
)
from burgscribe.utils.settings import get_settings

DEFAULT_TAVERN_STYLE = "adventurer-hub"

TAVERN_STYLE_NAMES = {
    "noble": ["Golden Crown", "Royal Rest", "Noble House", "Gilded Chalice", "Merchant Lodge"],
    "seedy": ["Broken Mug", "Dark Corner", "Rusty Nail", "Cutthroat Inn", "Shadow Den"],
    "dock-side": ["Anchor Inn", "Sailors Rest", "Harbor Light", "Shipwright Tavern", "Tide Pool"],
    "adventurer-hub": ["Crossed Swords", "Travelers Rest", "Quest Inn", "Wayfarers Stop", "Hero Hall"],
}

TAVERN_STYLE_DESCRIPTIONS = {
    "noble": "An upscale establishment catering to merchants and officials",
    "seedy": "A rough tavern where questionable deals are made in shadowy corners",
    "dock-side": "A bustling waterfront tavern filled with sailors and dock workers",
    "adventurer-hub": "A popular gathering place for travelers and adventurers",
}

TAVERN_STYLE_SIGNATURES = {
    "noble": "Fine wines and delicate pastries",
    "seedy": "Cheap ale and suspicious stew",
    "dock-side": "Rum and fresh-caught fish",
    "adventurer-hub": "Hearty ales and travelers tales",
}

SHOP_ADJECTIVES = ["Fine", "Quality", "Reliable", "Trusted", "Master", "Skilled"]
SHOP_NOUNS = ["Craft", "Works", "Shop", "Emporium", "House", "Guild"]

SHOP_DESCRIPTIONS = {
    "Alchemist": "brewing potions and selling reagents to local spellcasters",
    "General Store": "stocking everyday necessities and traveling supplies",
    "Apothecary": "providing herbs and healing remedies to the community",
    "Tailor": "crafting clothing and mending garments with skill",
    "Armorer": "forging and repairing armor for guards and adventurers",
    "Weaponsmith": "creating and maintaining weapons of all kinds",
    "Tanner": "working with leather and hides to create durable goods",
    "Carpenter": "building furniture and structures from local timber",
    "Baker": "providing fresh bread and baked goods daily",
    "Butcher": "preparing and selling quality meats",
    "Grocer": "offering fresh produce and preserved foods",
    "Fletcher": "crafting arrows and bows for hunters and guards",
    "Bowyer": "specializing in the creation of quality bows",
    "Stable": "caring for horses and providing traveling services",
    "Blacksmith": "forging tools and horseshoes for the community",
}

LANDMARK_DESCRIPTIONS = {
    "Well": "A stone-lined well that has provided fresh water to the community for generations",
    "Square": "A central gathering place where locals meet for markets and celebrations",
    "Stone": "A weathered standing stone marking an important boundary or memorial",
    "Tree": "A massive old tree that serves as a natural landmark and meeting point",
    "Gate": "An impressive gateway that marks the entrance to an important district",
    "Bridge": "A sturdy bridge that connects two parts of the settlement",
    "Monument": "A carved stone monument commemorating an important local event",
    "Garden": "A peaceful garden tended by locals and visitors alike",
}
LANDMARK_ADJECTIVES = ["Ancient", "Old", "Great", "Memorial", "Sacred", "Historic", "Central"]

LEADER_TITLES = [
    "Mayor", "Reeve", "Steward", "Administrator", "Councilor",
    "Captain", "Warden", "Elder", "Magistrate", "Overseer",
]
LEADER_STYLES = [
    "pragmatic and focused on infrastructure improvements",
    "diplomatic and skilled at resolving local disputes",
    "industrious and dedicated to expanding trade opportunities",
    "protective and committed to maintaining public safety",
    "progressive and interested in modernizing the settlement",
]

EVENT_TEMPLATES = [
    "A new bridge was constructed across the local river",
    "The settlement expanded with new residential districts",
    "A market charter was granted by regional authorities",
    "Local craftsmen formed a guild to regulate trade",
    "The community weathered a particularly harsh winter",
    "A festival tradition was established to celebrate the harvest",
    "New trade routes brought increased prosperity",
]


def _rng(rng: Optional[random.Random]) -> random.Random:
    return rng if rng is not None else random.Random()


def cultural_name(namebase: str, rng: Optional[random.Random] = None) -> str:
    """Build a two-syllable name in the style of ``namebase``."""
    rng = _rng(rng)
    prefixes, suffixes = name_pattern(namebase)
    return rng.choice(prefixes) + rng.choice(suffixes)


def fallback_tavern(settlement: Settlement, style: str, rng: Optional[random.Random] = None) -> Tavern:
    rng = _rng(rng)
    known_style = style if style in TAVERN_STYLE_NAMES else DEFAULT_TAVERN_STYLE
    namebase = culture_profile(settlement.culture).namebase
    return Tavern(
        type=style,
        name=rng.choice(TAVERN_STYLE_NAMES[known_style]),
        innkeeper=cultural_name(namebase, rng),
        signature=TAVERN_STYLE_SIGNATURES[known_style],
        description=f"{TAVERN_STYLE_DESCRIPTIONS[known_style]}, serving as a central meeting point in {settlement.burg}.",
    )


def fallback_shop(shop_type: str, settlement: Settlement, rng: Optional[random.Random] = None) -> Shop:
    rng = _rng(rng)
    namebase = culture_profile(settlement.culture).namebase
    adjective = rng.choice(SHOP_ADJECTIVES)
    noun = rng.choice(SHOP_NOUNS)
    trade = SHOP_DESCRIPTIONS.get(shop_type, f"providing {shop_type.lower()} services")
    return Shop(
        type=shop_type,
        name=f"{adjective} {shop_type} {noun}",
        owner=cultural_name(namebase, rng),
        description=(
            f"A reputable establishment in {settlement.burg}, {trade} "
            "with quality craftsmanship and fair dealings."
        ),
    )


def fallback_landmark(settlement: Settlement, rng: Optional[random.Random] = None) -> Landmark:
    rng = _rng(rng)
    kind = rng.choice(sorted(LANDMARK_DESCRIPTIONS))
    adjective = rng.choice(LANDMARK_ADJECTIVES)
    return Landmark(name=f"The {adjective} {kind}", description=LANDMARK_DESCRIPTIONS[kind])


def fallback_leader(settlement: Settlement, rng: Optional[random.Random] = None) -> Leader:
    rng = _rng(rng)
    namebase = culture_profile(settlement.culture).namebase
    title = rng.choice(LEADER_TITLES)
    name = cultural_name(namebase, rng)
    style = rng.choice(LEADER_STYLES)
    return Leader(
        name=name,
        title=title,
        description=(
            f"A {style} leader who has earned respect through consistent service "
            f"to {settlement.burg} and its citizens."
        ),
    )


def fallback_events(
    settlement: Settlement,
    count: int,
    founding_year: int,
    *,
    current_year: Optional[int] = None,
    rng: Optional[random.Random] = None,
) -> List[HistoricalEvent]:
    """Founding entry plus up to ``count - 1`` generic civic events.

    At most ``len(EVENT_TEMPLATES)`` events are produced in total.
    """
    rng = _rng(rng)
    if current_year is None:
        current_year = get_settings().lore.current_year
    founding = HistoricalEvent(
        year=founding_year,
        description=f"{settlement.burg} was founded by early settlers seeking opportunity in the region.",
    )
    later = [
        HistoricalEvent(
            year=int(founding_year + (current_year - founding_year) * rng.random()),
            description=template,
        )
        for template in EVENT_TEMPLATES[1:max(1, min(count, len(EVENT_TEMPLATES)))]
    ]
    later.sort(key=lambda event: event.year)
    return [founding, *later]



def fallback_burg_description(settlement: Settlement, geo: GeoClassification) -> str:
    return (
        f"{settlement.burg} is a {settlement.size.lower()} settlement in the {geo.primary_biome} "
        f"with a population of {settlement.population:,} residents."
    )


def fallback_capital_description(settlement: Settlement, geo: GeoClassification) -> str:
    return (
        f"{settlement.burg} serves as the capital of {settlement.state or 'its realm'}, a {settlement.size.lower()} "
        f"in the {geo.primary_biome} with {settlement.population:,} inhabitants."
    )


def fallback_feature(feature: str) -> Feature:
    return Feature(name=f"A forgotten {feature}", description=f"A {feature.lower()} of uncertain origin.")


def fallback_civic_feature(key: str, settlement: Settlement) -> Feature:
    return Feature(name=f"{key} of {settlement.burg}", description=f"A notable {key.lower()} in the settlement.")


__all__ = [
    "cultural_name",
    "fallback_burg_description",
    "fallback_capital_description",
    "fallback_civic_feature",
    "fallback_events",
    "fallback_feature",
    "fallback_landmark",
    "fallback_leader",
    "fallback_shop",
    "fallback_tavern",
]
