"""Culture lookup tables used to flavour prompts and fallback names."""

from __future__ import annotations

import random
from typing import Dict, List, NamedTuple, Optional, Tuple

from burgscribe.models.lore_schemas import CultureProfile

DEFAULT_NAMEBASE = "Generic Fantasy"

CULTURE_SPECIES: Dict[str, Dict[str, int]] = {
    "Thaumavori": {"Human": 90, "Other": 10},
    "Hetallian": {"Human": 85, "Other": 15},
    "Dwarves": {"Dwarf": 80, "Human": 15, "Other": 5},
    "Eldar": {"Elf": 85, "Human": 10, "Other": 5},
    "Uruk": {"Orc": 60, "Goblin": 25, "Other": 15},
    "Soultorn": {"Undead": 60, "Human": 30, "Other": 10},
    "Skiptondo": {"Human": 85, "Other": 15},
    "Sunstalker": {"Human": 60, "Half-Orc": 20, "Other": 20},
    "Shadow Elves": {"Shadar-Kai": 80, "Drow": 10, "Other": 10},
    "Gines": {"Human": 80, "Other": 20},
    "Kleard": {"Goblin": 85, "Other": 15},
    "Jotunn": {"Giant": 70, "Dwarf": 20, "Other": 10},
    "Wildlands": {"Human": 80, "Halfling": 10, "Other": 10},
    "Rakhnid": {"Rakhnid": 90, "Other": 10},
    "Drake": {"Dragon": 10, "Dragonborn": 60, "Human": 20, "Other": 10},
    "Aj'Snaga": {"Yuan-ti": 90, "Other": 10},
    "Halfling": {"Halfling": 95, "Other": 5},
    "Harengone": {"Harengon": 80, "Human": 15, "Other": 5},
    "Berberan": {"Human": 85, "Other": 15},
    "Nortumbic": {"Human": 90, "Other": 10},
}

CULTURE_SUMMARIES: Dict[str, str] = {
    "Thaumavori": "arcane-governed societies ranging from magocratic city-states to feudal kingdoms; shaped by guild law, magical hierarchy, and courtly traditions",
    "Hetallian": "independent coastal and inland city-states scattered across storm-swept forests and open wilds, shaped by ancestor cults, frontier pragmatism, and weatherworn stone traditions",
    "Dwarves": "mountain-forged society valuing craftsmanship, kin, and stoic tradition",
    "Eldar": "elegant elven society governed by ancient wisdom and arcane mastery",
    "Uruk": "brutal and honor-driven clans ruled by strength and fear",
    "Soultorn": "grim, introspective society shaped by lost faiths and arcane ruins, lich-ruled or haunted by restless spirits",
    "Skiptondo": "naval merchant republics with strong traditions of loyalty and exploration, pirate havens",
    "Sunstalker": "nomadic hunter-warrior culture surviving through adaptability and ferocity",
    "Shadow Elves": "secretive, hierarchical society with deep reverence for shadow and magic",
    "Gines": "cosmopolitan and cultured with an emphasis on refinement and artistry",
    "Kleard": "scrappy, resourceful goblin societies thriving in marginal lands and ruins",
    "Jotunn": "clan-driven land of the giants, isolated strongholds of elemental crafters and raiders hardened by cold, stone, and ancestral oaths",
    "Wildlands": "tribal and druidic communities steeped in song, stone, and seasonal rites",
    "Rakhnid": "ritual-bound, matriarchal web-cults that guard secrets in shadowed places",
    "Drake": "reverent of ancient wyrms and strength, with social castes tied to lineage",
    "Aj'Snaga": "scheming, serpentine cults driven by prophecy, purity, and psionics",
    "Halfling": "pastoral halfling shires rooted in tradition, comfort, and superstition",
    "Harengone": "plains-running harengon societies that prize freedom, wit, and folklore",
    "Berberan": "desert-dwelling traders and scouts shaped by wind, memory, and oaths",
    "Nortumbic": "village-based kin-networks that value personal honor, farming, and relics",
}

# culture -> (type, namebase)
CULTURE_NAMEBASES: Dict[str, Tuple[str, str]] = {
    "Thaumavori": ("Generic", "German"),
    "Hetallian": ("Generic", "Hetallian"),
    "Dwarves": ("Highland", "Dwarven"),
    "Eldar": ("Generic", "Sindarin"),
    "Uruk": ("Highland", "Black Speech"),
    "Soultorn": ("Generic", "Gothic-Fantasy"),
    "Skiptondo": ("Naval", "Castillian"),
    "Sunstalker": ("Hunting", "Mongolian"),
    "Shadow Elves": ("Hunting", "Dark Elven"),
    "Gines": ("Generic", "French"),
    "Kleard": ("Highland", "Goblin"),
    "Jotunn": ("Generic", "Nordic"),
    "Wildlands": ("", "Celtic"),
    "Rakhnid": ("Hunting", "Arachnid"),
    "Drake": ("Hunting", "Draconic"),
    "Aj'Snaga": ("Generic", "Serpents"),
    "Halfling": ("Generic", "Old English"),
    "Harengone": ("Generic", "Hungarian"),
    "Berberan": ("Hunting", "Berber"),
    "Nortumbic": ("River", "Saxon"),
}

# namebase -> (prefixes, suffixes)
NAME_PATTERNS: Dict[str, Tuple[List[str], List[str]]] = {
    "German": (
        ["Ada", "Bern", "Ger", "Hil", "Kar", "Ott", "Ric", "Wil"],
        ["bert", "hard", "mund", "wig", "helm", "fried", "mar", "win"],
    ),
    "Hetallian": (
        ["Anto", "Bene", "Cla", "Domi", "Este", "Fabr", "Giu", "Luc"],
        ["io", "ano", "etto", "ino", "ardo", "enzo", "aldo", "esco"],
    ),
    "Dwarven": (
        ["Bard", "Dur", "Grim", "Kor", "Mor", "Nor", "Ors", "Thar"],
        ["in", "ek", "ok", "un", "ar", "or", "an", "en"],
    ),
    "Sindarin": (
        ["Ael", "Ara", "Bel", "Cel", "Del", "Esh", "Fal", "Gal"],
        ["andra", "enth", "iel", "ith", "wyn", "eth", "ael", "orn"],
    ),
    "Black Speech": (
        ["Grak", "Urk", "Shar", "Goth", "Morg", "Bul", "Ghor", "Tusk"],
        ["ash", "ugh", "arg", "ork", "ush", "ang", "oth", "urg"],
    ),
    "Gothic-Fantasy": (
        ["Ala", "Blas", "Cas", "Dra", "Eva", "Flo", "Grim", "Hec"],
        ["ric", "ius", "ana", "oth", "eon", "iel", "wyn", "ash"],
    ),
    "Castillian": (
        ["Ale", "Car", "Die", "Fer", "Gon", "Her", "Isa", "Jua"],
        ["andro", "ez", "igo", "ando", "ero", "ano", "ito", "oso"],
    ),
    "Mongolian": (
        ["Bat", "Bol", "Gan", "Jav", "Khu", "Mon", "Nor", "Och"],
        ["bold", "batu", "khan", "gol", "mur", "chin", "gan", "jun"],
    ),
    "Dark Elven": (
        ["Dri", "Jal", "Mal", "Nal", "Pha", "Qil", "Riz", "Sab"],
        ["ice", "ace", "rae", "ine", "ara", "ess", "oth", "ira"],
    ),
    "French": (
        ["Ale", "Ber", "Cha", "Dav", "Eth", "Fra", "Gui", "Hen"],
        ["ard", "ert", "ois", "ain", "eau", "ien", "ard", "ier"],
    ),
    "Goblin": (
        ["Bix", "Gob", "Kri", "Nix", "Pok", "Rix", "Sni", "Tik"],
        ["nik", "gob", "kik", "zat", "bit", "git", "nok", "zik"],
    ),
    "Nordic": (
        ["Bjor", "Erik", "Gud", "Har", "Ing", "Olaf", "Rag", "Tor"],
        ["sen", "sson", "dottir", "ulf", "heim", "gar", "mund", "stein"],
    ),
    "Celtic": (
        ["Aed", "Bri", "Cad", "Dar", "Eas", "Fin", "Gar", "Mor"],
        ["an", "eth", "wyn", "gal", "ric", "dun", "ael", "orn"],
    ),
    "Uruk": (
        ["Gash", "Snag", "Grok", "Thrak", "Urk", "Brog", "Skar", "Morg"],
        ["ash", "ugh", "gul", "rak", "nazg", "burz", "goth", "hai"],
    ),
}

# Namebases without their own syllable table borrow this one.
FALLBACK_NAME_PATTERN = "Sindarin"

BIOME_SHOP_CONTEXT: Dict[str, str] = {
    "alpine": "Shops must withstand extreme cold, heavy snow loads, and thin air. Stone construction is common, with thick walls and small windows. Goods must be stored to prevent freezing.",
    "highland": "Mountain shops often built into hillsides or use local stone. Cool temperatures help preserve goods but require heating. Wind is a constant concern.",
    "maritime": "Coastal shops deal with salt air corrosion, humidity, and storms. Many use weather-resistant materials and have good ventilation to prevent mold.",
    "cold_coast": "Shops face freezing spray, ice formation, and harsh winter storms. Buildings are heavily insulated with protected entrances.",
    "temperate_coast": "Moderate coastal conditions allow varied construction but require protection from storms and salt air.",
    "warm_coast": "Tropical coastal shops emphasize ventilation, hurricane resistance, and protection from intense sun and salt air.",
    "continental_interior": "Shops must handle extreme temperature swings between seasons. Good insulation and heating or cooling are essential.",
    "grasslands": "Open plains shops often serve as waypoints for travelers. Built to withstand strong winds and weather extremes.",
    "cold_plains": "Harsh winter conditions require substantial heating and wind protection. Summer brings relief but also storms.",
    "hot_plains": "Shops emphasize cooling, shade, and protection from dust storms. Water conservation is often important.",
    "boreal": "Forest shops often use local timber construction. Damp conditions require good ventilation and waterproofing.",
    "tundra": "Permafrost affects foundations. Shops are heavily insulated and may be partially underground for warmth.",
    "desert": "Thick walls provide insulation from heat. Shops often have courtyards, water features, and emphasize shade.",
    "temperate": "Moderate conditions allow flexible construction. Shops adapt to four distinct seasons.",
    "subtropical": "High humidity requires good ventilation. Protection from heat and heavy rains is important.",
    "tropical": "Emphasis on airflow, protection from heavy rains, and resistance to heat and humidity.",
    "mixed": "Shops must adapt to varied environmental conditions throughout the year.",
}


BIOME_DESCRIPTIONS: Dict[str, str] = {
    "alpine": "The settlement sits among towering peaks where snow persists year-round and the air is thin and crisp.",
    "highland": "Rolling hills and rocky outcrops define the landscape, with cooler temperatures and mountain breezes.",
    "upland": "Elevated terrain provides commanding views while moderate slopes offer good drainage and building sites.",
    "valley": "Nestled in a sheltered valley with fertile soil and protection from harsh weather.",
    "lowland": "Situated on flat, fertile plains with easy access to water and transportation routes.",
    "maritime": "Salt air and the sound of waves create a coastal atmosphere with maritime influences throughout.",
    "cold_coast": "Icy winds blow off frigid waters, creating a harsh coastal environment with ice-crusted shores.",
    "temperate_coast": "Moderate sea breezes and temperate waters create a pleasant coastal climate.",
    "warm_coast": "Warm ocean breezes and tropical coastal conditions define the seaside atmosphere.",
    "continental_interior": "Far from any major water body, the climate shows extreme seasonal variations and wide temperature swings.",
    "grasslands": "Vast open plains stretch to the horizon with rolling grasslands and big skies.",
    "cold_plains": "Harsh winds sweep across frozen or near-frozen plains with sparse vegetation.",
    "hot_plains": "Heat shimmers rise from sun-baked flatlands where the horizon wavers in the distance.",
    "boreal": "Dense coniferous forests dominate the landscape with cool, moist conditions year-round.",
    "tundra": "Permafrost underlies the treeless landscape where only the hardiest vegetation survives.",
    "desert": "Arid conditions and sparse vegetation create a harsh environment of sand, rock, and scattered oases.",
    "temperate": "Four distinct seasons and moderate conditions create a balanced, habitable environment.",
    "subtropical": "Warm, humid conditions support lush vegetation and abundant rainfall.",
    "tropical": "Year-round warmth and abundant moisture create a verdant, jungle-like environment.",
    "mixed": "The landscape shows characteristics of multiple biomes, creating a diverse natural environment.",
    "clifftop": "Perched on dramatic cliffs with sweeping views and constant exposure to wind and weather.",
}


class Deity(NamedTuple):
    name: str
    domain: str
    tone: str


RELIGIONS: Dict[str, List[Deity]] = {
    "Dwarf domain": [
        Deity("Moradin", "Creation and Craftsmanship", "stoic and industrious"),
        Deity("Berronar Truesilver", "Family and Community", "nurturing and protective"),
        Deity("Clangeddin Silverbeard", "War and Honor", "fierce and valiant"),
        Deity("Dumathoin", "Secrets and Mining", "silent and watchful"),
    ],
    "Seldarine": [
        Deity("Corellon Larethian", "Magic and Art", "elegant and creative"),
        Deity("Sehanine Moonbow", "Dreams and Illusions", "mysterious and ethereal"),
        Deity("Eilistraee", "Light and Freedom", "hopeful and liberating"),
    ],
    "Skiptondo Religion": [
        Deity("The Sea Mother", "Ocean and Storms", "vast and unpredictable"),
        Deity("The Storm Lord", "Tempests and Thunder", "fierce and commanding"),
        Deity("The Navigator", "Guidance and Exploration", "wise and adventurous"),
    ],
    "Westen Druidism": [
        Deity("Wester", "Growth and Mist", "calm and sprawling"),
        Deity("Eldara", "Stars and Memory", "haunting and distant"),
        Deity("Thalor", "Roots and Secrets", "ancient and introspective"),
    ],
    "Wild Spirits": [
        Deity("The Wild Hunt", "Nature and Beasts", "untamed and primal"),
        Deity("The Great Stag", "Forests and Fertility", "majestic and nurturing"),
        Deity("The Storm Crow", "Sky and Change", "swift and unpredictable"),
        Deity("The Earth Mother", "Mountains and Stability", "solid and enduring"),
    ],
    "Wlasadian Church": [
        Deity("Wlasar", "Order and Revelation", "orthodox and solemn"),
        Deity("The Divine Light", "Purity and Justice", "radiant and unwavering"),
        Deity("The Sacred Flame", "Fire and Renewal", "cleansing and transformative"),
    ],
    "Shadowfell Beliefs": [
        Deity("Raven Queen", "Death and Fate", "mysterious and somber"),
        Deity("Shar", "Darkness and Loss", "shadowy and manipulative"),
    ],
    "No religion": [
        Deity("No deity", "None", "secular and civic"),
    ],
}


def culture_profile(culture: Optional[str]) -> CultureProfile:
    """Return the profile for ``culture``; unknown cultures get the generic default."""
    key = (culture or "").strip()
    fields: Dict[str, object] = {}
    if key in CULTURE_NAMEBASES:
        fields["type"], fields["namebase"] = CULTURE_NAMEBASES[key]
    if key in CULTURE_SUMMARIES:
        fields["summary"] = CULTURE_SUMMARIES[key]
    if key in CULTURE_SPECIES:
        fields["species"] = dict(CULTURE_SPECIES[key])
    return CultureProfile(**fields)


def name_pattern(namebase: str) -> Tuple[List[str], List[str]]:
    return NAME_PATTERNS.get(namebase, NAME_PATTERNS[FALLBACK_NAME_PATTERN])


def biome_shop_context(biome: str) -> str:
    key = (biome or "").strip().lower().replace(" ", "_")
    return BIOME_SHOP_CONTEXT.get(key, f"Shops adapt to the local {biome or 'regional'} environment.")


def biome_description(biome: str) -> str:
    key = (biome or "").strip().lower().replace(" ", "_")
    return BIOME_DESCRIPTIONS.get(key, f"The {biome or 'regional'} environment shapes the character of the settlement.")


def pick_deity(religion: str, rng: Optional[random.Random] = None) -> Deity:
    """Pick a deity of ``religion``; unknown faiths become a deity of their own name."""
    pantheon = RELIGIONS.get((religion or "").strip())
    if not pantheon:
        return Deity(religion or "an unnamed power", "mystery and the unknown", "cryptic and esoteric")
    return (rng or random.Random()).choice(pantheon)


__all__ = [
    "BIOME_DESCRIPTIONS",
    "BIOME_SHOP_CONTEXT",
    "CULTURE_NAMEBASES",
    "CULTURE_SPECIES",
    "CULTURE_SUMMARIES",
    "DEFAULT_NAMEBASE",
    "NAME_PATTERNS",
    "RELIGIONS",
    "Deity",
    "biome_description",
    "biome_shop_context",
    "culture_profile",
    "name_pattern",
    "pick_deity",
]
