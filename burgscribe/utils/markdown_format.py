"""Markdown snippets for generated lore, matching the settlement guide layout."""

from typing import Dict, Iterable, List

from burgscribe.models.lore_schemas import Feature, HistoricalEvent, Landmark, Leader, Shop, Tavern


def format_tavern(tavern: Tavern) -> str:
    return (
        f"- **Tavern name:** {tavern.name}\n"
        f"- **Innkeeper name:** {tavern.innkeeper}\n"
        f"- **Signature drink or tradition:** {tavern.signature}\n"
        f"\n{tavern.description}"
    )


def format_shop(shop: Shop) -> str:
    return f"- **Shop name:** {shop.name}\n- **Owner name:** {shop.owner}\n\n{shop.description}"


def format_shops(shops_by_type: Dict[str, List[Shop]]) -> str:
    sections = []
    for shop_type, shops in shops_by_type.items():
        body = "\n\n".join(format_shop(shop) for shop in shops)
        sections.append(f"### {shop_type}\n{body}")
    return "\n\n".join(sections)


def format_leader(leader: Leader) -> str:
    return f"- **{leader.name}**\n- **{leader.title}**\n\n{leader.description}"


def format_landmark(landmark: Landmark) -> str:
    # Stray braces survive emergency extraction now and then.
    text = f"### {landmark.name}\n{landmark.description}"
    return text.replace("{", "").replace("}", "").rstrip().rstrip('"').strip()


def format_feature(feature: Feature) -> str:
    return f"### {feature.name}\n{feature.description}"


def format_features(features: Iterable[Feature]) -> str:
    return "\n\n".join(format_feature(feature) for feature in features)


def format_events(events: Iterable[HistoricalEvent]) -> str:
    return "\n".join(f"- **{event.event_year}:** {event.description}" for event in events)


__all__ = [
    "format_events",
    "format_feature",
    "format_features",
    "format_landmark",
    "format_leader",
    "format_shop",
    "format_shops",
    "format_tavern",
]
