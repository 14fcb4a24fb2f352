"""Command line entry point for generating settlement lore with a local Ollama model."""
from __future__ import annotations

import argparse
import asyncio
import dataclasses
import json
import logging
import random
import sys
from pathlib import Path
from typing import Any, List, Optional

from pydantic import BaseModel, ValidationError

from burgscribe.exceptions import JSONParseError
from burgscribe.generators.description_generator import DescriptionGenerator
from burgscribe.generators.event_generator import EventGenerator
from burgscribe.generators.feature_generator import FeatureGenerator
from burgscribe.generators.landmark_generator import LandmarkGenerator
from burgscribe.generators.leader_generator import LeaderGenerator
from burgscribe.generators.shop_generator import ShopGenerator
from burgscribe.generators.tavern_generator import TavernGenerator
from burgscribe.models.lore_schemas import GeoClassification, HistoricalEvent, Settlement
from burgscribe.synthesis.ollama_client import OllamaClient
from burgscribe.utils.emergency_extraction import ContentKind
from burgscribe.utils.enhanced_logging import create_banner, setup_logging
from burgscribe.utils.json_parser import parse_json_response
from burgscribe.utils.markdown_format import (
    format_events,
    format_features,
    format_landmark,
    format_leader,
    format_shops,
    format_tavern,
)

logger = logging.getLogger(__name__)


def _dump(value: Any) -> Any:
    if isinstance(value, HistoricalEvent):
        return {**value.model_dump(), "event_year": value.event_year}
    if isinstance(value, BaseModel):
        return value.model_dump()
    if isinstance(value, dict):
        return {key: _dump(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_dump(item) for item in value]
    return value


def _print_json(value: Any) -> None:
    print(json.dumps(_dump(value), indent=2, ensure_ascii=False))


def load_settlement(args: argparse.Namespace) -> Settlement:
    if args.settlement_file:
        data = json.loads(Path(args.settlement_file).read_text(encoding="utf-8"))
        return Settlement.model_validate(data)
    return Settlement(
        burg=args.burg,
        culture=args.culture or "",
        province=args.province or "",
        state=args.state or "",
        population=args.population,
        biome=args.biome,
        religion=args.religion or "",
        capital=args.capital,
        **{Settlement.CIVIC_FEATURES[label]: label for label in args.civic},
    )


def _make_client(args: argparse.Namespace) -> OllamaClient:
    return OllamaClient(base_url=args.url, model=args.model, max_retries=args.retries)


async def _run_health(args: argparse.Namespace) -> int:
    async with _make_client(args) as client:
        report = await client.check_connection()
    print(json.dumps(dataclasses.asdict(report), indent=2))
    return 0 if report.ok and report.model_available else 1


async def _run_generator(args: argparse.Namespace) -> int:
    settlement = load_settlement(args)
    rng = random.Random(args.seed) if args.seed is not None else None
    markdown: Optional[str] = None

    async with _make_client(args) as client:
        if args.command == "tavern":
            result: Any = await TavernGenerator(client, rng=rng).generate_tavern(settlement, args.style)
            markdown = format_tavern(result)
        elif args.command == "taverns":
            result = await TavernGenerator(client, rng=rng).generate_taverns_batch(settlement, args.types)
            markdown = "\n\n".join(format_tavern(tavern) for tavern in result)
        elif args.command == "shops":
            result = await ShopGenerator(client, rng=rng).generate_shops_batch(settlement, args.types)
            markdown = format_shops(result)
        elif args.command == "landmark":
            result = await LandmarkGenerator(client, rng=rng).generate_landmark(settlement, args.hint, args.avoid)
            markdown = format_landmark(result)
        elif args.command == "leader":
            result = await LeaderGenerator(client, rng=rng).generate_leader(settlement, args.size, args.age)
            markdown = format_leader(result)
        elif args.command == "description":
            geo = GeoClassification(
                primary_geography=args.geography,
                primary_climate=args.climate,
                primary_biome=settlement.biome or "temperate",
            )
            result = await DescriptionGenerator(client, rng=rng).generate_description(settlement, geo)
            markdown = result
        elif args.command == "features":
            result = await FeatureGenerator(client, rng=rng).generate_feature_descriptions(
                settlement, event_hints=args.hints
            )
            markdown = format_features(result)
        else:
            result = await EventGenerator(client, rng=rng).generate_events(settlement, args.count, args.founding_year)
            markdown = format_events(result)

    if args.markdown:
        print(markdown)
    else:
        _print_json(result)
    return 0


def cmd_parse(args: argparse.Namespace) -> int:
    if args.input == "-":
        text = sys.stdin.read()
    else:
        text = Path(args.input).read_text(encoding="utf-8")
    try:
        value = parse_json_response(text, ContentKind(args.kind))
    except JSONParseError as exc:
        print(f"Could not parse response: {exc}", file=sys.stderr)
        return 1
    _print_json(value)
    return 0


def _add_settlement_args(parser: argparse.ArgumentParser) -> None:
    group = parser.add_argument_group("settlement")
    group.add_argument("--settlement-file", default=None, help="JSON file holding one exported settlement row")
    group.add_argument("--burg", default=None, help="Settlement name")
    group.add_argument("--culture", default=None)
    group.add_argument("--province", default=None)
    group.add_argument("--state", default=None)
    group.add_argument("--population", type=int, default=0)
    group.add_argument("--biome", default="temperate")
    group.add_argument("--religion", default=None)
    group.add_argument("--capital", action="store_true", help="The settlement is a state capital")
    group.add_argument("--civic", nargs="*", default=[], choices=list(Settlement.CIVIC_FEATURES), help="Civic features present")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Generate fantasy settlement lore with a local Ollama model")
    parser.add_argument("--url", default=None, help="Ollama base URL (defaults to OLLAMA_URL)")
    parser.add_argument("--model", default=None, help="Model name (defaults to OLLAMA_MODEL)")
    parser.add_argument("--retries", type=int, default=None, help="Attempts per request")
    parser.add_argument("--seed", type=int, default=None, help="Seed for fallback content")
    parser.add_argument("--markdown", action="store_true", help="Print markdown instead of JSON")
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    parser.add_argument("--log-file", default=None)

    subparsers = parser.add_subparsers(dest="command", required=True)

    health_parser = subparsers.add_parser("health", help="Check that Ollama is reachable and the model is installed")
    health_parser.set_defaults(func=_run_health, is_async=True)

    tavern_parser = subparsers.add_parser("tavern", help="Generate one tavern")
    _add_settlement_args(tavern_parser)
    tavern_parser.add_argument("--style", default="adventurer-hub")
    tavern_parser.set_defaults(func=_run_generator, is_async=True)

    taverns_parser = subparsers.add_parser("taverns", help="Generate several taverns in one request")
    _add_settlement_args(taverns_parser)
    taverns_parser.add_argument("--types", nargs="+", required=True)
    taverns_parser.set_defaults(func=_run_generator, is_async=True)

    shops_parser = subparsers.add_parser("shops", help="Generate shops grouped by type")
    _add_settlement_args(shops_parser)
    shops_parser.add_argument("--types", nargs="+", required=True)
    shops_parser.set_defaults(func=_run_generator, is_async=True)

    landmark_parser = subparsers.add_parser("landmark", help="Generate a minor landmark")
    _add_settlement_args(landmark_parser)
    landmark_parser.add_argument("--hint", default="")
    landmark_parser.add_argument("--avoid", nargs="*", default=[], help="Landmark names already in use")
    landmark_parser.set_defaults(func=_run_generator, is_async=True)

    leader_parser = subparsers.add_parser("leader", help="Generate the settlement's leader")
    _add_settlement_args(leader_parser)
    leader_parser.add_argument("--size", default="town")
    leader_parser.add_argument("--age", default="old")
    leader_parser.set_defaults(func=_run_generator, is_async=True)

    description_parser = subparsers.add_parser("description", help="Describe the settlement, or the capital city")
    _add_settlement_args(description_parser)
    description_parser.add_argument("--geography", default="varied terrain")
    description_parser.add_argument("--climate", default="temperate")
    description_parser.set_defaults(func=_run_generator, is_async=True)

    features_parser = subparsers.add_parser("features", help="Describe civic features and add bonus landmarks")
    _add_settlement_args(features_parser)
    features_parser.add_argument("--hints", nargs="*", default=[], help="Event summaries to inspire landmarks")
    features_parser.set_defaults(func=_run_generator, is_async=True)

    events_parser = subparsers.add_parser("events", help="Generate a settlement history")
    _add_settlement_args(events_parser)
    events_parser.add_argument("--count", type=int, default=8)
    events_parser.add_argument("--founding-year", type=int, default=None)
    events_parser.set_defaults(func=_run_generator, is_async=True)

    parse_parser = subparsers.add_parser("parse", help="Repair and parse a saved LLM response")
    parse_parser.add_argument("input", nargs="?", default="-", help="Response file, or - for stdin")
    parse_parser.add_argument("--kind", choices=[kind.value for kind in ContentKind], required=True)
    parse_parser.set_defaults(func=cmd_parse, is_async=False)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(console_level=getattr(logging, args.log_level), log_file=args.log_file)

    if getattr(args, "settlement_file", None) is None and hasattr(args, "burg") and not args.burg:
        parser.error("either --burg or --settlement-file is required")

    if args.is_async:
        logger.info(create_banner(f"burgscribe {args.command}"))
        try:
            return asyncio.run(args.func(args))
        except ValidationError as exc:
            print(f"Invalid settlement: {exc}", file=sys.stderr)
            return 2
    return args.func(args)


if __name__ == "__main__":
    raise SystemExit(main())
