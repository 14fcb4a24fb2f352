"""
Base class for the lore generators.

A generator owns one prompt family. It hardens the prompt, sends it through
the shared :class:`OllamaClient`, repairs and parses the JSON reply, and
validates it against the pydantic models. Subclasses decide what fallback
content to return when any of those steps fails.
"""

import logging
import random
from typing import Any, Dict, List, Optional, Type, TypeVar, Union

from pydantic import BaseModel, ValidationError

from burgscribe.data.cultures import culture_profile
from burgscribe.exceptions import SchemaError
from burgscribe.models.lore_schemas import CultureProfile, Settlement
from burgscribe.synthesis.ollama_client import OllamaClient
from burgscribe.synthesis.prompts import entropy_key, json_safe_prompt, species_block
from burgscribe.utils.emergency_extraction import ContentKind
from burgscribe.utils.enhanced_logging import log_event
from burgscribe.utils.json_parser import parse_json_response
from burgscribe.utils.settings import get_settings

ModelT = TypeVar("ModelT", bound=BaseModel)


class LoreGenerator:
    """Shared plumbing for every generator."""

    def __init__(
        self,
        client: OllamaClient,
        *,
        rng: Optional[random.Random] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.client = client
        self.rng = rng or random.Random()
        self.settings = get_settings()
        self.logger = logger or logging.getLogger(self.__class__.__module__)

    @property
    def current_year(self) -> int:
        return self.settings.lore.current_year

    def culture(self, settlement: Settlement) -> CultureProfile:
        return culture_profile(settlement.culture)

    def entropy(self) -> str:
        return entropy_key(self.rng)

    async def request_json(self, base_prompt: str, caller: Union[ContentKind, str]) -> Any:
        """Generate and parse a JSON reply for ``base_prompt``."""
        response = await self.client.generate_json(json_safe_prompt(base_prompt))
        return parse_json_response(response, caller, log=self.logger)

    @staticmethod
    def validate(model: Type[ModelT], data: Any) -> ModelT:
        try:
            return model.model_validate(data)
        except ValidationError as exc:
            raise SchemaError(f"Invalid {model.__name__} payload: {exc}") from exc

    @staticmethod
    def require_section(data: Any, key: str) -> Any:
        """Return ``data[key]`` or raise :class:`SchemaError`."""
        if not isinstance(data, dict) or data.get(key) is None:
            raise SchemaError(f"Response is missing the '{key}' section")
        return data[key]

    @staticmethod
    def require_list(data: Any, key: str) -> List[Any]:
        section = LoreGenerator.require_section(data, key)
        if not isinstance(section, list):
            raise SchemaError(f"'{key}' must be a list, got {type(section).__name__}")
        return section

    def using_fallback(self, what: str, settlement: Settlement, exc: Exception, **fields: Any) -> None:
        log_event(
            self.logger,
            logging.WARNING,
            f"{what} generation failed; using fallback content",
            burg=settlement.burg,
            error=str(exc),
            error_type=type(exc).__name__,
            **fields,
        )

    def culture_fields(self, settlement: Settlement) -> Dict[str, str]:
        profile = self.culture(settlement)
        return {
            "namebase": profile.namebase,
            "summary": profile.summary,
            "species": species_block(profile.species),
        }
