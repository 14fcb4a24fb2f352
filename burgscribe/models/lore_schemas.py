"""Pydantic models for settlements and the lore generated for them."""
from __future__ import annotations

import re
from typing import Any, ClassVar, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

_LEADING_INT_RE = re.compile(r"-?\d+")


def _require_text(value: Any) -> str:
    text = str(value if value is not None else "").strip()
    if not text:
        raise ValueError("field must contain non-empty text")
    return text


class Settlement(BaseModel):
    """A settlement row as exported by the map generator.

    Accepts both the export's column names (``Burg``, ``Province Full Name``)
    and the snake_case field names.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    burg: str = Field(..., alias="Burg")
    culture: str = Field("", alias="Culture")
    province: str = Field("", alias="Province Full Name")
    state: str = Field("", alias="State Full Name")
    population: int = Field(0, alias="Population", ge=0)
    biome: str = Field("temperate", alias="Biome")
    religion: str = Field("", alias="Religion")
    capital: bool = Field(False, alias="Capital")
    port: str = Field("", alias="Port")
    citadel: str = Field("", alias="Citadel")
    walls: str = Field("", alias="Walls")
    plaza: str = Field("", alias="Plaza")
    temple: str = Field("", alias="Temple")
    shanty_town: str = Field("", alias="Shanty Town")

    CIVIC_FEATURES: ClassVar[Dict[str, str]] = {
        "Port": "port",
        "Citadel": "citadel",
        "Walls": "walls",
        "Plaza": "plaza",
        "Temple": "temple",
        "Shanty Town": "shanty_town",
    }
    # Upper population bound, size label and bonus-landmark modifier.
    SIZE_CLASSES: ClassVar[Tuple[Tuple[float, str, int], ...]] = (
        (80, "Thorp", 0),
        (400, "Hamlet", 0),
        (900, "Village", 1),
        (2000, "Small Town", 2),
        (5000, "Large Town", 3),
        (12000, "Small City", 4),
        (25000, "Large City", 8),
        (float("inf"), "Metropolis", 10),
    )

    @field_validator("burg")
    @classmethod
    def _burg_present(cls, value: str) -> str:
        return _require_text(value)

    @field_validator(
        "culture", "province", "state", "biome", "religion",
        "port", "citadel", "walls", "plaza", "temple", "shanty_town",
        mode="before",
    )
    @classmethod
    def _strip(cls, value: Any) -> str:
        return str(value if value is not None else "").strip()

    @field_validator("population", mode="before")
    @classmethod
    def _parse_population(cls, value: Any) -> Any:
        if isinstance(value, str):
            cleaned = value.replace(",", "").strip()
            return int(float(cleaned)) if cleaned else 0
        return value

    @field_validator("capital", mode="before")
    @classmethod
    def _parse_capital(cls, value: Any) -> Any:
        # The export marks capitals with a non-empty cell such as "capital".
        if value is None:
            return False
        if isinstance(value, str):
            return value.strip().lower() not in ("", "false", "no", "0")
        return value

    def _size_class(self) -> Tuple[float, str, int]:
        return next(entry for entry in self.SIZE_CLASSES if self.population <= entry[0])

    @property
    def size(self) -> str:
        return self._size_class()[1]

    @property
    def pop_modifier(self) -> int:
        return self._size_class()[2]

    @property
    def civic_features(self) -> List[str]:
        """Civic feature columns with a non-blank value, in export order."""
        return [label for label, field_name in self.CIVIC_FEATURES.items() if getattr(self, field_name)]


class GeoClassification(BaseModel):
    primary_geography: str = "varied terrain"
    primary_climate: str = "temperate"
    primary_biome: str = "temperate"

    @classmethod
    def for_settlement(cls, settlement: Settlement) -> "GeoClassification":
        return cls(primary_biome=settlement.biome or "temperate")


class TownQuality(BaseModel):
    """Visitor ratings from 1 (worst) to 5 (best)."""

    residents: int = Field(3, ge=1, le=5)
    services: int = Field(3, ge=1, le=5)
    comfort: int = Field(3, ge=1, le=5)


class CultureProfile(BaseModel):
    type: str = "Unknown"
    namebase: str = "Generic Fantasy"
    summary: str = "a diverse cultural mix shaped by regional needs and ancient memory"
    species: Dict[str, int] = Field(default_factory=lambda: {"Human": 70, "Other": 30})


class Tavern(BaseModel):
    type: Optional[str] = None
    name: str
    innkeeper: str
    signature: str
    description: str

    @field_validator("name", "innkeeper", "signature", "description", mode="before")
    @classmethod
    def _text(cls, value: Any) -> str:
        return _require_text(value)


class Shop(BaseModel):
    type: str
    name: str
    owner: str
    description: str

    @field_validator("type", "name", "owner", "description", mode="before")
    @classmethod
    def _text(cls, value: Any) -> str:
        return _require_text(value)


class Landmark(BaseModel):
    name: str
    description: str

    @field_validator("name", "description", mode="before")
    @classmethod
    def _text(cls, value: Any) -> str:
        return _require_text(value)


class Feature(BaseModel):
    """A named civic feature, temple or bonus landmark."""

    name: str
    description: str

    @field_validator("name", "description", mode="before")
    @classmethod
    def _text(cls, value: Any) -> str:
        return _require_text(value)


class SettlementDescription(BaseModel):
    text: str

    @field_validator("text", mode="before")
    @classmethod
    def _text(cls, value: Any) -> str:
        return _require_text(value)


class Leader(BaseModel):
    name: str
    title: str
    description: str

    @field_validator("name", "title", "description", mode="before")
    @classmethod
    def _text(cls, value: Any) -> str:
        return _require_text(value)


class HistoricalEvent(BaseModel):
    """A dated entry in a settlement's history, years counted in ``MR``."""

    ERA_SUFFIX: ClassVar[str] = "MR"

    year: int
    description: str

    @field_validator("year", mode="before")
    @classmethod
    def _parse_year(cls, value: Any) -> Any:
        # Models sometimes answer "1204 MR" despite being told not to.
        if isinstance(value, str):
            match = _LEADING_INT_RE.search(value)
            if match is None:
                raise ValueError(f"no year found in {value!r}")
            return int(match.group(0))
        return value

    @field_validator("description", mode="before")
    @classmethod
    def _text(cls, value: Any) -> str:
        return _require_text(value)

    @property
    def event_year(self) -> str:
        return f"{self.year} {self.ERA_SUFFIX}"


class RandomEvent(BaseModel):
    description: str
    type: str = "cultural"
    impact: str = "minor"
    involves_people: bool = False
    involves_building: bool = False
    involves_trade: bool = False

    @field_validator("description", mode="before")
    @classmethod
    def _text(cls, value: Any) -> str:
        return _require_text(value)

    @field_validator("type", "impact", mode="before")
    @classmethod
    def _default_blank(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None or not str(value).strip():
            return cls.model_fields[info.field_name].default
        return str(value).strip()

    @field_validator("involves_people", "involves_building", "involves_trade", mode="before")
    @classmethod
    def _default_false(cls, value: Any) -> Any:
        return False if value is None else value


class FoundingEvent(BaseModel):
    description: str
    reason: str = "other"
    founders: str = "early settlers"

    @field_validator("description", mode="before")
    @classmethod
    def _text(cls, value: Any) -> str:
        return _require_text(value)

    @field_validator("reason", "founders", mode="before")
    @classmethod
    def _default_blank(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None or not str(value).strip():
            return cls.model_fields[info.field_name].default
        return str(value).strip()


__all__ = [
    "CultureProfile",
    "Feature",
    "FoundingEvent",
    "GeoClassification",
    "HistoricalEvent",
    "Landmark",
    "Leader",
    "RandomEvent",
    "Settlement",
    "SettlementDescription",
    "Shop",
    "Tavern",
    "TownQuality",
]
