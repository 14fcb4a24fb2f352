"""Centralized configuration for the Ollama backend and lore generation."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

_CONFIG_ENV_VAR = "BURGSCRIBE_CONFIG_FILE"

DEFAULT_BASE_URL = "http://127.0.0.1:11434"
DEFAULT_MODEL = "gemma3"
DEFAULT_TIMEOUT_MS = 30000
DEFAULT_MAX_RETRIES = 6
DEFAULT_RETRY_DELAY_MS = 1000
DEFAULT_CURRENT_YEAR = 2950


def _deep_update(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge ``overrides`` into ``base`` and return ``base``."""

    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            _deep_update(base[key], value)
        else:
            base[key] = value
    return base


@dataclass
class GenerationOptions:
    """Sampling options forwarded verbatim in the ``options`` block of a request."""

    temperature: float = 0.3
    top_p: float = 0.9
    num_predict: int = 2048
    repeat_penalty: Optional[float] = 1.1
    top_k: Optional[int] = 40

    def as_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "temperature": self.temperature,
            "top_p": self.top_p,
            "num_predict": self.num_predict,
        }
        if self.repeat_penalty is not None:
            payload["repeat_penalty"] = self.repeat_penalty
        if self.top_k is not None:
            payload["top_k"] = self.top_k
        return payload


def _text_options() -> GenerationOptions:
    return GenerationOptions(temperature=0.7, top_p=0.9, num_predict=1024, repeat_penalty=None, top_k=None)


@dataclass
class RetrySettings:
    max_retries: int = DEFAULT_MAX_RETRIES
    initial_delay_ms: int = DEFAULT_RETRY_DELAY_MS
    backoff_factor: float = 1.5

    @property
    def initial_delay(self) -> float:
        return self.initial_delay_ms / 1000.0


@dataclass
class LLMSettings:
    """Settings that control how the Ollama backend is reached."""

    base_url: str = DEFAULT_BASE_URL
    model: str = DEFAULT_MODEL
    timeout_ms: int = DEFAULT_TIMEOUT_MS
    retry: RetrySettings = field(default_factory=RetrySettings)
    json_options: GenerationOptions = field(default_factory=GenerationOptions)
    text_options: GenerationOptions = field(default_factory=_text_options)

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000.0


@dataclass
class LoreSettings:
    current_year: int = DEFAULT_CURRENT_YEAR


@dataclass
class Settings:
    """Top level configuration container."""

    llm: LLMSettings = field(default_factory=LLMSettings)
    lore: LoreSettings = field(default_factory=LoreSettings)


def _load_yaml_config(path: Path) -> Dict[str, Any]:
    import yaml

    try:
        with path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}
    except FileNotFoundError:
        logger.warning("Configuration file %s not found", path)
        return {}
    except yaml.YAMLError as exc:
        logger.error("Failed to load configuration from %s: %s", path, exc)
        return {}
    if not isinstance(data, dict):
        logger.error("Configuration root in %s must be a mapping; ignoring it", path)
        return {}
    return data


def _read_env_int(name: str) -> Optional[int]:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return None
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Invalid integer for %s=%s; using default", name, raw)
        return None
    if value <= 0:
        logger.warning("Non-positive value for %s=%s; using default", name, raw)
        return None
    return value


def _load_env_overrides() -> Dict[str, Any]:
    llm: Dict[str, Any] = {}
    overrides: Dict[str, Any] = {"llm": llm, "lore": {}}

    base_url = os.environ.get("OLLAMA_URL")
    if base_url:
        llm["base_url"] = base_url

    model = os.environ.get("OLLAMA_MODEL")
    if model:
        llm["model"] = model

    timeout_ms = _read_env_int("OLLAMA_TIMEOUT")
    if timeout_ms is not None:
        llm["timeout_ms"] = timeout_ms

    retry: Dict[str, Any] = {}
    max_retries = _read_env_int("OLLAMA_MAX_RETRIES")
    if max_retries is not None:
        retry["max_retries"] = max_retries
    delay = _read_env_int("OLLAMA_RETRY_DELAY")
    if delay is not None:
        retry["initial_delay_ms"] = delay
    if retry:
        llm["retry"] = retry

    current_year = _read_env_int("LORE_CURRENT_YEAR")
    if current_year is not None:
        overrides["lore"]["current_year"] = current_year

    return overrides


def _coerce_options(data: Any, defaults: GenerationOptions) -> GenerationOptions:
    if not isinstance(data, dict):
        return defaults
    return GenerationOptions(
        temperature=float(data.get("temperature", defaults.temperature)),
        top_p=float(data.get("top_p", defaults.top_p)),
        num_predict=int(data.get("num_predict", defaults.num_predict)),
        repeat_penalty=data.get("repeat_penalty", defaults.repeat_penalty),
        top_k=data.get("top_k", defaults.top_k),
    )


def _coerce_settings(data: Dict[str, Any]) -> Settings:
    llm_data = data.get("llm", {}) or {}
    retry_data = llm_data.get("retry", {}) or {}
    lore_data = data.get("lore", {}) or {}

    retry = RetrySettings(
        max_retries=int(retry_data.get("max_retries", DEFAULT_MAX_RETRIES)),
        initial_delay_ms=int(retry_data.get("initial_delay_ms", DEFAULT_RETRY_DELAY_MS)),
        backoff_factor=float(retry_data.get("backoff_factor", 1.5)),
    )
    llm = LLMSettings(
        base_url=str(llm_data.get("base_url", DEFAULT_BASE_URL)).rstrip("/"),
        model=str(llm_data.get("model", DEFAULT_MODEL)),
        timeout_ms=int(llm_data.get("timeout_ms", DEFAULT_TIMEOUT_MS)),
        retry=retry,
        json_options=_coerce_options(llm_data.get("json_options"), GenerationOptions()),
        text_options=_coerce_options(llm_data.get("text_options"), _text_options()),
    )
    lore = LoreSettings(current_year=int(lore_data.get("current_year", DEFAULT_CURRENT_YEAR)))
    return Settings(llm=llm, lore=lore)


def _build_settings() -> Settings:
    data: Dict[str, Any] = {}

    config_file = os.environ.get(_CONFIG_ENV_VAR)
    if config_file:
        data = _load_yaml_config(Path(config_file))

    _deep_update(data, _load_env_overrides())
    return _coerce_settings(data)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached configuration settings."""

    settings = _build_settings()
    logger.debug("Loaded settings: %s", json.dumps({
        "base_url": settings.llm.base_url,
        "model": settings.llm.model,
        "timeout_ms": settings.llm.timeout_ms,
        "max_retries": settings.llm.retry.max_retries,
    }))
    return settings


def reset_settings_cache() -> None:
    """Reset the cached settings to force a reload on next access."""

    get_settings.cache_clear()
