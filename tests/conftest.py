from typing import Any, List, Union

import pytest

from burgscribe.models.lore_schemas import Settlement
from burgscribe.utils.settings import reset_settings_cache

_ENV_VARS = (
    "OLLAMA_URL",
    "OLLAMA_MODEL",
    "OLLAMA_TIMEOUT",
    "OLLAMA_MAX_RETRIES",
    "OLLAMA_RETRY_DELAY",
    "LORE_CURRENT_YEAR",
    "BURGSCRIBE_CONFIG_FILE",
)


@pytest.fixture(autouse=True)
def _clear_settings(monkeypatch: pytest.MonkeyPatch):
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    reset_settings_cache()
    yield
    reset_settings_cache()


@pytest.fixture
def settlement() -> Settlement:
    return Settlement.model_validate(
        {
            "Burg": "Thornwick",
            "Culture": "Thaumavori",
            "Province Full Name": "Duchy of Vell",
            "State Full Name": "Kingdom of Arn",
            "Population": "2,450",
            "Biome": "temperate",
        }
    )


class StubClient:
    """Stands in for OllamaClient; replays queued replies or raises queued errors."""

    def __init__(self, json_replies: List[Union[str, Exception]] = (), text_replies: List[Union[str, Exception]] = ()):
        self.json_replies = list(json_replies)
        self.text_replies = list(text_replies)
        self.json_prompts: List[str] = []
        self.text_prompts: List[str] = []

    async def __aenter__(self) -> "StubClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        return None

    @staticmethod
    def _next(queue: List[Union[str, Exception]]) -> Any:
        reply = queue.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply

    async def generate_json(self, prompt: str, **_: Any) -> str:
        self.json_prompts.append(prompt)
        return self._next(self.json_replies)

    async def generate_text(self, prompt: str, **_: Any) -> str:
        self.text_prompts.append(prompt)
        return self._next(self.text_replies)


@pytest.fixture
def stub_client():
    return StubClient
