import json
import socket
from typing import Callable, List

import httpx
import pytest

from burgscribe.exceptions import GenerationError, TransportError, TransportFailure
from burgscribe.synthesis.ollama_client import OllamaClient, classify_error

BASE_URL = "http://ollama.test:11434"


class RecordingSleep:
    def __init__(self) -> None:
        self.delays: List[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(float(delay))


def make_client(handler: Callable[[httpx.Request], httpx.Response], sleep: RecordingSleep, **kwargs) -> OllamaClient:
    return OllamaClient(
        base_url=BASE_URL,
        model="gemma3",
        transport=httpx.MockTransport(handler),
        sleep=sleep,
        **kwargs,
    )


def reply(status: int, **kwargs) -> Callable[[httpx.Request], httpx.Response]:
    return lambda request: httpx.Response(status, **kwargs)


def scripted(*steps):
    """Handler that plays ``steps`` in order, repeating the last one.

    A step is either a response factory or an ``(exception_type, message)`` pair.
    """
    calls = {"count": 0}

    def handler(request: httpx.Request) -> httpx.Response:
        step = steps[min(calls["count"], len(steps) - 1)]
        calls["count"] += 1
        if isinstance(step, tuple):
            error_type, message = step
            raise error_type(message, request=request)
        return step(request)

    handler.calls = calls
    return handler


@pytest.mark.asyncio
async def test_generate_json_posts_prompt_and_trims_response():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"response": '  {"ok": true}\n', "done": True})

    sleep = RecordingSleep()
    async with make_client(handler, sleep) as client:
        text = await client.generate_json("Describe a tavern")

    assert text == '{"ok": true}'
    assert sleep.delays == []
    request = seen[0]
    assert request.method == "POST"
    assert str(request.url) == f"{BASE_URL}/api/generate"
    body = json.loads(request.content)
    assert body["model"] == "gemma3"
    assert body["prompt"] == "Describe a tavern"
    assert body["stream"] is False
    assert body["options"] == {
        "temperature": 0.3,
        "top_p": 0.9,
        "num_predict": 2048,
        "repeat_penalty": 1.1,
        "top_k": 40,
    }


@pytest.mark.asyncio
async def test_generate_text_uses_prose_options():
    bodies = []

    def handler(request: httpx.Request) -> httpx.Response:
        bodies.append(json.loads(request.content))
        return httpx.Response(200, json={"response": "**Tavern name:** The Bent Nail"})

    async with make_client(handler, RecordingSleep()) as client:
        text = await client.generate_text("Write a tavern")

    assert text == "**Tavern name:** The Bent Nail"
    assert bodies[0]["options"] == {"temperature": 0.7, "top_p": 0.9, "num_predict": 1024}


@pytest.mark.asyncio
async def test_connection_refused_is_retried_with_exponential_delays():
    handler = scripted((httpx.ConnectError, "[Errno 111] Connection refused"))
    sleep = RecordingSleep()

    async with make_client(handler, sleep) as client:
        with pytest.raises(GenerationError) as excinfo:
            await client.generate_json("prompt", max_retries=3, initial_delay=1.0)

    assert handler.calls["count"] == 3
    assert sleep.delays == [1.0, 1.5]
    error = excinfo.value
    assert error.attempts == 3
    assert error.kind is TransportFailure.CONNECTION_REFUSED
    assert "after 3 attempts" in str(error)
    assert BASE_URL in str(error)
    assert "gemma3" in str(error)


@pytest.mark.asyncio
async def test_dns_failure_is_not_retried():
    handler = scripted((httpx.ConnectError, "[Errno -2] Name or service not known"))
    sleep = RecordingSleep()

    async with make_client(handler, sleep, max_retries=6) as client:
        with pytest.raises(GenerationError) as excinfo:
            await client.generate_json("prompt")

    assert handler.calls["count"] == 1
    assert sleep.delays == []
    assert excinfo.value.attempts == 1
    assert excinfo.value.kind is TransportFailure.DNS_FAILURE


@pytest.mark.asyncio
async def test_missing_model_is_retried_then_succeeds(caplog):
    handler = scripted(
        reply(404, json={"error": "model 'gemma3' not found"}),
        reply(200, json={"response": "[1]"}),
    )
    sleep = RecordingSleep()

    async with make_client(handler, sleep, initial_delay=0.5) as client:
        assert await client.generate_json("prompt") == "[1]"

    assert sleep.delays == [0.5]
    retry_logs = [record for record in caplog.records if record.getMessage() == "Ollama attempt failed; retrying"]
    assert retry_logs[0].fields["kind"] == "model_not_found"
    assert retry_logs[0].fields["hint"] == "ollama pull gemma3"


@pytest.mark.asyncio
async def test_blank_response_is_retried():
    handler = scripted(
        reply(200, json={"response": "   \n"}),
        reply(200, json={"response": "done"}),
    )
    async with make_client(handler, RecordingSleep()) as client:
        assert await client.generate_json("prompt") == "done"
    assert handler.calls["count"] == 2


@pytest.mark.asyncio
async def test_blank_responses_exhaust_retries():
    handler = scripted(reply(200, json={"response": ""}))
    async with make_client(handler, RecordingSleep()) as client:
        with pytest.raises(GenerationError) as excinfo:
            await client.generate_json("prompt", max_retries=2)
    assert excinfo.value.kind is TransportFailure.EMPTY_RESPONSE
    assert excinfo.value.attempts == 2


@pytest.mark.parametrize(
    "response",
    [
        reply(200, json={"model": "gemma3"}),
        reply(200, json={"response": 12}),
        reply(200, text="<html>proxy error</html>"),
    ],
)
@pytest.mark.asyncio
async def test_malformed_bodies_are_invalid_responses(response):
    handler = scripted(response)
    async with make_client(handler, RecordingSleep()) as client:
        with pytest.raises(GenerationError) as excinfo:
            await client.generate_json("prompt", max_retries=2)
    assert excinfo.value.kind is TransportFailure.INVALID_RESPONSE
    assert handler.calls["count"] == 2


@pytest.mark.asyncio
async def test_timeouts_are_classified():
    handler = scripted((httpx.ReadTimeout, "timed out"))
    async with make_client(handler, RecordingSleep()) as client:
        with pytest.raises(GenerationError) as excinfo:
            await client.generate_text("prompt", max_retries=1)
    assert excinfo.value.kind is TransportFailure.TIMEOUT
    assert excinfo.value.attempts == 1


@pytest.mark.parametrize(
    "error_type, message",
    [(httpx.RemoteProtocolError, "peer closed connection"), (httpx.ReadError, "connection reset by peer")],
)
@pytest.mark.asyncio
async def test_dropped_connections_are_not_reported_as_refused(error_type, message):
    handler = scripted((error_type, message), reply(200, json={"response": '{"ok": true}'}))
    async with make_client(handler, RecordingSleep()) as client:
        assert await client.generate_json("prompt", max_retries=2) == '{"ok": true}'

    handler = scripted((error_type, message))
    async with make_client(handler, RecordingSleep()) as client:
        with pytest.raises(GenerationError) as excinfo:
            await client.generate_json("prompt", max_retries=2)
    assert excinfo.value.kind is TransportFailure.CONNECTION_LOST
    assert excinfo.value.attempts == 2


@pytest.mark.asyncio
async def test_zero_retries_still_makes_one_attempt():
    handler = scripted(reply(500, text="boom"))
    async with make_client(handler, RecordingSleep()) as client:
        with pytest.raises(GenerationError) as excinfo:
            await client.generate_json("prompt", max_retries=0)
    assert handler.calls["count"] == 1
    assert excinfo.value.kind is TransportFailure.HTTP_ERROR


@pytest.mark.asyncio
async def test_check_connection_reports_installed_model():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/api/version":
            return httpx.Response(200, json={"version": "0.5.7"})
        return httpx.Response(200, json={"models": [{"name": "llama3:8b"}, {"name": "gemma3:latest"}]})

    async with make_client(handler, RecordingSleep()) as client:
        report = await client.check_connection()

    assert report.ok is True
    assert report.version == "0.5.7"
    assert report.model_available is True
    assert report.available_models == ["llama3:8b", "gemma3:latest"]


@pytest.mark.asyncio
async def test_check_connection_flags_missing_model():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/api/version":
            return httpx.Response(200, json={"version": "0.5.7"})
        return httpx.Response(200, json={"models": [{"name": "gemma3-tools:latest"}]})

    async with make_client(handler, RecordingSleep()) as client:
        report = await client.check_connection()

    assert report.ok is True
    assert report.model_available is False


@pytest.mark.asyncio
async def test_check_connection_never_raises():
    async with make_client(lambda request: httpx.Response(500, text="down"), RecordingSleep()) as client:
        report = await client.check_connection()
    assert report.ok is False
    assert "500" in report.error


def test_classify_error_follows_cause_chain():
    request = httpx.Request("POST", f"{BASE_URL}/api/generate")
    try:
        try:
            raise socket.gaierror(-3, "Temporary failure")
        except socket.gaierror as cause:
            raise httpx.ConnectError("connect failed", request=request) from cause
    except httpx.ConnectError as exc:
        error = classify_error(exc)
    assert error.kind is TransportFailure.DNS_FAILURE
    assert error.retryable is False


def test_classify_error_passes_transport_errors_through():
    original = TransportError(TransportFailure.EMPTY_RESPONSE, "empty")
    assert classify_error(original) is original
    assert original.retryable is True
