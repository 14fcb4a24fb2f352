import io
import json

import httpx
import pytest

from burgscribe.cli import generate_lore
from burgscribe.synthesis.ollama_client import OllamaClient


@pytest.fixture(autouse=True)
def _quiet_logging(monkeypatch):
    # main() reconfigures the root logger; keep pytest's capture handlers in place.
    monkeypatch.setattr(generate_lore, "setup_logging", lambda **_: None)


def test_parse_repairs_a_saved_response(tmp_path, capsys):
    saved = tmp_path / "reply.txt"
    saved.write_text(
        'Sure!\n{"tavern": {"name": "The Lantern", "description": "The sign reads "Welcome" here"}}',
        encoding="utf-8",
    )

    assert generate_lore.main(["parse", str(saved), "--kind", "tavern"]) == 0

    value = json.loads(capsys.readouterr().out)
    assert value["tavern"]["description"] == 'The sign reads "Welcome" here'


def test_parse_reads_stdin(monkeypatch, capsys):
    monkeypatch.setattr("sys.stdin", io.StringIO('{"events": [{"year": 900, "description": "Founded"}]'))

    assert generate_lore.main(["parse", "--kind", "events"]) == 0

    assert json.loads(capsys.readouterr().out) == {"events": [{"year": 900, "description": "Founded"}]}


def test_parse_failure_exit_code(tmp_path, capsys):
    saved = tmp_path / "reply.txt"
    saved.write_text("The model declined to answer.", encoding="utf-8")

    assert generate_lore.main(["parse", str(saved), "--kind", "leader"]) == 1
    assert "Could not parse response" in capsys.readouterr().err


def test_generation_requires_a_settlement():
    with pytest.raises(SystemExit) as excinfo:
        generate_lore.main(["tavern"])
    assert excinfo.value.code == 2


def test_leader_markdown(monkeypatch, capsys, stub_client):
    client = stub_client(json_replies=['{"name": "Edda Voss", "title": "Reeve", "description": "Keeps the peace."}'])
    monkeypatch.setattr(generate_lore, "_make_client", lambda args: client)

    exit_code = generate_lore.main(["--markdown", "leader", "--burg", "Thornwick", "--culture", "Dwarves"])

    assert exit_code == 0
    assert capsys.readouterr().out.strip() == "- **Edda Voss**\n- **Reeve**\n\nKeeps the peace."
    assert "Naming Style: Dwarven" in client.json_prompts[0]


def test_events_json_from_settlement_file(monkeypatch, tmp_path, capsys, stub_client):
    row = tmp_path / "burg.json"
    row.write_text(json.dumps({"Burg": "Thornwick", "Province Full Name": "Duchy of Vell"}), encoding="utf-8")
    client = stub_client(json_replies=['{"events": [{"year": "1204 MR", "description": "Walls raised."}]}'])
    monkeypatch.setattr(generate_lore, "_make_client", lambda args: client)

    exit_code = generate_lore.main(["events", "--settlement-file", str(row), "--count", "1", "--founding-year", "1200"])

    assert exit_code == 0
    assert json.loads(capsys.readouterr().out) == [
        {"year": 1204, "description": "Walls raised.", "event_year": "1204 MR"}
    ]


def test_health_exit_code_reflects_model_availability(monkeypatch, capsys):
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/api/version":
            return httpx.Response(200, json={"version": "0.5.7"})
        return httpx.Response(200, json={"models": [{"name": "llama3:8b"}]})

    monkeypatch.setattr(
        generate_lore,
        "_make_client",
        lambda args: OllamaClient(base_url="http://ollama.test", model="gemma3", transport=httpx.MockTransport(handler)),
    )

    assert generate_lore.main(["health"]) == 1
    report = json.loads(capsys.readouterr().out)
    assert report["ok"] is True
    assert report["model_available"] is False
    assert report["available_models"] == ["llama3:8b"]


def test_features_markdown(monkeypatch, capsys, stub_client):
    client = stub_client(
        json_replies=[
            '{"feature": {"name": "Salt Wharf", "description": "Gulls wheel over the nets."}}',
            '{"landmark": {"name": "Old Mill", "description": "Grinds grain for the valley."}}',
        ]
    )
    monkeypatch.setattr(generate_lore, "_make_client", lambda args: client)

    exit_code = generate_lore.main(
        ["--markdown", "--seed", "3", "features", "--burg", "Thornwick", "--population", "120", "--civic", "Port"]
    )

    assert exit_code == 0
    assert capsys.readouterr().out.strip() == (
        "### Salt Wharf\nGulls wheel over the nets.\n\n### Old Mill\nGrinds grain for the valley."
    )
    assert "seaport district of Thornwick" in client.json_prompts[0]


def test_capital_description_json(monkeypatch, capsys, stub_client):
    client = stub_client(json_replies=['{"description": {"text": "Banners hang from every tower."}}'])
    monkeypatch.setattr(generate_lore, "_make_client", lambda args: client)

    exit_code = generate_lore.main(
        ["description", "--burg", "Arnhold", "--state", "Kingdom of Arn", "--capital", "--climate", "cold"]
    )

    assert exit_code == 0
    assert json.loads(capsys.readouterr().out) == "Banners hang from every tower."
    assert "capital city of Kingdom of Arn" in client.json_prompts[0]
    assert "- Climate: cold" in client.json_prompts[0]
