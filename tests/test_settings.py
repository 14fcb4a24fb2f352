import logging

from burgscribe.utils.settings import get_settings, reset_settings_cache


def test_defaults():
    settings = get_settings()
    assert settings.llm.base_url == "http://127.0.0.1:11434"
    assert settings.llm.model == "gemma3"
    assert settings.llm.timeout_seconds == 30.0
    assert settings.llm.retry.max_retries == 6
    assert settings.llm.retry.initial_delay == 1.0
    assert settings.llm.retry.backoff_factor == 1.5
    assert settings.lore.current_year == 2950


def test_settings_are_cached_until_reset(monkeypatch):
    first = get_settings()
    monkeypatch.setenv("OLLAMA_MODEL", "mistral")
    assert get_settings() is first
    reset_settings_cache()
    assert get_settings().llm.model == "mistral"


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("OLLAMA_URL", "http://gpu-box:11434/")
    monkeypatch.setenv("OLLAMA_TIMEOUT", "60000")
    monkeypatch.setenv("OLLAMA_MAX_RETRIES", "2")
    monkeypatch.setenv("OLLAMA_RETRY_DELAY", "250")
    monkeypatch.setenv("LORE_CURRENT_YEAR", "1492")

    settings = get_settings()
    assert settings.llm.base_url == "http://gpu-box:11434"
    assert settings.llm.timeout_seconds == 60.0
    assert settings.llm.retry.max_retries == 2
    assert settings.llm.retry.initial_delay == 0.25
    assert settings.lore.current_year == 1492


def test_invalid_numbers_fall_back_to_defaults(monkeypatch, caplog):
    monkeypatch.setenv("OLLAMA_MAX_RETRIES", "lots")
    monkeypatch.setenv("OLLAMA_RETRY_DELAY", "-5")
    monkeypatch.setenv("OLLAMA_TIMEOUT", "0")

    with caplog.at_level(logging.WARNING, logger="burgscribe.utils.settings"):
        settings = get_settings()

    assert settings.llm.retry.max_retries == 6
    assert settings.llm.retry.initial_delay_ms == 1000
    assert settings.llm.timeout_ms == 30000
    assert len(caplog.records) == 3


def test_yaml_file_with_environment_precedence(monkeypatch, tmp_path):
    config = tmp_path / "burgscribe.yaml"
    config.write_text(
        "llm:\n"
        "  base_url: http://yaml-host:11434\n"
        "  model: llama3\n"
        "  retry:\n"
        "    max_retries: 4\n"
        "    backoff_factor: 2.0\n"
        "  json_options:\n"
        "    temperature: 0.1\n"
        "lore:\n"
        "  current_year: 1200\n",
        encoding="utf-8",
    )
    monkeypatch.setenv("BURGSCRIBE_CONFIG_FILE", str(config))
    monkeypatch.setenv("OLLAMA_MODEL", "qwen2")

    settings = get_settings()
    assert settings.llm.base_url == "http://yaml-host:11434"
    assert settings.llm.model == "qwen2"
    assert settings.llm.retry.max_retries == 4
    assert settings.llm.retry.backoff_factor == 2.0
    assert settings.llm.json_options.temperature == 0.1
    assert settings.llm.json_options.num_predict == 2048
    assert settings.lore.current_year == 1200


def test_missing_config_file_is_ignored(monkeypatch, tmp_path):
    monkeypatch.setenv("BURGSCRIBE_CONFIG_FILE", str(tmp_path / "absent.yaml"))
    assert get_settings().llm.model == "gemma3"
