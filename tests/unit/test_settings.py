import json

import pytest
from pydantic import ValidationError

from config import ProviderConfig, Settings, load_provider_config
from evaluation_provider import FallbackEvaluationProvider, LlmEvaluationProvider, build_provider

ROUTES = {
    "llm_routes": {
        "primary": {"name": "primary", "base_url": "http://llm.local", "model": "model-a"},
        "backup": {"name": "backup", "base_url": "http://llm.local", "model": "model-b"},
    },
    "candidates": ["primary", "backup"],
}


def test_defaults():
    cfg = Settings(_env_file=None)
    assert cfg.DB_PATH == "data/interview.db"
    assert cfg.PROVIDER_CONFIG_PATH is None
    assert cfg.ANSWER_MAX_DURATION_MS == 600000
    assert cfg.SAVE_MAX_ATTEMPTS == 3


def test_env_override(monkeypatch):
    monkeypatch.setenv("SAVE_MAX_ATTEMPTS", "5")
    monkeypatch.setenv("CLIENT_URL", "https://interviews.example.com")
    cfg = Settings(_env_file=None)
    assert cfg.SAVE_MAX_ATTEMPTS == 5
    assert cfg.CLIENT_URL == "https://interviews.example.com"


def test_invalid_attempts_rejected():
    with pytest.raises(ValidationError):
        Settings(_env_file=None, SAVE_MAX_ATTEMPTS=0)


def test_routes_in_candidate_order(tmp_path):
    path = tmp_path / "providers.json"
    path.write_text(json.dumps(ROUTES), encoding="utf-8")
    config = load_provider_config(path)
    assert [route.model for route in config.ordered_routes()] == ["model-a", "model-b"]
    assert config.ordered_routes()[0].endpoint == "/v1/chat/completions"


def test_unknown_candidate_rejected():
    with pytest.raises(ValidationError):
        ProviderConfig.model_validate({"llm_routes": ROUTES["llm_routes"], "candidates": ["missing"]})
    with pytest.raises(ValidationError):
        ProviderConfig.model_validate({"llm_routes": ROUTES["llm_routes"], "candidates": []})


def test_provider_selection(tmp_path):
    assert isinstance(build_provider(Settings(_env_file=None)), FallbackEvaluationProvider)

    missing = Settings(_env_file=None, PROVIDER_CONFIG_PATH=str(tmp_path / "absent.json"))
    assert isinstance(build_provider(missing), FallbackEvaluationProvider)

    path = tmp_path / "providers.json"
    path.write_text(json.dumps(ROUTES), encoding="utf-8")
    live = Settings(_env_file=None, PROVIDER_CONFIG_PATH=str(path))
    assert isinstance(build_provider(live), LlmEvaluationProvider)


def test_broken_provider_config_fails_startup(tmp_path):
    path = tmp_path / "providers.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(ValidationError):
        build_provider(Settings(_env_file=None, PROVIDER_CONFIG_PATH=str(path)))
