from __future__ import annotations

from config import Config


def test_every_provider_has_models_and_credential_env_var() -> None:
    for provider in Config.providers():
        assert Config.models_for(provider)
        assert provider in Config.API_KEY_ENV_VARS


def test_default_model_is_first_option() -> None:
    assert Config.default_model_for("openai") == "gpt-3.5-turbo"
    assert Config.default_model_for("unknown") == ""


def test_get_api_key_reads_environment(monkeypatch) -> None:
    monkeypatch.setenv("GEMINI_API_KEY", "g-secret")
    monkeypatch.delenv("DEEPSEEK_API_KEY", raising=False)
    assert Config.get_api_key("gemini") == "g-secret"
    assert Config.get_api_key("deepseek") == ""
    assert Config.get_api_key("unknown") == ""


def test_validate_selection() -> None:
    assert Config.validate_selection("claude", "claude-2.1") == (True, "Selection valid")
    ok, message = Config.validate_selection("claude", "gpt-4")
    assert not ok
    assert "Anthropic Claude" in message
    assert Config.validate_selection("nope", "x")[0] is False


def test_model_label() -> None:
    assert Config.model_label("gemini", "gemini-2.0-flash") == "Gemini 2.0 Flash"
    assert Config.model_label("gemini", "custom") == "custom"


def test_prefill_api_key_keeps_a_typed_key(monkeypatch) -> None:
    monkeypatch.setenv("OPENAI_API_KEY", "sk-env")
    assert Config.prefill_api_key("openai", "sk-typed") == "sk-typed"
    assert Config.prefill_api_key("openai", "") == "sk-env"
    assert Config.prefill_api_key("openai") == "sk-env"
