import os
from dataclasses import replace
from types import SimpleNamespace

os.environ["ANALYZER_USE_LLM"] = "false"

import pytest

from docgraph import settings as settings_module
from docgraph.llm import Chat
from docgraph.settings import env_bool, env_float, env_int, env_list, env_str, is_placeholder_key, load_settings


def test_env_helpers(monkeypatch):
    monkeypatch.setenv("DG_STR", '"quoted"')
    monkeypatch.setenv("DG_INT", "oops")
    monkeypatch.setenv("DG_FLOAT", "2.5")
    monkeypatch.setenv("DG_BOOL", "Yes")
    monkeypatch.setenv("DG_LIST", "a, b,,c")
    assert env_str("DG_STR") == "quoted"
    assert env_int("DG_INT", 7) == 7
    assert env_float("DG_FLOAT", 0.0) == 2.5
    assert env_bool("DG_BOOL", False) is True
    assert env_list("DG_LIST", "") == ["a", "b", "c"]
    assert env_str("DG_MISSING", "fallback") == "fallback"


@pytest.mark.parametrize("key, expected", [
    (None, True),
    ("", True),
    ("your-openai-api-key", True),
    ("sk-placeholder", True),
    ("sk-live-1234", False),
])
def test_placeholder_keys(key, expected):
    assert is_placeholder_key(key) is expected


def test_unknown_provider_raises(monkeypatch):
    monkeypatch.setenv("LLM_PROVIDER", "bard")
    with pytest.raises(RuntimeError):
        load_settings()


def test_missing_key_is_not_an_error(monkeypatch):
    monkeypatch.setenv("LLM_PROVIDER", "openai")
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    cfg = load_settings()
    assert cfg.provider.llm_available() is False


def test_layout_settings_from_env(monkeypatch):
    monkeypatch.setenv("LAYOUT_PAGE_RADIUS", "750")
    assert load_settings().layout.page_radius == 750.0


class _FakeCompletions:
    def __init__(self):
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        message = SimpleNamespace(content='{"title": "ok"}')
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def test_chat_generate_builds_messages():
    cfg = replace(settings_module.settings,
                  provider=replace(settings_module.settings.provider, provider="openai", openai_api_key="sk-test"))
    chat = Chat(cfg)
    completions = _FakeCompletions()
    chat.client = SimpleNamespace(chat=SimpleNamespace(completions=completions))

    assert chat.generate("hello", system="be brief") == '{"title": "ok"}'
    call = completions.calls[0]
    assert call["messages"] == [
        {"role": "system", "content": "be brief"},
        {"role": "user", "content": "hello"},
    ]
    assert call["temperature"] == cfg.chat.temperature
    assert call["max_tokens"] == cfg.chat.max_tokens
    assert "response_format" not in call

    chat.generate("as json", json_mode=True, max_tokens=50)
    call = completions.calls[1]
    assert call["messages"] == [{"role": "user", "content": "as json"}]
    assert call["response_format"] == {"type": "json_object"}
    assert call["max_tokens"] == 50


def test_unknown_provider_in_chat_raises():
    cfg = replace(settings_module.settings, provider=replace(settings_module.settings.provider, provider="bard"))
    with pytest.raises(RuntimeError):
        Chat(cfg)
