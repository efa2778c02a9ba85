"""
Pytest configuration and fixtures shared by all tests.

Every test runs against a throwaway config directory so the developer's
config/config.json and provider keys in the environment are never used.
"""

from typing import Dict, List, Optional

import pytest

import yaml_translator.config as app_config
from yaml_translator.ai.exceptions import ProviderFatal, TranslationFailure
from yaml_translator.ai.port import TokenUsage, TranslationOutcome, TranslatorConfig


SAMPLE_YAML = """\
app:
  name: My Application
  version: 1.2.3
  description: A simple demo application
server:
  host: example.com
  port: 8080
  url: https://example.com/api
messages:
  welcome: Welcome to our app
  items:
    - First item
    - MAX_RETRY_COUNT
    - Second item
paths:
  bin: /usr/local/bin
enabled: true
"""

SAMPLE_JSON = """\
{
  "title": "Hello world",
  "count": 3,
  "nested": {"label": "Save changes", "code": "ERR_CODE"},
  "list": ["Open file", "42"]
}
"""


class FakeTranslator:
    """
    Deterministic translator port for tests.

    Prefixes every value with "[<target>] ". Values listed in fail_on raise
    TranslationFailure, values in fatal_on raise ProviderFatal.
    """

    def __init__(self, fail_on=(), fatal_on=(), before_call=None):
        self.fail_on = set(fail_on)
        self.fatal_on = set(fatal_on)
        self.before_call = before_call
        self.calls: List[str] = []

    async def translate_one(self, text: str, config: TranslatorConfig) -> TranslationOutcome:
        self.calls.append(text)
        if self.before_call is not None:
            self.before_call(text)
        if text in self.fatal_on:
            raise ProviderFatal("Provider unusable")
        if text in self.fail_on:
            raise TranslationFailure(f"Could not translate {text!r}")
        return TranslationOutcome(
            translated_value=f"[{config.target_language}] {text}",
            usage=TokenUsage(prompt_tokens=10, completion_tokens=5),
        )


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Point the config layer at a temporary directory and clear provider keys."""
    config_dir = tmp_path / "config"
    monkeypatch.setattr(app_config, "CONFIG_DIR", config_dir)
    monkeypatch.setattr(app_config, "CONFIG_FILE", config_dir / "config.json")
    for env_name in app_config.PROVIDER_API_KEY_ENV.values():
        monkeypatch.delenv(env_name, raising=False)
    return config_dir


@pytest.fixture
def settings_with_keys() -> Dict:
    """Application config with usable keys for every provider and no request delay."""
    settings = app_config.load_config()
    for provider in app_config.BUILTIN_PROVIDERS:
        settings[provider]["api_key"] = f"test-{provider}-key"
        settings[provider]["max_retries"] = 3
    settings["translation"]["request_delay"] = 0
    return settings


@pytest.fixture
def zh_config() -> TranslatorConfig:
    return TranslatorConfig(target_language="zh-CN")


@pytest.fixture
def fake_translator() -> FakeTranslator:
    return FakeTranslator()


def make_config(target: str = "zh-CN", source: Optional[str] = None, glossary=None, context=None) -> TranslatorConfig:
    return TranslatorConfig(
        target_language=target,
        source_language=source,
        domain_context=context,
        glossary=glossary or {},
    )
