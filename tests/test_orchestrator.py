"""Tests for the batch orchestrator."""

import asyncio
import copy

import pytest
import yaml

from yaml_translator.ai.exceptions import TranslationFailure
from yaml_translator.ai.port import TranslatorConfig
from yaml_translator.core.document import DocumentFormat, parse_document
from yaml_translator.core.walker import extract_leaves
from yaml_translator.translation.models import BATCH_ERROR_ADDRESS, UNIT_COMPLETED, UNIT_FAILED
from yaml_translator.translation.orchestrator import BatchOrchestrator
from yaml_translator.translation.progress import (
    PHASE_CANCELLED,
    PHASE_COMPLETED,
    PHASE_ERROR,
    PHASE_TRANSLATING,
)

from conftest import SAMPLE_JSON, SAMPLE_YAML, FakeTranslator


@pytest.fixture
def document():
    return yaml.safe_load(SAMPLE_YAML)


@pytest.fixture
def leaves(document):
    return extract_leaves(document)


def make_orchestrator(translator, fmt=DocumentFormat.YAML):
    return BatchOrchestrator(translator, fmt=fmt, request_delay=0)


@pytest.mark.asyncio
async def test_translates_every_leaf(document, leaves, zh_config, fake_translator):
    snapshot = copy.deepcopy(document)
    result = await make_orchestrator(fake_translator).run(document, leaves, zh_config)

    assert result.success is True
    assert result.translated_count == 5
    assert result.errors == []
    assert fake_translator.calls == [leaf.original_value for leaf in leaves]
    assert result.document["app"]["name"] == "[zh-CN] My Application"
    assert result.document["messages"]["items"][1] == "MAX_RETRY_COUNT"
    assert result.document["server"] == document["server"]
    assert document == snapshot
    assert yaml.safe_load(result.content) == result.document
    assert result.usage.total_tokens == 75


@pytest.mark.asyncio
async def test_failed_leaf_keeps_original_value(document, leaves, zh_config):
    translator = FakeTranslator(fail_on={leaves[2].original_value})
    result = await make_orchestrator(translator).run(document, leaves, zh_config)

    assert result.success is True
    assert result.translated_count == 4
    assert result.failure_count == 1
    assert [error.address for error in result.errors] == ["messages.welcome"]
    assert "Could not translate" in result.errors[0].reason
    assert result.document["messages"]["welcome"] == "Welcome to our app"
    assert result.document["messages"]["items"][2] == "[zh-CN] Second item"
    assert [unit.status for unit in result.units].count(UNIT_FAILED) == 1
    assert len(translator.calls) == 5


@pytest.mark.asyncio
async def test_unexpected_port_error_is_a_leaf_failure(document, leaves, zh_config):
    class FlakyTranslator(FakeTranslator):
        async def translate_one(self, text, config):
            if text == "My Application":
                raise RuntimeError("socket closed")
            return await super().translate_one(text, config)

    result = await make_orchestrator(FlakyTranslator()).run(document, leaves, zh_config)

    assert result.success is True
    assert result.translated_count == 4
    assert result.errors[0].address == "app.name"
    assert result.errors[0].reason == "socket closed"


@pytest.mark.asyncio
async def test_progress_events_are_ordered(document, leaves, zh_config, fake_translator):
    events = []
    await make_orchestrator(fake_translator).run(document, leaves, zh_config, on_progress=events.append)

    translating = [event for event in events if event.phase == PHASE_TRANSLATING]
    assert len(translating) == 2 * len(leaves)
    indices = [event.index for event in translating]
    assert indices == sorted(indices)
    assert translating[0].translated_value is None
    assert translating[1].translated_value == "[zh-CN] My Application"
    assert translating[0].current_address == "app.name"

    final = events[-1]
    assert final.phase == PHASE_COMPLETED
    assert final.index == final.total == 5
    assert final.percentage == 100


@pytest.mark.asyncio
async def test_failed_leaf_emits_single_event(document, leaves, zh_config):
    events = []
    translator = FakeTranslator(fail_on={"My Application"})
    await make_orchestrator(translator).run(document, leaves, zh_config, on_progress=events.append)

    first_leaf_events = [event for event in events if event.current_address == "app.name"]
    assert len(first_leaf_events) == 1
    assert events[-1].failure_count == 1


@pytest.mark.asyncio
async def test_cancel_before_second_leaf(document, leaves, zh_config, fake_translator):
    events = []

    def cancel_check():
        return len(fake_translator.calls) >= 1

    result = await make_orchestrator(fake_translator).run(
        document, leaves, zh_config, on_progress=events.append, cancel_check=cancel_check
    )

    assert result.success is False
    assert result.cancelled is True
    assert result.document is None
    assert result.content is None
    assert result.translated_count == 1
    assert fake_translator.calls == ["My Application"]
    assert result.errors[-1].address == BATCH_ERROR_ADDRESS
    assert events[-1].phase == PHASE_CANCELLED
    assert events[-1].index == 1


@pytest.mark.asyncio
async def test_cancel_before_first_leaf_makes_no_calls(document, leaves, zh_config, fake_translator):
    result = await make_orchestrator(fake_translator).run(
        document, leaves, zh_config, cancel_check=lambda: True
    )

    assert result.cancelled is True
    assert result.translated_count == 0
    assert fake_translator.calls == []


@pytest.mark.asyncio
async def test_provider_fatal_aborts_batch(document, leaves, zh_config):
    events = []
    translator = FakeTranslator(fatal_on={leaves[2].original_value})
    result = await make_orchestrator(translator).run(document, leaves, zh_config, on_progress=events.append)

    assert result.success is False
    assert result.cancelled is False
    assert result.translated_count == 2
    assert len(result.errors) == 1
    assert result.errors[0].address == BATCH_ERROR_ADDRESS
    assert result.failure_count == 0
    assert len(translator.calls) == 3
    assert events[-1].phase == PHASE_ERROR
    assert events[-1].index == 2


@pytest.mark.asyncio
async def test_missing_target_language_fails_before_any_call(document, leaves, fake_translator):
    result = await make_orchestrator(fake_translator).run(document, leaves, TranslatorConfig(target_language=""))

    assert result.success is False
    assert result.errors[0].address == BATCH_ERROR_ADDRESS
    assert fake_translator.calls == []


@pytest.mark.asyncio
async def test_no_leaves_skips_translator(zh_config):
    document = {"port": 8080, "url": "https://example.com"}
    events = []
    result = await make_orchestrator(None).run(document, [], zh_config, on_progress=events.append)

    assert result.success is True
    assert result.translated_count == 0
    assert result.document == document
    assert yaml.safe_load(result.content) == document
    assert events == []


@pytest.mark.asyncio
async def test_runs_are_idempotent(document, leaves, zh_config):
    orchestrator = make_orchestrator(FakeTranslator())
    first = await orchestrator.run(document, leaves, zh_config)
    second = await orchestrator.run(document, leaves, zh_config)

    assert first.document == second.document
    assert first.content == second.content


@pytest.mark.asyncio
async def test_unchanged_values_are_not_patched(document, leaves, zh_config):
    class EchoTranslator(FakeTranslator):
        async def translate_one(self, text, config):
            outcome = await super().translate_one(text, config)
            return type(outcome)(translated_value=text, usage=outcome.usage)

    result = await make_orchestrator(EchoTranslator()).run(document, leaves, zh_config)

    assert result.document == document
    assert all(unit.status == UNIT_COMPLETED for unit in result.units)


@pytest.mark.asyncio
async def test_delay_between_calls(document, leaves, zh_config, fake_translator, monkeypatch):
    delays = []
    real_sleep = asyncio.sleep

    async def fake_sleep(seconds, *args, **kwargs):
        delays.append(seconds)
        await real_sleep(0)

    monkeypatch.setattr("yaml_translator.translation.orchestrator.asyncio.sleep", fake_sleep)
    orchestrator = BatchOrchestrator(fake_translator, request_delay=0.25)
    await orchestrator.run(document, leaves, zh_config)

    assert delays.count(0.25) == len(leaves) - 1


@pytest.mark.asyncio
async def test_json_document_round_trip(zh_config, fake_translator):
    document = parse_document(SAMPLE_JSON, DocumentFormat.JSON)
    leaves = extract_leaves(document)
    result = await make_orchestrator(fake_translator, fmt=DocumentFormat.JSON).run(document, leaves, zh_config)

    translated = parse_document(result.content, DocumentFormat.JSON)
    assert translated["title"] == "[zh-CN] Hello world"
    assert translated["nested"] == {"label": "[zh-CN] Save changes", "code": "ERR_CODE"}
    assert translated["list"] == ["[zh-CN] Open file", "42"]
    assert translated["count"] == 3


@pytest.mark.asyncio
async def test_aliased_leaf_failure_keeps_its_own_original(zh_config):
    document = yaml.safe_load("base: &b\n  title: Hello there\ncopy: *b\n")
    leaves = extract_leaves(document)
    assert [leaf.path for leaf in leaves] == ["base.title", "copy.title"]

    class FailFirstTranslator(FakeTranslator):
        async def translate_one(self, text, config):
            if not self.calls:
                self.calls.append(text)
                raise TranslationFailure("rate limited")
            return await super().translate_one(text, config)

    result = await make_orchestrator(FailFirstTranslator()).run(document, leaves, zh_config)

    assert [error.address for error in result.errors] == ["base.title"]
    assert result.document["base"]["title"] == "Hello there"
    assert result.document["copy"]["title"] == "[zh-CN] Hello there"
    assert yaml.safe_load(result.content) == result.document
    assert document["copy"]["title"] == "Hello there"
