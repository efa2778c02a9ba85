"""Tests for the Flask API and background jobs."""

import threading

import pytest

from yaml_translator.translation.manager import TranslationManager
from yaml_translator.web import create_app, tasks
from yaml_translator.web.routes import providers as providers_routes

from conftest import SAMPLE_YAML, FakeTranslator

JOB_TIMEOUT = 5


@pytest.fixture
def client():
    app = create_app()
    app.config["TESTING"] = True
    return app.test_client()


@pytest.fixture
def translator(monkeypatch):
    """Route every job through a FakeTranslator instead of a real provider."""
    fake = FakeTranslator()

    def build_manager(config, provider=None, model=None, api_key=None, base_url=None):
        return TranslationManager(config, translator=fake, provider=provider, model=model, request_delay=0)

    monkeypatch.setattr(tasks, "build_manager", build_manager)
    return fake


def start_job(client, **overrides):
    body = {"content": SAMPLE_YAML, "filename": "app.yml", "target_language": "zh-CN"}
    body.update(overrides)
    return client.post("/api/translate", json=body)


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.get_json()["status"] == "ok"


def test_parse_document(client):
    response = client.post("/api/documents/parse", json={"content": SAMPLE_YAML, "filename": "app.yml"})

    assert response.status_code == 200
    data = response.get_json()
    assert data["format"] == "yaml"
    assert [leaf["address"] for leaf in data["leaves"]][:2] == ["app.name", "app.description"]
    assert data["estimate"]["item_count"] == 5


@pytest.mark.parametrize("body,message", [
    ({}, "Document content is required"),
    ({"content": "a: Hello there", "filename": "notes.txt"}, "supported"),
    ({"content": "a: Hello there", "format": "toml"}, "Unsupported format"),
])
def test_parse_document_rejects_bad_payload(client, body, message):
    response = client.post("/api/documents/parse", json=body)
    assert response.status_code == 400
    assert message in response.get_json()["error"]


def test_parse_document_reports_parse_failure(client):
    response = client.post("/api/documents/parse", json={"content": "title: a: b\n"})

    assert response.status_code == 400
    assert response.get_json()["code"] == "parse_failure"


def test_translation_job_completes(client, translator):
    response = start_job(client, glossary={"app": "应用"}, context="Mobile app")
    assert response.status_code == 202
    job_id = response.get_json()["job_id"]

    assert tasks.get_job(job_id).wait(JOB_TIMEOUT)

    progress = client.get(f"/api/translate/progress?job_id={job_id}")
    assert progress.status_code == 200
    job = progress.get_json()
    assert job["state"] == "completed"
    assert job["target_language"] == "zh-CN"
    assert job["result"]["translated_count"] == 5
    assert "[zh-CN] Welcome to our app" in job["result"]["content"]
    assert job["progress"]["phase"] == "completed"
    assert len(job["progress_history"]) == 11
    assert "done" not in job


def test_translation_job_with_failed_leaf(client, translator):
    translator.fail_on.add("Welcome to our app")
    job_id = start_job(client).get_json()["job_id"]
    assert tasks.get_job(job_id).wait(JOB_TIMEOUT)

    job = client.get(f"/api/translate/progress?job_id={job_id}").get_json()
    assert job["state"] == "completed"
    assert job["failure_count"] == 1
    assert job["result"]["errors"][0]["address"] == "messages.welcome"


def test_translation_job_parse_failure(client, translator):
    job_id = start_job(client, content="title: a: b\n", filename=None).get_json()["job_id"]
    assert tasks.get_job(job_id).wait(JOB_TIMEOUT)

    job = client.get(f"/api/translate/progress?job_id={job_id}").get_json()
    assert job["state"] == "failed"
    assert job["error"].startswith("Invalid YAML")


def test_translation_requires_target_language(client, translator):
    response = start_job(client, target_language="  ")
    assert response.status_code == 400
    assert "Target language" in response.get_json()["error"]


def test_translation_rejects_non_mapping_glossary(client, translator):
    response = start_job(client, glossary=["app"])
    assert response.status_code == 400


def test_translation_without_api_key_is_rejected(client):
    response = start_job(client, provider="openai")

    assert response.status_code == 400
    data = response.get_json()
    assert data["code"] == "ai_config_missing"
    assert data["details"]["missing_field"] == "api_key"


def test_cancel_running_job(client, translator):
    started = threading.Event()
    release = threading.Event()

    def block_first_call(text):
        if not started.is_set():
            started.set()
            release.wait(JOB_TIMEOUT)

    translator.before_call = block_first_call
    job_id = start_job(client).get_json()["job_id"]
    assert started.wait(JOB_TIMEOUT)

    response = client.post("/api/translate/cancel", json={"job_id": job_id})
    release.set()
    assert response.status_code == 200
    assert response.get_json()["status"] == "cancellation_requested"
    assert tasks.get_job(job_id).wait(JOB_TIMEOUT)

    job = client.get(f"/api/translate/progress?job_id={job_id}").get_json()
    assert job["state"] == "cancelled"
    assert job["result"]["cancelled"] is True
    assert job["result"]["content"] is None
    assert job["result"]["translated_count"] == 1
    assert len(translator.calls) == 1

    again = client.post("/api/translate/cancel", json={"job_id": job_id})
    assert again.status_code == 400


def test_progress_and_cancel_validation(client):
    assert client.get("/api/translate/progress").status_code == 400
    assert client.get("/api/translate/progress?job_id=nope").status_code == 404
    assert client.post("/api/translate/cancel", json={}).status_code == 400
    assert client.post("/api/translate/cancel", json={"job_id": "nope"}).status_code == 404


def test_list_providers(client):
    data = client.get("/api/providers").get_json()
    assert [p["id"] for p in data["providers"]] == ["openai", "claude", "gemini"]


def test_list_models(client):
    response = client.get("/api/providers/claude/models")
    assert response.status_code == 200
    assert "claude-3-haiku-20240307" in response.get_json()["models"]

    assert client.get("/api/providers/openai/models").get_json()["models"] == ["gpt-4", "gpt-3.5-turbo"]
    assert client.get("/api/providers/mistral/models").status_code == 404


def test_validate_key(client, monkeypatch):
    async def fake_validate(provider, api_key, base_url=None):
        return api_key == "good"

    monkeypatch.setattr(providers_routes, "validate_api_key", fake_validate)

    assert client.post("/api/providers/openai/validate", json={"api_key": "good"}).get_json()["valid"] is True
    assert client.post("/api/providers/openai/validate", json={"api_key": "bad"}).get_json()["valid"] is False
    assert client.post("/api/providers/openai/validate", json={}).status_code == 400


def test_settings_round_trip(client):
    response = client.put("/api/settings", json={"config": {
        "ai_provider": "claude",
        "claude": {"api_key": "sk-ant-1234567890"},
        "translation": {"request_delay": 0.5},
    }})
    assert response.status_code == 200

    data = client.get("/api/settings").get_json()
    assert data["config"]["ai_provider"] == "claude"
    assert data["config"]["claude"]["api_key"] == "sk-a*********7890"
    assert data["config"]["openai"]["api_key"] == ""
    assert data["config"]["translation"]["request_delay"] == 0.5
    assert data["config"]["translation"]["max_tokens"] == 2000


def test_settings_keep_key_when_masked(client):
    client.put("/api/settings", json={"config": {"gemini": {"api_key": "gm-secret-key-1"}}})
    client.put("/api/settings", json={"config": {"gemini": {"api_key": "gm-s*******ey-1", "timeout": 60}}})

    data = client.get("/api/settings").get_json()
    assert data["config"]["gemini"]["api_key"] == "gm-s*******ey-1"
    assert data["config"]["gemini"]["timeout"] == 60


@pytest.mark.parametrize("config,message", [
    ({"ai_provider": "mistral"}, "Invalid AI provider"),
    ({"log_mode": "verbose"}, "log_mode"),
    ({"openai": {"max_retries": 0}}, "max_retries"),
    ({"translation": {"request_delay": -1}}, "request_delay"),
])
def test_settings_validation(client, config, message):
    response = client.put("/api/settings", json={"config": config})
    assert response.status_code == 400
    assert message in response.get_json()["error"]


@pytest.mark.parametrize("field", ["target_language", "provider", "model", "api_key", "context"])
def test_translation_rejects_non_string_fields(client, translator, field):
    response = start_job(client, **{field: 5})

    assert response.status_code == 400
    assert response.get_json()["error"] == f"{field} must be a string"
    assert translator.calls == []


def test_parse_document_rejects_non_object_body(client):
    response = client.post("/api/documents/parse", json=["content"])
    assert response.status_code == 400


def test_settings_rejects_non_string_api_key(client):
    response = client.put("/api/settings", json={"config": {"openai": {"api_key": 12345}}})

    assert response.status_code == 400
    assert "api_key must be a string" in response.get_json()["error"]
