"""Translation job API routes."""

from __future__ import annotations

from typing import Any, Dict

from flask import Blueprint, jsonify, request

from yaml_translator.ai.exceptions import ProviderFatal
from yaml_translator.ai.port import TranslatorConfig
from yaml_translator.logger import get_logger
from yaml_translator.web import tasks
from yaml_translator.web.routes.documents import read_document_payload

translation_bp = Blueprint("translation", __name__)
logger = get_logger(__name__)


@translation_bp.post("")
def start_translation_job():
    """Start an asynchronous translation job for a document."""
    data: Dict[str, Any] = request.get_json(silent=True) or {}
    payload, error = read_document_payload(data)
    if error:
        return jsonify({"error": error}), 400
    content, filename, fmt = payload

    glossary = data.get("glossary") or {}
    if not isinstance(glossary, dict):
        return jsonify({"error": "Glossary must be an object of term -> translation"}), 400

    config = TranslatorConfig.from_dict(data)
    if not config.target_language:
        return jsonify({"error": "Target language is required"}), 400

    ai_provider = data.get("provider") or None
    model_override = data.get("model") or None

    # Accept "provider:model" shorthand
    if ai_provider and ":" in ai_provider:
        ai_provider, _, model_from_provider = ai_provider.partition(":")
        if model_override is None and model_from_provider:
            model_override = model_from_provider

    manager = tasks.build_manager(
        config,
        provider=ai_provider,
        model=model_override,
        api_key=data.get("api_key") or None,
        base_url=data.get("base_url") or None,
    )

    # Validate AI configuration before accepting the job
    try:
        manager.get_translator()
    except ProviderFatal as e:
        logger.warning("AI configuration validation failed: %s", e)
        return jsonify(e.to_dict()), 400

    job = tasks.create_translation_job(manager, content, filename=filename, fmt=fmt)
    return jsonify({"job_id": job.job_id, "job": job.to_dict()}), 202


@translation_bp.post("/cancel")
def cancel_translation_job():
    """Cancel a running translation job."""
    data: Dict[str, Any] = request.get_json(silent=True) or {}
    job_id = data.get("job_id")
    if not job_id:
        return jsonify({"error": "job_id is required"}), 400

    if not tasks.get_job(job_id):
        return jsonify({"error": "Job not found or expired"}), 404

    if tasks.cancel_job(job_id):
        return jsonify({"status": "cancellation_requested", "job_id": job_id})
    return jsonify({"error": "Job already finished and cannot be cancelled"}), 400


@translation_bp.get("/progress")
def get_translation_progress():
    """Return status for an asynchronous translation job."""
    job_id = request.args.get("job_id")
    if not job_id:
        return jsonify({"error": "job_id is required"}), 400

    job = tasks.get_job(job_id)
    if not job:
        return jsonify({"error": "Job not found or expired"}), 404

    return jsonify(job.to_dict())
