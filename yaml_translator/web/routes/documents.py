"""Document inspection API routes."""

from __future__ import annotations

from typing import Any, Dict

from flask import Blueprint, jsonify, request

from yaml_translator.ai.port import TranslatorConfig
from yaml_translator.config import load_config
from yaml_translator.core.document import DocumentFormat, validate_upload
from yaml_translator.core.exceptions import ParseFailure
from yaml_translator.logger import get_logger
from yaml_translator.translation.manager import TranslationManager

documents_bp = Blueprint("documents", __name__)
logger = get_logger(__name__)

TEXT_FIELDS = (
    "filename",
    "format",
    "target_language",
    "source_language",
    "context",
    "provider",
    "model",
    "api_key",
    "base_url",
)


def read_document_payload(data: Dict[str, Any]):
    """
    Pull (content, filename, fmt) out of a request body.

    Returns an error message instead when the payload is unusable.
    """
    if not isinstance(data, dict):
        return None, "Request body must be a JSON object"

    for name in TEXT_FIELDS:
        value = data.get(name)
        if value is not None and not isinstance(value, str):
            return None, f"{name} must be a string"

    content = data.get("content")
    if not isinstance(content, str) or not content.strip():
        return None, "Document content is required"

    filename = data.get("filename")
    if filename:
        max_upload_mb = load_config().get("translation", {}).get("max_upload_mb", 10)
        error = validate_upload(filename, len(content.encode("utf-8")), max_upload_mb)
        if error:
            return None, error

    fmt = data.get("format")
    if fmt is not None and fmt not in [f.value for f in DocumentFormat]:
        return None, f"Unsupported format: {fmt}"

    return (content, filename, fmt), None


@documents_bp.post("/parse")
def parse_document_route():
    """Parse a document and list its translatable values with an estimate."""
    data: Dict[str, Any] = request.get_json(silent=True) or {}
    payload, error = read_document_payload(data)
    if error:
        return jsonify({"error": error}), 400
    content, filename, fmt = payload

    manager = TranslationManager(
        TranslatorConfig(target_language=data.get("target_language") or ""),
        provider=data.get("provider"),
        model=data.get("model"),
    )
    try:
        analysis = manager.analyze(content, fmt=fmt, filename=filename)
    except ParseFailure as e:
        logger.warning("Document parse failed: %s", e)
        return jsonify(e.to_dict()), 400

    return jsonify(analysis.to_dict())
