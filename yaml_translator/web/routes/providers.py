"""Provider discovery API routes."""

from __future__ import annotations

import asyncio
from typing import Any, Dict

from flask import Blueprint, jsonify, request

from yaml_translator.ai.providers import AIProvider, get_available_models, validate_api_key
from yaml_translator.config import API_KEY_PLACEHOLDER, BUILTIN_PROVIDER_DISPLAY_NAMES, load_config
from yaml_translator.logger import get_logger

providers_bp = Blueprint("providers", __name__)
logger = get_logger(__name__)


@providers_bp.get("")
def list_providers():
    """List supported providers."""
    config = load_config()
    return jsonify({
        "default": config.get("ai_provider"),
        "providers": [
            {"id": p.value, "name": BUILTIN_PROVIDER_DISPLAY_NAMES[p.value]}
            for p in AIProvider
        ],
    })


@providers_bp.get("/<provider>/models")
def list_models(provider: str):
    """List models available for a provider."""
    try:
        ai_provider = AIProvider(provider)
    except ValueError:
        return jsonify({"error": f"Unsupported AI provider: {provider}"}), 404

    provider_config = load_config().get(ai_provider.value, {})
    api_key = request.args.get("api_key") or provider_config.get("api_key")
    if api_key == API_KEY_PLACEHOLDER:
        api_key = None
    base_url = request.args.get("base_url") or provider_config.get("api_url")
    models = asyncio.run(get_available_models(ai_provider, api_key=api_key, base_url=base_url))
    return jsonify({"provider": ai_provider.value, "models": models})


@providers_bp.post("/<provider>/validate")
def validate_key(provider: str):
    """Check an API key against the provider."""
    try:
        ai_provider = AIProvider(provider)
    except ValueError:
        return jsonify({"error": f"Unsupported AI provider: {provider}"}), 404

    data: Dict[str, Any] = request.get_json(silent=True) or {}
    api_key = data.get("api_key")
    if not api_key:
        return jsonify({"error": "api_key is required"}), 400

    valid = asyncio.run(validate_api_key(ai_provider, api_key, base_url=data.get("base_url")))
    logger.info("API key validation for %s: %s", ai_provider.value, "ok" if valid else "rejected")
    return jsonify({"provider": ai_provider.value, "valid": valid})
