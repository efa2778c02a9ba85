"""Settings management API routes."""

from __future__ import annotations

from typing import Any, Dict, Optional

from flask import Blueprint, jsonify, request

import yaml_translator.config as config
from yaml_translator.config import BUILTIN_PROVIDERS, BUILTIN_PROVIDER_DISPLAY_NAMES, PROVIDER_DEFAULTS
from yaml_translator.logger import get_logger, reset_log_mode_cache

settings_bp = Blueprint("settings", __name__)
logger = get_logger(__name__)

LOG_MODES = ("off", "info", "debug")


def _mask_api_key(api_key: str) -> str:
    if not api_key or api_key == config.API_KEY_PLACEHOLDER:
        return ""
    if len(api_key) <= 8:
        return "*" * len(api_key)
    return f"{api_key[:4]}{'*' * (len(api_key) - 8)}{api_key[-4:]}"


def validate_config(new_config: Dict[str, Any]) -> Optional[str]:
    """Return an error message if new_config is malformed, else None."""
    if not isinstance(new_config, dict):
        return "config must be an object"

    provider = new_config.get("ai_provider")
    if provider is not None and provider not in BUILTIN_PROVIDERS:
        return f"Invalid AI provider: {provider}"

    log_mode = new_config.get("log_mode")
    if log_mode is not None and log_mode not in LOG_MODES:
        return f"log_mode must be one of: {', '.join(LOG_MODES)}"

    for name in BUILTIN_PROVIDERS:
        if name not in new_config:
            continue
        provider_config = new_config[name]
        if not isinstance(provider_config, dict):
            return f"{name} config must be an object"
        if "api_url" in provider_config and not isinstance(provider_config["api_url"], str):
            return f"{name} api_url must be a string"
        if "api_key" in provider_config and not isinstance(provider_config["api_key"], (str, type(None))):
            return f"{name} api_key must be a string"
        if "models" in provider_config:
            models = provider_config["models"]
            if not isinstance(models, list):
                return f"{name} models must be an array"
            provider_config["models"] = [m for m in models if m and isinstance(m, str)]
        if "max_retries" in provider_config:
            retries = provider_config["max_retries"]
            if not isinstance(retries, int) or retries < 1:
                return f"{name} max_retries must be at least 1"
        if "timeout" in provider_config:
            timeout = provider_config["timeout"]
            if not isinstance(timeout, (int, float)) or timeout <= 0:
                return f"{name} timeout must be a positive number"

    translation = new_config.get("translation")
    if translation is not None:
        if not isinstance(translation, dict):
            return "translation config must be an object"
        delay = translation.get("request_delay")
        if delay is not None and (not isinstance(delay, (int, float)) or delay < 0):
            return "translation request_delay must be a non-negative number"

    return None


@settings_bp.get("")
def get_settings():
    """Return current configuration with API keys masked."""
    current_config = config.load_config()
    for name in BUILTIN_PROVIDERS:
        provider_config = current_config.get(name)
        if isinstance(provider_config, dict):
            provider_config["api_key"] = _mask_api_key(provider_config.get("api_key", ""))

    logger.debug("Settings retrieved")
    return jsonify({
        "config": current_config,
        "meta": {
            "builtin_providers": [
                {"id": p, "name": BUILTIN_PROVIDER_DISPLAY_NAMES[p]}
                for p in BUILTIN_PROVIDERS
            ],
            "provider_defaults": PROVIDER_DEFAULTS,
        },
    })


@settings_bp.put("")
def update_settings():
    """Merge the posted config into config/config.json."""
    data = request.get_json(silent=True)
    if not data or "config" not in data:
        return jsonify({"error": "config is required"}), 400

    new_config = data["config"]
    validation_error = validate_config(new_config)
    if validation_error:
        return jsonify({"error": validation_error}), 400

    # Masked or blank keys mean "unchanged"
    for name in BUILTIN_PROVIDERS:
        provider_config = new_config.get(name)
        if isinstance(provider_config, dict):
            api_key = provider_config.get("api_key")
            if not api_key or "*" in api_key:
                provider_config.pop("api_key", None)

    # Merge over the stored file only so environment keys are never persisted
    stored = config.read_config_file()
    try:
        config.save_config(config._merge(stored, new_config))
    except OSError as e:
        return jsonify({"error": f"Failed to save settings: {e}"}), 500

    if "log_mode" in new_config:
        reset_log_mode_cache()

    logger.info("Settings updated")
    return jsonify({"status": "ok"})
