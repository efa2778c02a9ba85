import copy
import json
import os
from pathlib import Path
from typing import Dict, Any

from yaml_translator.logger import get_logger

logger = get_logger(__name__)

# Rate-limit guard between two provider calls inside one batch (seconds)
DEFAULT_REQUEST_DELAY = 0.1
DEFAULT_SYSTEM_MESSAGE = "You are a professional translator. Translate accurately while preserving meaning and context."
API_KEY_PLACEHOLDER = "YOUR_API_KEY_HERE"

# Provider configuration constants
BUILTIN_PROVIDERS = ["openai", "claude", "gemini"]

BUILTIN_PROVIDER_DISPLAY_NAMES = {
    "openai": "OpenAI",
    "claude": "Claude",
    "gemini": "Gemini"
}

PROVIDER_API_KEY_ENV = {
    "openai": "OPENAI_API_KEY",
    "claude": "ANTHROPIC_API_KEY",
    "gemini": "GEMINI_API_KEY",
}

PROVIDER_DEFAULTS = {
    "max_retries": 3,
    "timeout": 120
}

# Get base directory (project root)
BASE_DIR = Path(__file__).parent.parent
CONFIG_DIR = BASE_DIR / "config"
CONFIG_FILE = CONFIG_DIR / "config.json"

# Default prompts
DEFAULT_PROMPTS = {
    "single_translation_prompt": {
        "version": "1.0",
        "description": "Single value prompt used for every document leaf",
        "prompt": """Translate the following text to {target_language_name}{source_section}{context_section}{glossary_section}

Rules:
1. Only return the translated text, no explanations
2. Preserve the original meaning and tone
3. Keep technical terms accurate
4. Maintain proper grammar and natural flow
5. If custom dictionary terms appear, use the provided translations

Text to translate:
{text}"""
    }
}

# Default configuration templates
DEFAULT_CONFIG = {
    "ai_provider": "openai",
    "openai": {
        "api_key": API_KEY_PLACEHOLDER,
        "models": ["gpt-4o-mini", "gpt-4o", "gpt-4", "gpt-3.5-turbo"],  # First is default
        "max_retries": 3,
        "timeout": 120,
        "api_url": "https://api.openai.com/v1"
    },
    "claude": {
        "api_key": API_KEY_PLACEHOLDER,
        "models": ["claude-3-sonnet-20240229", "claude-3-opus-20240229", "claude-3-haiku-20240307"],
        "max_retries": 3,
        "timeout": 120,
        "api_url": "https://api.anthropic.com/v1"
    },
    "gemini": {
        "api_key": API_KEY_PLACEHOLDER,
        "models": ["gemini-2.0-flash"],
        "max_retries": 3,
        "timeout": 120,
        "api_url": "https://generativelanguage.googleapis.com/v1beta"
    },
    "translation": {
        "request_delay": DEFAULT_REQUEST_DELAY,
        "temperature": 0.3,
        "max_tokens": 2000,
        "system_message": DEFAULT_SYSTEM_MESSAGE,
        "max_upload_mb": 10
    },
    "log_mode": "info"
}


def ensure_config_directory():
    """Ensure the config directory exists."""
    CONFIG_DIR.mkdir(exist_ok=True)
    logger.debug(f"Config directory ensured: {CONFIG_DIR}")


def create_default_config():
    """Create the default config.json file."""
    ensure_config_directory()
    with open(CONFIG_FILE, 'w', encoding='utf-8') as f:
        json.dump(DEFAULT_CONFIG, f, indent=4, ensure_ascii=False)
    logger.info(f"Created default config file: {CONFIG_FILE}")


def initialize_app():
    """
    Initialize the application.
    Called on first run: writes config/config.json from the defaults if missing.
    """
    logger.info("Initializing application...")
    if not CONFIG_FILE.exists():
        try:
            create_default_config()
        except OSError as e:
            logger.error(f"Failed to create default config: {e}")
            logger.warning("Application will use in-memory default configuration")
    logger.info("Application initialization complete")


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge override into a copy of base."""
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _apply_env_overrides(config: Dict[str, Any]) -> Dict[str, Any]:
    """Fill unset provider API keys from the environment."""
    for provider, env_name in PROVIDER_API_KEY_ENV.items():
        provider_config = config.get(provider)
        if not isinstance(provider_config, dict):
            continue
        env_value = os.environ.get(env_name)
        if env_value and provider_config.get('api_key', API_KEY_PLACEHOLDER) in ('', API_KEY_PLACEHOLDER):
            provider_config['api_key'] = env_value
    return config


def read_config_file() -> Dict[str, Any]:
    """Read config/config.json as stored, without defaults or environment overrides."""
    stored: Dict[str, Any] = {}
    if CONFIG_FILE.exists():
        try:
            with open(CONFIG_FILE, 'r', encoding='utf-8') as f:
                stored = json.load(f)
            if not isinstance(stored, dict):
                logger.warning("Config file does not hold a JSON object, using defaults")
                stored = {}
        except json.JSONDecodeError as e:
            logger.error(f"Failed to parse config file: {e}")
            logger.warning("Using default configuration")
            stored = {}
        except OSError as e:
            logger.error(f"Failed to read config file: {e}")
            logger.warning("Using default configuration")
            stored = {}
    return stored


def load_config() -> Dict[str, Any]:
    """Load the configuration file merged over the defaults."""
    return _apply_env_overrides(_merge(DEFAULT_CONFIG, read_config_file()))


def save_config(config: Dict[str, Any]):
    """Save the configuration to config/config.json."""
    try:
        ensure_config_directory()
        with open(CONFIG_FILE, 'w', encoding='utf-8') as f:
            json.dump(config, f, indent=4, ensure_ascii=False)
        logger.info("Configuration saved")
    except OSError as e:
        logger.error(f"Failed to save config: {e}")
        raise


def get_prompt(prompt_name: str = "single_translation_prompt") -> Dict[str, Any]:
    """Get a specific prompt by name."""
    return DEFAULT_PROMPTS.get(prompt_name, DEFAULT_PROMPTS["single_translation_prompt"]).copy()
