"""
AI Module

This module provides the translator port, the AI-backed implementation and
related utilities.
"""

from yaml_translator.ai.exceptions import (
    TranslationError,
    TranslationFailure,
    ProviderFatal,
    CancellationRequested,
)
from yaml_translator.ai.port import TranslatorConfig, TranslatorPort, TranslationOutcome, TokenUsage
from yaml_translator.ai.providers import AIProvider, validate_api_key, get_available_models
from yaml_translator.ai.service import AIService, validate_ai_config

__all__ = [
    'TranslationError',
    'TranslationFailure',
    'ProviderFatal',
    'CancellationRequested',
    'TranslatorConfig',
    'TranslatorPort',
    'TranslationOutcome',
    'TokenUsage',
    'AIProvider',
    'validate_api_key',
    'get_available_models',
    'AIService',
    'validate_ai_config',
]
