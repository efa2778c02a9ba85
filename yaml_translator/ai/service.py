"""
AI Translation Service Module

This module provides the concrete translator port:
- AIService, translating one value per call through the configured provider
- Configuration validation before a batch starts
- Error categorisation and retry logic

For provider-specific API implementations, see ai/providers.py
"""

import asyncio
from typing import Any, Dict, Optional, Tuple

import httpx

from yaml_translator.config import load_config, get_prompt, API_KEY_PLACEHOLDER, DEFAULT_SYSTEM_MESSAGE
from yaml_translator.logger import get_logger
from yaml_translator import language_codes as lc
from yaml_translator.ai.exceptions import TranslationFailure, ProviderFatal
from yaml_translator.ai.port import TokenUsage, TranslationOutcome, TranslatorConfig
from yaml_translator.ai.providers import (
    AIProvider,
    ProviderSettings,
    PROVIDER_CALLS,
    calculate_cost,
)

logger = get_logger(__name__)


def _resolve_provider(provider: Any) -> AIProvider:
    try:
        return AIProvider(provider)
    except ValueError:
        raise ProviderFatal(
            f"Unsupported AI provider: {provider}",
            code="ai_config_invalid",
            details={"provider": str(provider)},
        )


def validate_ai_config(provider_override: Optional[str] = None, config: Optional[Dict[str, Any]] = None) -> None:
    """
    Validate that AI provider configuration is properly set up.

    Args:
        provider_override: Optional provider to validate instead of the default.
        config: Configuration dict (loaded from disk when omitted).

    Raises:
        ProviderFatal: If configuration is invalid or missing, with code and details.
    """
    config = config if config is not None else load_config()
    provider = _resolve_provider(provider_override or config.get('ai_provider', 'openai'))

    provider_config = config.get(provider.value)
    if not isinstance(provider_config, dict) or not provider_config:
        raise ProviderFatal(
            f"AI provider '{provider.value}' configuration not found",
            code="ai_config_missing",
            details={"provider": provider.value}
        )

    api_key = provider_config.get('api_key', '')
    if not api_key or api_key == API_KEY_PLACEHOLDER:
        raise ProviderFatal(
            f"{provider.value.capitalize()} API key not configured. Set it in config/config.json or the environment.",
            code="ai_config_missing",
            details={"provider": provider.value, "missing_field": "api_key"}
        )

    models = provider_config.get('models', [])
    valid_models = [m for m in models if m and isinstance(m, str)] if isinstance(models, list) else []
    if not valid_models and not provider_config.get('model'):
        raise ProviderFatal(
            f"{provider.value.capitalize()} model not configured",
            code="ai_config_missing",
            details={"provider": provider.value, "missing_field": "models"}
        )

    if not provider_config.get('api_url'):
        raise ProviderFatal(
            f"{provider.value.capitalize()} API URL not configured",
            code="ai_config_missing",
            details={"provider": provider.value, "missing_field": "api_url"}
        )


class AIService:
    """
    Translator port backed by a remote AI provider.

    Holds only connection settings; every translate_one call is independent.
    """

    def __init__(
        self,
        model_override: Optional[str] = None,
        provider_override: Optional[str] = None,
        config: Optional[Dict[str, Any]] = None,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config if config is not None else load_config()
        self.provider = _resolve_provider(provider_override or self.config.get('ai_provider', 'openai'))
        self.model_override = model_override
        self.translation_config = self.config.get('translation', {})
        self.transport = transport

        provider_config = dict(self.config.get(self.provider.value) or {})
        if api_key:
            provider_config['api_key'] = api_key
        if base_url:
            provider_config['api_url'] = base_url
        self.settings = self._build_settings(provider_config)

        if model_override or provider_override:
            logger.info(f"Initialized AI service with provider: {self.provider.value}, model override: {model_override}")
        else:
            logger.info(f"Initialized AI service with provider: {self.provider.value}")

    def _get_model(self, provider_config: Dict[str, Any], default_model: str = "") -> str:
        """
        Get the model to use for translation.

        Priority:
        1. model_override (if set)
        2. First model from 'models' array
        3. 'model' field (legacy)
        4. default_model
        """
        if self.model_override:
            return self.model_override

        models = provider_config.get('models', [])
        if models and isinstance(models, list) and models[0]:
            return models[0]

        return provider_config.get('model', default_model)

    def _build_settings(self, provider_config: Dict[str, Any]) -> ProviderSettings:
        return ProviderSettings(
            provider=self.provider,
            api_key=provider_config.get('api_key', ''),
            model=self._get_model(provider_config),
            api_url=provider_config.get('api_url', ''),
            timeout=provider_config.get('timeout', 120),
            max_retries=max(1, int(provider_config.get('max_retries', 3))),
            temperature=self.translation_config.get('temperature', 0.3),
            max_tokens=self.translation_config.get('max_tokens', 2000),
        )

    def validate(self) -> None:
        """
        Pre-flight check of the resolved settings, overrides included.

        Raises:
            ProviderFatal: If the API key, model or API URL is missing.
        """
        resolved = {
            'api_key': self.settings.api_key,
            'models': [self.settings.model] if self.settings.model else [],
            'api_url': self.settings.api_url,
        }
        validate_ai_config(self.provider.value, {self.provider.value: resolved})

    def _get_system_message(self, default: str = DEFAULT_SYSTEM_MESSAGE) -> str:
        """Get system message from config or use default."""
        return self.translation_config.get('system_message') or default

    def build_prompt(self, text: str, config: TranslatorConfig) -> str:
        """Build the single-value prompt from the configured template."""
        target_language_name = lc.get_language_name(config.target_language)
        source_section = ""
        if config.source_language:
            source_section = f" from {lc.get_language_name(config.source_language)}"

        context_section = f"\n\nContext: {config.domain_context}" if config.domain_context else ""

        glossary_section = ""
        if config.glossary:
            lines = [f"- {term} → {fixed}" for term, fixed in config.glossary.items()]
            glossary_section = (
                "\n\nCustom dictionary (use these translations for specific terms):\n"
                + "\n".join(lines)
            )

        prompt_template = get_prompt('single_translation_prompt')['prompt']
        return prompt_template.format(
            target_language_name=target_language_name,
            source_section=source_section,
            context_section=context_section,
            glossary_section=glossary_section,
            text=text,
        )

    async def translate_one(self, text: str, config: TranslatorConfig) -> TranslationOutcome:
        """
        Translate a single value.

        Retries recoverable errors up to max_retries times, then raises
        TranslationFailure carrying the last reason.

        Args:
            text: The original value
            config: Batch translation settings

        Returns:
            TranslationOutcome with the translated text and token usage
        """
        if not config.target_language:
            raise TranslationFailure("Target language is required")

        prompt = self.build_prompt(text, config)
        logger.debug(f"  Input to AI (prompt):\n{prompt}")

        call = PROVIDER_CALLS[self.provider]
        max_retries = self.settings.max_retries
        usage = TokenUsage()
        last_error: Optional[Exception] = None

        for attempt in range(max_retries):
            try:
                if attempt > 0:
                    logger.info(f"  Retry attempt {attempt + 1}/{max_retries}")

                response_text, call_usage = await call(
                    self.settings, prompt, self._get_system_message(), transport=self.transport
                )
                usage.add(call_usage)

                translated = (response_text or '').strip()
                if not translated:
                    raise TranslationFailure(
                        f"No translation received from {self.provider.value.capitalize()}"
                    )

                usage.cost = calculate_cost(self.provider, self.settings.model, usage.total_tokens)
                return TranslationOutcome(translated_value=translated, usage=usage)

            except TranslationFailure as e:
                last_error = e
                should_retry, wait_time = self._categorize_error(e, attempt)

                if should_retry and attempt < max_retries - 1:
                    logger.warning(f"  Attempt {attempt + 1} failed: {e}. Waiting {wait_time}s before retry...")
                    await asyncio.sleep(wait_time)
                elif not should_retry:
                    logger.error(f"  Non-recoverable error: {e}")
                    break

        raise TranslationFailure(str(last_error), details=getattr(last_error, 'details', None))

    def _categorize_error(self, error: Exception, attempt: int) -> Tuple[bool, float]:
        """
        Categorize an error and determine retry strategy.

        Returns:
            Tuple of (should_retry, wait_time_seconds)
        """
        error_str = str(error).lower()

        # Rate limiting (429) - long backoff
        if '429' in error_str or 'rate limit' in error_str or 'too many requests' in error_str:
            wait_time = 30 * (2 ** attempt)  # 30s, 60s, 120s
            return True, min(wait_time, 300)  # Max 5 minutes

        # Authentication errors (401, 403) - don't retry
        if '401' in error_str or '403' in error_str or 'unauthorized' in error_str or 'forbidden' in error_str:
            return False, 0

        # Invalid request (400) - don't retry
        if '400' in error_str and ('invalid' in error_str or 'bad request' in error_str):
            return False, 0

        # Server errors (5xx) - standard backoff
        if any(code in error_str for code in ['500', '502', '503', '504']):
            return True, 2 ** attempt

        # Timeout - retry with backoff
        if 'timeout' in error_str:
            return True, 5 * (2 ** attempt)  # 5s, 10s, 20s

        # Empty reply - retry once
        if 'no translation received' in error_str or 'no content' in error_str:
            return attempt < 1, 1.0

        # Unknown errors - standard backoff
        return True, 2 ** attempt
