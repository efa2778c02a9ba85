"""
AI Provider API Implementations

This module contains the API call implementations for each AI provider:
- OpenAI (and OpenAI-compatible endpoints through api_url)
- Claude
- Gemini

Each call function takes the resolved ProviderSettings and a prompt and
returns (text, TokenUsage). Every failure surfaces as TranslationFailure
with a readable reason.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple

import httpx

from yaml_translator.logger import get_logger
from yaml_translator.ai.exceptions import TranslationFailure
from yaml_translator.ai.port import TokenUsage

logger = get_logger(__name__)

ANTHROPIC_VERSION = "2023-06-01"

CLAUDE_MODELS = [
    'claude-3-opus-20240229',
    'claude-3-sonnet-20240229',
    'claude-3-haiku-20240307',
]
GEMINI_MODELS = ['gemini-2.0-flash', 'gemini-1.5-pro', 'gemini-1.5-flash']
OPENAI_FALLBACK_MODELS = ['gpt-4', 'gpt-3.5-turbo']


class AIProvider(str, Enum):
    OPENAI = "openai"
    CLAUDE = "claude"
    GEMINI = "gemini"


@dataclass(frozen=True)
class ProviderSettings:
    """Resolved connection settings for one provider."""
    provider: AIProvider
    api_key: str
    model: str
    api_url: str
    timeout: Any = 120
    max_retries: int = 3
    temperature: float = 0.3
    max_tokens: int = 2000


def get_httpx_timeout(timeout_config: Any) -> httpx.Timeout:
    """
    Convert timeout configuration to httpx.Timeout object.

    Args:
        timeout_config: Either a number (total timeout) or a dict with
            connect, write, read, pool keys

    Returns:
        httpx.Timeout object
    """
    if isinstance(timeout_config, dict):
        return httpx.Timeout(
            connect=timeout_config.get('connect', 10.0),
            write=timeout_config.get('write', 60.0),
            read=timeout_config.get('read', 120.0),
            pool=timeout_config.get('pool', 10.0),
        )
    else:
        timeout_value = float(timeout_config) if timeout_config else 120.0
        return httpx.Timeout(
            connect=10.0,
            write=60.0,
            read=timeout_value,
            pool=10.0,
        )


def calculate_cost(provider: AIProvider, model: str, total_tokens: int) -> float:
    """Approximate cost in USD for total_tokens."""
    if provider == AIProvider.OPENAI:
        per_1k = 0.03 if 'gpt-4' in (model or '') else 0.002
        return (total_tokens / 1000) * per_1k
    if provider == AIProvider.CLAUDE:
        # Sonnet averages $3 in / $15 out per million tokens
        return (total_tokens / 1_000_000) * 9
    return (total_tokens / 1000) * 0.002


def handle_http_error(e: httpx.HTTPStatusError, provider: str):
    """Raise TranslationFailure with the most useful message the error body offers."""
    status_code = e.response.status_code
    error_text = "Unknown error"

    try:
        error_json = e.response.json()
        if isinstance(error_json, dict) and "error" in error_json:
            error_detail = error_json["error"]
            if isinstance(error_detail, dict):
                error_text = error_detail.get("message", str(error_detail))
            else:
                error_text = str(error_detail)
    except ValueError:
        error_text = e.response.text[:500] or "No details"

    raise TranslationFailure(
        f"{provider} API error ({status_code}): {error_text}",
        details={"status_code": status_code},
    ) from e


def _client(settings: ProviderSettings, transport: Optional[httpx.AsyncBaseTransport]) -> httpx.AsyncClient:
    return httpx.AsyncClient(timeout=get_httpx_timeout(settings.timeout), transport=transport)


async def call_openai_api(
    settings: ProviderSettings,
    prompt: str,
    system_message: str,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Tuple[str, TokenUsage]:
    """Call an OpenAI (or OpenAI-compatible) chat completions endpoint."""
    url = f"{settings.api_url.rstrip('/')}/chat/completions"
    headers = {
        "Authorization": f"Bearer {settings.api_key}",
        "Content-Type": "application/json"
    }
    body = {
        "model": settings.model,
        "messages": [
            {"role": "system", "content": system_message},
            {"role": "user", "content": prompt},
        ],
        "temperature": settings.temperature,
        "max_tokens": settings.max_tokens,
    }

    logger.debug(f"  Calling OpenAI API (model: {settings.model})...")

    try:
        async with _client(settings, transport) as client:
            response = await client.post(url, headers=headers, json=body)
            response.raise_for_status()
            result = response.json()

        usage = result.get('usage') or {}
        token_usage = TokenUsage(
            prompt_tokens=usage.get('prompt_tokens', 0),
            completion_tokens=usage.get('completion_tokens', 0),
        )

        choices = result.get('choices') or []
        if choices:
            content = (choices[0].get('message') or {}).get('content') or ''
            logger.debug(f"  Received {len(content)} chars from OpenAI (tokens: {token_usage.total_tokens})")
            return content, token_usage

        raise TranslationFailure("No content in OpenAI response")

    except TranslationFailure:
        raise
    except httpx.HTTPStatusError as e:
        handle_http_error(e, "OpenAI")
    except httpx.TimeoutException as e:
        raise TranslationFailure("OpenAI API request timeout") from e
    except (httpx.HTTPError, ValueError, KeyError, TypeError, AttributeError) as e:
        raise TranslationFailure(f"OpenAI API call failed: {e}") from e


async def call_claude_api(
    settings: ProviderSettings,
    prompt: str,
    system_message: str,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Tuple[str, TokenUsage]:
    """Call the Anthropic messages endpoint."""
    url = f"{settings.api_url.rstrip('/')}/messages"
    headers = {
        "x-api-key": settings.api_key,
        "anthropic-version": ANTHROPIC_VERSION,
        "Content-Type": "application/json"
    }
    body = {
        "model": settings.model,
        "max_tokens": settings.max_tokens,
        "temperature": settings.temperature,
        "system": system_message,
        "messages": [
            {"role": "user", "content": prompt},
        ],
    }

    logger.debug(f"  Calling Claude API (model: {settings.model})...")

    try:
        async with _client(settings, transport) as client:
            response = await client.post(url, headers=headers, json=body)
            response.raise_for_status()
            result = response.json()

        usage = result.get('usage') or {}
        token_usage = TokenUsage(
            prompt_tokens=usage.get('input_tokens', 0),
            completion_tokens=usage.get('output_tokens', 0),
        )

        blocks = result.get('content') or []
        if blocks and blocks[0].get('type') == 'text':
            content = blocks[0].get('text', '')
            logger.debug(f"  Received {len(content)} chars from Claude (tokens: {token_usage.total_tokens})")
            return content, token_usage

        raise TranslationFailure("No text content in Claude response")

    except TranslationFailure:
        raise
    except httpx.HTTPStatusError as e:
        handle_http_error(e, "Claude")
    except httpx.TimeoutException as e:
        raise TranslationFailure("Claude API request timeout") from e
    except (httpx.HTTPError, ValueError, KeyError, TypeError, AttributeError) as e:
        raise TranslationFailure(f"Claude API call failed: {e}") from e


async def call_gemini_api(
    settings: ProviderSettings,
    prompt: str,
    system_message: str,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Tuple[str, TokenUsage]:
    """Call the Gemini generateContent endpoint."""
    url = f"{settings.api_url.rstrip('/')}/models/{settings.model}:generateContent"
    body = {
        "systemInstruction": {"parts": [{"text": system_message}]},
        "contents": [{
            "parts": [{
                "text": prompt
            }]
        }],
        "generationConfig": {
            "temperature": settings.temperature,
            "maxOutputTokens": settings.max_tokens,
        }
    }

    logger.debug(f"  Calling Gemini API (model: {settings.model})...")

    try:
        async with _client(settings, transport) as client:
            response = await client.post(url, params={"key": settings.api_key}, json=body)
            response.raise_for_status()
            result = response.json()

        usage_metadata = result.get('usageMetadata') or {}
        prompt_tokens = usage_metadata.get('promptTokenCount', 0)
        completion_tokens = usage_metadata.get('candidatesTokenCount', 0)

        # Fallback: derive completion tokens from the total when candidatesTokenCount is missing
        if completion_tokens == 0 and prompt_tokens > 0:
            total_tokens = usage_metadata.get('totalTokenCount', 0)
            if total_tokens > prompt_tokens:
                completion_tokens = total_tokens - prompt_tokens

        token_usage = TokenUsage(prompt_tokens=prompt_tokens, completion_tokens=completion_tokens)

        candidates = result.get('candidates') or []
        if candidates:
            parts = (candidates[0].get('content') or {}).get('parts') or []
            if parts:
                content = parts[0].get('text', '')
                logger.debug(f"  Received {len(content)} chars from Gemini (tokens: {token_usage.total_tokens})")
                return content, token_usage

        raise TranslationFailure("Unexpected Gemini API response format")

    except TranslationFailure:
        raise
    except httpx.HTTPStatusError as e:
        handle_http_error(e, "Gemini")
    except httpx.TimeoutException as e:
        raise TranslationFailure("Gemini API request timeout") from e
    except (httpx.HTTPError, ValueError, KeyError, TypeError, AttributeError) as e:
        raise TranslationFailure(f"Gemini API call failed: {e}") from e


ProviderCall = Callable[..., Awaitable[Tuple[str, TokenUsage]]]

PROVIDER_CALLS: Dict[AIProvider, ProviderCall] = {
    AIProvider.OPENAI: call_openai_api,
    AIProvider.CLAUDE: call_claude_api,
    AIProvider.GEMINI: call_gemini_api,
}


async def validate_api_key(
    provider: AIProvider,
    api_key: str,
    base_url: Optional[str] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> bool:
    """Return True when the provider accepts api_key."""
    provider = AIProvider(provider)
    try:
        async with httpx.AsyncClient(timeout=get_httpx_timeout(30), transport=transport) as client:
            if provider == AIProvider.OPENAI:
                url = f"{(base_url or 'https://api.openai.com/v1').rstrip('/')}/models"
                response = await client.get(url, headers={"Authorization": f"Bearer {api_key}"})
            elif provider == AIProvider.CLAUDE:
                url = f"{(base_url or 'https://api.anthropic.com/v1').rstrip('/')}/messages"
                response = await client.post(
                    url,
                    headers={"x-api-key": api_key, "anthropic-version": ANTHROPIC_VERSION},
                    json={
                        "model": CLAUDE_MODELS[1],
                        "max_tokens": 10,
                        "messages": [{"role": "user", "content": "Hi"}],
                    },
                )
            else:
                url = f"{(base_url or 'https://generativelanguage.googleapis.com/v1beta').rstrip('/')}/models"
                response = await client.get(url, params={"key": api_key})
            response.raise_for_status()
        return True
    except httpx.HTTPError as e:
        logger.error(f"{provider.value} API key validation failed: {e}")
        return False


async def get_available_models(
    provider: AIProvider,
    api_key: Optional[str] = None,
    base_url: Optional[str] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> List[str]:
    """List the models offered for translation by provider."""
    provider = AIProvider(provider)
    if provider == AIProvider.CLAUDE:
        return list(CLAUDE_MODELS)
    if provider == AIProvider.GEMINI:
        return list(GEMINI_MODELS)
    if not api_key:
        return list(OPENAI_FALLBACK_MODELS)

    url = f"{(base_url or 'https://api.openai.com/v1').rstrip('/')}/models"
    try:
        async with httpx.AsyncClient(timeout=get_httpx_timeout(30), transport=transport) as client:
            response = await client.get(url, headers={"Authorization": f"Bearer {api_key}"})
            response.raise_for_status()
            data = response.json().get('data') or []
        return sorted(model['id'] for model in data if 'gpt' in model.get('id', ''))
    except (httpx.HTTPError, ValueError, KeyError) as e:
        logger.error(f"Failed to fetch OpenAI models: {e}")
        return list(OPENAI_FALLBACK_MODELS)
