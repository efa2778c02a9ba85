"""
Language code mappings used when building provider prompts.

Standards:
- ISO 639-1: 2-letter language codes (en, zh, es)
- BCP 47: Language + Region codes (zh-CN, pt-BR)

Providers understand plain English language names better than codes, so
prompts carry get_language_name(code). Unknown codes are passed through
unchanged; a caller may just as well write "Simplified Chinese" directly.
"""

from typing import Dict, Optional

# ISO 639-1 language codes (2-letter)
ISO_639_1 = {
    'ar': 'Arabic',
    'bg': 'Bulgarian',
    'bn': 'Bengali',
    'cs': 'Czech',
    'da': 'Danish',
    'de': 'German',
    'el': 'Greek',
    'en': 'English',
    'es': 'Spanish',
    'fa': 'Persian',
    'fi': 'Finnish',
    'fr': 'French',
    'he': 'Hebrew',
    'hi': 'Hindi',
    'hu': 'Hungarian',
    'id': 'Indonesian',
    'it': 'Italian',
    'ja': 'Japanese',
    'ko': 'Korean',
    'ms': 'Malay',
    'nl': 'Dutch',
    'no': 'Norwegian',
    'pl': 'Polish',
    'pt': 'Portuguese',
    'ro': 'Romanian',
    'ru': 'Russian',
    'sv': 'Swedish',
    'th': 'Thai',
    'tr': 'Turkish',
    'uk': 'Ukrainian',
    'vi': 'Vietnamese',
    'zh': 'Chinese',
}

# BCP 47 language-region codes (common variants)
BCP_47_VARIANTS = {
    'zh-CN': 'Simplified Chinese',
    'zh-TW': 'Traditional Chinese',
    'zh-HK': 'Traditional Chinese (Hong Kong)',
    'en-US': 'English (United States)',
    'en-GB': 'English (United Kingdom)',
    'es-ES': 'Spanish (Spain)',
    'es-MX': 'Spanish (Mexico)',
    'pt-BR': 'Portuguese (Brazil)',
    'pt-PT': 'Portuguese (Portugal)',
    'fr-CA': 'French (Canada)',
}

# Combined mapping
ALL_LANGUAGE_CODES = {**ISO_639_1, **BCP_47_VARIANTS}


def is_valid_language_code(code: str) -> bool:
    """
    Check if a language code is known.

    Examples:
        >>> is_valid_language_code('zh-CN')
        True
        >>> is_valid_language_code('invalid')
        False
    """
    return code in ALL_LANGUAGE_CODES


def get_language_name(code: Optional[str]) -> Optional[str]:
    """
    Get the language name for a code, or the code itself when unknown.

    Examples:
        >>> get_language_name('ja')
        'Japanese'
        >>> get_language_name('zh-CN')
        'Simplified Chinese'
        >>> get_language_name('Klingon')
        'Klingon'
    """
    if not code:
        return code
    return ALL_LANGUAGE_CODES.get(code, code)


def extract_base_language(code: str) -> str:
    """
    Extract base language from code (remove region).

    Examples:
        >>> extract_base_language('zh-CN')
        'zh'
    """
    return code.split('-')[0]


def languages_match(code1: Optional[str], code2: Optional[str], strict: bool = False) -> bool:
    """
    Check if two language codes match.

    Args:
        code1: First language code
        code2: Second language code
        strict: If True, must match exactly. If False, base language match is ok.

    Examples:
        >>> languages_match('zh-CN', 'zh-TW')
        True
        >>> languages_match('zh-CN', 'zh-TW', strict=True)
        False
    """
    if not code1 or not code2:
        return False
    if strict:
        return code1 == code2

    return extract_base_language(code1) == extract_base_language(code2)


def get_all_language_codes() -> Dict[str, str]:
    """Get all known language codes mapped to their names."""
    return ALL_LANGUAGE_CODES.copy()
