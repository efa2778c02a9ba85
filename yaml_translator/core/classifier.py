"""
Translatability classifier.

Decides whether a string scalar is natural-language text worth sending to a
provider. Anything shaped like a URL, path, number, constant or version is
left alone so machine-readable values are never rewritten.
"""

import re

# Rejection rules, checked in order; the first match marks the value as not translatable
URL_PATTERN = re.compile(r'^https?://')
HOSTNAME_PATTERN = re.compile(r'^[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$')
PATH_PATTERN = re.compile(r"^(?:\.{0,2}/|\.)[a-zA-Z0-9_-]+(?:/[a-zA-Z0-9_.-]+)*(?:\.[a-zA-Z0-9]+)*/?$")
NUMERIC_PATTERN = re.compile(r'^[0-9\s\-_+.()]*$')
IDENTIFIER_PATTERN = re.compile(r'^[A-Z_][A-Z0-9_]*$')
VERSION_PATTERN = re.compile(r'^\d+\.\d+(\.\d+)?(-[a-zA-Z0-9]+)?$')

LETTER_PATTERN = re.compile(r"[a-zA-Z\u4e00-\u9fff]")

IDENTIFIER_MAX_LENGTH = 30
MIN_LENGTH = 2


def _is_url(value: str) -> bool:
    return bool(URL_PATTERN.match(value) or HOSTNAME_PATTERN.match(value))


def _is_path(value: str) -> bool:
    return bool(PATH_PATTERN.match(value))


def _is_numeric(value: str) -> bool:
    return bool(NUMERIC_PATTERN.match(value))


def _is_identifier(value: str) -> bool:
    return bool(IDENTIFIER_PATTERN.match(value)) and len(value) < IDENTIFIER_MAX_LENGTH


def _is_version(value: str) -> bool:
    return bool(VERSION_PATTERN.match(value))


REJECTION_RULES = (
    ("url", _is_url),
    ("path", _is_path),
    ("numeric", _is_numeric),
    ("identifier", _is_identifier),
    ("version", _is_version),
)


def rejection_reason(value: str):
    """Return the name of the first rejection rule matching value, or None."""
    for name, rule in REJECTION_RULES:
        if rule(value):
            return name
    return None


def is_translatable(value: str) -> bool:
    """
    Return True when value looks like human-readable text.

    Never raises: non-string input is simply not translatable.

    Examples:
        >>> is_translatable("Hello world")
        True
        >>> is_translatable("https://example.com")
        False
        >>> is_translatable("MAX_RETRY_COUNT")
        False
    """
    if not isinstance(value, str) or not value.strip():
        return False
    if rejection_reason(value) is not None:
        return False
    return LETTER_PATTERN.search(value) is not None and len(value) >= MIN_LENGTH
