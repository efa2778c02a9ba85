"""
Document codec

Parses YAML/JSON text into plain Python trees and serializes them back:
- Format detection from filename or content
- Parse with typed ParseFailure errors
- Serialization preserving key order, unicode and block layout
- Upload validation and rough time estimates
"""

import json
from enum import Enum
from pathlib import Path
from typing import Any, Optional, Tuple

import yaml

from yaml_translator.core.address import clone_tree
from yaml_translator.core.exceptions import ParseFailure
from yaml_translator.logger import get_logger

logger = get_logger(__name__)

VALID_EXTENSIONS = {'.yml': 'yaml', '.yaml': 'yaml', '.json': 'json'}
DEFAULT_MAX_UPLOAD_MB = 10
SECONDS_PER_LEAF = 3
MIN_ESTIMATED_SECONDS = 10


class DocumentFormat(str, Enum):
    YAML = "yaml"
    JSON = "json"


class _NoAliasDumper(yaml.SafeDumper):
    """SafeDumper that writes shared nodes out in full instead of emitting anchors."""

    def ignore_aliases(self, data):
        return True


def detect_format(filename: Optional[str] = None, content: Optional[str] = None) -> DocumentFormat:
    """
    Pick the document format from the filename extension, then from the content.

    Content starting with '{' or '[' that parses as JSON is JSON; everything else is YAML.
    """
    if filename:
        suffix = Path(filename).suffix.lower()
        if suffix in VALID_EXTENSIONS:
            return DocumentFormat(VALID_EXTENSIONS[suffix])

    if content:
        stripped = content.lstrip()
        if stripped[:1] in ('{', '['):
            try:
                json.loads(stripped)
                return DocumentFormat.JSON
            except json.JSONDecodeError:
                pass
    return DocumentFormat.YAML


def parse_document(content: str, fmt: DocumentFormat = DocumentFormat.YAML) -> Any:
    """
    Parse content into a tree of dicts, lists and scalars.

    Raises:
        ParseFailure: If content is empty, not valid for the format, or holds a recursive alias.
    """
    if content is None or not content.strip():
        raise ParseFailure("Document is empty")

    fmt = DocumentFormat(fmt)
    try:
        if fmt == DocumentFormat.JSON:
            return json.loads(content)
        # Aliased nodes come back shared; give each position its own copy
        return clone_tree(yaml.safe_load(content))
    except json.JSONDecodeError as e:
        raise ParseFailure(f"Invalid JSON: {e}", details={"line": e.lineno, "column": e.colno}) from e
    except yaml.YAMLError as e:
        details = {}
        mark = getattr(e, 'problem_mark', None)
        if mark is not None:
            details = {"line": mark.line + 1, "column": mark.column + 1}
        raise ParseFailure(f"Invalid YAML: {e}", details=details) from e
    except ValueError as e:
        raise ParseFailure(f"Invalid {fmt.value.upper()}: {e}") from e


def serialize_document(document: Any, fmt: DocumentFormat = DocumentFormat.YAML) -> str:
    """Serialize document in block style, keeping key order and unicode text."""
    fmt = DocumentFormat(fmt)
    if fmt == DocumentFormat.JSON:
        return json.dumps(document, ensure_ascii=False, indent=2) + "\n"
    return yaml.dump(
        document,
        Dumper=_NoAliasDumper,
        allow_unicode=True,
        sort_keys=False,
        default_flow_style=False,
        width=float("inf"),
    )


def validate_content(content: str, fmt: DocumentFormat = DocumentFormat.YAML) -> Tuple[bool, Optional[str]]:
    """Return (is_valid, error_message) without raising."""
    try:
        parse_document(content, fmt)
        return True, None
    except ParseFailure as e:
        return False, str(e)


def validate_upload(filename: str, size_bytes: int, max_size_mb: int = DEFAULT_MAX_UPLOAD_MB) -> Optional[str]:
    """Check an uploaded file's extension and size. Returns an error message or None."""
    suffix = Path(filename or "").suffix.lower()
    if suffix not in VALID_EXTENSIONS:
        return f"Only {', '.join(sorted(VALID_EXTENSIONS))} files are supported"

    if size_bytes > max_size_mb * 1024 * 1024:
        return f"File size must not exceed {max_size_mb}MB"

    return None


def estimate_translation_time(leaf_count: int) -> int:
    """Rough duration in seconds for translating leaf_count values one by one."""
    return max(leaf_count * SECONDS_PER_LEAF, MIN_ESTIMATED_SECONDS)
