"""
Command line interface for translating one YAML/JSON document.

Examples:
    python -m yaml_translator.cli config.yml --target zh-CN
    python -m yaml_translator.cli app.json --target fr --glossary terms.yml -o app.fr.json
    python -m yaml_translator.cli config.yml --target de --dry-run
"""

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Dict, List, Optional

from yaml_translator.ai.port import TranslatorConfig
from yaml_translator.config import initialize_app
from yaml_translator.core.document import detect_format, parse_document
from yaml_translator.core.exceptions import ParseFailure
from yaml_translator.logger import get_logger
from yaml_translator.translation.manager import TranslationManager
from yaml_translator.translation.progress import PHASE_TRANSLATING, ProgressSnapshot

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_BATCH_FAILED = 1
EXIT_USAGE = 2


class Colors:
    """Terminal color codes."""
    CYAN = '\033[96m'
    GREEN = '\033[92m'
    YELLOW = '\033[93m'
    RED = '\033[91m'
    ENDC = '\033[0m'


def colored(text: str, color: str) -> str:
    """Apply color to text if terminal supports it."""
    if sys.stderr.isatty():
        return f"{color}{text}{Colors.ENDC}"
    return text


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="yaml-translator",
        description="Translate the human-readable values of a YAML or JSON document with an AI provider.",
    )
    parser.add_argument("input", help="Path to the .yml/.yaml/.json document")
    parser.add_argument("--target", "-t", required=True, help="Target language code (e.g. zh-CN, fr)")
    parser.add_argument("--source", "-s", help="Source language code")
    parser.add_argument("--context", "-c", help="Free-text domain context passed to the provider")
    parser.add_argument("--glossary", "-g", help="YAML/JSON file mapping terms to fixed translations")
    parser.add_argument("--provider", "-p", choices=["openai", "claude", "gemini"], help="AI provider")
    parser.add_argument("--model", "-m", help="Model name")
    parser.add_argument("--output", "-o", help="Write the translated document here (default: stdout)")
    parser.add_argument("--dry-run", action="store_true", help="List translatable values and the estimate only")
    return parser


def load_glossary(path: str) -> Dict[str, str]:
    """
    Load a glossary mapping from a YAML or JSON file.

    Raises:
        ParseFailure: If the file is unreadable or not a flat mapping.
    """
    try:
        content = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise ParseFailure(f"Cannot read glossary file: {e}", details={"path": path}) from e

    glossary = parse_document(content, detect_format(path, content))
    if not isinstance(glossary, dict):
        raise ParseFailure("Glossary must be a mapping of term -> translation", details={"path": path})
    return {str(term): str(fixed) for term, fixed in glossary.items()}


def print_progress(progress: ProgressSnapshot) -> None:
    """Print one line per finished leaf."""
    if progress.phase != PHASE_TRANSLATING:
        return
    prefix = f"[{progress.index}/{progress.total}] {progress.percentage:5.1f}%"
    if progress.translated_value is not None:
        print(f"{colored(prefix, Colors.CYAN)} {progress.current_address}: {progress.translated_value}", file=sys.stderr)


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    input_path = Path(args.input)
    try:
        content = input_path.read_text(encoding="utf-8")
    except OSError as e:
        print(colored(f"Cannot read {input_path}: {e}", Colors.RED), file=sys.stderr)
        return EXIT_USAGE

    initialize_app()

    try:
        glossary = load_glossary(args.glossary) if args.glossary else {}
    except ParseFailure as e:
        print(colored(f"Invalid glossary: {e}", Colors.RED), file=sys.stderr)
        return EXIT_USAGE

    config = TranslatorConfig(
        target_language=args.target.strip(),
        source_language=args.source,
        domain_context=args.context,
        glossary=glossary,
    )
    manager = TranslationManager(config, provider=args.provider, model=args.model)

    try:
        analysis = manager.analyze(content, filename=input_path.name)
    except ParseFailure as e:
        print(colored(f"Failed to parse {input_path}: {e}", Colors.RED), file=sys.stderr)
        return EXIT_USAGE

    estimate = analysis.estimate
    print(
        colored(
            f"{estimate['item_count']} translatable values, "
            f"~{estimate['estimated_time']}s, ~${estimate['estimated_cost']:.4f}",
            Colors.YELLOW,
        ),
        file=sys.stderr,
    )

    if args.dry_run:
        for leaf in analysis.leaves:
            print(f"{leaf.path}: {leaf.original_value}")
        return EXIT_OK

    result = asyncio.run(manager.translate_document(
        analysis.document,
        analysis.leaves,
        fmt=analysis.format,
        on_progress=print_progress,
    ))

    for error in result.errors:
        print(colored(f"  {error.address}: {error.reason}", Colors.RED), file=sys.stderr)

    if not result.success:
        print(colored("Translation failed", Colors.RED), file=sys.stderr)
        return EXIT_BATCH_FAILED

    if args.output:
        Path(args.output).write_text(result.content, encoding="utf-8")
        print(colored(f"Wrote {args.output}", Colors.GREEN), file=sys.stderr)
    else:
        sys.stdout.write(result.content)

    print(
        colored(
            f"Translated {result.translated_count}/{len(analysis.leaves)} values "
            f"({result.failure_count} failed, {result.usage.total_tokens} tokens)",
            Colors.GREEN,
        ),
        file=sys.stderr,
    )
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
