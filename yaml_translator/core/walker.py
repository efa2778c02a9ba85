"""
Tree walker: flattens a parsed document into its translatable leaves.

Traversal is depth-first, mapping keys in insertion order and sequence
elements by ascending index. The same order drives progress indexing and
reassembly, so it must not change between extraction and patching.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from yaml_translator.core.address import Address
from yaml_translator.core.classifier import is_translatable


@dataclass(frozen=True)
class TranslatableLeaf:
    """Snapshot of one translatable string and where it lives."""
    address: Address
    original_value: str

    @property
    def path(self) -> str:
        return str(self.address)

    @property
    def key(self) -> str:
        return self.address.key

    def to_dict(self) -> Dict[str, Any]:
        return {
            "address": self.path,
            "key": self.key,
            "value": self.original_value,
        }


def iter_scalars(document: Any, address: Address = Address()):
    """
    Yield (address, value) for every scalar in document, in canonical order.

    Example:
        >>> list(iter_scalars({"home": {"title": "Hello"}, "tags": ["a", 1]}))
        [(Address('home.title'), 'Hello'), (Address('tags.0'), 'a'), (Address('tags.1'), 1)]
    """
    if isinstance(document, dict):
        for key, value in document.items():
            yield from iter_scalars(value, address.child(key))
    elif isinstance(document, list):
        for index, item in enumerate(document):
            yield from iter_scalars(item, address.child(index))
    else:
        yield address, document


def extract_leaves(
    document: Any,
    classifier: Optional[Callable[[str], bool]] = None,
) -> List[TranslatableLeaf]:
    """
    Return the translatable leaves of document in canonical order.

    Only string scalars are considered; numbers, booleans and nulls are skipped
    without classification, and blank strings never reach the classifier.

    Args:
        document: Parsed tree of dicts, lists and scalars
        classifier: Predicate deciding translatability (defaults to is_translatable)

    Returns:
        List of TranslatableLeaf, one per translatable string
    """
    check = classifier or is_translatable
    leaves = []
    for address, value in iter_scalars(document):
        if not isinstance(value, str) or not value.strip():
            continue
        if check(value):
            leaves.append(TranslatableLeaf(address=address, original_value=value))
    return leaves
