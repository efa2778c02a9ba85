"""
Address / patch model.

An Address locates one scalar inside a parsed document. Mapping keys keep
their original key objects, sequence positions are ints, so two leaves never
share an address even when keys contain dots. The dot-joined string form is
used for display and for the JSON API.
"""

import copy
from typing import Any, Iterable, Tuple

from yaml_translator.core.exceptions import AddressNotFound

Segment = Any


class Address(tuple):
    """Immutable ordered path of mapping keys and sequence indices."""

    def __new__(cls, segments: Iterable[Segment] = ()):
        return super().__new__(cls, segments)

    @classmethod
    def parse(cls, text: str) -> "Address":
        """
        Build an address from its dot-joined form.

        Segments stay strings; sequence lookups accept digit-only strings.

        Example:
            >>> Address.parse("menu.items.0.label")
            Address('menu.items.0.label')
        """
        if not text:
            return cls()
        return cls(text.split('.'))

    def child(self, segment: Segment) -> "Address":
        return Address(tuple(self) + (segment,))

    @property
    def parent(self) -> "Address":
        return Address(self[:-1])

    @property
    def key(self) -> str:
        """Last segment as a string (empty for the root)."""
        return str(self[-1]) if self else ''

    def __str__(self) -> str:
        return '.'.join(str(segment) for segment in self)

    def __repr__(self) -> str:
        return f"Address({str(self)!r})"


def clone_tree(node: Any, _ancestors: Tuple[int, ...] = ()) -> Any:
    """
    Copy a tree so that every mapping and sequence position owns its container.

    Unlike copy.deepcopy, nodes shared through YAML aliases come out as
    independent copies, so patching one address never shows up at another.

    Raises:
        ValueError: If the tree contains itself (recursive alias).
    """
    if isinstance(node, (dict, list)):
        if id(node) in _ancestors:
            raise ValueError("Document contains a recursive alias")
        ancestors = _ancestors + (id(node),)
        if isinstance(node, dict):
            return {key: clone_tree(value, ancestors) for key, value in node.items()}
        return [clone_tree(item, ancestors) for item in node]
    return copy.copy(node)


def _sequence_index(node: list, segment: Segment):
    """Resolve segment to a valid index into node, or None."""
    if isinstance(segment, bool):
        return None
    if isinstance(segment, int):
        index = segment
    elif isinstance(segment, str) and segment.isdigit():
        index = int(segment)
    else:
        return None
    if 0 <= index < len(node):
        return index
    return None


def _step(node: Any, segment: Segment, address: Address) -> Tuple[Any, Segment]:
    """Return (child, resolved_segment) for one step, raising AddressNotFound on mismatch."""
    if isinstance(node, dict):
        if segment in node:
            return node[segment], segment
        # Dot-joined addresses carry every key as a string
        if isinstance(segment, str):
            for key in node:
                if not isinstance(key, str) and str(key) == segment:
                    return node[key], key
        raise AddressNotFound(address, segment)
    if isinstance(node, list):
        index = _sequence_index(node, segment)
        if index is None:
            raise AddressNotFound(address, segment)
        return node[index], index
    raise AddressNotFound(address, segment)


def read(document: Any, address: Address) -> Any:
    """
    Return the value stored at address.

    Raises:
        AddressNotFound: If an intermediate segment is missing or the container type does not match.
    """
    node = document
    for segment in address:
        node, _ = _step(node, segment, address)
    return node


def assign(document: Any, address: Address, value: Any) -> Any:
    """
    Overwrite the value at address in place and return the (possibly new) root.

    The target must already exist; assign never creates keys or grows sequences.
    Callers own the document, so this is only used on clones.
    """
    if not address:
        return value

    parent = read(document, address.parent)
    _, resolved = _step(parent, address[-1], address)
    parent[resolved] = value
    return document


def write(document: Any, address: Address, value: Any) -> Any:
    """
    Return an unshared clone of document with value stored at address.

    The input document is never mutated.

    Raises:
        AddressNotFound: If the address does not resolve inside document.
    """
    return assign(clone_tree(document), address, value)
