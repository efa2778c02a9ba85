"""Reassembler: splices translated values back into a clone of the original document."""

from typing import Any, Iterable, Tuple

from yaml_translator.core.address import Address, assign, clone_tree
from yaml_translator.logger import get_logger

logger = get_logger(__name__)


def apply(original_document: Any, patches: Iterable[Tuple[Address, Any]]) -> Any:
    """
    Apply (address, value) patches to a single unshared clone of original_document.

    Patches are applied in the order given. Addresses produced by the walker are
    disjoint, so the order only matters for speed. The original is untouched.

    Raises:
        AddressNotFound: If a patch address does not exist in the document.
    """
    document = clone_tree(original_document)
    applied = 0
    for address, value in patches:
        document = assign(document, address, value)
        applied += 1
    logger.debug(f"Applied {applied} patches to document clone")
    return document
