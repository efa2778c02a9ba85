"""
Core document model

This module provides the structural half of the pipeline:
- Document parsing and serialization (YAML/JSON)
- Translatability classification of string scalars
- Addresses that locate and patch values inside a tree
- Leaf extraction and reassembly
"""

from yaml_translator.core.address import Address, clone_tree, read, write
from yaml_translator.core.classifier import is_translatable
from yaml_translator.core.document import (
    DocumentFormat,
    detect_format,
    parse_document,
    serialize_document,
    validate_content,
    validate_upload,
    estimate_translation_time,
)
from yaml_translator.core.exceptions import DocumentError, ParseFailure, AddressNotFound
from yaml_translator.core.reassembler import apply
from yaml_translator.core.walker import TranslatableLeaf, extract_leaves, iter_scalars

__all__ = [
    'Address',
    'read',
    'write',
    'clone_tree',
    'is_translatable',
    'DocumentFormat',
    'detect_format',
    'parse_document',
    'serialize_document',
    'validate_content',
    'validate_upload',
    'estimate_translation_time',
    'DocumentError',
    'ParseFailure',
    'AddressNotFound',
    'apply',
    'TranslatableLeaf',
    'extract_leaves',
    'iter_scalars',
]
