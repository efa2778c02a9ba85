"""Errors raised while parsing documents and resolving addresses inside them."""

from yaml_translator.ai.exceptions import TranslationError


class DocumentError(TranslationError):
    """Base class for document-level errors."""


class ParseFailure(DocumentError):
    """The input could not be parsed into a document tree."""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message, code="parse_failure", details=details)


class AddressNotFound(DocumentError):
    """An address does not resolve inside a document."""

    def __init__(self, address, segment=None):
        if segment is None:
            message = f"Address not found: {address}"
        else:
            message = f"Address not found: {address} (segment {segment!r})"
        super().__init__(
            message,
            code="address_not_found",
            details={"address": str(address), "segment": None if segment is None else str(segment)},
        )
        self.address = address
        self.segment = segment
