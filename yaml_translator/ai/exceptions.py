"""
AI Service Exceptions

Exception classes shared by the translator port, the provider adapters and
the batch orchestrator. Kept in their own module to avoid circular imports
between service.py and providers.py.
"""


class TranslationError(Exception):
    """Translation service error with optional code and details."""

    def __init__(self, message: str, code: str = None, details: dict = None):
        super().__init__(message)
        self.code = code
        self.details = details or {}

    def to_dict(self) -> dict:
        payload = {"error": str(self), "code": self.code or "translation_error"}
        if self.details:
            payload["details"] = self.details
        return payload


class TranslationFailure(TranslationError):
    """A single value could not be translated; the batch carries on."""

    def __init__(self, reason: str, details: dict = None):
        super().__init__(reason, code="translation_failed", details=details)
        self.reason = reason


class ProviderFatal(TranslationError):
    """Provider-level failure outside the per-item contract (bad config, unusable backend)."""

    def __init__(self, message: str, code: str = "provider_fatal", details: dict = None):
        super().__init__(message, code=code, details=details)


class CancellationRequested(TranslationError):
    """Cooperative stop requested by the caller."""

    def __init__(self, message: str = "Translation cancelled"):
        super().__init__(message, code="cancelled")
