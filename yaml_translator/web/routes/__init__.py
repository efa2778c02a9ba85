"""Route blueprints for the web application."""

from .documents import documents_bp
from .translation import translation_bp
from .providers import providers_bp
from .settings import settings_bp

__all__ = [
    "documents_bp",
    "translation_bp",
    "providers_bp",
    "settings_bp",
]
