"""
Translation module - Batch translation functionality

This module provides:
- TranslationManager: Main translation workflow coordinator
- BatchOrchestrator: Sequential, cancellable, failure-isolating batch runner
- ProgressSnapshot: Progress event dataclass
- BatchResult and friends: Result data model
"""

from yaml_translator.translation.progress import ProgressSnapshot
from yaml_translator.translation.models import BatchResult, LeafError, TranslationUnit
from yaml_translator.translation.orchestrator import BatchOrchestrator
from yaml_translator.translation.manager import TranslationManager, DocumentAnalysis

__all__ = [
    'ProgressSnapshot',
    'BatchResult',
    'LeafError',
    'TranslationUnit',
    'BatchOrchestrator',
    'TranslationManager',
    'DocumentAnalysis',
]
