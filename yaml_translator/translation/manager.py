"""
Translation Manager Module

Main TranslationManager class that coordinates the translation workflow:
- Parse the document and detect its format
- Extract translatable leaves
- Estimate time and cost
- Run the batch orchestrator and return a BatchResult
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from yaml_translator.ai.exceptions import ProviderFatal
from yaml_translator.ai.port import TranslationOutcome, TranslatorConfig, TranslatorPort
from yaml_translator.ai.providers import AIProvider, calculate_cost
from yaml_translator.ai.service import AIService
from yaml_translator.config import DEFAULT_REQUEST_DELAY, load_config
from yaml_translator.core.document import (
    DocumentFormat,
    detect_format,
    estimate_translation_time,
    parse_document,
)
from yaml_translator.core.exceptions import ParseFailure
from yaml_translator.core.walker import TranslatableLeaf, extract_leaves
from yaml_translator.logger import get_logger
import yaml_translator.language_codes as lc
from yaml_translator.translation.models import BATCH_ERROR_ADDRESS, BatchResult, LeafError
from yaml_translator.translation.orchestrator import BatchOrchestrator, CancelCheck, ProgressCallback

logger = get_logger(__name__)

AVG_TOKENS_PER_ITEM = 50


@dataclass
class DocumentAnalysis:
    """Parsed document together with its leaves and a rough estimate."""
    format: DocumentFormat
    document: Any
    leaves: List[TranslatableLeaf]
    estimate: Dict[str, Any]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "format": self.format.value,
            "leaves": [leaf.to_dict() for leaf in self.leaves],
            "estimate": self.estimate,
        }


class TranslationManager:
    """
    Coordinates one document translation from raw text to BatchResult.

    Features:
    - YAML and JSON input, serialized back in the same format
    - Pluggable translator port (AIService by default)
    - Progress callbacks and cooperative cancellation
    - Parse and configuration failures returned as failed results
    """

    def __init__(
        self,
        config: TranslatorConfig,
        translator: Optional[TranslatorPort] = None,
        provider: Optional[str] = None,
        model: Optional[str] = None,
        settings: Optional[Dict[str, Any]] = None,
        request_delay: Optional[float] = None,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
    ):
        """
        Initialize translation manager.

        Args:
            config: Batch translation settings
            translator: Translator port to use instead of building an AIService
            provider: Provider override (openai, claude, gemini)
            model: Model override
            settings: Application config dict (loaded from disk when omitted)
            request_delay: Seconds between provider calls (config default when omitted)
            api_key: API key override for the provider
            base_url: Endpoint override for the provider
        """
        self.config = config
        self.settings = settings if settings is not None else load_config()
        self.provider = provider or self.settings.get('ai_provider', 'openai')
        self.model = model
        self._api_key = api_key
        self._base_url = base_url
        self._translator = translator

        if request_delay is None:
            request_delay = self.settings.get('translation', {}).get('request_delay', DEFAULT_REQUEST_DELAY)
        self.request_delay = request_delay

        if lc.languages_match(config.source_language, config.target_language, strict=True):
            logger.warning(
                f"Source and target language are both '{config.target_language}', values may come back unchanged"
            )

    def get_translator(self) -> TranslatorPort:
        """Return the translator port, building an AIService on first use."""
        if self._translator is None:
            service = AIService(
                model_override=self.model,
                provider_override=self.provider,
                config=self.settings,
                api_key=self._api_key,
                base_url=self._base_url,
            )
            service.validate()
            self._translator = service
        return self._translator

    def analyze(
        self,
        content: str,
        fmt: Optional[DocumentFormat] = None,
        filename: Optional[str] = None,
    ) -> DocumentAnalysis:
        """
        Parse content and list its translatable leaves.

        Raises:
            ParseFailure: If content cannot be parsed.
        """
        fmt = DocumentFormat(fmt) if fmt else detect_format(filename, content)
        document = parse_document(content, fmt)
        leaves = extract_leaves(document)
        logger.info(f"Found {len(leaves)} translatable values in {fmt.value} document")
        return DocumentAnalysis(
            format=fmt,
            document=document,
            leaves=leaves,
            estimate=self.get_translation_estimate(leaves),
        )

    def get_translation_estimate(self, leaves: List[TranslatableLeaf]) -> Dict[str, Any]:
        """Estimate item count, duration (seconds) and cost (USD) for leaves."""
        item_count = len(leaves)
        total_tokens = item_count * AVG_TOKENS_PER_ITEM

        try:
            estimated_cost = calculate_cost(AIProvider(self.provider), self.model or '', total_tokens)
        except ValueError:
            estimated_cost = (total_tokens / 1000) * 0.002

        return {
            "item_count": item_count,
            "estimated_time": estimate_translation_time(item_count),
            "estimated_cost": estimated_cost,
        }

    async def translate_content(
        self,
        content: str,
        fmt: Optional[DocumentFormat] = None,
        filename: Optional[str] = None,
        on_progress: Optional[ProgressCallback] = None,
        cancel_check: Optional[CancelCheck] = None,
    ) -> BatchResult:
        """
        Translate a whole document given as text.

        Parse and pre-flight configuration failures are returned as a failed
        BatchResult rather than raised.

        Returns:
            BatchResult with the translated document serialized in the input format
        """
        try:
            analysis = self.analyze(content, fmt=fmt, filename=filename)
        except ParseFailure as e:
            logger.error(f"Failed to parse document: {e}")
            return BatchResult(success=False, errors=[LeafError(address=BATCH_ERROR_ADDRESS, reason=str(e))])

        return await self.translate_document(
            analysis.document,
            analysis.leaves,
            fmt=analysis.format,
            on_progress=on_progress,
            cancel_check=cancel_check,
        )

    async def translate_document(
        self,
        document: Any,
        leaves: Optional[List[TranslatableLeaf]] = None,
        fmt: DocumentFormat = DocumentFormat.YAML,
        on_progress: Optional[ProgressCallback] = None,
        cancel_check: Optional[CancelCheck] = None,
    ) -> BatchResult:
        """Translate an already parsed document."""
        if leaves is None:
            leaves = extract_leaves(document)

        translator = None
        if leaves:
            try:
                translator = self.get_translator()
            except ProviderFatal as e:
                logger.error(f"Translator configuration invalid: {e}")
                return BatchResult(success=False, errors=[LeafError(address=BATCH_ERROR_ADDRESS, reason=str(e))])

        orchestrator = BatchOrchestrator(translator, fmt=fmt, request_delay=self.request_delay)
        return await orchestrator.run(
            document,
            leaves,
            self.config,
            on_progress=on_progress,
            cancel_check=cancel_check,
        )

    async def translate_text(self, text: str) -> TranslationOutcome:
        """
        Translate a single string with the batch settings.

        Raises:
            TranslationFailure: If the provider call fails.
            ProviderFatal: If the translator cannot be configured.
        """
        return await self.get_translator().translate_one(text, self.config)
