"""
Batch Orchestrator Module

Drives every translatable leaf of one document through a translator port:
- Strictly sequential, one provider call per leaf
- Progress events in leaf order
- Cooperative cancellation checked before each leaf
- Per-leaf failure isolation (original value kept)
- Reassembly of the translated document
"""

import asyncio
import time
from typing import Any, Callable, List, Optional, Sequence

from yaml_translator.ai.exceptions import CancellationRequested, ProviderFatal
from yaml_translator.ai.port import TokenUsage, TranslatorConfig, TranslatorPort
from yaml_translator.config import DEFAULT_REQUEST_DELAY
from yaml_translator.core.document import DocumentFormat, serialize_document
from yaml_translator.core.reassembler import apply
from yaml_translator.core.walker import TranslatableLeaf
from yaml_translator.logger import get_logger
from yaml_translator.translation.models import (
    BATCH_ERROR_ADDRESS,
    BatchResult,
    LeafError,
    TranslationUnit,
    UNIT_COMPLETED,
)
from yaml_translator.translation.progress import (
    ProgressSnapshot,
    PHASE_TRANSLATING,
    PHASE_COMPLETED,
    PHASE_ERROR,
    PHASE_CANCELLED,
)

logger = get_logger(__name__)

ProgressCallback = Callable[[ProgressSnapshot], None]
CancelCheck = Callable[[], bool]


class BatchOrchestrator:
    """
    Runs one batch at a time against a single translator port.

    The instance keeps no state between runs; concurrent runs on the same
    instance are not supported and must be serialized by the caller.
    """

    def __init__(
        self,
        translator: TranslatorPort,
        fmt: DocumentFormat = DocumentFormat.YAML,
        request_delay: float = DEFAULT_REQUEST_DELAY,
    ):
        self.translator = translator
        self.fmt = DocumentFormat(fmt)
        self.request_delay = request_delay

    async def run(
        self,
        document: Any,
        leaves: Sequence[TranslatableLeaf],
        config: TranslatorConfig,
        on_progress: Optional[ProgressCallback] = None,
        cancel_check: Optional[CancelCheck] = None,
    ) -> BatchResult:
        """
        Translate leaves and rebuild document with the results.

        Never raises for batch-level problems: cancellation, invalid config and
        fatal provider errors all come back as a BatchResult with success=False.

        Args:
            document: Parsed document the leaves were extracted from (not mutated)
            leaves: Leaves in extraction order
            config: Batch translation settings
            on_progress: Optional callback receiving ProgressSnapshot events
            cancel_check: Optional callable returning True once the caller wants to stop

        Returns:
            BatchResult describing the run
        """
        start_time = time.time()

        if not leaves:
            logger.info("No translatable values found, skipping provider")
            return BatchResult(
                success=True,
                document=document,
                content=serialize_document(document, self.fmt),
                translated_count=0,
                elapsed_time=time.time() - start_time,
            )

        total = len(leaves)
        units: List[TranslationUnit] = [TranslationUnit(leaf=leaf) for leaf in leaves]
        errors: List[LeafError] = []
        usage = TokenUsage()
        translated_count = 0

        def emit(snapshot: ProgressSnapshot) -> None:
            if on_progress is not None:
                on_progress(snapshot)

        logger.info(f"Starting batch of {total} values (target: {config.target_language})")

        try:
            if not config.target_language:
                raise ProviderFatal("Target language is required", code="config_invalid")

            for index, unit in enumerate(units):
                if cancel_check is not None and cancel_check():
                    raise CancellationRequested()

                leaf = unit.leaf
                position = index + 1
                percentage = position / total * 100

                unit.start()
                emit(ProgressSnapshot(
                    index=position,
                    total=total,
                    current_address=leaf.path,
                    current_value=leaf.original_value,
                    percentage=percentage,
                    phase=PHASE_TRANSLATING,
                    translated_count=translated_count,
                    failure_count=len(errors),
                ))

                try:
                    outcome = await self.translator.translate_one(leaf.original_value, config)
                except (ProviderFatal, CancellationRequested):
                    raise
                except Exception as e:
                    reason = str(e) or type(e).__name__
                    unit.fail(reason)
                    errors.append(LeafError(address=leaf.path, reason=reason, original_value=leaf.original_value))
                    logger.warning(f"Failed to translate \"{leaf.path}\": {reason}")
                else:
                    unit.succeed(outcome.translated_value)
                    usage.add(outcome.usage)
                    translated_count += 1
                    emit(ProgressSnapshot(
                        index=position,
                        total=total,
                        current_address=leaf.path,
                        current_value=leaf.original_value,
                        percentage=percentage,
                        phase=PHASE_TRANSLATING,
                        translated_value=outcome.translated_value,
                        translated_count=translated_count,
                        failure_count=len(errors),
                    ))

                # Small delay between calls to avoid provider rate limiting
                if position < total and self.request_delay > 0:
                    await asyncio.sleep(self.request_delay)

            patches = [
                (unit.leaf.address, unit.translated_value)
                for unit in units
                if unit.status == UNIT_COMPLETED and unit.translated_value != unit.leaf.original_value
            ]
            translated_document = apply(document, patches)
            content = serialize_document(translated_document, self.fmt)

        except CancellationRequested as e:
            logger.info(f"Batch cancelled after {translated_count}/{total} values, discarding partial output")
            emit(ProgressSnapshot(
                index=translated_count + len(errors),
                total=total,
                current_address="",
                current_value="",
                percentage=0,
                phase=PHASE_CANCELLED,
                error=str(e),
                translated_count=translated_count,
                failure_count=len(errors),
            ))
            return BatchResult(
                success=False,
                translated_count=translated_count,
                errors=errors + [LeafError(address=BATCH_ERROR_ADDRESS, reason=str(e))],
                usage=usage,
                units=units,
                cancelled=True,
                elapsed_time=time.time() - start_time,
            )
        except Exception as e:
            if isinstance(e, ProviderFatal):
                logger.error(f"Batch translation failed: {e}")
            else:
                logger.exception(f"Batch translation failed: {e}")
            message = str(e) or "Batch translation failed"
            emit(ProgressSnapshot(
                index=translated_count + len(errors),
                total=total,
                current_address="",
                current_value="",
                percentage=0,
                phase=PHASE_ERROR,
                error=message,
                translated_count=translated_count,
                failure_count=len(errors),
            ))
            return BatchResult(
                success=False,
                translated_count=translated_count,
                errors=[LeafError(address=BATCH_ERROR_ADDRESS, reason=message)],
                usage=usage,
                units=units,
                elapsed_time=time.time() - start_time,
            )

        emit(ProgressSnapshot(
            index=total,
            total=total,
            current_address="",
            current_value="",
            percentage=100,
            phase=PHASE_COMPLETED,
            translated_count=translated_count,
            failure_count=len(errors),
        ))

        elapsed_time = time.time() - start_time
        logger.info(
            "Batch completed in %.1f seconds (success=%d, failed=%d, tokens=%d)",
            elapsed_time,
            translated_count,
            len(errors),
            usage.total_tokens,
        )

        return BatchResult(
            success=True,
            document=translated_document,
            content=content,
            translated_count=translated_count,
            errors=errors,
            usage=usage,
            units=units,
            elapsed_time=elapsed_time,
        )
