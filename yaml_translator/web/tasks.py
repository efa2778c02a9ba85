"""
Asynchronous task helpers for long-running background jobs (document translation).
"""

from __future__ import annotations

import asyncio
import threading
import time
import uuid
from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Optional

from yaml_translator.ai.port import TranslatorConfig
from yaml_translator.logger import get_logger
from yaml_translator.translation.manager import TranslationManager
from yaml_translator.translation.models import BATCH_ERROR_ADDRESS
from yaml_translator.translation.progress import ProgressSnapshot

logger = get_logger(__name__)

_PRIVATE_FIELDS = ("done",)


@dataclass
class JobState:
    """In-memory representation of an asynchronous translation job."""

    job_id: str
    filename: Optional[str] = None
    target_language: str = ""
    source_language: Optional[str] = None
    provider: Optional[str] = None
    model: Optional[str] = None
    cancel_requested: bool = False
    state: str = "pending"  # pending|running|completed|failed|cancelled
    created_at: float = field(default_factory=time.time)
    started_at: Optional[float] = None
    finished_at: Optional[float] = None
    progress: Dict[str, Any] = field(default_factory=dict)
    progress_history: List[Dict[str, Any]] = field(default_factory=list)  # History of all progress updates
    result: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
    failure_count: int = 0
    last_update: float = field(default_factory=time.time)
    done: threading.Event = field(default_factory=threading.Event, repr=False, compare=False)

    def request_cancel(self):
        """Mark this job as requested for cancellation."""
        self.cancel_requested = True
        self.last_update = time.time()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until the job finishes. Returns False on timeout."""
        return self.done.wait(timeout)

    def to_dict(self) -> Dict[str, Any]:
        payload = {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if f.name not in _PRIVATE_FIELDS
        }
        payload["progress"] = dict(self.progress)
        payload["progress_history"] = list(self.progress_history)
        return payload


_jobs: Dict[str, JobState] = {}
_jobs_lock = threading.Lock()
_JOB_RETENTION_SECONDS = 600  # Retain job info for 10 minutes after completion


def build_manager(
    config: TranslatorConfig,
    provider: Optional[str] = None,
    model: Optional[str] = None,
    api_key: Optional[str] = None,
    base_url: Optional[str] = None,
) -> TranslationManager:
    """Create the TranslationManager used by a job."""
    return TranslationManager(config, provider=provider, model=model, api_key=api_key, base_url=base_url)


def create_translation_job(
    manager: TranslationManager,
    content: str,
    filename: Optional[str] = None,
    fmt: Optional[str] = None,
) -> JobState:
    """
    Create and launch an asynchronous translation job for a document.

    Args:
        manager: Configured TranslationManager (one job per manager).
        content: Raw YAML/JSON text.
        filename: Optional original filename, used for format detection.
        fmt: Optional explicit format ("yaml" or "json").

    Returns:
        JobState for the new job (already registered and running in background).
    """
    job_id = uuid.uuid4().hex
    job_state = JobState(
        job_id=job_id,
        filename=filename,
        target_language=manager.config.target_language,
        source_language=manager.config.source_language,
        provider=manager.provider,
        model=manager.model,
    )

    with _jobs_lock:
        _cleanup_jobs_locked()
        _jobs[job_id] = job_state

    thread = threading.Thread(
        target=_run_translation_job,
        args=(job_state, manager, content, filename, fmt),
        name=f"translation-job-{job_id}",
        daemon=True,
    )
    thread.start()
    logger.info(
        "Translation job %s started (file=%s, target=%s, provider=%s)",
        job_id,
        filename or "inline",
        job_state.target_language,
        job_state.provider,
    )
    return job_state


def get_job(job_id: str) -> Optional[JobState]:
    """Fetch a job by ID (if still retained)."""
    with _jobs_lock:
        job = _jobs.get(job_id)
        if job and job.finished_at and (time.time() - job.finished_at) > _JOB_RETENTION_SECONDS:
            # Expired; remove
            _jobs.pop(job_id, None)
            return None
        return job


def cancel_job(job_id: str) -> bool:
    """
    Request cancellation of a running job.

    Args:
        job_id: The job ID to cancel.

    Returns:
        True if job was found and cancellation requested, False otherwise.
    """
    with _jobs_lock:
        job = _jobs.get(job_id)
        if not job:
            return False
        if job.state in ("completed", "failed", "cancelled"):
            return False  # Already finished
        job.request_cancel()
        logger.info("Cancellation requested for job %s", job_id)
        return True


def _run_translation_job(
    job: JobState,
    manager: TranslationManager,
    content: str,
    filename: Optional[str],
    fmt: Optional[str],
):
    """Worker function executed in a background thread."""
    job.state = "running"
    job.started_at = time.time()
    job.last_update = job.started_at
    try:
        def on_progress(progress: ProgressSnapshot):
            with _jobs_lock:
                serialized = progress.to_dict()
                job.progress = serialized  # Latest state
                job.progress_history.append(serialized)
                job.failure_count = progress.failure_count
                job.last_update = time.time()

        def check_cancel():
            """Check if job cancellation was requested."""
            with _jobs_lock:
                return job.cancel_requested

        result = asyncio.run(manager.translate_content(
            content,
            fmt=fmt,
            filename=filename,
            on_progress=on_progress,
            cancel_check=check_cancel,
        ))

        job.result = result.to_dict(include_units=True)
        if result.cancelled:
            job.state = "cancelled"
        else:
            job.state = "completed" if result.success else "failed"
        if not result.success:
            job.error = "; ".join(error.reason for error in result.errors if error.address == BATCH_ERROR_ADDRESS) or None
        job.finished_at = time.time()
        job.last_update = job.finished_at
        logger.info(
            "Translation job %s finished (state=%s, translated=%s, failed=%s)",
            job.job_id,
            job.state,
            result.translated_count,
            result.failure_count,
        )
    except Exception as exc:
        job.state = "failed"
        error_type = type(exc).__name__
        error_message = str(exc)
        job.error = f"{error_type}: {error_message}"
        job.finished_at = time.time()
        job.last_update = job.finished_at
        logger.exception(
            "Translation job %s failed: %s: %s",
            job.job_id,
            error_type,
            error_message,
        )
    finally:
        job.done.set()


def _cleanup_jobs_locked():
    """Remove completed jobs that exceeded retention period (call with lock held)."""
    now = time.time()
    expired = [
        job_id
        for job_id, job in _jobs.items()
        if job.finished_at and (now - job.finished_at) > _JOB_RETENTION_SECONDS
    ]
    for job_id in expired:
        _jobs.pop(job_id, None)
