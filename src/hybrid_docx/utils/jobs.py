"""
Background conversion jobs.

Provides:
- JobStatus snapshots as reported to progress pollers
- JobStore: process-wide, lock-protected status map
- ConversionService: submits conversions to a thread pool and publishes
  progress into the store
"""

import functools
import logging
import threading
import uuid
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Union

from ..config import PipelineConfig, get_config
from .io import ensure_dir

logger = logging.getLogger(__name__)


class JobNotFoundError(KeyError):
    """No job is registered under the requested identifier."""


class ArtifactNotFoundError(FileNotFoundError):
    """The requested output file does not exist."""


# ============================================================================
# Job Status
# ============================================================================

@dataclass(frozen=True)
class JobStatus:
    """Latest progress snapshot of a conversion job."""
    percent: int = 0
    status: str = ""
    download_url: Optional[str] = None
    completed: Optional[bool] = None
    message: Optional[str] = None

    @classmethod
    def started(cls) -> "JobStatus":
        return cls(percent=0, status="Starting...")

    @classmethod
    def converting(cls, percent: int) -> "JobStatus":
        return cls(percent=percent, status=f"Converting... {percent}%")

    @classmethod
    def succeeded(cls, download_url: str) -> "JobStatus":
        return cls(
            percent=100,
            status="Completed successfully!",
            download_url=download_url,
            completed=True,
        )

    @classmethod
    def failed(cls, message: str) -> "JobStatus":
        return cls(percent=0, status="Error", message=message)

    @property
    def is_error(self) -> bool:
        return self.message is not None

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"percent": self.percent, "status": self.status}
        if self.download_url is not None:
            result["downloadUrl"] = self.download_url
        if self.completed is not None:
            result["completed"] = self.completed
        if self.message is not None:
            result["message"] = self.message
        return result


# ============================================================================
# Job Store
# ============================================================================

class JobStore:
    """
    Thread-safe map of job id to latest JobStatus.

    Entries are created on submission, overwritten by the conversion task
    (last write wins) and never pruned.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._jobs: Dict[str, JobStatus] = {}

    def create(self, job_id: str, status: Optional[JobStatus] = None):
        with self._lock:
            if job_id in self._jobs:
                raise ValueError(f"Job already exists: {job_id}")
            self._jobs[job_id] = status or JobStatus.started()

    def update(self, job_id: str, status: JobStatus):
        with self._lock:
            if job_id not in self._jobs:
                raise JobNotFoundError(job_id)
            self._jobs[job_id] = status

    def get(self, job_id: str) -> JobStatus:
        with self._lock:
            try:
                return self._jobs[job_id]
            except KeyError:
                raise JobNotFoundError(job_id) from None

    def __contains__(self, job_id: str) -> bool:
        with self._lock:
            return job_id in self._jobs

    def __len__(self) -> int:
        with self._lock:
            return len(self._jobs)


# ============================================================================
# Conversion Service
# ============================================================================

def output_name_for(original_name: str) -> str:
    """DOCX artifact name for an uploaded file name."""
    stem = Path(original_name or "document").stem or "document"
    return f"{stem}.docx"


class ConversionService:
    """
    Runs conversions in the background and tracks their progress.

    ``converter`` is called as ``converter(input_path, output_path,
    on_progress)``; it defaults to ``DocumentAssembler.convert``.
    """

    def __init__(
        self,
        config: Optional[PipelineConfig] = None,
        store: Optional[JobStore] = None,
        converter: Optional[Callable[..., Any]] = None
    ):
        self.config = config or get_config()
        self.store = store or JobStore()
        self._converter = converter
        self._executor = ThreadPoolExecutor(
            max_workers=self.config.service.max_workers,
            thread_name_prefix="conversion"
        )
        # Only jobs still queued or running; finished ones live in the store
        self._futures_lock = threading.Lock()
        self._futures: Dict[str, Future] = {}

    @property
    def output_dir(self) -> Path:
        return Path(self.config.service.output_dir)

    def _convert(self, input_path: Path, output_path: Path, on_progress):
        if self._converter is not None:
            return self._converter(input_path, output_path, on_progress)

        from .assembler import DocumentAssembler
        return DocumentAssembler(self.config).convert(input_path, output_path, on_progress)

    def submit(self, input_path: Union[str, Path], original_name: Optional[str] = None) -> str:
        """
        Start converting a PDF and return its job id immediately.

        Args:
            input_path: Stored upload
            original_name: Client-side file name, used to name the output
        """
        job_id = str(uuid.uuid4())[:8]
        output_name = output_name_for(original_name or Path(input_path).name)

        self.store.create(job_id)
        with self._futures_lock:
            future = self._executor.submit(self._run, job_id, Path(input_path), output_name)
            self._futures[job_id] = future
        # Runs immediately if the job already finished, so it must not hold the lock
        future.add_done_callback(functools.partial(self._forget, job_id))
        logger.info(f"Submitted job {job_id} for {original_name or input_path}")
        return job_id

    def _forget(self, job_id: str, future: Future):
        with self._futures_lock:
            self._futures.pop(job_id, None)

    def _run(self, job_id: str, input_path: Path, output_name: str):
        output_path = ensure_dir(self.output_dir) / output_name

        def on_progress(percent: int):
            # 100% is only published together with the download URL
            if percent < 100:
                self.store.update(job_id, JobStatus.converting(percent))

        try:
            self._convert(input_path, output_path, on_progress)
        except Exception as e:
            logger.error(f"Conversion error in job {job_id}: {e}", exc_info=True)
            self.store.update(job_id, JobStatus.failed(str(e)))
            return

        self.store.update(job_id, JobStatus.succeeded(f"/download/{output_name}"))
        logger.info(f"Job {job_id} completed: {output_path}")

    def get_status(self, job_id: str) -> JobStatus:
        return self.store.get(job_id)

    def wait(self, job_id: str, timeout: Optional[float] = None) -> JobStatus:
        """
        Block until the job finishes and return its final status.

        Raises:
            JobNotFoundError: If no job was ever submitted under ``job_id``
        """
        with self._futures_lock:
            future = self._futures.get(job_id)
        if future is not None:
            future.result(timeout=timeout)
        return self.store.get(job_id)

    def artifact_path(self, filename: str) -> Path:
        """
        Resolve a download name to an existing output file.

        Raises:
            ArtifactNotFoundError: If no such artifact exists
        """
        name = Path(filename).name
        path = self.output_dir / name
        if not name or not path.is_file():
            raise ArtifactNotFoundError(filename)
        return path

    def shutdown(self, wait: bool = True):
        self._executor.shutdown(wait=wait)
