"""Acquisition of every boot asset into the asset tree."""

from __future__ import annotations

import logging
import tempfile
import threading
import time
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from pathlib import Path
from typing import Callable, Sequence

import requests

from ..core.errors import ExtractionError
from ..core.models import AcquisitionResult, DownloadTask, FetchResult
from ..rendering.io import atomic_write_text
from .catalogue import ISO_ROOT, PLACEHOLDERS, SKELETON, TFTP_ROOT, USER_SUPPLIED
from .extract import extract_member
from .fetcher import DEFAULT_CHUNK_SIZE, DEFAULT_RETRY_DELAY, DEFAULT_TIMEOUT, fetch
from .permissions import normalize_tree

logger = logging.getLogger(__name__)


def create_skeleton(root: Path) -> list[Path]:
    """Create the asset directories and their instruction placeholders.

    Returns:
        Directories created or confirmed
    """
    created = []
    for directory in SKELETON:
        path = root / directory
        path.mkdir(parents=True, exist_ok=True)
        created.append(path)
        logger.debug(f"Created directory: {path}")

    for relative, text in PLACEHOLDERS.items():
        atomic_write_text(root / relative, text)
        logger.debug(f"Wrote instructions to {root / relative}")

    logger.info("Sample directory structure created")
    return created


class _Runner:
    """Runs single download tasks with shared transfer settings."""

    def __init__(
        self,
        root: Path,
        session: requests.Session | None,
        retry_delay: float,
        timeout: float,
        chunk_size: int,
        stop: threading.Event,
        sleep: Callable[[float], None],
    ) -> None:
        self.root = root
        self.session = session
        self.retry_delay = retry_delay
        self.timeout = timeout
        self.chunk_size = chunk_size
        self.stop = stop
        self.sleep = sleep

    def _fetch(self, task: DownloadTask, destination: Path) -> FetchResult:
        return fetch(
            task,
            destination,
            session=self.session,
            retry_delay=self.retry_delay,
            timeout=self.timeout,
            chunk_size=self.chunk_size,
            cancel=self.stop,
            sleep=self.sleep,
        )

    def run(self, task: DownloadTask) -> FetchResult:
        destination = self.root / task.destination
        if not task.archive_member:
            return self._fetch(task, destination)

        with tempfile.TemporaryDirectory(prefix="pxeprep-") as scratch:
            archive = Path(scratch) / Path(task.url).name
            result = self._fetch(task, archive)
            if not result.ok:
                return result
            try:
                member = extract_member(archive, task.archive_member, destination)
            except ExtractionError as exc:
                return result.model_copy(update={"ok": False, "error": str(exc)})
        logger.info(f"Installed {task.name} from archive member {member}")
        return result


def _record(result: FetchResult, outcome: AcquisitionResult) -> bool:
    """Store a result; return True when the pipeline must stop."""
    outcome.results.append(result)
    if result.ok:
        return False
    if result.task.required:
        logger.error(f"Required asset {result.task.name} failed: {result.error}")
        outcome.aborted = True
        return True
    message = f"Failed to download {result.task.name} (optional): {result.error}"
    logger.warning(message)
    outcome.warnings.append(message)
    return False


def _run_sequential(
    runner: _Runner,
    tasks: Sequence[DownloadTask],
    outcome: AcquisitionResult,
    cancel: threading.Event | None,
) -> None:
    for task in tasks:
        if cancel is not None and cancel.is_set():
            logger.warning("Acquisition cancelled; remaining tasks not started")
            outcome.aborted = True
            return
        if _record(runner.run(task), outcome):
            return


def _run_pool(
    runner: _Runner,
    tasks: Sequence[DownloadTask],
    outcome: AcquisitionResult,
    cancel: threading.Event | None,
    workers: int,
) -> None:
    order = {task.name: index for index, task in enumerate(tasks)}
    executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="pxeprep")
    pending: set[Future[FetchResult]] = {
        executor.submit(runner.run, task) for task in tasks
    }
    try:
        while pending:
            done, pending = wait(pending, timeout=0.5, return_when=FIRST_COMPLETED)
            if cancel is not None and cancel.is_set():
                logger.warning("Acquisition cancelled; remaining tasks not started")
                outcome.aborted = True
            for future in done:
                _record(future.result(), outcome)
            if outcome.aborted:
                runner.stop.set()
                break
    finally:
        executor.shutdown(wait=not outcome.aborted, cancel_futures=True)
    outcome.results.sort(key=lambda result: order[result.task.name])


def acquire_assets(
    root: Path,
    tasks: Sequence[DownloadTask],
    *,
    session: requests.Session | None = None,
    retry_delay: float = DEFAULT_RETRY_DELAY,
    timeout: float = DEFAULT_TIMEOUT,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    workers: int = 1,
    cancel: threading.Event | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> AcquisitionResult:
    """Download every task, tolerating optional failures.

    A failed required task stops the run: later tasks are not started and
    permissions are left untouched. Otherwise the asset tree is normalized.

    Args:
        root: Project root holding the asset tree
        tasks: Download tasks in execution order
        session: HTTP session shared by all tasks
        retry_delay: Seconds between attempts
        timeout: Per-request timeout in seconds
        chunk_size: Streaming chunk size in bytes
        workers: Parallel downloads (1 runs strictly in order)
        cancel: Event that stops new tasks from starting when set
        sleep: Sleep function used between attempts

    Returns:
        Acquisition result
    """
    create_skeleton(root)

    stop = threading.Event()
    runner = _Runner(root, session, retry_delay, timeout, chunk_size, stop, sleep)
    outcome = AcquisitionResult()

    logger.info(f"Acquiring {len(tasks)} asset(s) with {workers} worker(s)")
    if workers > 1:
        _run_pool(runner, tasks, outcome, cancel, workers)
    else:
        _run_sequential(runner, tasks, outcome, cancel)

    if outcome.aborted:
        return outcome

    executables = [task.destination for task in tasks if task.executable]
    normalize_tree(root, (TFTP_ROOT, ISO_ROOT), executables)
    logger.info("File permissions set")

    for label, marker in USER_SUPPLIED.items():
        if not (root / marker).exists():
            message = f"Still needed: {label} in {marker.parent.parent}/"
            logger.warning(message)
            outcome.warnings.append(message)

    return outcome
