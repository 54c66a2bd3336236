"""Fetch-with-retry primitive for remote boot assets."""

from __future__ import annotations

import hashlib
import logging
import os
import tempfile
import threading
import time
from pathlib import Path
from typing import Callable

import requests
from tenacity import (
    RetryCallState,
    RetryError,
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_fixed,
)

from ..core.errors import CancelledError, IntegrityError, TransferError
from ..core.models import DownloadTask, FetchResult
from ..rendering.io import discard, ensure_parent

logger = logging.getLogger(__name__)

DEFAULT_RETRY_DELAY = 2.0
DEFAULT_TIMEOUT = 60.0
DEFAULT_CHUNK_SIZE = 64 * 1024


def _log_retry(retry_state: RetryCallState) -> None:
    outcome = retry_state.outcome
    error = outcome.exception() if outcome is not None else None
    task: DownloadTask = retry_state.args[0]
    logger.warning(
        f"Download of {task.name} failed, retrying "
        f"({retry_state.attempt_number}/{task.attempts}): {error}"
    )


def _transfer(
    task: DownloadTask,
    destination: Path,
    session: requests.Session,
    timeout: float,
    chunk_size: int,
) -> None:
    """Stream one attempt into a scratch file and move it into place."""
    ensure_parent(destination)
    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{destination.name}.", suffix=".part", dir=str(destination.parent)
    )
    scratch = Path(tmp_name)
    digest = hashlib.sha256()
    try:
        with os.fdopen(fd, "wb") as handle:
            with session.get(
                task.url, stream=True, timeout=timeout, allow_redirects=True
            ) as response:
                response.raise_for_status()
                for chunk in response.iter_content(chunk_size=chunk_size):
                    if chunk:
                        handle.write(chunk)
                        digest.update(chunk)
            handle.flush()
            os.fsync(handle.fileno())

        if task.sha256:
            actual = digest.hexdigest()
            if actual.lower() != task.sha256.lower():
                raise IntegrityError(task.url, task.sha256.lower(), actual)
            logger.info(f"Verified SHA-256 of {task.name}")

        os.replace(scratch, destination)
    except requests.RequestException as exc:
        raise TransferError(f"{task.url}: {exc}") from exc
    except OSError as exc:
        raise TransferError(f"{task.url}: cannot write {destination}: {exc}") from exc
    finally:
        discard(scratch)


def fetch(
    task: DownloadTask,
    destination: Path,
    *,
    session: requests.Session | None = None,
    retry_delay: float = DEFAULT_RETRY_DELAY,
    timeout: float = DEFAULT_TIMEOUT,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    cancel: threading.Event | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> FetchResult:
    """Retrieve a download task with a bounded, fixed-delay retry policy.

    Transfer and integrity failures are retried up to ``task.attempts`` times
    in total. The destination is only replaced once a complete (and, when a
    digest is pinned, verified) copy exists.

    Args:
        task: Asset to download
        destination: Absolute destination path
        session: HTTP session (a fresh one is created when omitted)
        retry_delay: Seconds to wait between attempts
        timeout: Per-request timeout in seconds
        chunk_size: Streaming chunk size in bytes
        cancel: Event that stops further attempts when set
        sleep: Sleep function used between attempts

    Returns:
        Fetch result with the attempt count and error (if any)
    """
    own_session = session is None
    http = session or requests.Session()
    attempts = 0

    def attempt(current: DownloadTask) -> None:
        nonlocal attempts
        if cancel is not None and cancel.is_set():
            raise CancelledError(f"Download of {current.name} cancelled")
        attempts += 1
        _transfer(current, destination, http, timeout, chunk_size)

    retrying = Retrying(
        reraise=True,
        retry=retry_if_exception_type(TransferError),
        stop=stop_after_attempt(task.attempts),
        wait=wait_fixed(retry_delay),
        before_sleep=_log_retry,
        sleep=sleep,
    )

    logger.info(f"Downloading {task.description or task.name} from {task.url}")
    try:
        retrying(attempt, task)
    except (TransferError, CancelledError, RetryError) as exc:
        logger.error(
            f"Failed to download {task.name} after {attempts} attempt(s): {exc}"
        )
        return FetchResult(task=task, ok=False, attempts=attempts, error=str(exc))
    finally:
        if own_session:
            http.close()

    logger.info(f"Downloaded {task.name} to {destination}")
    return FetchResult(task=task, ok=True, attempts=attempts)
