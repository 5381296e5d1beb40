"""Runners for best-effort work that must never affect the webhook response."""

import contextvars
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Protocol

import structlog


logger = structlog.get_logger()

Job = Callable[[], Any]


class BackgroundRunner(Protocol):
    def submit(self, name: str, job: Job) -> None:
        ...

    def shutdown(self, *, wait: bool = True) -> None:
        ...


class ThreadRunner:
    """Runs jobs on a small thread pool; failures only reach the log."""

    def __init__(self, *, max_workers: int = 4) -> None:
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="emoji-checker-job")

    def submit(self, name: str, job: Job) -> None:
        # carry the bound log context (event_type, event_id) onto the pool thread
        context = contextvars.copy_context()
        self._executor.submit(context.run, _run_job, name, job)

    def shutdown(self, *, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)


class InlineRunner:
    """Runs jobs in the calling thread, after the caller has decided its result.

    Used under Lambda, where threads left running after the handler returns are
    frozen with the execution environment.
    """

    def submit(self, name: str, job: Job) -> None:
        _run_job(name, job)

    def shutdown(self, *, wait: bool = True) -> None:
        return None


def _run_job(name: str, job: Job) -> None:
    try:
        job()
    except Exception as exc:
        logger.error("background_job_failed", job=name, error=f"{type(exc).__name__}: {exc}")
        return
    logger.debug("background_job_finished", job=name)
