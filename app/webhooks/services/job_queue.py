"""Fire-and-forget job hand-off for project services.

Webhook deliveries must be acknowledged quickly, so each service execution
is handed to a background thread. Enqueueing never raises on behalf of the
job: failures are logged with their traceback and left to the job itself.

With ``JOB_QUEUE_EAGER`` enabled (tests, management scripts) jobs run inline
on the calling thread with the same error handling.
"""

import logging
import threading
from typing import Any, Callable

from django.conf import settings

logger = logging.getLogger(__name__)


class JobQueue:
    """Run callables in daemon threads.

    Attributes:
        eager: Run jobs inline instead of in a thread. Defaults to the
            JOB_QUEUE_EAGER setting when not given.
    """

    def __init__(self, eager: bool | None = None) -> None:
        self._eager = eager
        self._lock = threading.Lock()
        self._threads: list[threading.Thread] = []

    @property
    def eager(self) -> bool:
        if self._eager is not None:
            return self._eager
        return getattr(settings, "JOB_QUEUE_EAGER", False)

    def enqueue(self, func: Callable[..., Any], *args: Any, **kwargs: Any) -> None:
        """Hand a job off for execution.

        Args:
            func: Job callable.
            *args: Positional arguments for the job.
            **kwargs: Keyword arguments for the job.
        """
        job_name = getattr(func, "__qualname__", repr(func))

        if self.eager:
            self._run(job_name, func, args, kwargs)
            return

        thread = threading.Thread(
            target=self._run,
            args=(job_name, func, args, kwargs),
            name=f"job:{job_name}",
            daemon=True,  # Don't block shutdown
        )
        with self._lock:
            self._threads = [t for t in self._threads if t.is_alive()]
            self._threads.append(thread)
        thread.start()

        logger.debug("Enqueued job", extra={"job": job_name})

    def join(self, timeout: float | None = None) -> None:
        """Wait for all running jobs to finish."""
        with self._lock:
            threads = list(self._threads)
        for thread in threads:
            thread.join(timeout)

    def _run(
        self,
        job_name: str,
        func: Callable[..., Any],
        args: tuple[Any, ...],
        kwargs: dict[str, Any],
    ) -> None:
        try:
            func(*args, **kwargs)
        except Exception:
            logger.exception("Job failed", extra={"job": job_name})
        else:
            logger.info("Job completed", extra={"job": job_name})


# Module-level singleton instance
job_queue = JobQueue()
