# executor.py
from __future__ import annotations

import os
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable, Optional, Protocol

WorkFn = Callable[[str, Any], Any]


class Executor(Protocol):
    """Anything that can run one unit's work and hand back a Future."""

    def submit(self, key: str, payload: Any) -> Future: ...


class PoolExecutor:
    """
    Bounded worker pool for build units.

    At most `max_workers` units run at once; extra submissions wait in the
    pool's own queue. The size is fixed for the lifetime of the pool.
    """

    def __init__(self, work_fn: WorkFn, max_workers: Optional[int] = None):
        if max_workers is None:
            max_workers = os.cpu_count() or 1
        if max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {max_workers}")

        self.work_fn = work_fn
        self.max_workers = max_workers
        self._pool = ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix="parabuild",
        )

    def submit(self, key: str, payload: Any) -> Future:
        return self._pool.submit(self.work_fn, key, payload)

    def shutdown(self, wait: bool = True, cancel_pending: bool = False) -> None:
        # running units are never interrupted, only queued ones are dropped
        self._pool.shutdown(wait=wait, cancel_futures=cancel_pending)

    def __enter__(self) -> PoolExecutor:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.shutdown(wait=exc_type is None, cancel_pending=exc_type is not None)
