"""Fire-all-then-collect execution for independent blocking calls.

Results come back in submission order no matter which call finishes first.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor
from typing import TypeVar

_Item = TypeVar("_Item")
_Result = TypeVar("_Result")


class OrderedTaskGroup:
    """Run one action per item on a bounded worker pool and join in input order."""

    def __init__(self, max_workers: int = 8) -> None:
        if max_workers < 1:
            raise ValueError("`max_workers` must be a positive integer.")
        self.max_workers = max_workers

    def map(
        self,
        action: Callable[[_Item], _Result],
        items: Sequence[_Item],
    ) -> list[_Result]:
        """Return `[action(item) for item in items]`, computed concurrently.

        The first exception in input order is raised; calls not yet started are
        cancelled.
        """

        if not items:
            return []
        if self.max_workers == 1 or len(items) == 1:
            return [action(item) for item in items]

        executor = ThreadPoolExecutor(
            max_workers=min(self.max_workers, len(items)),
            thread_name_prefix="sentencevoice",
        )
        try:
            futures = [executor.submit(action, item) for item in items]
            return [future.result() for future in futures]
        finally:
            executor.shutdown(wait=True, cancel_futures=True)
