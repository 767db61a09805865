"""Order-preserving bounded-concurrency map over a thread pool.

``p_map(items, fn, concurrency=N)`` runs at most ``N`` calls of ``fn`` at a
time and returns the results in input order. ``concurrency=1`` short-circuits
to a plain sequential loop with no pool at all.

The first exception raised by ``fn`` propagates to the caller; work that has
not started yet is cancelled.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from typing import TypeVar

InT = TypeVar("InT")
OutT = TypeVar("OutT")


def p_map(
    iterable: Iterable[InT],
    mapper: Callable[[InT], OutT],
    *,
    concurrency: int,
    thread_name_prefix: str = "sa-map",
) -> list[OutT]:
    """Map ``iterable`` through ``mapper`` keeping input order."""

    if isinstance(concurrency, bool) or not isinstance(concurrency, int) or concurrency < 1:
        raise ValueError("concurrency must be a positive integer")

    if concurrency == 1:
        return [mapper(item) for item in iterable]

    it = enumerate(iterable)
    results: dict[int, OutT] = {}
    pending: dict[Future[OutT], int] = {}

    def _top_up(pool: ThreadPoolExecutor) -> None:
        while len(pending) < concurrency:
            try:
                idx, item = next(it)
            except StopIteration:
                return
            pending[pool.submit(mapper, item)] = idx

    with ThreadPoolExecutor(max_workers=concurrency, thread_name_prefix=thread_name_prefix) as pool:
        _top_up(pool)
        while pending:
            done, _ = wait(pending, return_when=FIRST_COMPLETED)
            for fut in done:
                idx = pending.pop(fut)
                try:
                    results[idx] = fut.result()
                except Exception:
                    pool.shutdown(wait=False, cancel_futures=True)
                    raise
            _top_up(pool)

    return [results[i] for i in range(len(results))]


__all__ = ["p_map"]
