"""Bounded, order-preserving concurrent map over a thread pool.

Modelled on JavaScript's ``p-map``: call :func:`p_map` with an iterable, a
mapper and a ``concurrency`` cap. Two failure policies:

- fail fast (default): the first mapper error propagates and work that has
  not started yet is cancelled;
- settle: pass ``on_error`` and every failed item is replaced by
  ``on_error(item, exc)`` while the remaining items keep running. This is the
  "gather, tolerating partial failure" shape used for per-source ingestion.
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
    on_error: Callable[[InT, Exception], OutT] | None = None,
) -> list[OutT]:
    """Map ``iterable`` through ``mapper`` with at most ``concurrency`` calls in flight.

    The result list preserves input order. Raises ``ValueError`` when
    ``concurrency`` is not a positive integer.
    """

    if isinstance(concurrency, bool) or not isinstance(concurrency, int) or concurrency < 1:
        raise ValueError("concurrency must be a positive integer")

    # Not materialized up front so large inputs stream through the window.
    it = enumerate(iterable)

    results: dict[int, OutT] = {}
    future_to_item: dict[Future, tuple[int, InT]] = {}

    def _submit(pool: ThreadPoolExecutor) -> Future | None:
        try:
            idx, item = next(it)
        except StopIteration:
            return None
        fut = pool.submit(mapper, item)
        future_to_item[fut] = (idx, item)
        return fut

    with ThreadPoolExecutor(max_workers=concurrency) as pool:
        active: set[Future] = set()
        for _ in range(concurrency):
            fut = _submit(pool)
            if fut is None:
                break
            active.add(fut)

        while active:
            done, active = wait(active, return_when=FIRST_COMPLETED)

            for fut in done:
                idx, item = future_to_item.pop(fut)
                try:
                    results[idx] = fut.result()
                except Exception as e:  # noqa: BLE001
                    if on_error is None:
                        pool.shutdown(wait=False, cancel_futures=True)
                        raise
                    results[idx] = on_error(item, e)

            # One new submission per completion keeps the window full.
            for _ in range(len(done)):
                fut = _submit(pool)
                if fut is None:
                    break
                active.add(fut)

    return [results[i] for i in sorted(results)]


__all__ = ["p_map"]
