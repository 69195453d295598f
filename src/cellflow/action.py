"""Batches, actions and transactions: coalesced listener calls.

Inside a batch, every listener touched by a write is queued instead of
called. When the outermost scope exits, each queued listener runs once with
the value its cell holds at that point. Derived recomputations queued in the
same batch all run, in order.
"""

from __future__ import annotations

import functools
from typing import TypeVar, Callable, ParamSpec
from contextlib import contextmanager
from cellflow._tracking import begin_batch, end_batch

P = ParamSpec("P")
R = TypeVar("R")


def batch(fn: Callable[[], R]) -> R:
    """Run fn as one batch and return its result.

    Usage:
        count = source(0)
        count.listen(print)
        batch(lambda: [count.set(n) for n in (1, 2, 3)])
        # prints 3, once
    """
    begin_batch()
    try:
        return fn()
    finally:
        end_batch()


def action(fn: Callable[P, R]) -> Callable[P, R]:
    """Decorator: batch all cell writes inside fn.

    Listeners only fire after fn returns, not during.

    Usage:
        first = source("Ada")
        last = source("Lovelace")

        @action
        def rename(f, l):
            first.value = f
            last.value = l
    """

    @functools.wraps(fn)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        begin_batch()
        try:
            return fn(*args, **kwargs)
        finally:
            end_batch()

    return wrapper


@contextmanager
def transaction():
    """Context manager for batching writes.

    Usage:
        with transaction():
            first.value = "Grace"
            last.value = "Hopper"
            # listeners fire here, after both are set
    """
    begin_batch()
    try:
        yield
    finally:
        end_batch()
