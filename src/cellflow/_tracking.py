"""Dependency tracking engine: the coordination state shared by every cell.

A Root holds the stack of derived cells currently being evaluated, the
global pre/post update hooks, and the batching state. The active Root lives
in a contextvar, so a task or test can swap in its own with use_root().

Any Cell.get() made while a derived cell sits on top of the stack registers
that derived cell as a dependent. Batching: listener calls made inside a
batch are recorded and run once when the outermost scope exits.
"""

from __future__ import annotations

import contextvars
import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING, Callable, Iterator

if TYPE_CHECKING:
    from cellflow.cell import Cell
    from cellflow.derived import DerivedCell

logger = logging.getLogger(__name__)


class GlobalEffect:
    """A process-wide hook run before or after every cell update."""

    __slots__ = ("effect", "run_once", "ignore_derived")

    def __init__(self, effect: Callable, run_once: bool = False, ignore_derived: bool = False) -> None:
        self.effect = effect
        self.run_once = run_once
        self.ignore_derived = ignore_derived

    def __repr__(self) -> str:
        return (
            f"GlobalEffect({getattr(self.effect, '__name__', self.effect)!r}, "
            f"run_once={self.run_once}, ignore_derived={self.ignore_derived})"
        )


class Root:
    """Coordination state for one reactive world."""

    __slots__ = (
        "derivation_stack",
        "pre_update_hooks",
        "post_update_hooks",
        "batch_depth",
        "batched_calls",
    )

    def __init__(self) -> None:
        self.derivation_stack: list[DerivedCell] = []
        self.pre_update_hooks: list[GlobalEffect] = []
        self.post_update_hooks: list[GlobalEffect] = []
        self.batch_depth: int = 0
        # key -> (callable, owning cell or None). Insertion ordered.
        self.batched_calls: dict[object, tuple[Callable, Cell | None]] = {}

    @property
    def current_derivation(self) -> DerivedCell | None:
        return self.derivation_stack[-1] if self.derivation_stack else None

    @property
    def batching(self) -> bool:
        return self.batch_depth > 0

    def reset(self) -> None:
        """Drop all hooks, pending calls and tracking state."""
        self.derivation_stack.clear()
        self.pre_update_hooks.clear()
        self.post_update_hooks.clear()
        self.batch_depth = 0
        self.batched_calls.clear()

    def __repr__(self) -> str:
        return (
            f"Root(depth={len(self.derivation_stack)}, batch_depth={self.batch_depth}, "
            f"pending={len(self.batched_calls)})"
        )


_default_root = Root()

# The Root every cell in this context coordinates through.
current_root: contextvars.ContextVar[Root] = contextvars.ContextVar("cellflow_root", default=_default_root)


def get_root() -> Root:
    return current_root.get()


def reset() -> None:
    """Clear the active root. Meant for test isolation."""
    current_root.get().reset()
    logger.debug("Reactive root reset")


@contextmanager
def use_root(root: Root | None = None) -> Iterator[Root]:
    """Run a block against an explicit Root (a fresh one if none is given).

    Usage:
        with use_root() as root:
            a = source(1)
            ...
    """
    root = root if root is not None else Root()
    token = current_root.set(root)
    try:
        yield root
    finally:
        current_root.reset(token)


@contextmanager
def tracking(derivation: DerivedCell) -> Iterator[None]:
    """Make derivation the implicit dependency-tracking context.

    The stack is always popped, even when the computation raises.
    """
    stack = current_root.get().derivation_stack
    stack.append(derivation)
    try:
        yield
    finally:
        stack.pop()


# ─── Batching ────────────────────────────────────────────────────────────────


def begin_batch() -> None:
    """Enter a batching scope. Nested batches are supported."""
    current_root.get().batch_depth += 1


def end_batch() -> None:
    """Exit a batching scope. When the outermost scope exits, flush pending calls."""
    root = current_root.get()
    root.batch_depth -= 1
    if root.batch_depth == 0:
        _flush_pending(root)


def defer(key: object, fn: Callable, cell: Cell | None = None) -> None:
    """Record a call to run when the outermost batch exits.

    A later call with the same key replaces the earlier one and moves to the
    back of the queue, behind any recomputation queued in between.
    """
    calls = current_root.get().batched_calls
    calls.pop(key, None)
    calls[key] = (fn, cell)


def _flush_pending(root: Root) -> None:
    """Run every pending call, including ones queued by the flush itself."""
    while root.batched_calls:
        # Snapshot and clear: calls may queue new ones while running.
        calls = list(root.batched_calls.values())
        root.batched_calls.clear()
        logger.debug("Flushing %d batched calls", len(calls))
        for fn, cell in calls:
            if cell is None:
                fn()
            else:
                fn(cell._value)


def get_pending_count() -> int:
    """Number of calls waiting for the current batch to end. Useful for testing."""
    return len(current_root.get().batched_calls)


# ─── Global hooks ────────────────────────────────────────────────────────────


def run_hooks(hooks: list[GlobalEffect], value: object, is_derived: bool) -> None:
    """Invoke hooks in registration order, dropping run-once hooks after they fire."""
    for hook in list(hooks):
        if hook not in hooks or (is_derived and hook.ignore_derived):
            continue
        if hook.run_once:
            hooks.remove(hook)
        hook.effect(value)
