"""Derived cells: values computed from other cells.

A DerivedCell wraps a function. It evaluates the function immediately,
recording every cell read along the way as a dependency. When any of those
cells updates, the function re-runs eagerly and the change propagates on,
even when the new result equals the old one.

Inside a batch each recomputation request is queued on its own, so a
derived cell with several changed dependencies recomputes once per change
rather than once per batch. Listeners, by contrast, are coalesced.
"""

from __future__ import annotations

from typing import Callable, NoReturn, TypeVar

from cellflow._tracking import defer, get_root, run_hooks, tracking
from cellflow.cell import Cell, CellKind
from cellflow.errors import DerivedWriteError

T = TypeVar("T")


class DerivedCell(Cell[T]):
    """A read-only value that tracks its dependencies and recomputes on change."""

    __slots__ = ("_fn",)

    def __init__(self, fn: Callable[[], T]) -> None:
        super().__init__(CellKind.DERIVED)
        self._fn = fn
        self._recompute()

    def _recompute(self) -> None:
        """Re-evaluate the function, tracking dependencies."""
        with tracking(self):
            self._value = self._fn()

    def set(self, value: T) -> NoReturn:
        raise DerivedWriteError(self)

    value = property(Cell.get, set)

    def update(self) -> None:
        root = get_root()
        run_hooks(root.pre_update_hooks, self._value, is_derived=True)

        if root.batching:
            # A fresh key per request: recomputations are never coalesced.
            defer(object(), self._recompute)
        else:
            self._recompute()

        super().update()

    def __repr__(self) -> str:
        name = getattr(self._fn, "__name__", "<fn>")
        return f"DerivedCell({name}, {self._value!r})"


def derived(fn: Callable[[], T]) -> DerivedCell[T]:
    """Decorator/factory to create a DerivedCell from a function.

    Usage:
        price = source(10)
        quantity = source(2)

        @derived
        def total():
            return price.value * quantity.value

        total.value  # 20
        quantity.value = 3
        total.value  # 30
    """
    return DerivedCell(fn)
