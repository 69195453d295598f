"""Source cells: mutable state that notifies its readers.

Writing a new value runs the global pre-update hooks, stores the value and
propagates the change. Writing a value equal to the current one does
nothing at all. Dicts, lists, sets and attribute objects are stored behind a
deep-mutation proxy, so assigning a nested field propagates too.
"""

from __future__ import annotations

from typing import Callable, TypeVar

from cellflow._proxy import proxify, unwrap
from cellflow._tracking import get_root, run_hooks
from cellflow.cell import Cell, CellKind
from cellflow.errors import ImmutableWriteError

T = TypeVar("T")

# Immutable scalars compare by value; everything else by identity.
_SCALAR_TYPES = {int, float, complex, str, bytes, bool, type(None)}


def is_same(old: object, new: object) -> bool:
    """Default equality for writes."""
    if old is new:
        return True
    return type(old) is type(new) and type(old) in _SCALAR_TYPES and old == new


class SourceCell(Cell[T]):
    """A mutable reactive value."""

    __slots__ = ("_immutable", "_shallow", "_equals")

    def __init__(
        self,
        value: T,
        *,
        immutable: bool = False,
        shallow: bool = False,
        equals: Callable[[T, T], bool] | None = None,
    ) -> None:
        super().__init__(CellKind.SOURCE)
        self._immutable = immutable
        self._shallow = shallow
        self._equals = equals if equals is not None else is_same
        self._value = self._prepare(value)

    @property
    def immutable(self) -> bool:
        return self._immutable

    def _prepare(self, value: T) -> T:
        return value if self._shallow else proxify(value, self)

    def set(self, value: T) -> None:
        """Write a new value and propagate it. Equal values are ignored."""
        if self._immutable:
            raise ImmutableWriteError(self)

        if self._equals(unwrap(self._value), unwrap(value)):
            return

        run_hooks(get_root().pre_update_hooks, self._value, is_derived=False)
        self._value = self._prepare(value)
        self.update()

    value = property(Cell.get, set)


def source(
    value: T,
    *,
    immutable: bool = False,
    shallow: bool = False,
    equals: Callable[[T, T], bool] | None = None,
) -> SourceCell[T]:
    """Create a SourceCell.

    Usage:
        count = source(0)
        count.value = 1

        settings = source({"theme": "dark"})
        settings.value["theme"] = "light"  # propagates through the proxy

        frozen = source(5, immutable=True)
        frozen.value = 9  # raises ImmutableWriteError
    """
    return SourceCell(value, immutable=immutable, shallow=shallow, equals=equals)
