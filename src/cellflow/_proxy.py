"""Deep-mutation proxies: containers that report nested reads and writes to their cell.

A source cell stores dicts, lists, sets and plain attribute objects wrapped
in one of these proxies. Any read operation registers a dependency on the
owning cell and wraps the nested value it returns. Any mutation changes the
underlying object and then updates the owning cell once, with no equality
check.

Only access through the proxy is observed: mutating the unwrapped object,
or calling one of its own methods, does not notify anyone.
"""

from __future__ import annotations

import enum
import types
from collections.abc import Mapping, MutableMapping, MutableSequence, MutableSet, Set
from typing import Iterator

from cellflow.cell import Cell

_PASSTHROUGH_TYPES = (int, float, complex, str, bytes, bool, type(None), tuple, frozenset, enum.Enum, Cell)


class _Proxy:
    __slots__ = ("_target", "_owner")

    def __init__(self, target: object, owner: Cell) -> None:
        object.__setattr__(self, "_target", target)
        object.__setattr__(self, "_owner", owner)

    def _track(self) -> None:
        """Register the owning cell with the current derivation, if any."""
        self._owner.get()

    def _wrap(self, value: object) -> object:
        return proxify(value, self._owner)

    def __eq__(self, other: object) -> bool:
        self._track()
        return self._target == unwrap(other)

    __hash__ = None  # type: ignore[assignment]

    def __str__(self) -> str:
        self._track()
        return str(self._target)

    def __format__(self, format_spec: str) -> str:
        self._track()
        return format(self._target, format_spec)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._target!r})"


class ListProxy(_Proxy, MutableSequence):
    """A list whose reads track and whose writes update the owning cell."""

    __slots__ = ()

    # --- Read operations (track) ---

    def __getitem__(self, index):
        self._track()
        if isinstance(index, slice):
            return [self._wrap(item) for item in self._target[index]]
        return self._wrap(self._target[index])

    def __len__(self) -> int:
        self._track()
        return len(self._target)

    def __iter__(self) -> Iterator:
        self._track()
        return (self._wrap(item) for item in list(self._target))

    def __contains__(self, item) -> bool:
        self._track()
        return unwrap(item) in self._target

    def __bool__(self) -> bool:
        self._track()
        return bool(self._target)

    # --- Write operations (update) ---

    def __setitem__(self, index, value) -> None:
        if isinstance(index, slice):
            self._target[index] = [unwrap(item) for item in value]
        else:
            self._target[index] = unwrap(value)
        self._owner.update()

    def __delitem__(self, index) -> None:
        del self._target[index]
        self._owner.update()

    def insert(self, index: int, value) -> None:
        self._target.insert(index, unwrap(value))
        self._owner.update()

    def append(self, value) -> None:
        self._target.append(unwrap(value))
        self._owner.update()

    def extend(self, values) -> None:
        self._target.extend(unwrap(item) for item in values)
        self._owner.update()

    def __iadd__(self, values):
        self.extend(values)
        return self

    def pop(self, index: int = -1):
        result = self._target.pop(index)
        self._owner.update()
        return result

    def remove(self, value) -> None:
        self._target.remove(unwrap(value))
        self._owner.update()

    def clear(self) -> None:
        self._target.clear()
        self._owner.update()

    def reverse(self) -> None:
        self._target.reverse()
        self._owner.update()

    def sort(self, *, key=None, reverse: bool = False) -> None:
        self._target.sort(key=key, reverse=reverse)
        self._owner.update()


class DictProxy(_Proxy, MutableMapping):
    """A dict whose reads track and whose writes update the owning cell."""

    __slots__ = ()

    # --- Read operations (track) ---

    def __getitem__(self, key):
        self._track()
        return self._wrap(self._target[key])

    def get(self, key, default=None):
        self._track()
        return self._wrap(self._target.get(key, default))

    def __contains__(self, key) -> bool:
        self._track()
        return key in self._target

    def __len__(self) -> int:
        self._track()
        return len(self._target)

    def __iter__(self) -> Iterator:
        self._track()
        return iter(list(self._target))

    def __bool__(self) -> bool:
        self._track()
        return bool(self._target)

    def __eq__(self, other: object) -> bool:
        self._track()
        other = unwrap(other)
        if isinstance(other, Mapping) and not isinstance(other, dict):
            other = dict(other.items())
        return self._target == other

    # --- Write operations (update) ---

    def __setitem__(self, key, value) -> None:
        self._target[key] = unwrap(value)
        self._owner.update()

    def __delitem__(self, key) -> None:
        del self._target[key]
        self._owner.update()

    def pop(self, key, *args):
        result = self._target.pop(key, *args)
        self._owner.update()
        return result

    def popitem(self):
        result = self._target.popitem()
        self._owner.update()
        return result

    def update(self, other=(), /, **kwargs) -> None:
        other = unwrap(other)
        if isinstance(other, Mapping):
            other = other.items()
        for key, value in other:
            self._target[key] = unwrap(value)
        for key, value in kwargs.items():
            self._target[key] = unwrap(value)
        self._owner.update()

    def clear(self) -> None:
        self._target.clear()
        self._owner.update()

    def setdefault(self, key, default=None):
        if key not in self._target:
            self._target[key] = unwrap(default)
            self._owner.update()
        return self[key]


class SetProxy(_Proxy, MutableSet):
    """A set whose reads track and whose writes update the owning cell.

    Elements are hashable, so they are returned as-is rather than wrapped.
    """

    __slots__ = ()

    @classmethod
    def _from_iterable(cls, iterable):
        return set(iterable)

    def __contains__(self, item) -> bool:
        self._track()
        return item in self._target

    def __len__(self) -> int:
        self._track()
        return len(self._target)

    def __iter__(self) -> Iterator:
        self._track()
        return iter(list(self._target))

    def __eq__(self, other: object) -> bool:
        self._track()
        other = unwrap(other)
        if isinstance(other, Set) and not isinstance(other, (set, frozenset)):
            other = set(other)
        return self._target == other

    def add(self, item) -> None:
        self._target.add(item)
        self._owner.update()

    def discard(self, item) -> None:
        self._target.discard(item)
        self._owner.update()

    def remove(self, item) -> None:
        self._target.remove(item)
        self._owner.update()

    def pop(self):
        result = self._target.pop()
        self._owner.update()
        return result

    def clear(self) -> None:
        self._target.clear()
        self._owner.update()

    def update(self, *others) -> None:
        self._target.update(*(unwrap(other) for other in others))
        self._owner.update()

    def difference_update(self, *others) -> None:
        self._target.difference_update(*(unwrap(other) for other in others))
        self._owner.update()

    def intersection_update(self, *others) -> None:
        self._target.intersection_update(*(unwrap(other) for other in others))
        self._owner.update()

    def symmetric_difference_update(self, other) -> None:
        self._target.symmetric_difference_update(unwrap(other))
        self._owner.update()

    def __ior__(self, other):
        self.update(other)
        return self

    def __isub__(self, other):
        self.difference_update(other)
        return self

    def __iand__(self, other):
        self.intersection_update(other)
        return self

    def __ixor__(self, other):
        self.symmetric_difference_update(other)
        return self


class ObjectProxy(_Proxy):
    """An attribute object whose reads track and whose assignments update the owning cell."""

    __slots__ = ()

    def __getattr__(self, name: str):
        if name in _Proxy.__slots__:
            raise AttributeError(name)
        self._track()
        return self._wrap(getattr(self._target, name))

    def __setattr__(self, name: str, value) -> None:
        setattr(self._target, name, unwrap(value))
        self._owner.update()

    def __delattr__(self, name: str) -> None:
        delattr(self._target, name)
        self._owner.update()


# Objects implementing these behave like containers, which ObjectProxy cannot mirror.
_CONTAINER_METHODS = ("__len__", "__iter__", "__contains__", "__getitem__")


def _is_attribute_object(value: object) -> bool:
    return (
        hasattr(value, "__dict__")
        and not callable(value)
        and not isinstance(value, (type, types.ModuleType))
        and not any(hasattr(type(value), method) for method in _CONTAINER_METHODS)
    )


def proxify(value: object, owner: Cell) -> object:
    """Wrap value so reads and writes through it are reported to owner."""
    value = unwrap(value)
    if isinstance(value, _PASSTHROUGH_TYPES):
        return value
    if isinstance(value, dict):
        return DictProxy(value, owner)
    if isinstance(value, list):
        return ListProxy(value, owner)
    if isinstance(value, set):
        return SetProxy(value, owner)
    if _is_attribute_object(value):
        return ObjectProxy(value, owner)
    return value


def unwrap(value: object) -> object:
    """Return the plain object behind a proxy, or value itself."""
    if isinstance(value, _Proxy):
        return object.__getattribute__(value, "_target")
    return value
