"""Cell: the base reactive value.

A Cell holds a value, an ordered list of listeners, and weak references to
the derived cells that read it. Reading a cell inside a derived computation
registers the edge; update() fans a change out to listeners, then to live
dependents, then to the global post-update hooks.

Dependents are held weakly: a derived cell the application drops is not
kept alive by its dependencies, and stops receiving updates once collected.
That cleanup is a convenience of the garbage collector, not a guarantee.
"""

from __future__ import annotations

import enum
import logging
import weakref
from typing import TYPE_CHECKING, Callable, Generic, TypeVar

from cellflow._tracking import defer, get_root, run_hooks
from cellflow.errors import DuplicateListenerError

if TYPE_CHECKING:
    from cellflow.abort import AbortSignal
    from cellflow.derived import DerivedCell

T = TypeVar("T")

Disposer = Callable[[], None]

logger = logging.getLogger(__name__)


class CellKind(enum.Enum):
    SOURCE = "source"
    DERIVED = "derived"


class _Effect:
    """One registered listener. Active until removed; removal is final."""

    __slots__ = ("cell", "callback", "name", "priority", "once", "active", "detach")

    def __init__(self, cell: Cell, callback: Callable, name: str | None, priority: int, once: bool) -> None:
        self.cell = cell
        self.callback = callback
        self.name = name
        self.priority = priority
        self.once = once
        self.active = True
        self.detach: Disposer | None = None

    def __call__(self, value: object) -> None:
        if not self.active:
            return
        if self.once:
            self.cell._remove_effect(self)
        self.callback(value)

    def __repr__(self) -> str:
        label = self.name or getattr(self.callback, "__name__", repr(self.callback))
        return f"_Effect({label}, priority={self.priority})"


def _by_priority(effect: _Effect) -> int:
    return -effect.priority


class Cell(Generic[T]):
    """A reactive value with listeners and implicitly tracked dependents."""

    __slots__ = ("_value", "_effects", "_dependents", "kind", "__weakref__")

    def __init__(self, kind: CellKind) -> None:
        self._value: T = None  # type: ignore[assignment]
        self._effects: list[_Effect] = []
        self._dependents: list[weakref.ref[DerivedCell]] = []
        self.kind = kind

    def get(self) -> T:
        """Read the value. If inside a derived computation, registers the dependency."""
        derivation = get_root().current_derivation
        if derivation is not None:
            ref = weakref.ref(derivation)
            if ref not in self._dependents:
                self._dependents.append(ref)
        return self._value

    value = property(get)

    def peek(self) -> T:
        """Read the value without registering a dependency."""
        return self._value

    # --- Listeners ---

    def listen(
        self,
        callback: Callable[[T], None],
        *,
        once: bool = False,
        signal: AbortSignal | None = None,
        name: str | None = None,
        priority: int = 0,
    ) -> Disposer:
        """Call callback(new_value) whenever this cell updates.

        Listeners run in descending priority; equal priorities keep
        registration order. Returns a function that removes the listener.

        Usage:
            count = source(0)
            stop = count.listen(print, priority=10, name="printer")
            count.value = 1  # prints 1
            stop()
        """
        for existing in self._effects:
            if existing.callback == callback:
                raise DuplicateListenerError(self, callback)
            if name is not None and existing.name == name:
                raise DuplicateListenerError(self, name)

        effect = _Effect(self, callback, name, priority, once)
        self._effects.append(effect)
        self._effects.sort(key=_by_priority)
        logger.debug("Registered %r on %r", effect, self)

        if signal is not None:
            if signal.aborted:
                self._remove_effect(effect)
            else:
                effect.detach = signal.add_listener(lambda _reason: self._remove_effect(effect))

        return lambda: self._remove_effect(effect)

    def run_and_listen(self, callback: Callable[[T], None], **options) -> Disposer:
        """Call callback with the current value now, then listen for changes."""
        callback(self._value)
        return self.listen(callback, **options)

    def ignore(self, callback: Callable[[T], None]) -> None:
        """Remove the listener registered with callback. No-op if absent."""
        for effect in self._effects:
            if effect.callback == callback:
                self._remove_effect(effect)
                return

    def stop_listening_to(self, name: str) -> None:
        """Remove the listener registered under name. No-op if absent."""
        for effect in self._effects:
            if effect.name == name:
                self._remove_effect(effect)
                return

    def _set_on_change(self, callback: Callable[[T], None]) -> None:
        self.listen(callback)

    on_change = property(None, _set_on_change, doc="Assigning a callback listens to this cell.")

    def is_listening_to(self, name: str) -> bool:
        return any(effect.name == name for effect in self._effects)

    def _remove_effect(self, effect: _Effect) -> None:
        if not effect.active:
            return
        effect.active = False
        self._effects.remove(effect)
        if effect.detach is not None:
            effect.detach()
            effect.detach = None
        logger.debug("Removed %r from %r", effect, self)

    # --- Propagation ---

    def update(self) -> None:
        """Notify listeners, then live dependents, then global post-update hooks."""
        root = get_root()

        for effect in list(self._effects):
            if root.batching:
                defer(effect.callback, effect, self)
            else:
                effect(self._value)

        for ref in list(self._dependents):
            dependent = ref()
            if dependent is None:
                self._dependents.remove(ref)
                logger.debug("Pruned collected dependent from %r", self)
                continue
            dependent.update()

        run_hooks(root.post_update_hooks, self._value, self.kind is CellKind.DERIVED)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._value!r})"
