"""Errors raised when a caller breaks a cell contract."""


class CellError(Exception):
    """Base class for every cellflow error."""


class ImmutableWriteError(CellError):
    """A write was attempted on a source cell created with immutable=True."""

    def __init__(self, cell) -> None:
        super().__init__(f"Cannot write to immutable cell {cell!r}.")
        self.cell = cell


class DerivedWriteError(CellError, AttributeError):
    """A write was attempted on a derived cell."""

    def __init__(self, cell) -> None:
        super().__init__(f"Cannot set a derived cell value: {cell!r}.")
        self.cell = cell


class DuplicateListenerError(CellError):
    """The same callback, or the same listener name, was registered twice on one cell."""

    def __init__(self, cell, key) -> None:
        super().__init__(f"Effect {key!r} is already registered on {cell!r}.")
        self.cell = cell
        self.key = key
