"""cellflow: fine-grained reactive cells for Python."""

from importlib.metadata import version as _version

__version__ = _version("cellflow")

from cellflow._tracking import Root, get_root, reset, use_root, get_pending_count
from cellflow.cell import Cell, CellKind
from cellflow.source import SourceCell, source
from cellflow.derived import DerivedCell, derived
from cellflow.action import action, batch, transaction
from cellflow.hooks import after_update, before_update, remove_global_effect, remove_global_effects
from cellflow.flatten import flatten, flatten_dict, flatten_list, is_cell
from cellflow.abort import AbortController, AbortSignal
from cellflow.errors import CellError, DerivedWriteError, DuplicateListenerError, ImmutableWriteError
from cellflow._proxy import unwrap

__all__ = [
    "Cell",
    "CellKind",
    "SourceCell",
    "source",
    "DerivedCell",
    "derived",
    "batch",
    "action",
    "transaction",
    "before_update",
    "after_update",
    "remove_global_effect",
    "remove_global_effects",
    "is_cell",
    "flatten",
    "flatten_list",
    "flatten_dict",
    "unwrap",
    "AbortController",
    "AbortSignal",
    "CellError",
    "ImmutableWriteError",
    "DerivedWriteError",
    "DuplicateListenerError",
    "Root",
    "get_root",
    "reset",
    "use_root",
    "get_pending_count",
]
