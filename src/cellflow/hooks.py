"""Global hooks: callbacks run before or after every cell update."""

from __future__ import annotations

import logging
from typing import Callable

from cellflow._tracking import GlobalEffect, get_root

logger = logging.getLogger(__name__)

Effect = Callable[[object], None]


def before_update(effect: Effect, *, run_once: bool = False, ignore_derived: bool = False) -> None:
    """Call effect(old_value) before any cell changes.

    Source cells fire it only for writes that change the value; derived
    cells fire it before each recomputation unless ignore_derived is set.

    Usage:
        before_update(lambda old: print("was", old))
        count = source(0)
        count.value = 1  # prints "was 0"
    """
    get_root().pre_update_hooks.append(GlobalEffect(effect, run_once, ignore_derived))


def after_update(effect: Effect, *, run_once: bool = False, ignore_derived: bool = False) -> None:
    """Call effect(new_value) after any cell has propagated a change."""
    get_root().post_update_hooks.append(GlobalEffect(effect, run_once, ignore_derived))


def remove_global_effect(effect: Effect) -> None:
    """Remove effect from both hook lists. No-op if it was never added."""
    root = get_root()
    for hooks in (root.pre_update_hooks, root.post_update_hooks):
        hooks[:] = [hook for hook in hooks if hook.effect != effect]


def remove_global_effects() -> None:
    """Remove every global hook."""
    root = get_root()
    logger.debug(
        "Removing %d pre-update and %d post-update hooks",
        len(root.pre_update_hooks),
        len(root.post_update_hooks),
    )
    root.pre_update_hooks.clear()
    root.post_update_hooks.clear()
