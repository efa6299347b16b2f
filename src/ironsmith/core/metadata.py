"""Metadata merging for the engine's shared key/value tree.

Plugins share settings and collected data through ``Ironsmith.metadata``.
Besides outright replacement, the tree supports a recursive merge where
mappings merge key-wise and everything else (lists, scalars) replaces.
"""

import copy
from collections.abc import Mapping
from typing import Any

from .types import Metadata


def deep_merge(base: Metadata, update: Mapping[str, Any]) -> Metadata:
    """Recursively merge ``update`` into ``base`` in place.

    Args:
        base: Metadata tree to merge into (mutated)
        update: Values to merge in

    Returns:
        The mutated ``base`` for chaining

    Example:
        >>> deep_merge({'site': {'title': 'A', 'tags': [1]}}, {'site': {'tags': [2]}})
        {'site': {'title': 'A', 'tags': [2]}}
    """
    for key, value in update.items():
        current = base.get(key)

        if isinstance(current, dict) and isinstance(value, Mapping):
            deep_merge(current, value)
        else:
            # Copy so later mutations of the caller's data do not leak in
            base[key] = copy.deepcopy(value)

    return base


def merged(base: Mapping[str, Any], update: Mapping[str, Any]) -> Metadata:
    """Return a new tree with ``update`` merged over ``base``.

    Neither argument is modified.
    """
    return deep_merge(copy.deepcopy(dict(base)), update)
