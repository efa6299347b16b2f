"""Type definitions shared across the engine.

This module defines the aliases and TypedDict classes that mirror the JSON
schemas in ``schemas/`` and the callable contracts used by the pipeline.
"""

from typing import TYPE_CHECKING, Any, Callable, TypedDict

if TYPE_CHECKING:
    from ..engine import Ironsmith
    from ..file import File
    from ..pipeline import Continuation


# Path (relative, POSIX separators) -> File
FileMap = dict[str, "File"]

# Arbitrary nested key/value tree owned by the engine
Metadata = dict[str, Any]

# Per-file construction hook; raising rejects the file
Augment = Callable[["File"], Any]

# Pipeline stage; must call its continuation exactly once
Plugin = Callable[[FileMap, "Ironsmith", "Continuation"], Any]


class FileRecord(TypedDict):
    """Structural export of a File for persistence or transport."""

    asset: bool  # Loaded from the assets root
    contents: bytes  # Always raw bytes
    path: str  # Path relative to the root it was loaded from
    tags: list[str]  # Sorted tag list


class EngineOptions(TypedDict, total=False):
    """Options accepted by the Ironsmith constructor."""

    root_path: str  # Base for relative resolution
    source_path: str  # Source tree, relative to root_path
    build_path: str  # Destination tree, relative to root_path
    assets_path: str  # Assets tree, relative to root_path
    load_source: bool
    load_assets: bool
    clean: bool  # Empty build_path before writing
    metadata: Metadata
    verbose: bool | int  # 0 = normal, 1 = verbose, 2 = debug
