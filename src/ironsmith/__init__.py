"""Ironsmith - pluggable file processing engine.

This package loads a tree of source files into memory, passes the
collection through an ordered list of plugins, and writes the result back
out to a build directory.
"""

# Core library interface
from .engine import Ironsmith
from .file import File
from .pipeline import Continuation, PluginPipeline
from .registry import AugmentRegistry

# Directory primitives
from .dumper import dump_directory, empty_directory
from .loader import load_directory, normalize_prefix

# Core utilities
from .core import (
    ContinuationError,
    FileMap,
    FileRecord,
    FileRejected,
    IronsmithError,
    Metadata,
    PluginError,
    deep_merge,
)

__version__ = "0.1.0"

__all__ = [
    # Primary library interface
    "Ironsmith",
    "File",
    "AugmentRegistry",
    "PluginPipeline",
    "Continuation",
    # Directory primitives
    "load_directory",
    "dump_directory",
    "empty_directory",
    "normalize_prefix",
    # Core utilities
    "FileMap",
    "FileRecord",
    "Metadata",
    "deep_merge",
    "IronsmithError",
    "FileRejected",
    "PluginError",
    "ContinuationError",
]
