"""Core utilities shared by the engine.

This package contains type definitions, error types, schema validation,
and metadata merging used across the loader, dumper, and pipeline.
"""

from .errors import ContinuationError, FileRejected, IronsmithError, PluginError
from .metadata import deep_merge, merged
from .types import Augment, EngineOptions, FileMap, FileRecord, Metadata, Plugin
from .validator import validate_options_with_error_details, validate_record

__all__ = [
    "Augment",
    "ContinuationError",
    "EngineOptions",
    "FileMap",
    "FileRecord",
    "FileRejected",
    "IronsmithError",
    "Metadata",
    "Plugin",
    "PluginError",
    "deep_merge",
    "merged",
    "validate_options_with_error_details",
    "validate_record",
]
