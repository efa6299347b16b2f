"""Exception types raised by the engine."""


class IronsmithError(Exception):
    """Base class for all engine errors."""


class FileRejected(IronsmithError):
    """Raised when an augment vetoes the construction of a file.

    Attributes:
        path: Path of the file that was rejected
        reason: Human-readable reason given by the augment
    """

    def __init__(self, path: str, reason: str):
        super().__init__(f"File rejected: {path} ({reason})")
        self.path = path
        self.reason = reason


class PluginError(IronsmithError):
    """Raised when a plugin fails instead of continuing the pipeline.

    The original exception is available as ``__cause__``.

    Attributes:
        plugin: Name of the failing plugin
    """

    def __init__(self, plugin: str, message: str):
        super().__init__(f"Plugin '{plugin}' failed: {message}")
        self.plugin = plugin


class ContinuationError(IronsmithError):
    """Raised when a plugin invokes its continuation more than once."""
