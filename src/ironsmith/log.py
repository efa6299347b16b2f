"""Namespaced logging on top of loguru.

Every component logs through ``get_logger(namespace)``. Output goes to a
single stderr sink whose threshold follows the engine's verbosity:

    0 = normal output (INFO and above)
    1 = verbose output (adds VERBOSE)
    2 = debug output (adds DEBUG)
"""

import sys
from typing import Any

from loguru import logger

VERBOSE = "VERBOSE"

_LEVELS = {0: "INFO", 1: VERBOSE, 2: "DEBUG"}

_state: dict[str, Any] = {"level": 0, "handler": None}


def _ensure_verbose_level() -> None:
    try:
        logger.level(VERBOSE)
    except ValueError:
        logger.level(VERBOSE, no=15, color="<blue><bold>")


def _stderr(message: str) -> None:
    # Looked up per call so redirected streams are honoured
    sys.stderr.write(message)


def _format(record: dict[str, Any]) -> str:
    namespace = str(record["extra"].get("namespace", record["name"]))
    return (
        "<green>{time:HH:mm:ss}</green> <cyan>"
        + namespace
        + "</cyan> <level>{level: <8}</level> {message}\n{exception}"
    )


def get_logger(namespace: str = "ironsmith") -> Any:
    """Return a logger bound to ``namespace``.

    Args:
        namespace: Name shown in front of every line (e.g. ``'ironsmith:file'``)

    Returns:
        A loguru logger carrying the namespace in its ``extra`` dict
    """
    _ensure_verbose_level()
    return logger.bind(namespace=namespace)


def get_level() -> int:
    """Return the current verbosity level (0, 1 or 2)."""
    return int(_state["level"])


def ensure_sink() -> None:
    """Install the stderr sink at the current level unless one is set up."""
    if _state["handler"] is None:
        set_level(_state["level"])


def set_level(level: int | bool, sink: Any = None) -> None:
    """Set the verbosity level and (re)install the output sink.

    Args:
        level: 0 (normal), 1 (verbose) or 2 (debug). ``True`` means 1.
        sink: Where to write; defaults to the current ``sys.stderr``

    Raises:
        ValueError: If level is not one of 0, 1, 2
    """
    level = int(level)
    if level not in _LEVELS:
        raise ValueError(f"Logger level must be one of 0, 1, 2; Got {level}")

    _ensure_verbose_level()

    if _state["handler"] is None:
        # First configuration replaces loguru's default stderr handler
        try:
            logger.remove(0)
        except ValueError:
            pass
    else:
        logger.remove(_state["handler"])

    _state["level"] = level
    _state["handler"] = logger.add(
        sink if sink is not None else _stderr,
        format=_format,
        level=_LEVELS[level],
    )
