"""Augment registry for per-file construction hooks.

An augment is a callable run once for every File created through
``File.create`` (and therefore for every file the loader reads). Augments
may mutate the file in place, or raise to veto its creation.

Unlike a process-wide hook list, a registry is an ordinary object owned by
whoever builds files (usually the engine), so separate engines and separate
tests never see each other's augments.
"""

import inspect
from collections.abc import Iterator
from typing import TYPE_CHECKING

from .core.errors import FileRejected
from .core.types import Augment
from .log import VERBOSE, get_logger

if TYPE_CHECKING:
    from .file import File

log = get_logger("ironsmith:file")


def _name_of(func: Augment) -> str:
    return getattr(func, "__name__", type(func).__name__)


class AugmentRegistry:
    """Ordered collection of augments.

    Registration order is execution order. Registering an augment only
    affects files created afterwards.

    Example:
        >>> augments = AugmentRegistry()
        >>> @augments.add
        ... def skip_drafts(file):
        ...     if file.path.startswith('drafts/'):
        ...         raise ValueError('draft')
    """

    def __init__(self, augments: list[Augment] | None = None):
        self._augments: list[Augment] = list(augments or [])

    def add(self, func: Augment) -> Augment:
        """Register an augment.

        Args:
            func: Callable taking a File; sync or async

        Returns:
            The augment itself, so this can be used as a decorator
        """
        log.debug(f"Added augment: {_name_of(func)}")
        self._augments.append(func)
        return func

    @property
    def names(self) -> list[str]:
        """Names of the registered augments, in execution order."""
        return [_name_of(func) for func in self._augments]

    def __len__(self) -> int:
        return len(self._augments)

    def __iter__(self) -> Iterator[Augment]:
        return iter(list(self._augments))

    async def apply(self, file: "File") -> None:
        """Run every augment over ``file`` in registration order.

        Args:
            file: The freshly constructed file

        Raises:
            FileRejected: If any augment raises; later augments are not run
        """
        if not self._augments:
            return

        log.debug(f"Applying {len(self._augments)} augments to {file.path}")
        for func in list(self._augments):
            log.debug(f"Running augment: {_name_of(func)}")
            try:
                result = func(file)
                if inspect.isawaitable(result):
                    await result
            except FileRejected:
                raise
            except Exception as e:
                log.log(VERBOSE, f"Augment {_name_of(func)} rejected {file.path}: {e}")
                raise FileRejected(file.path, str(e) or type(e).__name__) from e
