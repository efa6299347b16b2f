"""Plugin pipeline.

Plugins run strictly one after another. Each receives the working FileMap
(and mutates it in place), the owning engine, and a continuation it must
call exactly once when it is done. The next plugin starts only after that.
"""

import asyncio
import inspect
import threading
from collections.abc import Iterator
from typing import TYPE_CHECKING, Any

from .core.errors import ContinuationError, PluginError
from .core.types import FileMap, Plugin
from .log import VERBOSE, get_logger

if TYPE_CHECKING:
    from .engine import Ironsmith

log = get_logger("ironsmith:pipeline")


def plugin_name(plugin: Plugin) -> str:
    """Return a readable name for a plugin callable."""
    return getattr(plugin, "__name__", type(plugin).__name__)


class Continuation:
    """Single-use completion signal handed to a plugin.

    Calling it resolves the stage; calling it with an exception fails the
    stage with that exception. It may be called from any thread. A second
    call raises ``ContinuationError``.

    Example:
        >>> def drafts(files, engine, next):
        ...     for path in [p for p, f in files.items() if f.tagged('draft')]:
        ...         del files[path]
        ...     next()
    """

    def __init__(self, plugin: str, loop: asyncio.AbstractEventLoop | None = None):
        self.plugin = plugin
        self._loop = loop or asyncio.get_running_loop()
        self._future: asyncio.Future[None] = self._loop.create_future()
        self._lock = threading.Lock()
        self._called = False

    @property
    def called(self) -> bool:
        """Whether the continuation has been invoked."""
        return self._called

    def __call__(self, error: Any = None) -> None:
        with self._lock:
            if self._called:
                raise ContinuationError(
                    f"Plugin '{self.plugin}' invoked its continuation more than once"
                )
            self._called = True

        try:
            in_loop = asyncio.get_running_loop() is self._loop
        except RuntimeError:
            in_loop = False

        if in_loop:
            self._resolve(error)
        else:
            self._loop.call_soon_threadsafe(self._resolve, error)

    def _resolve(self, error: Any) -> None:
        # Already cancelled by a stage timeout
        if self._future.done():
            return

        if error is None:
            self._future.set_result(None)
        elif isinstance(error, BaseException):
            self._future.set_exception(error)
        else:
            self._future.set_exception(RuntimeError(str(error)))

    async def wait(self) -> None:
        """Wait until the plugin continues (or fails)."""
        await self._future


class PluginPipeline:
    """Ordered list of plugins and the loop that runs them."""

    def __init__(self, plugins: list[Plugin] | None = None):
        self._plugins: list[Plugin] = list(plugins or [])

    def append(self, plugin: Plugin) -> None:
        """Add a plugin to the end of the pipeline."""
        log.log(VERBOSE, f"Registered plugin: {plugin_name(plugin)}")
        self._plugins.append(plugin)

    @property
    def names(self) -> list[str]:
        """Names of the registered plugins, in execution order."""
        return [plugin_name(plugin) for plugin in self._plugins]

    def __len__(self) -> int:
        return len(self._plugins)

    def __iter__(self) -> Iterator[Plugin]:
        return iter(list(self._plugins))

    async def _run_stage(
        self, plugin: Plugin, files: FileMap, engine: "Ironsmith", done: Continuation
    ) -> None:
        result = plugin(files, engine, done)
        if inspect.isawaitable(result):
            await result
        await done.wait()

    async def run(
        self,
        files: FileMap,
        engine: "Ironsmith",
        timeout: float | None = None,
    ) -> FileMap:
        """Run every plugin over ``files`` in registration order.

        A plugin may be a plain function or a coroutine function. When it
        returns an awaitable, that is awaited first; then the pipeline waits
        for the continuation. A plugin that never continues stalls the run
        unless ``timeout`` is given.

        Args:
            files: Working FileMap, mutated in place by the plugins
            engine: Engine passed through to every plugin
            timeout: Optional per-plugin limit in seconds

        Returns:
            The same FileMap, after the last plugin continued

        Raises:
            PluginError: If a plugin raises, fails its continuation, or
                exceeds ``timeout``; remaining plugins do not run
        """
        for plugin in list(self._plugins):
            name = plugin_name(plugin)
            log.log(VERBOSE, f"Running plugin: {name}")
            done = Continuation(name)

            try:
                await asyncio.wait_for(self._run_stage(plugin, files, engine, done), timeout)
            except asyncio.TimeoutError as e:
                raise PluginError(name, f"did not continue within {timeout}s") from e
            except Exception as e:
                raise PluginError(name, str(e) or type(e).__name__) from e

            log.debug(f"Plugin {name} finished ({len(files)} files)")

        return files
