"""The Ironsmith engine.

This module provides the main interface: configure source/assets/build
directories, register plugins and augments, then ``process()`` or
``build()``.
"""

import asyncio
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from .core.metadata import deep_merge
from .core.types import Augment, EngineOptions, FileMap, Metadata, Plugin
from .core.validator import validate_options_with_error_details
from .dumper import dump_directory, empty_directory
from .file import File
from .loader import load_directory
from .log import VERBOSE, ensure_sink, get_level, get_logger, set_level
from .pipeline import PluginPipeline
from .registry import AugmentRegistry

log = get_logger("ironsmith")

# Engine states
IDLE = "idle"
LOADING = "loading"
RUNNING_PLUGINS = "running-plugins"
WRITING = "writing"

PATH_OPTIONS = ("root_path", "source_path", "build_path", "assets_path")


class Ironsmith:
    """File processing engine.

    Loads the source tree (and optionally the assets tree) into a FileMap,
    runs the registered plugins over it in order, and optionally writes the
    result to the build directory.

    Example:
        >>> def stamp(files, engine, next):
        ...     for file in files.values():
        ...         file['site'] = engine.metadata['site']
        ...     next()
        >>> engine = Ironsmith(root_path='.', metadata={'site': 'Docs'}, clean=True)
        >>> files = engine.use(stamp).run_build()
    """

    def __init__(self, options: EngineOptions | Mapping[str, Any] | None = None, **kwargs: Any):
        """Initialize the engine.

        Invalid options are reported as warnings and ignored.

        Args:
            options: Engine options (see ``EngineOptions``)
            **kwargs: Same options as keyword arguments; override ``options``
        """
        ensure_sink()

        self._plugins = PluginPipeline()
        self._files: FileMap = {}
        self.augments = AugmentRegistry()
        self.state = IDLE

        self._root_path = Path.cwd()
        self._source_path = Path("src")
        self._build_path = Path("build")
        self._assets_path = Path("assets")

        self._metadata: Metadata = {}
        self.load_source = True
        self.load_assets = False
        self.clean = False

        settings = {**dict(options or {}), **kwargs}

        # Path objects validate as plain strings
        for key in PATH_OPTIONS:
            if isinstance(settings.get(key), os.PathLike):
                settings[key] = os.fspath(settings[key])

        problems = validate_options_with_error_details(settings)

        for key, message in problems.items():
            log.warning(f"Ignoring option '{key}': {message}")
            settings.pop(key, None)

        # Other paths resolve against the root, so it goes first
        if "root_path" in settings:
            self.root_path = settings.pop("root_path")

        for key, value in settings.items():
            setattr(self, key, value)

    # --- Directories ---

    def _resolve(self, directory: Path) -> Path:
        return (self._root_path / directory).resolve()

    def _checked(self, name: str, directory: str | os.PathLike[str]) -> Path | None:
        if not str(directory):
            log.warning(f"Refusing to set an empty {name} path; keeping the previous one")
            return None
        return Path(directory)

    @property
    def root_path(self) -> Path:
        """Base directory for relative source, build and assets paths."""
        return self._root_path

    @root_path.setter
    def root_path(self, directory: str | os.PathLike[str]) -> None:
        path = self._checked("root", directory)
        if path is not None:
            self._root_path = path.resolve()
            log.debug(f"Root path: {self._root_path}")

    @property
    def source_path(self) -> Path:
        """Absolute source directory."""
        return self._resolve(self._source_path)

    @source_path.setter
    def source_path(self, directory: str | os.PathLike[str]) -> None:
        path = self._checked("source", directory)
        if path is not None:
            self._source_path = path
            log.debug(f"Source path: {self.source_path}")

    @property
    def build_path(self) -> Path:
        """Absolute build (output) directory."""
        return self._resolve(self._build_path)

    @build_path.setter
    def build_path(self, directory: str | os.PathLike[str]) -> None:
        path = self._checked("build", directory)
        if path is not None:
            self._build_path = path
            log.debug(f"Build path: {self.build_path}")

    @property
    def assets_path(self) -> Path:
        """Absolute assets directory."""
        return self._resolve(self._assets_path)

    @assets_path.setter
    def assets_path(self, directory: str | os.PathLike[str]) -> None:
        path = self._checked("assets", directory)
        if path is not None:
            self._assets_path = path
            log.debug(f"Assets path: {self.assets_path}")

    # --- Other properties ---

    @property
    def metadata(self) -> Metadata:
        """Shared key/value tree available to every plugin."""
        return self._metadata

    @metadata.setter
    def metadata(self, value: Mapping[str, Any]) -> None:
        self._metadata = dict(value)

    def merge_metadata(self, value: Mapping[str, Any]) -> Metadata:
        """Deep-merge ``value`` into the metadata tree.

        Mappings merge key-wise; lists and scalars replace.

        Returns:
            The merged metadata
        """
        return deep_merge(self._metadata, value)

    @property
    def verbose(self) -> int:
        """Logging verbosity: 0 = normal, 1 = verbose, 2 = debug."""
        return get_level()

    @verbose.setter
    def verbose(self, value: bool | int) -> None:
        set_level(value)

    @property
    def files(self) -> FileMap:
        """The working FileMap."""
        return self._files

    @property
    def plugins(self) -> PluginPipeline:
        """The registered plugins."""
        return self._plugins

    # --- Build initialization ---

    def use(self, plugin: Plugin) -> "Ironsmith":
        """Add a plugin to the end of the pipeline.

        Returns:
            The engine, for chaining
        """
        self._plugins.append(plugin)
        return self

    def augment(self, func: Augment) -> Augment:
        """Register an augment run for every file this engine loads."""
        return self.augments.add(func)

    def add_file(self, file: File, path: str | None = None) -> None:
        """Add a file to the working FileMap before processing.

        Args:
            file: The file to add
            path: Key to use; defaults to ``file.path``
        """
        self._files[path if path is not None else file.path] = file

    async def load_directory(self, directory: str | os.PathLike[str], **options: Any) -> FileMap:
        """Load a directory into the working FileMap.

        Loaded files go through this engine's augments and replace existing
        entries on path collision.

        Args:
            directory: Directory to load, relative to ``root_path``
            **options: ``load_relative``, ``tags``, ``asset`` and extras

        Returns:
            The working FileMap
        """
        files = await load_directory(
            self._resolve(Path(directory)), augments=self.augments, **options
        )
        self._files.update(files)
        return self._files

    # --- Build process ---

    async def _process(self) -> FileMap:
        self.state = LOADING

        if self.load_source:
            self._files.update(
                await load_directory(self.source_path, augments=self.augments)
            )

        if self.load_assets:
            self._files.update(
                await load_directory(self.assets_path, augments=self.augments, asset=True)
            )

        self.state = RUNNING_PLUGINS
        return await self._plugins.run(self._files, self)

    async def process(self) -> FileMap:
        """Load files and run them through the plugins without writing.

        Returns:
            The final FileMap

        Raises:
            OSError: If loading fails
            PluginError: If a plugin fails
        """
        try:
            return await self._process()
        finally:
            self.state = IDLE

    async def build(self) -> FileMap:
        """Process files and write the result to ``build_path``.

        With ``clean`` set, the build directory is emptied before anything
        else happens. Files written before a failure stay on disk.

        Returns:
            The final FileMap

        Raises:
            OSError: If cleaning, loading or writing fails
            PluginError: If a plugin fails
        """
        try:
            if self.clean:
                log.log(VERBOSE, f"Cleaning build directory: {self.build_path}")
                await empty_directory(self.build_path)

            files = await self._process()

            self.state = WRITING
            await dump_directory(self.build_path, files)
            return files
        finally:
            self.state = IDLE

    def run_process(self) -> FileMap:
        """Run ``process()`` to completion in a new event loop."""
        return asyncio.run(self.process())

    def run_build(self) -> FileMap:
        """Run ``build()`` to completion in a new event loop."""
        return asyncio.run(self.build())
