"""Directory dumping.

This module writes a FileMap out to a destination tree, and provides the
directory-emptying step used by clean builds.
"""

import asyncio
import os
import shutil
from pathlib import Path

from .core.types import FileMap
from .file import File, contents_to_bytes
from .log import get_logger

log = get_logger("ironsmith")


def validate_path_safety(path: Path, base_dir: Path) -> None:
    """Validate that a path stays within the base directory.

    This prevents FileMap keys like ``../outside.txt`` from writing outside
    the destination.

    Args:
        path: Path to validate
        base_dir: Base directory that path must be within

    Raises:
        ValueError: If path escapes the base directory
    """
    resolved_path = path.resolve()
    resolved_base = base_dir.resolve()

    if not resolved_path.is_relative_to(resolved_base) or resolved_path == resolved_base:
        raise ValueError(f"Path {path} escapes base directory {base_dir}")


def _write_file(target: Path, file: File) -> None:
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(contents_to_bytes(file.contents))


async def dump_directory(directory: str | os.PathLike[str], files: FileMap) -> None:
    """Write every file of ``files`` below ``directory``.

    Each file lands at ``directory/<key>``; intermediate directories are
    created on demand and existing files are overwritten. Files already in
    ``directory`` but absent from ``files`` are left alone.

    Writes run concurrently, but this coroutine only returns once every
    write has settled.

    Args:
        directory: Destination root
        files: FileMap to write

    Raises:
        ValueError: If a key would land outside ``directory``; nothing is
            written in that case
        OSError: The first write failure, after all writes have settled
    """
    root_path = Path(directory).resolve()
    log.debug(f"Dumping {len(files)} files into {root_path}")

    # Check every target before the first write starts
    targets = []
    for name, file in list(files.items()):
        target = root_path / name
        validate_path_safety(target, root_path)
        targets.append((name, target, file))

    jobs = []
    for name, target, file in targets:
        log.debug(f"Writing file: ./{name}{' (asset)' if file.asset else ''}")
        jobs.append(asyncio.to_thread(_write_file, target, file))

    results = await asyncio.gather(*jobs, return_exceptions=True)

    for result in results:
        if isinstance(result, BaseException):
            raise result


def _empty_directory(root_path: Path) -> None:
    root_path.mkdir(parents=True, exist_ok=True)

    for entry in root_path.iterdir():
        if entry.is_dir() and not entry.is_symlink():
            shutil.rmtree(entry)
        else:
            entry.unlink()


async def empty_directory(directory: str | os.PathLike[str]) -> None:
    """Remove everything inside ``directory``, creating it if missing.

    The directory itself is kept.

    Raises:
        OSError: If an entry cannot be removed
    """
    root_path = Path(directory).resolve()
    log.debug(f"Emptying directory: {root_path}")
    await asyncio.to_thread(_empty_directory, root_path)
