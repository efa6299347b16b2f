"""Directory loading.

This module reads a directory tree into a FileMap, constructing one File
per regular file found and running each through the augment registry.
"""

import asyncio
import os
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from .core.errors import FileRejected
from .core.types import FileMap
from .file import File
from .log import VERBOSE, get_logger
from .registry import AugmentRegistry

log = get_logger("ironsmith")


def normalize_prefix(prefix: str | None) -> str:
    """Normalize a ``load_relative`` prefix.

    Leading separators are stripped and exactly one trailing separator is
    ensured; an empty prefix stays empty.

    Example:
        >>> normalize_prefix('/blog/'), normalize_prefix('blog'), normalize_prefix('')
        ('blog/', 'blog/', '')
    """
    if not prefix:
        return ""

    prefix = prefix.replace("\\", "/").lstrip("/").rstrip("/")
    return f"{prefix}/" if prefix else ""


def walk_files(root_path: Path) -> list[Path]:
    """Recursively list regular files below ``root_path``.

    The order is deterministic for a given filesystem snapshot: directories
    and files are visited in sorted name order. Symlinked directories are
    descended into, except links back into a directory already on the
    current branch.

    Args:
        root_path: Directory to walk

    Returns:
        Absolute paths of every regular file (symlinked files included)
    """
    found: list[Path] = []
    top = str(root_path)
    # dirpath -> real paths of the directories above it, itself included
    branches = {top: (os.path.realpath(top),)}

    # Walk the directory tree
    for dirpath, dirnames, filenames in os.walk(top, followlinks=True):
        branch = branches.pop(dirpath)
        descend = []
        for name in sorted(dirnames):
            child = os.path.join(dirpath, name)
            real = os.path.realpath(child)
            if real in branch:
                log.warning(f"Skipping symlink loop: {child}")
                continue
            branches[child] = branch + (real,)
            descend.append(name)
        dirnames[:] = descend

        for filename in sorted(filenames):
            file_path = Path(dirpath) / filename
            # Skips broken symlinks, sockets, fifos
            if file_path.is_file():
                found.append(file_path)

    return found


async def load_directory(
    directory: str | os.PathLike[str],
    *,
    augments: AugmentRegistry | None = None,
    load_relative: str | None = None,
    tags: Iterable[str] | None = None,
    asset: bool = False,
    **extras: Any,
) -> FileMap:
    """Load every file below ``directory`` into a new FileMap.

    Files are read and constructed one at a time. A file vetoed by an
    augment is logged and skipped; any filesystem error aborts the load.

    Args:
        directory: Directory to load
        augments: Registry run over every constructed file
        load_relative: Prefix prepended to every loaded path
        tags: Tags given to every loaded file
        asset: Asset flag for every loaded file
        **extras: Extra named values copied onto every loaded file

    Returns:
        FileMap keyed by each file's final path (last one wins on collision)

    Raises:
        FileNotFoundError: If ``directory`` does not exist
        NotADirectoryError: If ``directory`` is not a directory
        OSError: If reading a file fails

    Example:
        >>> files = await load_directory('content', load_relative='blog')
        >>> sorted(files)
        ['blog/index.md', 'blog/posts/first.md']
    """
    root_path = Path(directory).resolve()

    if not root_path.exists():
        raise FileNotFoundError(f"Path does not exist: {root_path}")

    if not root_path.is_dir():
        raise NotADirectoryError(f"Path is not a directory: {root_path}")

    prefix = normalize_prefix(load_relative)
    filenames = await asyncio.to_thread(walk_files, root_path)
    tag_seed = list(tags) if tags is not None else []
    files: FileMap = {}

    log.log(
        VERBOSE,
        f"Loading {len(filenames)} files from {root_path}"
        + (f" into {prefix}" if prefix else ""),
    )

    for file_path in filenames:
        buffer = await asyncio.to_thread(file_path.read_bytes)
        relative_path = f"{prefix}{file_path.relative_to(root_path).as_posix()}"

        try:
            file = await File.create(
                buffer,
                relative_path,
                augments=augments,
                tags=tag_seed,
                asset=asset,
                **extras,
            )
        except FileRejected as e:
            # Augments veto files by raising; the file is skipped
            log.log(VERBOSE, f"Skipped {relative_path} ({e.reason})")
            continue

        log.debug(f"Loaded {file.path}{' (asset)' if file.asset else ''}")
        files[file.path] = file

    return files
