"""Shared fixtures for the engine tests."""

from pathlib import Path

import pytest
from loguru import logger


def write_tree(root: Path, files: dict[str, bytes | str]) -> Path:
    """Create ``files`` (relative path -> contents) below ``root``."""
    for name, contents in files.items():
        target = root / name
        target.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(contents, str):
            target.write_text(contents, encoding="utf-8")
        else:
            target.write_bytes(contents)
    return root


@pytest.fixture
def source_tree(tmp_path: Path) -> Path:
    """Directory with ``a.txt`` and ``sub/b.txt``."""
    return write_tree(tmp_path / "source", {"a.txt": "hi", "sub/b.txt": "bye"})


@pytest.fixture
def site(tmp_path: Path) -> Path:
    """Root directory laid out with ``src/``, ``assets/`` and ``build/``."""
    root = tmp_path / "site"
    write_tree(root / "src", {"index.md": "# Home", "posts/first.md": "# First"})
    write_tree(root / "assets", {"css/site.css": "body {}", "logo.png": b"\x89PNG"})
    (root / "build").mkdir()
    return root


@pytest.fixture
def log_messages():
    """Collect log messages emitted during the test."""
    messages: list[str] = []
    handler_id = logger.add(
        lambda message: messages.append(message.record["message"]),
        level="DEBUG",
        format="{message}",
    )
    yield messages
    logger.remove(handler_id)
