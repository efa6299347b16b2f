"""Tests for the augment registry."""

import asyncio

import pytest

from ironsmith import AugmentRegistry, File, FileRejected


def make_recorder(name: str, calls: list[tuple[str, str]]):
    def augment(file: File) -> None:
        calls.append((name, file.path))

    augment.__name__ = name
    return augment


class TestOrdering:
    """Test that augments run once each, in registration order."""

    def test_runs_in_registration_order(self) -> None:
        """Test the sequence A -> B -> C for every file."""
        calls: list[tuple[str, str]] = []
        augments = AugmentRegistry()
        for name in ("A", "B", "C"):
            augments.add(make_recorder(name, calls))

        asyncio.run(File.create(b"", "one.txt", augments=augments))
        asyncio.run(File.create(b"", "two.txt", augments=augments))

        assert calls == [
            ("A", "one.txt"), ("B", "one.txt"), ("C", "one.txt"),
            ("A", "two.txt"), ("B", "two.txt"), ("C", "two.txt"),
        ]

    def test_veto_stops_later_augments(self) -> None:
        """Test that a file vetoed by B never reaches C."""
        calls: list[tuple[str, str]] = []
        augments = AugmentRegistry()
        augments.add(make_recorder("A", calls))

        @augments.add
        def B(file: File) -> None:
            calls.append(("B", file.path))
            raise RuntimeError("vetoed")

        augments.add(make_recorder("C", calls))

        with pytest.raises(FileRejected):
            asyncio.run(File.create(b"", "x.txt", augments=augments))

        assert calls == [("A", "x.txt"), ("B", "x.txt")]

    def test_async_augments_are_awaited(self) -> None:
        """Test that coroutine augments complete before the next one starts."""
        calls: list[str] = []
        augments = AugmentRegistry()

        @augments.add
        async def slow(file: File) -> None:
            await asyncio.sleep(0.01)
            calls.append("slow")

        @augments.add
        def fast(file: File) -> None:
            calls.append("fast")

        asyncio.run(File.create(b"", "x.txt", augments=augments))

        assert calls == ["slow", "fast"]

    def test_async_rejection(self) -> None:
        """Test that a coroutine augment can veto a file."""
        augments = AugmentRegistry()

        @augments.add
        async def veto(file: File) -> None:
            raise ValueError("async no")

        with pytest.raises(FileRejected, match="async no"):
            asyncio.run(File.create(b"", "x.txt", augments=augments))


class TestRegistry:
    """Test registry bookkeeping."""

    def test_names(self) -> None:
        """Test that names are listed in order."""
        augments = AugmentRegistry()

        def first(file: File) -> None:
            pass

        def second(file: File) -> None:
            pass

        augments.add(first)
        augments.add(second)

        assert augments.names == ["first", "second"]
        assert len(augments) == 2
        assert list(augments) == [first, second]

    def test_decorator_returns_function(self) -> None:
        """Test that add can be used as a decorator."""
        augments = AugmentRegistry()

        @augments.add
        def mark(file: File) -> None:
            file.tag("marked")

        assert callable(mark)
        assert augments.names == ["mark"]

    def test_not_retroactive(self) -> None:
        """Test that registering later does not touch existing files."""
        augments = AugmentRegistry()
        existing = asyncio.run(File.create(b"", "old.txt", augments=augments))

        augments.add(lambda file: file.tag("new"))
        created = asyncio.run(File.create(b"", "new.txt", augments=augments))

        assert not existing.tagged("new")
        assert created.tagged("new")

    def test_registries_are_independent(self) -> None:
        """Test that separate registries do not share augments."""
        first = AugmentRegistry()
        second = AugmentRegistry()
        first.add(lambda file: file.tag("first"))

        file = asyncio.run(File.create(b"", "x.txt", augments=second))

        assert len(second) == 0
        assert not file.tagged("first")
