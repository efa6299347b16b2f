"""In-memory file representation.

A File holds the raw contents of one document, the path it will be written
to, an asset flag, a tag set, and an auxiliary key/value map for anything
else plugins want to attach (titles, dates, layouts...).
"""

from collections.abc import Iterable, Iterator
from typing import Any

import bson

from .core.types import FileRecord
from .core.validator import validate_record
from .log import get_logger
from .registry import AugmentRegistry

log = get_logger("ironsmith:file")


def contents_to_bytes(contents: Any) -> bytes:
    """Convert file contents to raw bytes.

    Bytes pass through untouched, bytearray and memoryview are copied with
    ``bytes()``, strings are encoded as UTF-8, and any other object goes
    through ``str()`` first.
    """
    if isinstance(contents, bytes):
        return contents
    if isinstance(contents, (bytearray, memoryview)):
        return bytes(contents)
    if isinstance(contents, str):
        return contents.encode("utf-8")
    return str(contents).encode("utf-8")


class File:
    """A single document flowing through the pipeline.

    Attributes:
        contents: Raw bytes or text; interpreted by plugins only
        path: Path relative to the root the file was loaded from
        asset: True when loaded from the assets tree
        extras: Additional named values (anything besides tags and asset
            passed at construction)

    Example:
        >>> file = File(b'# Hello', 'index.md', tags=['page'], title='Home')
        >>> file.tagged('page'), file['title']
        (True, 'Home')
    """

    def __init__(
        self,
        contents: Any,
        path: str,
        tags: Iterable[str] | None = None,
        asset: bool = False,
        **extras: Any,
    ):
        """Initialize a file without running augments.

        Use ``File.create`` to construct a file through an augment registry.

        Args:
            contents: Raw bytes or text
            path: Relative path, used as the FileMap key
            tags: Initial tags
            asset: Whether the file comes from the assets tree
            **extras: Additional named values stored in ``extras``
        """
        self.contents = contents
        self.path = path
        self.asset = bool(asset)
        self.extras: dict[str, Any] = dict(extras)
        self._tags: set[str] = set(tags) if tags is not None else set()

    @classmethod
    async def create(
        cls,
        contents: Any,
        path: str,
        augments: AugmentRegistry | None = None,
        **options: Any,
    ) -> "File":
        """Construct a file and run it through an augment registry.

        Args:
            contents: Raw bytes or text
            path: Relative path
            augments: Registry to apply; nothing runs when omitted or empty
            **options: ``tags``, ``asset`` and any extra named values

        Returns:
            The constructed (and possibly augmented) file

        Raises:
            FileRejected: If an augment vetoed the file
        """
        log.debug(f"New file created: {path} {sorted(options)}")
        file = cls(contents, path, **options)

        if augments is not None:
            await augments.apply(file)

        return file

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(path={self.path!r}, asset={self.asset!r}, "
            f"tags={sorted(self._tags)!r})"
        )

    # --- Tag set ---

    def tag(self, value: str) -> None:
        """Add ``value`` to the tag set (no-op if already present)."""
        self._tags.add(value)

    def untag(self, value: str) -> bool:
        """Remove ``value`` from the tag set.

        Returns:
            True if the tag was present
        """
        if value in self._tags:
            self._tags.remove(value)
            return True
        return False

    def tagged(self, value: str) -> bool:
        """Return True if the file carries ``value``."""
        return value in self._tags

    def tags(self) -> Iterator[str]:
        """Iterate over a snapshot of the current tags.

        Tagging or untagging while iterating is safe.
        """
        return iter(list(self._tags))

    @property
    def tag_count(self) -> int:
        """Number of distinct tags."""
        return len(self._tags)

    # --- Extras ---

    def __getitem__(self, name: str) -> Any:
        return self.extras[name]

    def __setitem__(self, name: str, value: Any) -> None:
        self.extras[name] = value

    def __delitem__(self, name: str) -> None:
        del self.extras[name]

    def __contains__(self, name: object) -> bool:
        return name in self.extras

    def get(self, name: str, default: Any = None) -> Any:
        """Return the extra value ``name``, or ``default`` if unset."""
        return self.extras.get(name, default)

    # --- Binary export ---

    def to_record(self) -> FileRecord:
        """Export the file as a plain record.

        Extras are not part of the record.

        Returns:
            Record with raw-bytes contents and a sorted tag list
        """
        return FileRecord(
            asset=self.asset,
            contents=contents_to_bytes(self.contents),
            path=self.path,
            tags=sorted(self._tags),
        )

    def to_bson(self) -> bytes:
        """Serialize ``to_record()`` as a BSON document."""
        return bson.encode(dict(self.to_record()))

    @classmethod
    def from_record(cls, record: FileRecord) -> "File":
        """Rebuild a file from an exported record.

        Raises:
            ValidationError: If the record is malformed
        """
        validate_record(record)
        return cls(
            bytes(record["contents"]),
            record["path"],
            tags=record["tags"],
            asset=record["asset"],
        )

    @classmethod
    def from_bson(cls, data: bytes) -> "File":
        """Rebuild a file from ``to_bson()`` output."""
        return cls.from_record(bson.decode(data))  # type: ignore[arg-type]
