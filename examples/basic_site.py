"""Basic site build with a few hand-written plugins.

This example demonstrates the complete pattern for using the engine:
- An augment that vetoes draft files while loading
- A plugin that renames files (re-keying the FileMap)
- An async plugin that wraps contents using shared metadata
- A clean build into the output directory

Usage:
    python examples/basic_site.py path/to/site
"""

import asyncio
import sys
from pathlib import Path

from ironsmith import File, FileMap, Ironsmith


# Step 1: Define an augment (runs once per loaded file)
def skip_drafts(file: File) -> None:
    """Reject files whose name starts with an underscore."""
    if Path(file.path).name.startswith("_"):
        raise ValueError("draft")
    if file.path.endswith(".md"):
        file.tag("page")


# Step 2: Define plugins (run once per build, in order)
def permalinks(files: FileMap, engine: Ironsmith, next) -> None:
    """Move every page from ``name.md`` to ``name.html``."""
    for path, file in list(files.items()):
        if file.tagged("page"):
            del files[path]
            file.path = path[: -len(".md")] + ".html"
            files[file.path] = file
    next()


async def layout(files: FileMap, engine: Ironsmith, next) -> None:
    """Wrap every page in a minimal HTML document."""
    title = engine.metadata.get("site", {}).get("title", "")
    for file in files.values():
        if file.tagged("page"):
            body = file.contents.decode("utf-8")
            file.contents = f"<title>{title}</title>\n<pre>{body}</pre>\n"
        await asyncio.sleep(0)
    next()


def main() -> None:
    root = Path(sys.argv[1]) if len(sys.argv) > 1 else Path.cwd()

    # Step 3: Configure the engine
    engine = Ironsmith(
        root_path=str(root),
        load_assets=(root / "assets").is_dir(),
        clean=True,
        metadata={"site": {"title": "Example"}},
        verbose=1,
    )
    engine.augment(skip_drafts)

    # Step 4: Build
    files = engine.use(permalinks).use(layout).run_build()

    for path in sorted(files):
        print(f"{path}{' (asset)' if files[path].asset else ''}")


if __name__ == "__main__":
    main()
