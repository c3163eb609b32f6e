import os
from collections.abc import Iterator
from pathlib import Path

from rust_scaffold.settings import SKIPPED_DIRECTORIES


class LocalFileSystem:
    """Reads and writes files on disk as UTF-8, keeping line endings as they are.

    Implements the ``FileSystem`` protocol.
    """

    def is_dir(self, path: Path) -> bool:
        return path.is_dir()

    def iter_files(self, root: Path) -> Iterator[Path]:
        for dirpath, dirnames, filenames in os.walk(root):
            dirnames[:] = sorted(d for d in dirnames if not d.startswith(".") and d not in SKIPPED_DIRECTORIES)
            for filename in sorted(filenames):
                yield Path(dirpath) / filename

    def read_text(self, path: Path) -> str:
        with path.open("r", encoding="utf-8", newline="") as handle:
            return handle.read()

    def write_text(self, path: Path, text: str) -> None:
        with path.open("w", encoding="utf-8", newline="") as handle:
            handle.write(text)
