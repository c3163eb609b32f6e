from collections.abc import Iterator
from pathlib import Path
from typing import Protocol


class FileSystem(Protocol):
    def is_dir(self, path: Path) -> bool: ...

    def iter_files(self, root: Path) -> Iterator[Path]: ...

    def read_text(self, path: Path) -> str: ...

    def write_text(self, path: Path, text: str) -> None: ...
