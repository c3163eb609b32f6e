from collections.abc import Iterator
from pathlib import Path, PurePosixPath

from rust_scaffold.settings import SKIPPED_DIRECTORIES


class InMemoryFileSystem:
    """Dictionary-backed file system for tests and dry runs."""

    def __init__(self, files: dict[str, str] | None = None) -> None:
        self.files: dict[PurePosixPath, str] = {}
        self.writes: list[PurePosixPath] = []
        for path, text in (files or {}).items():
            self.files[PurePosixPath(path)] = text

    def _key(self, path: Path | PurePosixPath | str) -> PurePosixPath:
        return PurePosixPath(str(path).replace("\\", "/"))

    def is_dir(self, path: Path) -> bool:
        key = self._key(path)
        return any(key in file_path.parents for file_path in self.files)

    def iter_files(self, root: Path) -> Iterator[Path]:
        key = self._key(root)
        for file_path in sorted(self.files):
            if key not in file_path.parents:
                continue
            relative = file_path.relative_to(key)
            directories = relative.parts[:-1]
            if any(part.startswith(".") or part in SKIPPED_DIRECTORIES for part in directories):
                continue
            yield Path(file_path)

    def read_text(self, path: Path) -> str:
        key = self._key(path)
        if key not in self.files:
            raise FileNotFoundError(f"File not found: {path}")
        return self.files[key]

    def write_text(self, path: Path, text: str) -> None:
        key = self._key(path)
        self.files[key] = text
        self.writes.append(key)
