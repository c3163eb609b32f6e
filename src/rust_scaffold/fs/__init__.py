from rust_scaffold.fs.local import LocalFileSystem
from rust_scaffold.fs.memory import InMemoryFileSystem

__all__ = [
    "InMemoryFileSystem",
    "LocalFileSystem",
]
