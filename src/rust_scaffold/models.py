from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict


class TerminatorKind(str, Enum):
    BLOCK_OPEN = "block-open"
    STATEMENT_END = "statement-end"


class GenerationMode(str, Enum):
    DEFAULT = "default"
    PLACEHOLDER = "placeholder"


class FileStatus(str, Enum):
    UPDATED = "updated"
    UNCHANGED = "unchanged"
    SKIPPED = "skipped"
    FAILED = "failed"


class DeclarationSite(BaseModel):
    model_config = ConfigDict(frozen=True)

    declaration_offset: int
    declaration_text: str
    terminator_kind: TerminatorKind
    terminator_offset: int


class Block(BaseModel):
    model_config = ConfigDict(frozen=True)

    start_offset: int
    end_offset: int  # inclusive
    text: str
    preamble: str
    declaration_text: str
    is_test_block: bool = False

    def contains(self, other: "Block") -> bool:
        return self.start_offset <= other.start_offset and other.end_offset <= self.end_offset


class ReplacementOp(BaseModel):
    model_config = ConfigDict(frozen=True)

    start_offset: int
    length: int
    replacement_text: str

    @property
    def end_offset(self) -> int:
        """Exclusive end of the replaced range."""
        return self.start_offset + self.length


class SerializationFormat(BaseModel):
    """How one serde backend encodes and decodes a value in generated tests."""

    model_config = ConfigDict(frozen=True)

    name: str
    crate: str
    encode: str
    decode: str
    encoded_type: str


class ScaffoldSpec(BaseModel):
    model_config = ConfigDict(frozen=True)

    type_names: tuple[str, ...]
    mode: GenerationMode = GenerationMode.DEFAULT
    export_path: str | None = None
    formats: tuple[SerializationFormat, ...] = ()


class RewriteResult(BaseModel):
    text: str
    type_names: list[str]
    neutralized: int = 0
    skipped_sites: list[int] = []
    scaffold_appended: bool = False
    exempt_module_present: bool = False
    changed: bool = False


class FileOutcome(BaseModel):
    path: Path
    status: FileStatus
    message: str = ""
    result: RewriteResult | None = None


class RunSummary(BaseModel):
    root: Path
    outcomes: list[FileOutcome] = []

    def count(self, status: FileStatus) -> int:
        return sum(1 for outcome in self.outcomes if outcome.status is status)
