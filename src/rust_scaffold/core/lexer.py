"""Delimiter scanning over Rust source with opaque comment and literal regions.

The scanner is a small state machine: in ``CODE`` every character counts, and
the recognisers below switch into one of the opaque states (line comment,
block comment, string, raw string, char literal) and return the offset just
past the region. Nothing inside an opaque region is ever looked at for
delimiters.
"""

from __future__ import annotations

import bisect
import logging
from dataclasses import dataclass
from enum import Enum

logger = logging.getLogger(__name__)


class RegionKind(str, Enum):
    LINE_COMMENT = "line-comment"
    BLOCK_COMMENT = "block-comment"
    STRING = "string"
    RAW_STRING = "raw-string"
    CHAR = "char"


class UnterminatedRegionError(ValueError):
    def __init__(self, kind: RegionKind, offset: int) -> None:
        super().__init__(f"Unterminated {kind.value} starting at offset {offset}")
        self.kind = kind
        self.offset = offset


@dataclass(frozen=True)
class OpaqueRegion:
    start: int
    end: int  # exclusive
    kind: RegionKind
    terminated: bool = True


def _is_ident_char(ch: str) -> bool:
    return ch.isalnum() or ch == "_"


def _skip_quoted(text: str, start: int, quote: str, kind: RegionKind) -> int:
    """Return the offset just past the closing ``quote`` of a literal opened at ``start``."""
    i = start + 1
    n = len(text)
    while i < n:
        ch = text[i]
        if ch == "\\":
            i += 2
            continue
        if ch == quote:
            return i + 1
        i += 1
    raise UnterminatedRegionError(kind, start)


def _raw_string_end(text: str, start: int) -> int | None:
    """Recognise ``r"..."`` / ``r#"..."#`` / ``br"..."`` at ``start``.

    Returns ``None`` if no raw string starts here.
    """
    if start > 0 and _is_ident_char(text[start - 1]):
        return None
    i = start
    if text.startswith("br", i):
        i += 2
    elif text.startswith("r", i):
        i += 1
    else:
        return None
    hashes = 0
    while i < len(text) and text[i] == "#":
        hashes += 1
        i += 1
    if i >= len(text) or text[i] != '"':
        return None
    closer = '"' + "#" * hashes
    end = text.find(closer, i + 1)
    if end == -1:
        raise UnterminatedRegionError(RegionKind.RAW_STRING, start)
    return end + len(closer)


def _char_literal_end(text: str, start: int) -> int | None:
    """Recognise a character literal opened by the quote at ``start``.

    ``'a`` with no closing quote right after one character is a lifetime or a
    loop label, which is plain code.
    """
    n = len(text)
    if start + 1 >= n:
        return None
    if text[start + 1] == "\\":
        return _skip_quoted(text, start, "'", RegionKind.CHAR)
    if start + 2 < n and text[start + 2] == "'" and text[start + 1] != "\n":
        return start + 3
    return None


def region_at(text: str, i: int) -> tuple[RegionKind, int] | None:
    """Return ``(kind, end)`` if an opaque region starts at ``i``, else ``None``.

    Raises ``UnterminatedRegionError`` for a block comment or literal that
    never closes.
    """
    ch = text[i]
    nxt = text[i + 1] if i + 1 < len(text) else ""

    if ch == "/" and nxt == "/":
        newline = text.find("\n", i)
        return RegionKind.LINE_COMMENT, len(text) if newline == -1 else newline
    if ch == "/" and nxt == "*":
        close = text.find("*/", i + 2)
        if close == -1:
            raise UnterminatedRegionError(RegionKind.BLOCK_COMMENT, i)
        return RegionKind.BLOCK_COMMENT, close + 2
    if ch in "rb":
        end = _raw_string_end(text, i)
        if end is not None:
            return RegionKind.RAW_STRING, end
        return None
    if ch == '"':
        return RegionKind.STRING, _skip_quoted(text, i, '"', RegionKind.STRING)
    if ch == "'":
        end = _char_literal_end(text, i)
        if end is not None:
            return RegionKind.CHAR, end
    return None


def find_matching_close(text: str, open_offset: int, opener: str = "{", closer: str = "}") -> int | None:
    """Return the offset of the delimiter closing the one at ``open_offset``.

    Returns ``None`` when the text ends first or an opaque region inside the
    body is never closed.
    """
    if open_offset >= len(text) or text[open_offset] != opener:
        return None

    depth = 1
    i = open_offset + 1
    n = len(text)
    while i < n:
        try:
            region = region_at(text, i)
        except UnterminatedRegionError as exc:
            logger.debug("Scan from offset %d aborted: %s", open_offset, exc)
            return None
        if region is not None:
            i = region[1]
            continue

        ch = text[i]
        if ch == opener:
            depth += 1
        elif ch == closer:
            depth -= 1
            if depth == 0:
                return i
        i += 1
    return None


def find_in_code(
    text: str,
    start: int,
    targets: str,
    nesting: tuple[str, str] = ("([", ")]"),
) -> int | None:
    """Find the first character of ``targets`` at nesting depth zero.

    Depth is tracked over the ``nesting`` opener/closer pairs and opaque
    regions are skipped. Returns ``None`` if nothing is found.
    """
    openers, closers = nesting
    depth = 0
    i = start
    n = len(text)
    while i < n:
        try:
            region = region_at(text, i)
        except UnterminatedRegionError:
            return None
        if region is not None:
            i = region[1]
            continue

        ch = text[i]
        if depth == 0 and ch in targets:
            return i
        if ch in openers:
            depth += 1
        elif ch in closers:
            if depth == 0:
                return None
            depth -= 1
        i += 1
    return None


class OpaqueMap:
    """Sorted, non-overlapping opaque regions of one file."""

    def __init__(self, regions: list[OpaqueRegion]) -> None:
        self.regions = regions
        self._starts = [r.start for r in regions]

    def __len__(self) -> int:
        return len(self.regions)

    def region_containing(self, offset: int) -> OpaqueRegion | None:
        idx = bisect.bisect_left(self._starts, offset) - 1
        if idx < 0:
            return None
        region = self.regions[idx]
        if region.start < offset < region.end:
            return region
        return None

    def is_inside(self, offset: int) -> bool:
        """True if ``offset`` lies strictly after the start of some region and before its end."""
        return self.region_containing(offset) is not None

    def is_opaque(self, offset: int) -> bool:
        """True if the character at ``offset`` belongs to a region, opener included."""
        idx = bisect.bisect_right(self._starts, offset) - 1
        return idx >= 0 and offset < self.regions[idx].end


def scan_opaque_regions(text: str) -> OpaqueMap:
    """Lex the whole file once and collect every opaque region.

    An unterminated region is recorded as running to the end of the text, so
    no declaration after it is considered code.
    """
    regions: list[OpaqueRegion] = []
    i = 0
    n = len(text)
    while i < n:
        try:
            region = region_at(text, i)
        except UnterminatedRegionError as exc:
            logger.warning("%s; treating the rest of the file as opaque", exc)
            regions.append(OpaqueRegion(i, n, exc.kind, terminated=False))
            break
        if region is None:
            i += 1
            continue
        kind, end = region
        regions.append(OpaqueRegion(i, end, kind))
        i = end
    return OpaqueMap(regions)
