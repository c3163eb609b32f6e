import logging
import re

from rust_scaffold.core.lexer import OpaqueMap, find_matching_close, scan_opaque_regions
from rust_scaffold.core.lines import LineIndex
from rust_scaffold.models import Block, DeclarationSite, TerminatorKind

logger = logging.getLogger(__name__)

# What may precede the keyword on the declaration's own line for the block to
# still own the whole line.
_LINE_PREFIX = re.compile(
    r"""\s*(?:
        \#\[[^\]\n]*\]\s*
      | /\*(?:[^*\n]|\*(?!/))*\*/\s*
      | (?:pub(?:\s*\([^)\n]*\))?|async|unsafe|const|default|extern(?:\s+"[^"\n]*")?)\s+
    )*+""",
    re.VERBOSE,
)

_PREAMBLE_MARKERS = ("#[", "//", "/*")


def _is_preamble_line(line: str, line_start: int, opaque: OpaqueMap) -> bool:
    stripped = line.strip()
    if stripped and not stripped.startswith(_PREAMBLE_MARKERS):
        return False
    # A brace or `;` in code means the line also opens or ends something else.
    return not any(ch in "{};" and not opaque.is_opaque(line_start + i) for i, ch in enumerate(line))


def _preamble_start(text: str, site: DeclarationSite, lines: LineIndex, opaque: OpaqueMap) -> int:
    decl_line = lines.line_of(site.declaration_offset)
    start = lines.line_start(decl_line)
    if not _LINE_PREFIX.fullmatch(text[start : site.declaration_offset]):
        return site.declaration_offset

    line = decl_line - 1
    while line >= 0:
        line_start = lines.line_start(line)
        if not _is_preamble_line(lines.line_text(line), line_start, opaque):
            break
        start = line_start
        line -= 1
    return start


def extract_block(text: str, site: DeclarationSite, lines: LineIndex, opaque: OpaqueMap) -> Block | None:
    """The preamble-plus-body block owned by ``site``, or ``None`` if its extent is unknown."""
    if site.terminator_kind is TerminatorKind.BLOCK_OPEN:
        end = find_matching_close(text, site.terminator_offset)
        if end is None:
            logger.warning(
                "Unbalanced braces for block starting at offset %d (%s). Skipping.",
                site.declaration_offset,
                site.declaration_text,
            )
            return None
    else:
        end = site.terminator_offset

    start = _preamble_start(text, site, lines, opaque)
    if opaque.is_inside(start):
        region = opaque.region_containing(start)
        assert region is not None
        logger.warning(
            "Preamble of declaration at offset %d starts inside a %s opened at offset %d. Skipping.",
            site.declaration_offset,
            region.kind.value,
            region.start,
        )
        return None

    return Block(
        start_offset=start,
        end_offset=end,
        text=text[start : end + 1],
        preamble=text[start : site.declaration_offset],
        declaration_text=site.declaration_text,
    )


def extract_blocks(
    text: str,
    sites: list[DeclarationSite],
    lines: LineIndex | None = None,
    opaque: OpaqueMap | None = None,
) -> tuple[list[Block], list[int]]:
    """Extract a block for each site.

    Returns ``(blocks, skipped)`` where ``skipped`` holds the declaration
    offsets of sites whose extent could not be determined.
    """
    if lines is None:
        lines = LineIndex(text)
    if opaque is None:
        opaque = scan_opaque_regions(text)

    blocks: list[Block] = []
    skipped: list[int] = []
    for site in sites:
        block = extract_block(text, site, lines, opaque)
        if block is None:
            skipped.append(site.declaration_offset)
        else:
            blocks.append(block)
    return blocks, skipped
