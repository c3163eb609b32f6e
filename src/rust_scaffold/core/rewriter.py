from collections.abc import Iterable

from rust_scaffold.models import Block, ReplacementOp

COMMENT_OPEN = "/*\n"
COMMENT_CLOSE = "\n*/"
COMMENT_DELIMITERS = ("/*", "*/")


def neutralize(block_text: str) -> str:
    """Wrap ``block_text`` in a block comment, leaving every byte of it intact."""
    return f"{COMMENT_OPEN}{block_text}{COMMENT_CLOSE}"


def can_neutralize(block_text: str) -> bool:
    """False when a comment delimiter inside the block would end or unbalance the wrapper."""
    return not any(delimiter in block_text for delimiter in COMMENT_DELIMITERS)


def outermost(blocks: Iterable[Block]) -> list[Block]:
    """Drop blocks nested inside another block of the same batch."""
    ordered = sorted(blocks, key=lambda b: (b.start_offset, -b.end_offset))
    kept: list[Block] = []
    for block in ordered:
        if kept and kept[-1].contains(block):
            continue
        kept.append(block)
    return kept


def build_replacements(blocks: Iterable[Block]) -> list[ReplacementOp]:
    """One neutralizing replacement per outermost test block."""
    return [
        ReplacementOp(
            start_offset=block.start_offset,
            length=block.end_offset - block.start_offset + 1,
            replacement_text=neutralize(block.text),
        )
        for block in outermost(b for b in blocks if b.is_test_block)
    ]


def apply_replacements(text: str, ops: Iterable[ReplacementOp]) -> str:
    """Apply ``ops`` computed against ``text``, highest offset first."""
    ordered = sorted(ops, key=lambda op: op.start_offset, reverse=True)
    limit = len(text)
    for op in ordered:
        if op.end_offset > limit:
            raise ValueError(
                f"Replacement at offset {op.start_offset} (length {op.length}) overlaps the next one or the end of text"
            )
        limit = op.start_offset

    result = text
    for op in ordered:
        result = result[: op.start_offset] + op.replacement_text + result[op.end_offset :]
    return result
