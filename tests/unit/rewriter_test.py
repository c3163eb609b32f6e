"""Unit tests for replacement building and application."""

import pytest

from rust_scaffold.core.rewriter import apply_replacements, build_replacements, can_neutralize, neutralize, outermost
from rust_scaffold.models import Block, ReplacementOp


def _block(start: int, end: int, is_test: bool = True, text: str = "") -> Block:
    return Block(
        start_offset=start,
        end_offset=end,
        text=text or "x" * (end - start + 1),
        preamble="",
        declaration_text="fn x()",
        is_test_block=is_test,
    )


def test_neutralize_wraps_without_touching_the_block() -> None:
    assert neutralize("fn a() {}") == "/*\nfn a() {}\n*/"


def test_apply_replacements_is_order_independent() -> None:
    ops = [
        ReplacementOp(start_offset=1, length=2, replacement_text="XY_"),
        ReplacementOp(start_offset=4, length=1, replacement_text="Z"),
    ]
    assert apply_replacements("abcdef", ops) == "aXY_dZf"
    assert apply_replacements("abcdef", list(reversed(ops))) == "aXY_dZf"


def test_apply_replacements_without_ops_returns_text() -> None:
    assert apply_replacements("abc", []) == "abc"


def test_overlapping_replacements_are_rejected() -> None:
    ops = [
        ReplacementOp(start_offset=0, length=3, replacement_text=""),
        ReplacementOp(start_offset=2, length=2, replacement_text=""),
    ]
    with pytest.raises(ValueError, match="overlaps"):
        apply_replacements("abcdef", ops)


def test_replacement_past_end_is_rejected() -> None:
    with pytest.raises(ValueError):
        apply_replacements("abc", [ReplacementOp(start_offset=2, length=5, replacement_text="")])


def test_outermost_drops_nested_blocks() -> None:
    outer, inner, other = _block(0, 20), _block(5, 10), _block(25, 30)
    assert outermost([inner, other, outer]) == [outer, other]


def test_build_replacements_only_for_test_blocks() -> None:
    text = "fn a() {}\nfn b() {}"
    first = _block(0, 8, is_test=True, text=text[0:9])
    second = _block(10, 18, is_test=False, text=text[10:19])
    ops = build_replacements([first, second])
    assert ops == [ReplacementOp(start_offset=0, length=9, replacement_text="/*\nfn a() {}\n*/")]
    assert apply_replacements(text, ops) == "/*\nfn a() {}\n*/\nfn b() {}"


def test_nested_test_blocks_produce_one_replacement() -> None:
    text = "mod t { fn a() {} }"
    outer = _block(0, len(text) - 1, text=text)
    inner = _block(8, 16, text=text[8:17])
    ops = build_replacements([outer, inner])
    assert len(ops) == 1
    assert apply_replacements(text, ops) == f"/*\n{text}\n*/"


@pytest.mark.parametrize(
    ("block_text", "expected"),
    [
        ("#[cfg(test)]\nfn a() {}", True),
        ('fn a() { let s = "*/"; }', False),
        ("fn a() { /* inner */ }", False),
        ('fn a() { let s = "/*"; }', False),
    ],
)
def test_can_neutralize(block_text: str, expected: bool) -> None:
    assert can_neutralize(block_text) is expected
