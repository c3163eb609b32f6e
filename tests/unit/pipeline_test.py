"""Tests for the whole-file rewrite pipeline."""

import logging

import pytest

from rust_scaffold.core.pipeline import normalize_newlines, process_source
from rust_scaffold.models import GenerationMode
from rust_scaffold.settings import Settings, parse_formats


def test_normalize_newlines() -> None:
    assert normalize_newlines("a\r\nb\rc\n") == "a\nb\nc\n"


class TestTypeWithTestFunction:
    def test_test_function_is_wrapped(self, type_with_test_fn: str, neutralized_block: str) -> None:
        result = process_source(type_with_test_fn)
        assert result.changed
        assert result.neutralized == 1
        assert f"/*\n{neutralized_block}\n*/" in result.text

    def test_code_before_the_block_is_untouched(self, type_with_test_fn: str, neutralized_block: str) -> None:
        result = process_source(type_with_test_fn)
        prefix = type_with_test_fn[: type_with_test_fn.index(neutralized_block)]
        assert result.text.startswith(prefix + "/*\n")

    def test_scaffold_is_appended(self, type_with_test_fn: str) -> None:
        result = process_source(type_with_test_fn)
        assert result.type_names == ["TypeA"]
        assert result.scaffold_appended
        assert "\nmod generated_tests {\n" in result.text
        assert "fn test_bincode_serialization_for_type_a() {" in result.text
        assert "fn test_serde_json_wasm_serialization_for_type_a() {" in result.text

    def test_second_run_changes_nothing(self, type_with_test_fn: str) -> None:
        first = process_source(type_with_test_fn)
        second = process_source(first.text)
        assert not second.changed
        assert second.text == first.text
        assert second.exempt_module_present

    def test_second_run_with_export_path_changes_nothing(self, type_with_test_fn: str) -> None:
        settings = Settings(export_path="neptune_cash::api::export")
        first = process_source(type_with_test_fn, settings)
        assert "pub use neptune_cash::api::export::TypeA;" in first.text
        assert not process_source(first.text, settings).changed


def test_source_without_types_or_tests_is_returned_as_is(plain_source: str) -> None:
    result = process_source(plain_source)
    assert not result.changed
    assert result.text == plain_source
    assert result.type_names == []
    assert not result.scaffold_appended


def test_existing_generated_module_is_kept(exempt_with_stray: str, generated_module: str) -> None:
    result = process_source(exempt_with_stray)
    assert result.exempt_module_present
    assert result.neutralized == 1
    assert generated_module in result.text
    assert result.text.endswith("/*\n\n#[cfg(test)]\nfn stray() {}\n*/\n")
    assert not result.scaffold_appended
    assert result.text.count("mod generated_tests") == 1


def test_existing_generated_module_is_logged(exempt_with_stray: str, caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.INFO, logger="rust_scaffold.core.pipeline"):
        process_source(exempt_with_stray)
    assert "Preserving existing 'generated_tests' module" in caplog.text


def test_types_are_listed_once() -> None:
    text = "pub struct A {}\nmod inner {\n    pub struct A {}\n    pub enum B { X }\n}\n"
    result = process_source(text)
    assert result.type_names == ["A", "B"]
    assert result.text.count("fn test_bincode_serialization_for_a() {") == 1


def test_types_inside_neutralized_code_are_not_scaffolded() -> None:
    text = "#[cfg(test)]\nmod tests {\n    struct Fixture { x: u8 }\n}\n"
    result = process_source(text)
    assert result.neutralized == 1
    assert result.type_names == []
    assert not result.scaffold_appended
    assert result.text == f"/*\n{text[:-1]}\n*/\n"


def test_type_declared_both_inside_and_outside_test_code_is_kept() -> None:
    text = "pub struct Fixture { x: u8 }\n#[cfg(test)]\nmod tests {\n    struct Fixture { x: u8 }\n}\n"
    result = process_source(text)
    assert result.type_names == ["Fixture"]


def test_nested_test_blocks_are_wrapped_once() -> None:
    text = "#[cfg(test)]\nmod tests {\n    #[cfg(test)]\n    fn helper() {}\n}\n"
    result = process_source(text)
    assert result.neutralized == 1
    assert result.text.count("/*") == 1


def test_feature_gated_block_is_neutralized() -> None:
    text = '#[cfg(any(test, feature = "arbitrary-impls"))]\nfn arbitrary_value() -> u8 {\n    4\n}\n'
    result = process_source(text)
    assert result.neutralized == 1
    assert result.text.startswith("/*\n#[cfg(any(test")


def test_custom_feature_name() -> None:
    text = '#[cfg(any(test, feature = "proptest"))]\nfn arbitrary_value() -> u8 {\n    4\n}\n'
    assert process_source(text).neutralized == 0
    assert process_source(text, Settings(feature="proptest")).neutralized == 1


def test_unbalanced_block_is_left_alone() -> None:
    text = "pub struct A {}\n#[cfg(test)]\nfn broken() {\n"
    result = process_source(text)
    assert result.neutralized == 0
    assert result.skipped_sites == [text.index("fn broken")]
    assert result.text.startswith(text)
    assert result.scaffold_appended


def test_crlf_file_without_changes_keeps_its_line_endings() -> None:
    text = "use std::fmt;\r\n\r\npub fn add() {}\r\n"
    result = process_source(text)
    assert not result.changed
    assert result.text == text


def test_crlf_file_with_changes_is_normalized() -> None:
    text = "pub struct A {}\r\n#[cfg(test)]\r\nfn t() {}\r\n"
    result = process_source(text)
    assert result.changed
    assert "\r" not in result.text
    assert "/*\n#[cfg(test)]\nfn t() {}\n*/" in result.text


def test_placeholder_mode() -> None:
    result = process_source("pub struct A {}\n", Settings(mode=GenerationMode.PLACEHOLDER))
    assert 'let original_instance: A = todo!("Instantiate");' in result.text


def test_selected_formats_only() -> None:
    result = process_source("pub struct A {}\n", Settings(formats=parse_formats("serde_json")))
    assert "fn test_serde_json_serialization_for_a() {" in result.text
    assert "bincode" not in result.text


def test_test_module_after_comment_ending_in_keyword_is_neutralized() -> None:
    text = "pub struct A {}\n\n#[cfg(test)]\n// Tests for this mod\nmod tests {\n    #[test]\n    fn t() {}\n}\n"
    result = process_source(text)
    assert result.neutralized == 1
    assert "/*\n\n#[cfg(test)]\n// Tests for this mod\nmod tests {" in result.text
    assert result.type_names == ["A"]


@pytest.mark.parametrize(
    "body",
    ['    let s = "*/";\n', "    /* inner note */\n", '    let s = "/*";\n'],
    ids=["closer-in-string", "inner-comment", "opener-in-string"],
)
def test_test_block_with_comment_delimiter_is_left_alone(body: str, caplog: pytest.LogCaptureFixture) -> None:
    text = f"pub struct A {{}}\n#[cfg(test)]\nfn t() {{\n{body}}}\n"
    first = process_source(text)
    assert first.neutralized == 0
    assert first.skipped_sites == [text.index("fn t")]
    assert first.text.startswith(text)
    assert "contains a block comment delimiter" in caplog.text

    second = process_source(first.text)
    assert not second.changed
