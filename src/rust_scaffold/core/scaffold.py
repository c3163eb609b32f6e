"""Generation of the ``generated_tests`` module appended to rewritten files.

Each discovered type gets one test per serialization format. A test builds an
instance, round-trips it through the format, checks the decoded value equals
the original and re-encodes identically, and, when an export path is set,
checks that the exported type of the same name serializes to the same output.
"""

import re
from collections.abc import Iterable

from rust_scaffold.models import GenerationMode, ScaffoldSpec, SerializationFormat

MODULE_NAME = "generated_tests"
EXPORT_MODULE = "nc"
INDENT = "    "

BINCODE = SerializationFormat(
    name="bincode",
    crate="bincode",
    encode="bincode::serialize(&{value})",
    decode="bincode::deserialize(&{encoded})",
    encoded_type="Vec<u8>",
)
SERDE_JSON = SerializationFormat(
    name="serde_json",
    crate="serde_json",
    encode="serde_json::to_string(&{value})",
    decode="serde_json::from_str(&{encoded})",
    encoded_type="String",
)
SERDE_JSON_WASM = SerializationFormat(
    name="serde_json_wasm",
    crate="serde_json_wasm",
    encode="serde_json_wasm::to_string(&{value})",
    decode="serde_json_wasm::from_str(&{encoded})",
    encoded_type="String",
)

DEFAULT_FORMATS: tuple[SerializationFormat, ...] = (BINCODE, SERDE_JSON, SERDE_JSON_WASM)
KNOWN_FORMATS = {fmt.name: fmt for fmt in DEFAULT_FORMATS}

_MODULE_ATTRIBUTES = (
    "#[cfg(test)]",
    "#[allow(unused_imports)]",
    "#[allow(unused_variables)]",
    "#[allow(unreachable_code)]",
    "#[allow(non_snake_case)]",
)

_WORD_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")


def snake_case(type_name: str) -> str:
    return _WORD_BOUNDARY.sub("_", type_name).lower()


class FunctionNamer:
    """Hands out function-name stems, suffixing ``_2``, ``_3``... on repeats."""

    def __init__(self) -> None:
        self._counts: dict[str, int] = {}
        self._used: set[str] = set()

    def stem_for(self, type_name: str) -> str:
        base = snake_case(type_name)
        stem = base
        while stem in self._used:
            self._counts[base] = self._counts.get(base, 1) + 1
            stem = f"{base}_{self._counts[base]}"
        self._used.add(stem)
        return stem


def _instance_expr(type_path: str, mode: GenerationMode) -> str:
    if mode is GenerationMode.PLACEHOLDER:
        return 'todo!("Instantiate")'
    return f"{type_path}::default()"


def _test_function(
    type_name: str,
    stem: str,
    fmt: SerializationFormat,
    mode: GenerationMode,
    exported: bool,
) -> list[str]:
    body = INDENT * 2
    encode = fmt.encode.format(value="original_instance")
    decode = fmt.decode.format(encoded="encoded")
    re_encode = fmt.encode.format(value="decoded")
    lines = [
        f"{INDENT}#[test]",
        f"{INDENT}fn test_{fmt.name}_serialization_for_{stem}() {{",
        f"{body}let original_instance: {type_name} = {_instance_expr(type_name, mode)};",
        f'{body}let encoded: {fmt.encoded_type} = {encode}.expect("Failed to serialize {type_name}");',
        f'{body}let decoded: {type_name} = {decode}.expect("Failed to deserialize {type_name}");',
        f'{body}assert_eq!(original_instance, decoded, "Round-tripped {type_name} should equal the original");',
        f'{body}let re_encoded: {fmt.encoded_type} = {re_encode}.expect("Failed to re-serialize {type_name}");',
        f'{body}assert_eq!(encoded, re_encoded, "Re-serialized {type_name} should match the original output");',
    ]
    if exported:
        nc_type = f"{EXPORT_MODULE}::{type_name}"
        nc_encode = fmt.encode.format(value="nc_instance")
        lines += [
            f"{body}let nc_instance: {nc_type} = {_instance_expr(nc_type, mode)};",
            f'{body}let exported_encoded: {fmt.encoded_type} = {nc_encode}.expect("Failed to serialize {nc_type}");',
            f'{body}assert_eq!(encoded, exported_encoded, "Serialized {nc_type} should match serialized {type_name}");',
        ]
    lines.append(f"{INDENT}}}")
    return lines


def _imports(formats: Iterable[SerializationFormat]) -> list[str]:
    crates = sorted({fmt.crate for fmt in formats})
    lines = [f"{INDENT}use super::*;"]
    lines += [f"{INDENT}use {crate};" for crate in crates]
    lines.append(f"{INDENT}use serde::{{Deserialize, Serialize}};")
    return lines


def _export_module(type_names: Iterable[str], export_path: str) -> list[str]:
    lines = [f"{INDENT}pub mod {EXPORT_MODULE} {{"]
    lines += [f"{INDENT * 2}pub use {export_path}::{name};" for name in type_names]
    lines.append(f"{INDENT}}}")
    return lines


def generate_scaffold(spec: ScaffoldSpec) -> str:
    """Source text of a ``generated_tests`` module covering ``spec.type_names``."""
    formats = spec.formats or DEFAULT_FORMATS
    exported = bool(spec.export_path)

    lines = ["", *_MODULE_ATTRIBUTES, f"mod {MODULE_NAME} {{"]
    lines += _imports(formats)
    lines.append("")
    if spec.export_path:
        lines += _export_module(dict.fromkeys(spec.type_names), spec.export_path)
        lines.append("")

    namer = FunctionNamer()
    for type_name in dict.fromkeys(spec.type_names):
        stem = namer.stem_for(type_name)
        for fmt in formats:
            lines += _test_function(type_name, stem, fmt, spec.mode, exported)
            lines.append("")

    if lines[-1] == "":
        lines.pop()
    lines.append("}")
    return "\n".join(lines) + "\n"
