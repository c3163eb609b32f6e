"""Shared fixtures and helpers for tests."""

from pathlib import Path

import pytest

from rust_scaffold.fs import InMemoryFileSystem
from rust_scaffold.settings import Settings

_REPO_ROOT = Path(__file__).parent.parent


# ---------------------------------------------------------------------------
# Auto-marker: tag tests as "unit" or "integration" based on directory
# ---------------------------------------------------------------------------


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        test_path = Path(str(item.fspath))
        rel = test_path.relative_to(_REPO_ROOT / "tests")
        parts = rel.parts
        if parts and parts[0] == "integration":
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)


# ---------------------------------------------------------------------------
# Rust sources
# ---------------------------------------------------------------------------

TYPE_WITH_TEST_FN = """\
use serde::{Deserialize, Serialize};

#[derive(Debug, Default, Clone, PartialEq, Serialize, Deserialize)]
pub struct TypeA {
    pub value: u64,
}

#[cfg(test)]
fn helper_only_for_tests() -> TypeA {
    TypeA { value: 1 }
}
"""

TEST_FN_BLOCK = """
#[cfg(test)]
fn helper_only_for_tests() -> TypeA {
    TypeA { value: 1 }
}"""

PLAIN_SOURCE = """\
use std::fmt;

pub fn add(a: u8, b: u8) -> u8 {
    a + b
}
"""

GENERATED_MODULE = """\
#[cfg(test)]
#[allow(unused_imports)]
mod generated_tests {
    use super::*;

    #[test]
    fn test_bincode_serialization_for_type_a() {
        let original_instance: TypeA = TypeA::default();
    }
}"""

EXEMPT_WITH_STRAY = f"""\
pub struct TypeA {{
    pub value: u64,
}}

{GENERATED_MODULE}

#[cfg(test)]
fn stray() {{}}
"""


# ---------------------------------------------------------------------------
# Shared unit-test fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep RUST_SCAFFOLD_* variables from the developer's shell out of tests."""
    for name in ("WORKERS", "MODE", "EXPORT_PATH", "FEATURE", "FORMATS"):
        monkeypatch.delenv(f"RUST_SCAFFOLD_{name}", raising=False)


@pytest.fixture
def settings() -> Settings:
    return Settings(workers=1)


@pytest.fixture
def project_fs() -> InMemoryFileSystem:
    """A small crate with one file of every kind the runner distinguishes."""
    return InMemoryFileSystem(
        {
            "/proj/README.md": "# not rust\n",
            "/proj/src/lib.rs": "pub mod a;\npub mod plain;\n",
            "/proj/src/a.rs": TYPE_WITH_TEST_FN,
            "/proj/src/plain.rs": PLAIN_SOURCE,
            "/proj/src/nested/mod.rs": "#[cfg(test)]\nmod tests {}\n",
            "/proj/target/debug/build.rs": TYPE_WITH_TEST_FN,
            "/proj/.git/hooks/hook.rs": TYPE_WITH_TEST_FN,
        }
    )


@pytest.fixture
def type_with_test_fn() -> str:
    return TYPE_WITH_TEST_FN


@pytest.fixture
def neutralized_block() -> str:
    """The exact block of ``type_with_test_fn`` that gets neutralized."""
    return TEST_FN_BLOCK


@pytest.fixture
def plain_source() -> str:
    return PLAIN_SOURCE


@pytest.fixture
def generated_module() -> str:
    return GENERATED_MODULE


@pytest.fixture
def exempt_with_stray() -> str:
    return EXEMPT_WITH_STRAY
