import re

from rust_scaffold.core.scaffold import MODULE_NAME
from rust_scaffold.models import Block

EXEMPT_MODULE = f"mod {MODULE_NAME}"
DEFAULT_FEATURE = "arbitrary-impls"


def marker_pattern(feature: str = DEFAULT_FEATURE) -> re.Pattern[str]:
    """``#[cfg(test)]`` or ``#[cfg(any(test, feature = "<feature>"))]`` at the start of a line."""
    return re.compile(
        rf'^\s*#\[cfg\((?:test|any\(\s*test\s*,\s*feature\s*=\s*"{re.escape(feature)}"\s*\))\)\]',
        re.MULTILINE,
    )


_DEFAULT_MARKER = marker_pattern()


def is_test_preamble(preamble: str, feature: str = DEFAULT_FEATURE) -> bool:
    pattern = _DEFAULT_MARKER if feature == DEFAULT_FEATURE else marker_pattern(feature)
    return pattern.search(preamble) is not None


def is_exempt(declaration_text: str) -> bool:
    return declaration_text.strip() == EXEMPT_MODULE


def classify(block: Block, feature: str = DEFAULT_FEATURE) -> bool:
    """Whether ``block`` is test code to neutralize.

    The generated tests module is never a target, whatever its attributes say,
    so that re-running does not wrap our own output.
    """
    if is_exempt(block.declaration_text):
        return False
    return is_test_preamble(block.preamble, feature)
