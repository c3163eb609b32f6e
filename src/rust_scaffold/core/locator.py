import logging
import re

from rust_scaffold.core.lexer import OpaqueMap, find_in_code, find_matching_close, region_at, scan_opaque_regions
from rust_scaffold.models import DeclarationSite, TerminatorKind

logger = logging.getLogger(__name__)

_IDENT = r"[A-Za-z_][A-Za-z0-9_]*"

# The name sits in a lookahead so a keyword ending a comment line never
# swallows the declaration keyword on the next line.
_TYPE_PATTERN = re.compile(rf"(?<![\w#])(?:struct|enum)(?=\s+(?P<name>{_IDENT}))")
_SITE_PATTERN = re.compile(rf"(?<![\w#])(?:(?P<kw>mod|fn)(?=\s+(?P<name>{_IDENT}))|(?P<use>use)\b)")


def _skip_ws(text: str, i: int) -> int:
    n = len(text)
    while i < n and text[i].isspace():
        i += 1
    return i


def _starts_keyword(text: str, i: int, keyword: str) -> bool:
    end = i + len(keyword)
    return text.startswith(keyword, i) and (end >= len(text) or not (text[end].isalnum() or text[end] == "_"))


def _generics_end(text: str, start: int) -> int | None:
    """Offset of the ``>`` closing the generic list opened at ``start``."""
    depth = 0
    i = start
    n = len(text)
    while i < n:
        region = region_at(text, i)
        if region is not None:
            i = region[1]
            continue
        ch = text[i]
        if ch == "<":
            depth += 1
        elif ch == ">" and text[i - 1] != "-":
            depth -= 1
            if depth == 0:
                return i
        elif ch in "{;":
            return None
        i += 1
    return None


def _has_type_body(text: str, pos: int) -> bool:
    """Whether a brace body or a ``(...);`` form follows a struct/enum name."""
    i = _skip_ws(text, pos)
    if i < len(text) and text[i] == "<":
        end = _generics_end(text, i)
        if end is None:
            return False
        i = _skip_ws(text, end + 1)
    if i >= len(text):
        return False
    if _starts_keyword(text, i, "where"):
        j = find_in_code(text, i, "{;")
        return j is not None and text[j] == "{"
    if text[i] == "{":
        return True
    if text[i] == "(":
        close = find_matching_close(text, i, "(", ")")
        if close is None:
            return False
        j = find_in_code(text, close + 1, ";{")
        return j is not None and text[j] == ";"
    return False


def find_type_names(text: str, opaque: OpaqueMap | None = None) -> list[str]:
    """Names of the structs and enums declared in ``text``, first-seen order, no duplicates."""
    return list(dict.fromkeys(name for name, _ in find_type_declarations(text, opaque)))


def find_type_declarations(text: str, opaque: OpaqueMap | None = None) -> list[tuple[str, int]]:
    """Every struct/enum declaration as ``(name, offset)``, repeats included."""
    if opaque is None:
        opaque = scan_opaque_regions(text)

    found: list[tuple[str, int]] = []
    for match in _TYPE_PATTERN.finditer(text):
        if opaque.is_opaque(match.start()):
            continue
        try:
            has_body = _has_type_body(text, match.end("name"))
        except ValueError:
            has_body = False
        if has_body:
            found.append((match.group("name"), match.start()))
    return found


def _site_from_match(text: str, match: re.Match[str]) -> DeclarationSite | None:
    start = match.start()
    if match.group("use"):
        terminator = find_in_code(text, match.end(), ";", nesting=("{", "}"))
    elif match.group("kw") == "mod":
        terminator = _skip_ws(text, match.end("name"))
        if terminator >= len(text) or text[terminator] not in "{;":
            return None
    else:
        terminator = find_in_code(text, match.end("name"), "{;")

    if terminator is None:
        logger.debug("No terminator for declaration at offset %d", start)
        return None

    kind = TerminatorKind.BLOCK_OPEN if text[terminator] == "{" else TerminatorKind.STATEMENT_END
    return DeclarationSite(
        declaration_offset=start,
        declaration_text=text[start:terminator].strip(),
        terminator_kind=kind,
        terminator_offset=terminator,
    )


def find_declaration_sites(text: str, opaque: OpaqueMap | None = None) -> list[DeclarationSite]:
    """Every ``mod``, ``fn`` and ``use`` declaration that sits in code, in text order."""
    if opaque is None:
        opaque = scan_opaque_regions(text)

    sites: list[DeclarationSite] = []
    for match in _SITE_PATTERN.finditer(text):
        if opaque.is_opaque(match.start()):
            continue
        site = _site_from_match(text, match)
        if site is not None:
            sites.append(site)
    return sites
