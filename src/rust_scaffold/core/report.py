from pydantic import BaseModel

from rust_scaffold.core.blocks import extract_block
from rust_scaffold.core.classifier import classify, is_exempt
from rust_scaffold.core.lexer import scan_opaque_regions
from rust_scaffold.core.lines import LineIndex
from rust_scaffold.core.locator import find_declaration_sites, find_type_names
from rust_scaffold.core.pipeline import normalize_newlines
from rust_scaffold.models import TerminatorKind
from rust_scaffold.settings import Settings


class SiteReport(BaseModel):
    line: int
    offset: int
    declaration: str
    terminator: TerminatorKind
    block_start_line: int | None = None
    block_end_line: int | None = None
    is_test: bool = False
    exempt: bool = False
    skipped: bool = False


class SourceReport(BaseModel):
    type_names: list[str]
    sites: list[SiteReport]
    opaque_regions: int


def describe_source(text: str, settings: Settings | None = None) -> SourceReport:
    """Read-only view of what the rewrite pipeline sees in ``text``.

    Line numbers are 1-based.
    """
    settings = settings or Settings()
    source = normalize_newlines(text)
    opaque = scan_opaque_regions(source)
    lines = LineIndex(source)

    reports: list[SiteReport] = []
    for site in find_declaration_sites(source, opaque):
        report = SiteReport(
            line=lines.line_of(site.declaration_offset) + 1,
            offset=site.declaration_offset,
            declaration=site.declaration_text,
            terminator=site.terminator_kind,
            exempt=is_exempt(site.declaration_text),
        )
        block = extract_block(source, site, lines, opaque)
        if block is None:
            report.skipped = True
        else:
            report.block_start_line = lines.line_of(block.start_offset) + 1
            report.block_end_line = lines.line_of(block.end_offset) + 1
            report.is_test = classify(block, settings.feature)
        reports.append(report)

    return SourceReport(
        type_names=find_type_names(source, opaque),
        sites=reports,
        opaque_regions=len(opaque),
    )
