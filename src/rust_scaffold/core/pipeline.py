import logging

from rust_scaffold.core.blocks import extract_blocks
from rust_scaffold.core.classifier import classify, is_exempt
from rust_scaffold.core.lexer import scan_opaque_regions
from rust_scaffold.core.lines import LineIndex
from rust_scaffold.core.locator import find_declaration_sites, find_type_declarations
from rust_scaffold.core.rewriter import apply_replacements, build_replacements, can_neutralize, outermost
from rust_scaffold.core.scaffold import MODULE_NAME, generate_scaffold
from rust_scaffold.models import Block, RewriteResult, ScaffoldSpec, TerminatorKind
from rust_scaffold.settings import Settings

logger = logging.getLogger(__name__)


def normalize_newlines(text: str) -> str:
    return text.replace("\r\n", "\n").replace("\r", "\n")


def _inside_any(offset: int, blocks: list[Block]) -> bool:
    return any(block.start_offset <= offset <= block.end_offset for block in blocks)


def process_source(text: str, settings: Settings | None = None) -> RewriteResult:
    """Neutralize test code in one file's text and append a generated tests module.

    Returns the original text untouched (``changed=False``) when there is
    nothing to neutralize and nothing to append.
    """
    settings = settings or Settings()
    source = normalize_newlines(text)
    opaque = scan_opaque_regions(source)
    lines = LineIndex(source)

    type_declarations = find_type_declarations(source, opaque)
    sites = find_declaration_sites(source, opaque)
    exempt_present = any(
        is_exempt(site.declaration_text) and site.terminator_kind is TerminatorKind.BLOCK_OPEN for site in sites
    )

    blocks, skipped = extract_blocks(source, sites, lines, opaque)
    candidates: list[Block] = []
    for block in blocks:
        if not classify(block, settings.feature):
            continue
        if not can_neutralize(block.text):
            offset = block.start_offset + len(block.preamble)
            logger.warning(
                "Test block of declaration at offset %d (%s) contains a block comment delimiter. Skipping.",
                offset,
                block.declaration_text,
            )
            skipped.append(offset)
            continue
        candidates.append(block.model_copy(update={"is_test_block": True}))
    test_blocks = outermost(candidates)
    ops = build_replacements(test_blocks)
    rewritten = apply_replacements(source, ops) if ops else source

    # Types declared inside neutralized code no longer exist for the generated tests.
    type_names = list(
        dict.fromkeys(name for name, offset in type_declarations if not _inside_any(offset, test_blocks))
    )

    appended = False
    if exempt_present:
        logger.info("Preserving existing '%s' module", MODULE_NAME)
    elif type_names:
        spec = ScaffoldSpec(
            type_names=tuple(type_names),
            mode=settings.mode,
            export_path=settings.export_path,
            formats=settings.formats,
        )
        rewritten = f"{rewritten}\n{generate_scaffold(spec)}"
        appended = True
    else:
        logger.debug("No types found; skipping test module generation")

    changed = bool(ops) or appended
    return RewriteResult(
        text=rewritten if changed else text,
        type_names=type_names,
        neutralized=len(ops),
        skipped_sites=sorted(skipped),
        scaffold_appended=appended,
        exempt_module_present=exempt_present,
        changed=changed,
    )
