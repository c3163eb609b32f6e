import logging
from collections.abc import Callable, Iterable
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from rust_scaffold.core.pipeline import process_source
from rust_scaffold.core.ports.filesystem import FileSystem
from rust_scaffold.models import FileOutcome, FileStatus, RunSummary
from rust_scaffold.settings import AGGREGATOR_FILENAMES, SOURCE_EXTENSIONS, Settings

logger = logging.getLogger(__name__)


class RootNotFoundError(FileNotFoundError):
    def __init__(self, root: Path) -> None:
        super().__init__(f"Root directory '{root}' not found.")
        self.root = root


def is_source_file(path: Path) -> bool:
    return path.suffix in SOURCE_EXTENSIONS


def is_aggregator(path: Path) -> bool:
    return path.name in AGGREGATOR_FILENAMES


def _describe(neutralized: int, appended: bool, preserved: bool) -> str:
    parts = []
    if neutralized:
        parts.append(f"neutralized {neutralized} test block(s)")
    if appended:
        parts.append("added 'generated_tests' module")
    if preserved:
        parts.append("preserved existing 'generated_tests' module")
    return "; ".join(parts) or "no changes"


def process_file(path: Path, fs: FileSystem, settings: Settings) -> FileOutcome:
    """Run the rewrite pipeline on one file and persist the result if it changed.

    Read, write and decode errors are reported in the outcome, never raised.
    """
    try:
        text = fs.read_text(path)
    except (OSError, UnicodeDecodeError) as exc:
        logger.error("Could not read file %s: %s", path, exc)
        return FileOutcome(path=path, status=FileStatus.FAILED, message=f"could not read file: {exc}")

    try:
        result = process_source(text, settings)
    except ValueError as exc:
        logger.warning("%s: left untouched: %s", path, exc)
        return FileOutcome(path=path, status=FileStatus.FAILED, message=str(exc))

    for offset in result.skipped_sites:
        logger.warning("%s: declaration at offset %d left untouched", path, offset)

    message = _describe(result.neutralized, result.scaffold_appended, result.exempt_module_present)
    if not result.changed:
        return FileOutcome(path=path, status=FileStatus.UNCHANGED, message=message, result=result)

    if not settings.dry_run:
        try:
            fs.write_text(path, result.text)
        except OSError as exc:
            logger.error("Could not write to file %s: %s", path, exc)
            return FileOutcome(
                path=path, status=FileStatus.FAILED, message=f"could not write file: {exc}", result=result
            )

    return FileOutcome(path=path, status=FileStatus.UPDATED, message=message, result=result)


def select_files(paths: Iterable[Path]) -> tuple[list[Path], list[Path]]:
    """Split traversal output into ``(to_process, skipped_aggregators)``."""
    selected: list[Path] = []
    skipped: list[Path] = []
    for path in paths:
        if not is_source_file(path):
            continue
        if is_aggregator(path):
            skipped.append(path)
        else:
            selected.append(path)
    return selected, skipped


def run(
    root: Path,
    fs: FileSystem,
    settings: Settings | None = None,
    on_outcome: Callable[[FileOutcome], None] | None = None,
) -> RunSummary:
    """Rewrite every eligible source file under ``root``.

    ``on_outcome`` is called once per file as results come in.
    """
    settings = settings or Settings.from_env()
    if not fs.is_dir(root):
        raise RootNotFoundError(root)

    summary = RunSummary(root=root)

    def _record(outcome: FileOutcome) -> None:
        summary.outcomes.append(outcome)
        if on_outcome is not None:
            on_outcome(outcome)

    selected, aggregators = select_files(fs.iter_files(root))
    for path in aggregators:
        _record(FileOutcome(path=path, status=FileStatus.SKIPPED, message="module aggregator"))

    logger.info("Processing %d file(s) under %s with %d worker(s)", len(selected), root, settings.workers)
    if settings.workers == 1:
        for path in selected:
            _record(process_file(path, fs, settings))
        return summary

    with ThreadPoolExecutor(max_workers=settings.workers) as executor:
        for outcome in executor.map(lambda p: process_file(p, fs, settings), selected):
            _record(outcome)
    return summary
