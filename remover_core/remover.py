"""
Conditional remover pipeline

Phase 1  locate directives and disabled text      (core.preprocess)
Phase 2  build + classify target blocks           (analysis.conditional_analyzer)
Phase 3  rewrite behind the verification gate     (transform.verification)
Phase 4  mark blocks left for review              (transform.marker_injector)
Phase 5  orphan check on the final text           (utils.orphan_detector)

remove_conditionals() is the in-memory core. process_file() wraps it with
the file-level concerns: backup, BOM, generated files, line endings,
whitespace cleanup and post-write verification.
"""

import os
import traceback
from concurrent.futures import ProcessPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Optional, Sequence

from remover_core.analysis.blocks import AnalysisIssue
from remover_core.analysis.conditional_analyzer import ConditionalAnalyzer
from remover_core.config import REVIEW_SENTINEL, ProcessingOptions, scan_symbols
from remover_core.core.preprocess import scan_source
from remover_core.results import ProcessingResult
from remover_core.transform.marker_injector import inject_markers
from remover_core.transform.verification import VerificationGate
from remover_core.utils import backup, bom, generated, line_endings, whitespace
from remover_core.utils.log import get_logger
from remover_core.utils.orphan_detector import OrphanedDirective, detect

logger = get_logger("processor")

EXCLUDED_DIRS = {"obj", "bin", ".git"}


@dataclass
class TransformResult:
    text: str
    blocks_removed: int = 0
    blocks_flagged: int = 0
    issues: List[AnalysisIssue] = field(default_factory=list)
    orphans: List[OrphanedDirective] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.orphans

    @property
    def errors(self) -> List[str]:
        return [f"Orphaned directive at line {o.line}: {o.text}" for o in self.orphans]


def remove_conditionals(text: str, target_symbols: Sequence[str],
                        defined_symbols: Iterable[str] = (),
                        sentinel: str = REVIEW_SENTINEL) -> TransformResult:
    """
    Remove the conditionals bound to target_symbols from text, assuming the
    target is defined. When the orphan check fails the input text is
    returned unchanged together with the orphans.
    """
    logger.info("remove_conditionals started")
    try:
        symbols = scan_symbols(target_symbols, defined_symbols)

        # Phase 1
        scan = scan_source(text, symbols)

        # Phase 2
        analysis = ConditionalAnalyzer(target_symbols).analyze(scan)

        # Phase 3
        gate = VerificationGate(symbols, sentinel).run(text, analysis.simple_blocks)

        # Phase 4
        review = sorted(analysis.complex_blocks + gate.failed, key=lambda b: b.if_directive.start)
        output = gate.text
        if review:
            output = inject_markers(output, review, gate.failed, gate.rewrite, sentinel)

        issues = list(analysis.issues)
        for block in gate.failed:
            issues.append(AnalysisIssue(
                block.line,
                "Transformation caused compilation error - requires manual review",
                block.if_directive.start,
            ))
        issues.sort(key=lambda i: i.offset)

        # Phase 5
        orphans = detect(output)
        if orphans:
            logger.error(f"remove_conditionals: {len(orphans)} orphaned directive(s), output discarded")
            return TransformResult(text, issues=issues, orphans=orphans)

        logger.info(
            f"remove_conditionals finished: removed={len(gate.succeeded)} flagged={len(review)}"
        )
        return TransformResult(output, len(gate.succeeded), len(review), issues)
    except Exception as e:
        logger.error("remove_conditionals failed: %s", e)
        logger.debug(traceback.format_exc())
        raise


def process_text(text: str, options: ProcessingOptions) -> TransformResult:
    return remove_conditionals(
        text,
        options.target_symbols_with_aliases,
        options.additional_defines,
    )


def process_file(file_path: str, options: ProcessingOptions) -> ProcessingResult:
    """Run the pipeline on one file. Never raises; failures become results."""
    file_path = str(file_path)
    backup_path = None
    logger.info(f"process_file {file_path}")
    try:
        if options.create_backup and not options.dry_run:
            backup_path = backup.create_backup(file_path)

        content, has_bom = bom.read_with_bom(file_path)

        if not options.include_generated and generated.is_generated_file(file_path, content):
            logger.info(f"skipping generated file {file_path}")
            if backup_path is not None:
                backup.cleanup_backup(backup_path)
            return ProcessingResult.skipped(file_path, "Generated file")

        ending = line_endings.detect(content)
        transformed = process_text(content, options)

        if not transformed.ok:
            if backup_path is not None:
                backup.restore_backup(backup_path, file_path)
            return ProcessingResult.failed(file_path, transformed.errors)

        output = transformed.text
        if output != content:
            output = whitespace.normalize(output, ending)

        if not options.dry_run and output != content:
            bom.write_with_bom(file_path, output, has_bom)
            written, _ = bom.read_with_bom(file_path)
            if written != output:
                if backup_path is not None:
                    backup.restore_backup(backup_path, file_path)
                raise OSError(f"Write verification failed for {file_path}: content mismatch after write")

        if backup_path is not None:
            backup.cleanup_backup(backup_path)

        preview = None
        if options.dry_run:
            preview = "\ufeff" + output if has_bom else output

        return ProcessingResult.success(
            file_path,
            transformed.blocks_removed,
            transformed.blocks_flagged,
            transformed.issues,
            preview,
        )

    except Exception as e:
        logger.error("process_file failed on %s: %s", file_path, e)
        logger.debug(traceback.format_exc())
        if backup_path is not None:
            backup.restore_backup(backup_path, file_path)
        return ProcessingResult.failed(file_path, [f"Unexpected error: {e}"])


def discover_files(path: str, include_generated: bool = False) -> List[str]:
    """A single file as given, or every *.cs below a directory."""
    if os.path.isfile(path):
        return [path]
    found = []
    for root, dirs, files in os.walk(path):
        dirs[:] = sorted(d for d in dirs if d not in EXCLUDED_DIRS)
        for name in sorted(files):
            if not name.endswith(".cs"):
                continue
            full = os.path.join(root, name)
            if not include_generated and generated.is_generated_name(full):
                continue
            found.append(full)
    return found


def process_files(files: Sequence[str], options: ProcessingOptions,
                  on_result: Optional[Callable[[ProcessingResult], None]] = None,
                  max_workers: Optional[int] = None) -> List[ProcessingResult]:
    """
    Process files one after another, or in a process pool when
    options.parallel is set. Results come back in input order.
    """
    results: List[Optional[ProcessingResult]] = [None] * len(files)

    if options.parallel and len(files) > 1:
        with ProcessPoolExecutor(max_workers=max_workers) as executor:
            futures = {executor.submit(process_file, f, options): i for i, f in enumerate(files)}
            for future in as_completed(futures):
                result = future.result()
                results[futures[future]] = result
                if on_result is not None:
                    on_result(result)
    else:
        for i, f in enumerate(files):
            result = process_file(f, options)
            results[i] = result
            if on_result is not None:
                on_result(result)

    return results
