"""Check registry and runners.

This module orchestrates checks:
- ALL_CHECKS: Dispatch table from CheckId to check instance
- run_checks(): Runs selected checks against one loaded document
- run_file(): Loads one file and runs the checks, recording file-level errors
- run_batch(): Runs every file of an invocation, one at a time
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Union

from tqdm import tqdm

from print_check.core.enums import CheckId, CheckStatus, SeverityOverride
from print_check.core.errors import CheckExecutionError, DocumentLoadError
from print_check.document import DocumentModel, load_document
from .checks import PrintCheck
from .checks.bleed_trim import BleedTrimCheck
from .checks.colorspace import ColorSpaceCheck
from .checks.fonts import FontsCheck
from .checks.page_size import PageSizeCheck
from .checks.pdfx_compliance import PdfxComplianceCheck
from .checks.resolution import ResolutionCheck
from .checks.tac import TacCheck
from .checks.transparency import TransparencyCheck
from .config import CHECK_NAMES
from .models import BatchReport, CheckResult, FileReport
from .options import CheckOptions, ResolvedOptions
from .severity import apply_severity_override

logger = logging.getLogger(__name__)

# Registry of all checks, in default run order
ALL_CHECKS: Dict[CheckId, PrintCheck] = {
    CheckId.BLEED: BleedTrimCheck(),
    CheckId.FONTS: FontsCheck(),
    CheckId.COLORSPACE: ColorSpaceCheck(),
    CheckId.RESOLUTION: ResolutionCheck(),
    CheckId.PDFX: PdfxComplianceCheck(),
    CheckId.TAC: TacCheck(),
    CheckId.TRANSPARENCY: TransparencyCheck(),
    CheckId.PAGESIZE: PageSizeCheck(),
}


def _execute(check_id: CheckId, document: DocumentModel, options: CheckOptions) -> CheckResult:
    try:
        return ALL_CHECKS[check_id].validate(document, options)
    except Exception as e:  # pylint: disable=broad-except
        raise CheckExecutionError(check_id.value, str(e) or e.__class__.__name__) from e


def run_checks(
    document: DocumentModel,
    options: CheckOptions,
    check_ids: Optional[Sequence[CheckId]] = None,
    severity: Optional[Mapping[CheckId, SeverityOverride]] = None,
) -> List[CheckResult]:
    """Run checks sequentially against one document.

    A check that raises does not stop the others: its result becomes a failing
    result whose summary carries the error message.

    Args:
        document: Loaded document, shared read-only by all checks.
        options: Resolved check options.
        check_ids: Checks to run, in order; None runs every check.
        severity: Per-check overrides applied to each result. Checks set to
            ``off`` are skipped.

    Returns:
        One result per check, in run order, after severity adjustment.

    Examples:
        >>> with load_document("flyer.pdf") as doc:
        ...     results = run_checks(doc, CheckOptions(), [CheckId.FONTS])
        >>> results[0].check
        'Fonts'
    """
    severity = severity or {}
    results: List[CheckResult] = []
    for check_id in check_ids if check_ids is not None else list(CheckId):
        if severity.get(check_id) == SeverityOverride.OFF:
            logger.debug("Check %s disabled by severity override", check_id.value)
            continue
        try:
            result = _execute(check_id, document, options)
        except CheckExecutionError as e:
            logger.exception("Check %s failed on %s", check_id.value, document.name)
            result = CheckResult(
                check=CHECK_NAMES[check_id],
                status=CheckStatus.FAIL,
                summary=f"Error: {e}",
            )
        results.append(apply_severity_override(result, severity.get(check_id)))
    return results


def run_file(
    path: Union[str, Path],
    resolved: ResolvedOptions,
    check_ids: Optional[Sequence[CheckId]] = None,
) -> FileReport:
    """Load one PDF and run the checks against it.

    Args:
        path: PDF file path.
        resolved: Options, severity and default selection for the invocation.
        check_ids: Checks to run; defaults to ``resolved.checks``.

    Returns:
        FileReport with results, or with ``error`` set and no results when the
        file is missing or cannot be loaded.
    """
    path = Path(path)
    ids = list(check_ids) if check_ids is not None else list(resolved.checks)
    try:
        document = load_document(path)
    except FileNotFoundError as e:
        logger.error("%s", e)
        return FileReport(file=path.name, error=str(e))
    except DocumentLoadError as e:
        logger.error("%s", e)
        return FileReport(file=path.name, error=str(e))

    with document:
        results = run_checks(document, resolved.options, ids, resolved.severity)
    return FileReport(file=path.name, results=results)


def run_batch(
    paths: Iterable[Union[str, Path]],
    resolved: ResolvedOptions,
    check_ids: Optional[Sequence[CheckId]] = None,
    progress: bool = False,
) -> BatchReport:
    """Check every file, strictly one at a time.

    Args:
        paths: PDF file paths.
        resolved: Options resolved once for the whole batch.
        check_ids: Checks to run; defaults to ``resolved.checks``.
        progress: Show a tqdm progress bar on stderr.

    Returns:
        BatchReport with one FileReport per path, in input order.
    """
    paths = list(paths)
    report = BatchReport()
    for path in tqdm(paths, desc="Checking PDFs", unit="file", disable=not progress):
        logger.info("Checking %s", path)
        report.files.append(run_file(path, resolved, check_ids))
    return report


__all__ = ["ALL_CHECKS", "run_checks", "run_file", "run_batch"]
