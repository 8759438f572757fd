import argparse
import logging
from pathlib import Path
from typing import Any, Dict, Optional

import colorlog

from print_check import __version__ as _PACKAGE_VERSION
from print_check.core.enums import CheckId, ColorSpaceMode, OutputFormat
from print_check.core.errors import OptionValidationError
from print_check.interfaces.cli.config_file import load_config
from print_check.validation.config import DEFAULT_PROFILE, PROFILES
from print_check.validation.options import resolve
from print_check.validation.registry import run_batch


def setup_logging(
    verbose: bool = False, warnings_only: bool = False, errors_only: bool = False
) -> None:
    logger = logging.getLogger()
    for h in list(logger.handlers):
        logger.removeHandler(h)
    log_format = (
        "%(asctime)s:%(levelname)s:%(name)s in %(filename)s:%(funcName)s:%(lineno)d: %(message)s"
    )
    log_colors = {
        "DEBUG": "cyan",
        "INFO": "green",
        "WARNING": "yellow",
        "ERROR": "red",
        "CRITICAL": "bold_red",
    }
    stream_handler = colorlog.StreamHandler()
    formatter = colorlog.ColoredFormatter(f"%(log_color)s{log_format}", log_colors=log_colors)
    stream_handler.setFormatter(formatter)
    logger.addHandler(stream_handler)
    if errors_only:
        logger.setLevel(logging.ERROR)
    elif warnings_only:
        logger.setLevel(logging.WARNING)
    else:
        logger.setLevel(logging.DEBUG if verbose else logging.INFO)


def _cli_values(args: argparse.Namespace) -> Dict[str, Any]:
    """Explicit command-line values; options not given stay None."""
    return {
        "min_dpi": getattr(args, "min_dpi", None),
        "color_space": getattr(args, "color_space", None),
        "bleed_mm": getattr(args, "bleed", None),
        "max_tac": getattr(args, "max_tac", None),
        "page_size": getattr(args, "page_size", None),
        "checks": getattr(args, "checks", None),
        "severity": getattr(args, "severity", None),
    }


def cmd_check(args: argparse.Namespace) -> int:
    """Check one or more PDF files for print readiness.

    Options are resolved once (profile, then config file, then command line)
    and applied to every file. A missing or unreadable file is reported and
    the remaining files are still checked.

    Returns:
        0 if no file has a failing check (after severity overrides)
        1 if any check failed or any file could not be checked
        2 if the configuration is invalid (no file is processed)
    """
    config_options: Dict[str, Any] = {}
    if not getattr(args, "no_config", False):
        try:
            config = load_config(getattr(args, "config", None))
        except (OptionValidationError, FileNotFoundError) as e:
            logging.error("%s", e)
            return 2
        if config is not None:
            logging.info("Using config file %s", config.path)
            config_options = config.options

    try:
        resolved = resolve(getattr(args, "profile", None), config_options, _cli_values(args))
    except OptionValidationError as e:
        logging.error("%s", e)
        return 2

    output_format = OutputFormat(
        getattr(args, "format", None) or config_options.get("format") or OutputFormat.TEXT.value
    )
    show_details = bool(getattr(args, "details", False) or config_options.get("verbose", False))

    files = [Path(f) for f in args.files]
    report = run_batch(files, resolved, progress=len(files) > 1)

    if output_format == OutputFormat.JSON:
        print(report.to_json())
    elif output_format == OutputFormat.MARKDOWN:
        print(report.to_markdown())
    else:
        print(report.to_console(show_details), end="")

    report_json = getattr(args, "report_json", None)
    if report_json:
        out_path = Path(report_json)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_text(report.to_json(), encoding="utf-8")
        logging.info("JSON report written to %s", out_path)

    if report.has_failures():
        totals = report.totals()
        logging.debug(
            "Failures found: %d failed checks, %d unreadable files",
            totals["failed"],
            totals["errors"],
        )
        return 1
    return 0


def cmd_profiles(args: argparse.Namespace) -> int:
    """List built-in profiles."""
    for name, values in PROFILES.items():
        marker = " (default)" if name == DEFAULT_PROFILE else ""
        print(
            f"{name}{marker}: min DPI {values['min_dpi']}, color space {values['color_space']}, "
            f"bleed {values['bleed_mm']:g}mm, max TAC {values['max_tac']:g}%"
        )
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="print-check",
        description=f"Print-readiness checks for PDF files (v{_PACKAGE_VERSION})",
    )
    p.add_argument("--verbose", action="store_true", help="Enable verbose logging")
    p.add_argument(
        "--warnings-only",
        action="store_true",
        help="Show only warnings and errors (overrides --verbose)",
    )
    p.add_argument(
        "--errors-only",
        action="store_true",
        help="Show only errors (overrides --warnings-only and --verbose)",
    )

    sub = p.add_subparsers(dest="command", required=True)

    p_check = sub.add_parser("check", help="Check one or more PDF files")
    p_check.add_argument("files", nargs="+", metavar="FILE", help="PDF file(s) to check")
    p_check.add_argument("--min-dpi", type=int, default=None, help="Minimum acceptable DPI")
    p_check.add_argument(
        "--color-space",
        choices=[m.value for m in ColorSpaceMode],
        default=None,
        help="Expected color space: cmyk | any",
    )
    p_check.add_argument("--bleed", type=float, default=None, help="Required bleed in mm")
    p_check.add_argument(
        "--max-tac", type=float, default=None, help="Maximum total ink coverage in percent"
    )
    p_check.add_argument(
        "--page-size", default=None, help="Expected page size in mm as WxH (e.g. 210x297)"
    )
    p_check.add_argument(
        "--checks",
        default=None,
        help=f"Comma-separated checks to run, or 'all' ({', '.join(c.value for c in CheckId)})",
    )
    p_check.add_argument(
        "--severity",
        default=None,
        help="Per-check severity overrides, e.g. fonts:warn,transparency:off",
    )
    p_check.add_argument(
        "--profile",
        choices=list(PROFILES),
        default=None,
        help=f"Option preset (default: {DEFAULT_PROFILE})",
    )
    p_check.add_argument(
        "--format",
        choices=[f.value for f in OutputFormat],
        default=None,
        help="Output format: text | json | markdown",
    )
    p_check.add_argument(
        "--details", action="store_true", help="Show detailed per-page results"
    )
    p_check.add_argument(
        "--config", default=None, help="Config file to use instead of discovering one"
    )
    p_check.add_argument("--no-config", action="store_true", help="Ignore config files")
    p_check.add_argument(
        "--report-json", default=None, help="Also write the JSON report to this path"
    )
    p_check.set_defaults(func=cmd_check)

    p_profiles = sub.add_parser("profiles", help="List built-in profiles")
    p_profiles.set_defaults(func=cmd_profiles)

    return p


def main(argv: Optional[list] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(
        verbose=bool(args.verbose),
        warnings_only=bool(getattr(args, "warnings_only", False)),
        errors_only=bool(getattr(args, "errors_only", False)),
    )
    return args.func(args)


if __name__ == "__main__":
    raise SystemExit(main())
