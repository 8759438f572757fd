"""Config file discovery and loading for the ``print-check`` command.

The first config file found walking up from the working directory is used.
Within one directory the candidates are tried in CONFIG_FILES order. JSON
files are parsed as YAML (JSON is a subset of YAML).

Example ``.printcheckrc.yaml``::

    profile: magazine
    minDpi: 350
    pageSize: 210x297
    checks: bleed,fonts,resolution
    severity:
      transparency: off
      fonts: warn
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Union

import yaml

from print_check.core.enums import ColorSpaceMode, OutputFormat, SeverityOverride
from print_check.core.errors import OptionValidationError
from print_check.core.utils import parse_page_size
from print_check.validation.config import PROFILES

logger = logging.getLogger(__name__)

CONFIG_FILES = (
    ".printcheckrc",
    ".printcheckrc.json",
    ".printcheckrc.yaml",
    ".printcheckrc.yml",
    "printcheck.config.yaml",
)


@dataclass
class ConfigFile:
    """A loaded config file.

    Attributes:
        path: Where the file was found.
        options: Validated contents, keyed as written in the file.
    """

    path: Path
    options: Dict[str, Any] = field(default_factory=dict)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _positive_int(value: Any) -> Optional[str]:
    if isinstance(value, int) and not isinstance(value, bool) and value > 0:
        return None
    return "must be a positive integer"


def _non_negative(value: Any) -> Optional[str]:
    return None if _is_number(value) and value >= 0 else "must be a non-negative number"


def _positive(value: Any) -> Optional[str]:
    return None if _is_number(value) and value > 0 else "must be a positive number"


def _choice(*choices: str) -> Callable[[Any], Optional[str]]:
    def check(value: Any) -> Optional[str]:
        return None if value in choices else f"must be one of: {', '.join(choices)}"

    return check


def _page_size(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return "must be a string such as 210x297"
    try:
        parse_page_size(value)
    except ValueError as e:
        return str(e)
    return None


def _checks(value: Any) -> Optional[str]:
    if isinstance(value, str):
        return None
    if isinstance(value, list) and all(isinstance(v, str) for v in value):
        return None
    return "must be a comma-separated string or a list of check names"


def _boolean(value: Any) -> Optional[str]:
    return None if isinstance(value, bool) else "must be true or false"


def _severity(value: Any) -> Optional[str]:
    if not isinstance(value, dict):
        return "must be a mapping of check name to fail, warn or off"
    levels = {s.value for s in SeverityOverride}
    for name, level in value.items():
        # YAML reads a bare `off` as boolean false
        if level is False:
            level = SeverityOverride.OFF.value
            value[name] = level
        if not isinstance(name, str) or level not in levels:
            return f"entry '{name}: {level}' must be one of: fail, warn, off"
    return None


_VALIDATORS: Dict[str, Callable[[Any], Optional[str]]] = {
    "minDpi": _positive_int,
    "min_dpi": _positive_int,
    "colorSpace": _choice(*(m.value for m in ColorSpaceMode)),
    "color_space": _choice(*(m.value for m in ColorSpaceMode)),
    "bleed": _non_negative,
    "bleed_mm": _non_negative,
    "maxTac": _positive,
    "max_tac": _positive,
    "pageSize": _page_size,
    "page_size": _page_size,
    "checks": _checks,
    "verbose": _boolean,
    "format": _choice(*(f.value for f in OutputFormat)),
    "profile": _choice(*PROFILES),
    "severity": _severity,
}


def validate_config(raw: Any, path: Union[str, Path]) -> Dict[str, Any]:
    """Validate parsed config contents.

    Args:
        raw: Parsed file contents; None (an empty file) is an empty config.
        path: Config file path, used in messages.

    Returns:
        The known keys with validated values. Unknown keys are logged and dropped.

    Raises:
        OptionValidationError: If the contents are not a mapping or a value is invalid.
    """
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise OptionValidationError(f"Invalid config file ({path}): expected a mapping at top level")

    options: Dict[str, Any] = {}
    errors = []
    for key, value in raw.items():
        validator = _VALIDATORS.get(key)
        if validator is None:
            logger.warning("Ignoring unknown config key '%s' in %s", key, path)
            continue
        if value is None:
            continue
        problem = validator(value)
        if problem:
            errors.append(f"{key} {problem}")
        else:
            options[key] = value
    if errors:
        raise OptionValidationError(f"Invalid config file ({path}): {'; '.join(errors)}")
    if isinstance(options.get("checks"), list):
        options["checks"] = ",".join(options["checks"])
    return options


def find_config_file(start: Optional[Union[str, Path]] = None) -> Optional[Path]:
    """Find the nearest config file from start (default: cwd) upward."""
    directory = Path(start or Path.cwd()).resolve()
    for candidate_dir in (directory, *directory.parents):
        for name in CONFIG_FILES:
            candidate = candidate_dir / name
            if candidate.is_file():
                return candidate
    return None


def load_config_file(path: Union[str, Path]) -> ConfigFile:
    """Read and validate one config file.

    Raises:
        FileNotFoundError: If the file does not exist.
        OptionValidationError: If the file cannot be parsed or is invalid.
    """
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"Config file not found: {path}")
    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise OptionValidationError(f"Invalid config file ({path}): {e}") from e
    return ConfigFile(path=path, options=validate_config(raw, path))


def load_config(
    explicit: Optional[Union[str, Path]] = None, start: Optional[Union[str, Path]] = None
) -> Optional[ConfigFile]:
    """Load the explicit config file, or discover one.

    Args:
        explicit: Path given with ``--config``; bypasses discovery.
        start: Directory discovery starts from (default: cwd).

    Returns:
        The loaded config, or None when no file was found.
    """
    path = Path(explicit) if explicit else find_config_file(start)
    if path is None:
        return None
    config = load_config_file(path)
    logger.debug("Using config file %s", config.path)
    return config


__all__ = [
    "CONFIG_FILES",
    "ConfigFile",
    "find_config_file",
    "load_config",
    "load_config_file",
    "validate_config",
]
