"""Options resolution.

Options are layered per field with ascending precedence:

1. the selected profile (``standard`` unless chosen otherwise)
2. the config file
3. explicit command-line values

``OptionsBuilder`` applies the layers and records where each field's final
value came from. Severity maps from the config file and the command line are
merged per check, command line winning. Checks whose severity resolves to
``off`` are removed from the run at selection time.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from print_check.core.enums import CheckId, ColorSpaceMode, SeverityOverride
from print_check.core.errors import OptionValidationError
from print_check.core.utils import parse_page_size
from .config import DEFAULT_PROFILE, PROFILES, get_profile

logger = logging.getLogger(__name__)

OPTION_FIELDS = ("min_dpi", "color_space", "bleed_mm", "max_tac", "page_size")

# Accepted spellings for each option field (config files use camelCase)
_FIELD_ALIASES: Dict[str, str] = {
    "minDpi": "min_dpi",
    "min_dpi": "min_dpi",
    "colorSpace": "color_space",
    "color_space": "color_space",
    "bleed": "bleed_mm",
    "bleedMm": "bleed_mm",
    "bleed_mm": "bleed_mm",
    "maxTac": "max_tac",
    "max_tac": "max_tac",
    "pageSize": "page_size",
    "page_size": "page_size",
}

SeveritySpec = Union[str, Mapping[str, Any], None]


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


@dataclass(frozen=True)
class CheckOptions:
    """Canonical, immutable options consumed by every check.

    Attributes:
        min_dpi: Minimum effective image resolution.
        color_space: "cmyk" to flag RGB content, "any" to skip the color check.
        bleed_mm: Required bleed on every side of the TrimBox, in millimetres.
        max_tac: Total ink coverage limit in percent.
        page_size: Expected trimmed page size ``WxH`` in millimetres, or None.

    Raises:
        OptionValidationError: If any field is out of range.
    """

    min_dpi: int = 300
    color_space: ColorSpaceMode = ColorSpaceMode.CMYK
    bleed_mm: float = 3.0
    max_tac: float = 300.0
    page_size: Optional[str] = None

    def __post_init__(self) -> None:
        if not _is_number(self.min_dpi) or int(self.min_dpi) != self.min_dpi or self.min_dpi <= 0:
            raise OptionValidationError(
                f"Invalid min_dpi: {self.min_dpi!r}. Must be a positive integer."
            )
        object.__setattr__(self, "min_dpi", int(self.min_dpi))

        try:
            object.__setattr__(self, "color_space", ColorSpaceMode(self.color_space))
        except ValueError as e:
            raise OptionValidationError(
                f"Invalid color_space: {self.color_space!r}. Must be one of: cmyk, any."
            ) from e

        if not _is_number(self.bleed_mm) or self.bleed_mm < 0:
            raise OptionValidationError(
                f"Invalid bleed_mm: {self.bleed_mm!r}. Must be a non-negative number."
            )
        object.__setattr__(self, "bleed_mm", float(self.bleed_mm))

        if not _is_number(self.max_tac) or self.max_tac <= 0:
            raise OptionValidationError(
                f"Invalid max_tac: {self.max_tac!r}. Must be a positive number."
            )
        object.__setattr__(self, "max_tac", float(self.max_tac))

        if self.page_size is not None:
            try:
                parse_page_size(str(self.page_size))
            except ValueError as e:
                raise OptionValidationError(str(e)) from e
            object.__setattr__(self, "page_size", str(self.page_size).strip() or None)

    @property
    def expected_page_size(self) -> Optional[Tuple[float, float]]:
        """``(width_mm, height_mm)`` parsed from page_size, or None."""
        return parse_page_size(self.page_size)


class OptionsBuilder:
    """Layer profile, config and CLI values into CheckOptions.

    Args:
        profile_name: Built-in profile seeding every field; None selects the default.

    Raises:
        OptionValidationError: If the profile is unknown.

    Examples:
        >>> builder = OptionsBuilder("magazine")
        >>> _ = builder.apply_config({"minDpi": 200}).apply_cli({"min_dpi": 350})
        >>> builder.build().min_dpi
        350
        >>> builder.provenance["min_dpi"], builder.provenance["bleed_mm"]
        ('cli', 'profile')
    """

    def __init__(self, profile_name: Optional[str] = None):
        self.profile = profile_name or DEFAULT_PROFILE
        try:
            self._values: Dict[str, Any] = get_profile(self.profile)
        except KeyError as e:
            raise OptionValidationError(
                f"Unknown profile '{self.profile}'. Available: {', '.join(PROFILES)}"
            ) from e
        self._provenance: Dict[str, str] = {name: "profile" for name in OPTION_FIELDS}

    @property
    def provenance(self) -> Dict[str, str]:
        return dict(self._provenance)

    def set(self, name: str, value: Any, source: str) -> "OptionsBuilder":
        """Set one field unless value is None."""
        field_name = _FIELD_ALIASES.get(name)
        if field_name is None:
            raise OptionValidationError(f"Unknown option: {name}")
        if value is not None:
            self._values[field_name] = value
            self._provenance[field_name] = source
        return self

    def _apply(self, mapping: Optional[Mapping[str, Any]], source: str) -> "OptionsBuilder":
        for key, value in (mapping or {}).items():
            if key in _FIELD_ALIASES:
                self.set(key, value, source)
        return self

    def apply_config(self, mapping: Optional[Mapping[str, Any]]) -> "OptionsBuilder":
        """Apply option values from a config file; non-option keys are ignored."""
        return self._apply(mapping, "config")

    def apply_cli(self, mapping: Optional[Mapping[str, Any]]) -> "OptionsBuilder":
        """Apply explicit command-line values; None means not given."""
        return self._apply(mapping, "cli")

    def build(self) -> CheckOptions:
        return CheckOptions(**{name: self._values[name] for name in OPTION_FIELDS})


@dataclass(frozen=True)
class ResolvedOptions:
    """Everything resolved once per invocation.

    Attributes:
        options: Canonical check options.
        severity: Override per check; checks without an entry keep ``fail``.
        provenance: Source of each option field: "profile", "config" or "cli".
        profile: Name of the profile the options were seeded from.
        checks: Checks to run, in run order, with ``off`` checks removed.
    """

    options: CheckOptions
    severity: Mapping[CheckId, SeverityOverride] = field(default_factory=dict)
    provenance: Mapping[str, str] = field(default_factory=dict)
    profile: str = DEFAULT_PROFILE
    checks: Tuple[CheckId, ...] = tuple(CheckId)

    def severity_for(self, check_id: CheckId) -> SeverityOverride:
        return self.severity.get(check_id, SeverityOverride.FAIL)


def parse_severity_arg(value: Optional[str]) -> Dict[str, str]:
    """Parse a ``check:level`` list such as ``"fonts:warn,transparency:off"``.

    Args:
        value: Comma-separated entries; None or empty yields an empty mapping.

    Returns:
        Mapping of check name to level, in input order.

    Raises:
        OptionValidationError: If an entry is not of the form ``check:level``.
    """
    result: Dict[str, str] = {}
    if not value:
        return result
    for entry in value.split(","):
        entry = entry.strip()
        if not entry:
            continue
        name, sep, level = entry.partition(":")
        if not sep or not name.strip() or not level.strip():
            raise OptionValidationError(
                f"Invalid severity entry '{entry}'. Expected check:level, e.g. fonts:warn"
            )
        result[name.strip().lower()] = level.strip().lower()
    return result


def _normalize_severity(spec: SeveritySpec, source: str) -> Dict[CheckId, SeverityOverride]:
    if spec is None:
        return {}
    if isinstance(spec, str):
        spec = parse_severity_arg(spec)
    if not isinstance(spec, Mapping):
        raise OptionValidationError(f"Invalid severity in {source}: expected a mapping")

    result: Dict[CheckId, SeverityOverride] = {}
    for name, level in spec.items():
        try:
            override = SeverityOverride(str(level).strip().lower())
        except ValueError as e:
            raise OptionValidationError(
                f"Invalid severity '{level}' for check '{name}' in {source}. "
                f"Must be one of: fail, warn, off."
            ) from e
        try:
            check_id = CheckId(str(name).strip().lower())
        except ValueError:
            logger.warning('Unknown check in severity (%s): "%s" (ignored)', source, name)
            continue
        result[check_id] = override
    return result


def merge_severity(
    config_map: SeveritySpec = None, cli_map: SeveritySpec = None
) -> Dict[CheckId, SeverityOverride]:
    """Merge config and CLI severity maps, CLI entries winning per check.

    Args:
        config_map: Mapping (or ``check:level`` string) from the config file.
        cli_map: Mapping (or ``check:level`` string) from the command line.

    Returns:
        Merged mapping; checks absent from both keep the default ``fail``.

    Raises:
        OptionValidationError: If a level is not fail, warn or off.

    Examples:
        >>> merge_severity({"fonts": "off", "tac": "warn"}, "fonts:warn")
        {<CheckId.FONTS: 'fonts'>: <SeverityOverride.WARN: 'warn'>, <CheckId.TAC: 'tac'>: <SeverityOverride.WARN: 'warn'>}
    """
    merged = _normalize_severity(config_map, "config")
    merged.update(_normalize_severity(cli_map, "command line"))
    return merged


def select_checks(
    selection: Union[str, Iterable[str], None],
    severity: Optional[Mapping[CheckId, SeverityOverride]] = None,
) -> List[CheckId]:
    """Turn a ``--checks`` selection into the ordered list of checks to run.

    Args:
        selection: "all", None, a comma-separated string or an iterable of names.
        severity: Resolved severity map; checks set to ``off`` are excluded.

    Returns:
        Selected checks in selection order ("all" uses the default run order).

    Raises:
        OptionValidationError: If nothing is left to run.
    """
    if selection is None or (isinstance(selection, str) and selection.strip().lower() == "all"):
        names: List[str] = [c.value for c in CheckId]
    elif isinstance(selection, str):
        names = [s.strip() for s in selection.split(",") if s.strip()]
    else:
        names = [str(s).strip() for s in selection if str(s).strip()]

    selected: List[CheckId] = []
    for name in names:
        try:
            check_id = CheckId(name.lower())
        except ValueError:
            logger.warning('Unknown check: "%s" (skipping)', name)
            continue
        if check_id in selected:
            continue
        if (severity or {}).get(check_id) == SeverityOverride.OFF:
            logger.debug("Check %s disabled by severity override", check_id.value)
            continue
        selected.append(check_id)

    if not selected:
        raise OptionValidationError("No valid checks to run.")
    return selected


def resolve(
    profile: Optional[str] = None,
    config: Optional[Mapping[str, Any]] = None,
    cli: Optional[Mapping[str, Any]] = None,
) -> ResolvedOptions:
    """Resolve options, severity and check selection for one invocation.

    Args:
        profile: Profile named on the command line, if any.
        config: Parsed config file contents (see ``interfaces.cli.config_file``).
        cli: Command-line values keyed by option field name, plus optional
            ``checks`` and ``severity`` entries. None values mean "not given".

    Returns:
        ResolvedOptions for the whole batch.

    Raises:
        OptionValidationError: If the merged configuration is invalid.
    """
    config = config or {}
    cli = cli or {}

    profile_name = profile or config.get("profile") or DEFAULT_PROFILE
    builder = OptionsBuilder(profile_name)
    builder.apply_config(config).apply_cli(cli)
    options = builder.build()

    severity = merge_severity(config.get("severity"), cli.get("severity"))
    selection = cli.get("checks") or config.get("checks")
    checks = select_checks(selection, severity)

    logger.debug(
        "Resolved options (profile %s): %s; provenance %s", profile_name, options, builder.provenance
    )
    return ResolvedOptions(
        options=options,
        severity=severity,
        provenance=builder.provenance,
        profile=profile_name,
        checks=tuple(checks),
    )


__all__ = [
    "CheckOptions",
    "OptionsBuilder",
    "ResolvedOptions",
    "OPTION_FIELDS",
    "parse_severity_arg",
    "merge_severity",
    "select_checks",
    "resolve",
]
