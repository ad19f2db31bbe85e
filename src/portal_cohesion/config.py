"""
portal_cohesion - Configuration.

Runtime configuration for the audit. Defaults come from patterns.py;
an optional YAML file can override any of them.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Optional

import yaml

from . import patterns

logger = logging.getLogger(__name__)

# Looked up relative to the audited root when --config is not given
CONFIG_FILENAME = "cohesion_audit.yaml"

SEVERITIES = ("ERROR", "WARN", "INFO")
EXTRACTION_KINDS = ("object", "attribute")
KEY_STYLES = ("quoted", "bare", "computed")


class ConfigError(ValueError):
    """Raised when a configuration file cannot be used."""


@dataclass(frozen=True)
class SourceSpec:
    """Where one identifier set comes from."""
    name: str
    label: str
    path: str
    kind: str = "object"
    target: str = ""
    key_style: str = "quoted"


@dataclass(frozen=True)
class Comparison:
    """One fixed, one-directional check: tokens of left missing from right."""
    left: str
    right: str
    severity: str
    title: str
    allowed: frozenset[str] = frozenset()

    @property
    def is_hard(self) -> bool:
        return self.severity == "ERROR"


@dataclass(frozen=True)
class ScanPattern:
    category: str
    regex: re.Pattern[str]


@dataclass
class AuditConfig:
    """Runtime configuration for one audit run."""

    root: Path

    # Scanner settings
    scan_dirs: tuple[str, ...] = ("src",)
    source_exts: tuple[str, ...] = (".js", ".jsx", ".ts", ".tsx")
    exclude_dirs: tuple[str, ...] = (
        ".git",
        "node_modules",
        "build",
        "dist",
    )
    truncate_at: int = 220
    max_listed: int = 25

    # Cohesion settings
    always_allowed: frozenset[str] = patterns.ALWAYS_ALLOWED
    # None means "use the tables in patterns.py"
    sources: Optional[dict[str, SourceSpec]] = None
    comparisons: Optional[tuple[Comparison, ...]] = None
    scan_patterns: Optional[tuple[ScanPattern, ...]] = None

    # Output settings
    json_output: bool = False
    errors_only: bool = False

    # Set when a YAML file was applied
    config_path: Optional[Path] = None

    def __post_init__(self) -> None:
        if self.sources is None:
            self.sources = default_sources()
        if self.comparisons is None:
            self.comparisons = default_comparisons()
        if self.scan_patterns is None:
            self.scan_patterns = default_scan_patterns()


# =============================================================================
# Defaults from pattern tables
# =============================================================================

def default_sources() -> dict[str, SourceSpec]:
    return {
        name: SourceSpec(name, label, path, kind, target, key_style)
        for name, (label, path, kind, target, key_style)
        in patterns.IDENTIFIER_SOURCES.items()
    }


def default_comparisons() -> tuple[Comparison, ...]:
    return tuple(
        Comparison(left, right, severity, title, frozenset(allowed))
        for left, right, severity, title, allowed in patterns.COMPARISONS
    )


def default_scan_patterns() -> tuple[ScanPattern, ...]:
    return tuple(
        ScanPattern(category, re.compile(regex))
        for category, regex in patterns.SECRET_PATTERNS
    )


# =============================================================================
# YAML overrides
# =============================================================================

def load_config(root: Path, config_path: Optional[Path] = None) -> AuditConfig:
    """
    Build the configuration for auditing *root*.

    Uses *config_path* when given (it must exist), otherwise
    ``<root>/cohesion_audit.yaml`` when present, otherwise the defaults.

    Raises:
        ConfigError: If the file is missing, not valid YAML, or describes
            an unusable configuration.
    """
    cfg = AuditConfig(root=root)

    if config_path is None:
        candidate = root / CONFIG_FILENAME
        if not candidate.is_file():
            logger.debug("No %s under %s, using defaults", CONFIG_FILENAME, root)
            return cfg
        config_path = candidate
    elif not config_path.is_file():
        raise ConfigError(f"Config file not found: {config_path}")

    try:
        with config_path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Failed to load config from {config_path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Config must be a YAML mapping, got {type(data).__name__}")

    cfg = apply_overrides(cfg, data)
    cfg.config_path = config_path
    logger.info("Loaded configuration from %s", config_path)
    return cfg


def apply_overrides(cfg: AuditConfig, data: dict[str, Any]) -> AuditConfig:
    """Return a copy of *cfg* with the YAML mapping *data* applied."""
    unknown = set(data) - {"scan", "always_allowed", "sources", "comparisons", "patterns"}
    if unknown:
        raise ConfigError(f"Unknown config keys: {', '.join(sorted(unknown))}")

    changes: dict[str, Any] = {}

    scan = data.get("scan") or {}
    if not isinstance(scan, dict):
        raise ConfigError("'scan' must be a mapping")
    if "dirs" in scan:
        changes["scan_dirs"] = _str_tuple(scan["dirs"], "scan.dirs")
    if "extensions" in scan:
        changes["source_exts"] = _str_tuple(scan["extensions"], "scan.extensions")
    if "exclude_dirs" in scan:
        changes["exclude_dirs"] = _str_tuple(scan["exclude_dirs"], "scan.exclude_dirs")
    for key in ("truncate_at", "max_listed"):
        if key in scan:
            value = scan[key]
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise ConfigError(f"scan.{key} must be a positive integer")
            changes[key] = value

    if "always_allowed" in data:
        changes["always_allowed"] = frozenset(
            _str_tuple(data["always_allowed"], "always_allowed")
        )

    raw_sources = data.get("sources") or {}
    if not isinstance(raw_sources, dict):
        raise ConfigError("'sources' must be a mapping")
    sources = dict(cfg.sources)
    for name, raw in raw_sources.items():
        sources[str(name)] = _parse_source(str(name), raw, sources.get(str(name)))
    changes["sources"] = sources

    if "comparisons" in data:
        raw_comparisons = _list_of(data["comparisons"], "comparisons")
        changes["comparisons"] = tuple(
            _parse_comparison(i, raw) for i, raw in enumerate(raw_comparisons)
        )

    if "patterns" in data:
        raw_patterns = _list_of(data["patterns"], "patterns")
        changes["scan_patterns"] = tuple(
            _parse_pattern(i, raw) for i, raw in enumerate(raw_patterns)
        )

    new_cfg = replace(cfg, **changes)
    _validate(new_cfg)
    return new_cfg


def _list_of(value: Any, where: str) -> list[Any]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ConfigError(f"'{where}' must be a list")
    return value


def _str_tuple(value: Any, where: str) -> tuple[str, ...]:
    if isinstance(value, str) or not isinstance(value, (list, tuple)):
        raise ConfigError(f"{where} must be a list of strings")
    if not all(isinstance(v, str) for v in value):
        raise ConfigError(f"{where} must be a list of strings")
    return tuple(value)


def _parse_source(name: str, raw: Any, base: Optional[SourceSpec]) -> SourceSpec:
    if not isinstance(raw, dict):
        raise ConfigError(f"sources.{name} must be a mapping")
    if base is None:
        if "path" not in raw or "target" not in raw:
            raise ConfigError(f"sources.{name} needs at least 'path' and 'target'")
        base = SourceSpec(name=name, label=name, path="")
    allowed_keys = {"label", "path", "kind", "target", "key_style"}
    unknown = set(raw) - allowed_keys
    if unknown:
        raise ConfigError(f"sources.{name}: unknown keys {', '.join(sorted(unknown))}")
    spec = replace(base, **{k: str(v) for k, v in raw.items()})
    if spec.kind not in EXTRACTION_KINDS:
        raise ConfigError(f"sources.{name}.kind must be one of {EXTRACTION_KINDS}")
    if spec.kind == "object" and spec.key_style not in KEY_STYLES:
        raise ConfigError(f"sources.{name}.key_style must be one of {KEY_STYLES}")
    return spec


def _parse_comparison(index: int, raw: Any) -> Comparison:
    if not isinstance(raw, dict) or "left" not in raw or "right" not in raw:
        raise ConfigError(f"comparisons[{index}] needs 'left' and 'right'")
    severity = str(raw.get("severity", "ERROR")).upper()
    if severity not in SEVERITIES:
        raise ConfigError(f"comparisons[{index}].severity must be one of {SEVERITIES}")
    left, right = str(raw["left"]), str(raw["right"])
    title = str(raw.get("title") or f"{left} IDs missing in {right}")
    allowed = _str_tuple(raw.get("allowed", []), f"comparisons[{index}].allowed")
    return Comparison(left, right, severity, title, frozenset(allowed))


def _parse_pattern(index: int, raw: Any) -> ScanPattern:
    if not isinstance(raw, dict) or "category" not in raw or "regex" not in raw:
        raise ConfigError(f"patterns[{index}] needs 'category' and 'regex'")
    try:
        regex = re.compile(str(raw["regex"]))
    except re.error as e:
        raise ConfigError(f"patterns[{index}].regex is invalid: {e}") from e
    return ScanPattern(str(raw["category"]), regex)


def _validate(cfg: AuditConfig) -> None:
    for comp in cfg.comparisons:
        for side in (comp.left, comp.right):
            if side not in cfg.sources:
                raise ConfigError(
                    f"Comparison '{comp.title}' references unknown source '{side}'"
                )
