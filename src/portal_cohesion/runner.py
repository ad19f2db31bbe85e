"""
portal_cohesion - Main runner and CLI.

Orchestrates extraction, comparison and scanning, and renders the report.
main() is the process boundary: it never lets an exception escape, so CI
logs always carry whatever report could be built.

Exit codes:
    0  all hard checks passed
    1  at least one hard check failed, or the audit aborted
    2  bad root or configuration; the audit did not run

CI should treat any non-zero code as a failure.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from . import __version__
from .compare import compare_sets
from .config import AuditConfig, ConfigError, load_config
from .extract import load_identifier_set
from .reporting import AuditReport, StageError
from .scanner import scan_for_patterns

logger = logging.getLogger(__name__)


def run(cfg: AuditConfig) -> AuditReport:
    """Run all checks once and return the report."""
    report = AuditReport(scan_dirs=cfg.scan_dirs, max_listed=cfg.max_listed)

    # Identifier extraction, one file read per source
    for name, spec in cfg.sources.items():
        try:
            report.sets[name] = load_identifier_set(cfg.root, spec)
        except Exception as e:
            logger.exception("Identifier extraction failed for %s", spec.path)
            report.stage_errors.append(
                StageError(f"extraction:{name}", f"{type(e).__name__}: {e}", hard=True)
            )

    # Fixed comparison table
    try:
        report.results = compare_sets(report.sets, cfg.comparisons, cfg.always_allowed)
    except Exception as e:
        logger.exception("Cohesion comparison failed")
        report.stage_errors.append(StageError("cohesion", f"{type(e).__name__}: {e}", hard=True))

    # Secret/endpoint scan (advisory)
    try:
        report.scan = scan_for_patterns(cfg)
    except Exception as e:
        logger.exception("Integration scan failed")
        report.stage_errors.append(StageError("scan", f"{type(e).__name__}: {e}", hard=False))

    return report


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )


def _setup_failure(message: str) -> int:
    """Report a usage/config problem on both streams; the audit never ran."""
    print(f"ERROR: {message}", file=sys.stderr)
    print("=== Result ===")
    print(f"FAIL: audit not run ({message})")
    return 2


def main(argv: Optional[list[str]] = None) -> int:
    """CLI entry point."""
    # Fix unicode output on Windows console
    if sys.platform == "win32":
        for stream in (sys.stdout, sys.stderr):
            if hasattr(stream, "reconfigure"):
                stream.reconfigure(encoding="utf-8", errors="replace")  # type: ignore[union-attr]

    parser = argparse.ArgumentParser(
        description=f"portal_cohesion v{__version__} - page/module/permission cohesion audit"
    )
    parser.add_argument(
        "root",
        nargs="?",
        default=".",
        help="Project root to audit (default: current directory)",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="YAML config file (default: <root>/cohesion_audit.yaml if present)",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output as JSON",
    )
    parser.add_argument(
        "--errors-only",
        action="store_true",
        help="Only list hard-failure comparisons",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    args = parser.parse_args(argv)

    _configure_logging(args.verbose)

    root = Path(args.root).resolve()
    if not root.is_dir():
        return _setup_failure(f"root directory not found: {root}")

    try:
        cfg = load_config(root, args.config)
    except ConfigError as e:
        return _setup_failure(str(e))
    except Exception as e:
        logger.exception("Failed to load configuration")
        return _setup_failure(f"{type(e).__name__}: {e}")
    cfg.json_output = args.json
    cfg.errors_only = args.errors_only

    try:
        report = run(cfg)
    except Exception:
        logger.exception("Audit aborted")
        return 1

    try:
        if cfg.json_output:
            output = report.render_json()
        else:
            output = report.render_human(errors_only=cfg.errors_only)
    except Exception:
        logger.exception("Failed to render report")
        return 1

    print(output)
    return report.exit_code


if __name__ == "__main__":
    raise SystemExit(main())
