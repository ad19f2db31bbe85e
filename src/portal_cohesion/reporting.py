"""
portal_cohesion - Reporting and output formatting.

Handles:
- AuditReport (everything one run produced)
- Human-readable output
- JSON output
- Exit code policy
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Optional

from .compare import DriftResult
from .extract import IdentifierSet
from .scanner import ScanResult


@dataclass(frozen=True)
class StageError:
    """An unexpected exception caught while running one stage."""
    stage: str
    message: str
    hard: bool


@dataclass
class AuditReport:
    """Collects and formats the results of one audit run."""

    sets: dict[str, IdentifierSet] = field(default_factory=dict)
    results: list[DriftResult] = field(default_factory=list)
    scan: Optional[ScanResult] = None
    scan_dirs: tuple[str, ...] = ("src",)
    max_listed: int = 25
    stage_errors: list[StageError] = field(default_factory=list)

    @property
    def failures(self) -> list[DriftResult]:
        return [r for r in self.results if r.failed]

    @property
    def warnings(self) -> list[DriftResult]:
        return [
            r for r in self.results
            if r.comparison.severity == "WARN" and r.status != "ok"
        ]

    @property
    def passed(self) -> bool:
        return not self.failures and not any(e.hard for e in self.stage_errors)

    @property
    def exit_code(self) -> int:
        return 0 if self.passed else 1

    # =========================================================================
    # Human output
    # =========================================================================

    def render_human(self, errors_only: bool = False) -> str:
        """Render the report as sectioned plain text."""
        out: list[str] = []
        self._render_cohesion(out, errors_only)
        self._render_scan(out)
        if self.stage_errors:
            out.append("")
            out.append("=== Stage Errors ===")
            for e in self.stage_errors:
                out.append(f"{e.stage}: {e.message}")
        self._render_result(out)
        return "\n".join(out).lstrip("\n")

    def _render_cohesion(self, out: list[str], errors_only: bool) -> None:
        out.append("")
        out.append("=== Page/Module Cohesion ===")
        for ident in self.sets.values():
            if not ident.available:
                out.append(f"{ident.label}: unavailable ({ident.source}: {ident.note})")
                continue
            line = f"{ident.label}: {len(ident)} ({ident.source})"
            if ident.note:
                line += f" - {ident.note}"
            out.append(line)

        if not self.results:
            return
        out.append("")

        if all(r.status == "ok" for r in self.results):
            out.append("No cohesion drift found across route/nav/permissions/module IDs.")
            return

        for r in self.results:
            comp = r.comparison
            if errors_only and not comp.is_hard:
                continue
            if r.status == "ok":
                out.append(f"{'OK':<6}{comp.title}: no drift")
            elif r.status == "unavailable":
                out.append(f"{comp.severity:<6}{comp.title}: unavailable "
                           f"({self._unavailable_side(r)})")
            else:
                out.append(f"{comp.severity:<6}{comp.title}: {', '.join(r.missing)}")

    def _unavailable_side(self, r: DriftResult) -> str:
        names = []
        for side in (r.comparison.left, r.comparison.right):
            ident = self.sets.get(side)
            if ident is None or not ident.available:
                names.append(ident.label if ident else side)
        return ", ".join(names) or "unknown source"

    def _render_scan(self, out: list[str]) -> None:
        out.append("")
        out.append("=== Hardcoded Integration Audit ===")
        if self.scan is None:
            out.append("Scan unavailable.")
            return

        where = ", ".join(f"{d}/" for d in self.scan_dirs)
        for missing in self.scan.missing_roots:
            out.append(f"Scan directory not found: {missing}/")

        grouped = self.scan.by_category()
        if not grouped:
            out.append(f"No hardcoded integration endpoints or API key patterns found in {where}.")
        for category, items in grouped.items():
            out.append(f"{category}: {len(items)}")
            for item in items[:self.max_listed]:
                out.append(f"  - {item}")
            if len(items) > self.max_listed:
                out.append(f"  ... +{len(items) - self.max_listed} more")

        if self.scan.unreadable:
            out.append(f"Unreadable files skipped: {len(self.scan.unreadable)}")

    def _render_result(self, out: list[str]) -> None:
        out.append("")
        out.append("=== Result ===")
        n_warn = len(self.warnings)
        if self.passed:
            out.append(f"PASS: all hard cohesion checks passed ({n_warn} warning(s))")
        else:
            n_fail = len(self.failures) + sum(1 for e in self.stage_errors if e.hard)
            out.append(f"FAIL: {n_fail} hard cohesion failure(s), {n_warn} warning(s)")

    # =========================================================================
    # JSON output
    # =========================================================================

    def to_dict(self) -> dict[str, Any]:
        return {
            "sets": {
                name: {
                    "label": s.label,
                    "source": s.source,
                    "available": s.available,
                    "note": s.note,
                    "tokens": s.sorted(),
                }
                for name, s in self.sets.items()
            },
            "comparisons": [
                {
                    "left": r.comparison.left,
                    "right": r.comparison.right,
                    "severity": r.comparison.severity,
                    "title": r.comparison.title,
                    "status": r.status,
                    "missing": list(r.missing),
                }
                for r in self.results
            ],
            "findings": [
                {"category": f.category, "path": f.path, "line": f.line, "text": f.text}
                for f in (self.scan.findings if self.scan else [])
            ],
            "stage_errors": [
                {"stage": e.stage, "message": e.message, "hard": e.hard}
                for e in self.stage_errors
            ],
            "passed": self.passed,
            "exit_code": self.exit_code,
        }

    def render_json(self) -> str:
        """Render the report as JSON."""
        return json.dumps(self.to_dict(), indent=2, default=str)
