"""
portal_cohesion - Source tree scanning.

Handles:
- Directory walking with exclusions
- Source file loading
- Line-level secret/endpoint pattern matching

Matches are a heuristic: false positives and false negatives are expected,
and findings are advisory only.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Iterator

from .config import AuditConfig, ScanPattern

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SourceFile:
    """A loaded source file with content."""
    path: Path
    lines: list[str]


@dataclass(frozen=True)
class PatternFinding:
    """One line-level pattern hit."""
    category: str
    path: str
    line: int
    text: str

    def __str__(self) -> str:
        return f"{self.path}:{self.line} :: {self.text}"


@dataclass
class ScanResult:
    findings: list[PatternFinding] = field(default_factory=list)
    missing_roots: list[str] = field(default_factory=list)
    unreadable: list[str] = field(default_factory=list)
    files_scanned: int = 0

    def by_category(self) -> dict[str, list[PatternFinding]]:
        grouped: dict[str, list[PatternFinding]] = {}
        for f in self.findings:
            grouped.setdefault(f.category, []).append(f)
        return {k: grouped[k] for k in sorted(grouped)}


def load_source(path: Path) -> SourceFile:
    """Load a single source file."""
    text = path.read_text(encoding="utf-8", errors="replace")
    return SourceFile(path=path, lines=text.splitlines())


def iter_source_files(cfg: AuditConfig, top: Path) -> Iterator[Path]:
    """
    Yield source files under *top* in sorted order.

    Excluded directories are pruned before descending, so nothing under
    node_modules or .git is ever visited.
    """
    exts = set(cfg.source_exts)
    excluded = set(cfg.exclude_dirs)
    for dirpath, dirnames, filenames in os.walk(top):
        dirnames[:] = sorted(d for d in dirnames if d not in excluded)
        for name in sorted(filenames):
            if Path(name).suffix in exts:
                yield Path(dirpath) / name


def scan_lines(
    lines: Iterable[str],
    patterns: Iterable[ScanPattern],
    rel_path: str,
    truncate_at: int = 220,
) -> list[PatternFinding]:
    """Test every line against every pattern; one finding per (line, category)."""
    pats = tuple(patterns)
    findings: list[PatternFinding] = []
    for line_no, line in enumerate(lines, start=1):
        for pat in pats:
            if pat.regex.search(line):
                findings.append(PatternFinding(
                    category=pat.category,
                    path=rel_path,
                    line=line_no,
                    text=line.strip()[:truncate_at],
                ))
    return findings


def _relative(path: Path, root: Path) -> str:
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        return path.as_posix()


def scan_for_patterns(cfg: AuditConfig) -> ScanResult:
    """Scan every configured directory under the root once."""
    result = ScanResult()

    for scan_dir in cfg.scan_dirs:
        top = cfg.root / scan_dir
        if not top.is_dir():
            logger.warning("Scan directory not found: %s", scan_dir)
            result.missing_roots.append(scan_dir)
            continue

        for path in iter_source_files(cfg, top):
            rel = _relative(path, cfg.root)
            try:
                src = load_source(path)
            except OSError as e:
                logger.warning("Skipping unreadable file %s: %s", rel, e)
                result.unreadable.append(rel)
                continue
            result.files_scanned += 1
            result.findings.extend(
                scan_lines(src.lines, cfg.scan_patterns, rel, cfg.truncate_at)
            )

    logger.debug(
        "Scanned %d files, %d findings", result.files_scanned, len(result.findings)
    )
    return result
