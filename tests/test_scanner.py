"""
Secret/endpoint scanner tests.
"""
from __future__ import annotations

from pathlib import Path

from portal_cohesion.config import AuditConfig, default_scan_patterns
from portal_cohesion.scanner import iter_source_files, scan_for_patterns, scan_lines


def _write(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


class TestScanForPatterns:

    def test_single_api_key_finding(self, tmp_path: Path) -> None:
        _write(tmp_path / "src" / "config.js",
               'import x from "y";\nconst key = "AIzaSyABCDEFGHIJKLMNOPQRSTUVWXYZ123456"\n')
        result = scan_for_patterns(AuditConfig(root=tmp_path))

        assert len(result.findings) == 1
        [finding] = result.findings
        assert finding.category == "google_api_key"
        assert finding.path == "src/config.js"
        assert finding.line == 2
        assert finding.text == 'const key = "AIzaSyABCDEFGHIJKLMNOPQRSTUVWXYZ123456"'

    def test_endpoint_categories(self, tmp_path: Path) -> None:
        _write(tmp_path / "src" / "api.ts", "\n".join([
            "const SHEET = 'https://script.google.com/macros/s/abc123/exec';",
            "const FN = 'https://us-central1-proj.cloudfunctions.net/renderTemplate';",
            "const OK = 'https://example.com';",
        ]))
        result = scan_for_patterns(AuditConfig(root=tmp_path))
        grouped = result.by_category()
        assert list(grouped) == ["firebase_cloudfunctions_url", "google_apps_script_url"]
        assert grouped["google_apps_script_url"][0].line == 1
        assert grouped["firebase_cloudfunctions_url"][0].line == 2

    def test_excluded_directories_and_extensions(self, tmp_path: Path) -> None:
        key = "AIzaSyABCDEFGHIJKLMNOPQRSTUVWXYZ123456"
        _write(tmp_path / "src" / "node_modules" / "lib" / "index.js", key)
        _write(tmp_path / "src" / "build" / "bundle.js", key)
        _write(tmp_path / "src" / "notes.md", key)
        _write(tmp_path / "src" / "app.jsx", key)

        cfg = AuditConfig(root=tmp_path)
        files = [p.relative_to(tmp_path).as_posix() for p in iter_source_files(cfg, tmp_path / "src")]
        assert files == ["src/app.jsx"]

        result = scan_for_patterns(cfg)
        assert [f.path for f in result.findings] == ["src/app.jsx"]
        assert result.files_scanned == 1

    def test_missing_scan_root(self, tmp_path: Path) -> None:
        result = scan_for_patterns(AuditConfig(root=tmp_path))
        assert result.missing_roots == ["src"]
        assert result.findings == []


class TestScanLines:

    def test_long_line_is_truncated_but_reported(self) -> None:
        line = "  const key = 'AIzaSyABCDEFGHIJKLMNOPQRSTUVWXYZ123456'; " + "x" * 500
        [finding] = scan_lines(["// header", line], default_scan_patterns(), "src/a.js", truncate_at=220)
        assert finding.category == "google_api_key"
        assert finding.path == "src/a.js"
        assert finding.line == 2
        assert len(finding.text) == 220
        assert finding.text == line.strip()[:220]

    def test_one_finding_per_line_and_category(self) -> None:
        line = "fetch('https://a.cloudfunctions.net/x', 'https://b.cloudfunctions.net/y')"
        findings = scan_lines([line], default_scan_patterns(), "src/a.js")
        assert len(findings) == 1
