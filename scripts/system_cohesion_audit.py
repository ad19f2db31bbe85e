#!/usr/bin/env python3
"""
System Cohesion Audit

Read-only audit of the portal source tree this script lives in:
- Compares page/module IDs across routing, nav, permissions and the module registry
- Reports hardcoded integration endpoints and Google-style API keys

Takes no arguments; extra flags are passed through to the CLI.

Usage:
    python scripts/system_cohesion_audit.py
    python scripts/system_cohesion_audit.py --json
"""

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent

# Add src to path
sys.path.insert(0, str(ROOT / "src"))

from portal_cohesion.runner import main

if __name__ == "__main__":
    raise SystemExit(main([str(ROOT), *sys.argv[1:]]))
