"""
portal_cohesion - Configuration cohesion audit for the admin portal.

Cross-references page/module/permission identifiers declared across the
portal's routing, navigation, permissions and module-registry files, and
flags hard-coded integration endpoints and API keys in the source tree.

Usage:
    python -m portal_cohesion [root]
    python -m portal_cohesion --json
    python -m portal_cohesion --errors-only
    python scripts/system_cohesion_audit.py
"""

__version__ = "0.1.0"
