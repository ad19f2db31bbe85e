"""
portal_cohesion - Pattern definitions.

This module contains PURE DATA: identifier sources, comparison pairs,
exception tokens and secret/endpoint patterns.
Edit this file to change what the audit checks.
No logic here - just definitions.

Organization:
1. IDENTIFIER_SOURCES - Files and declarations that yield identifier sets
2. ALWAYS_ALLOWED - Tokens excluded from every comparison
3. COMPARISONS - Fixed one-directional comparison pairs
4. SECRET_PATTERNS - Line-level secret/endpoint regexes
"""

from __future__ import annotations

# =============================================================================
# 1. IDENTIFIER SOURCES
# =============================================================================
# name -> (label, relative path, extraction kind, target, key style)
#
# kind "object":    keys declared directly inside `target = { ... }`
# kind "attribute": every value of `target="..."` across the file
#
# key style only applies to "object":
#   "quoted"   'key': {...}
#   "bare"     KEY: 'value'
#   "computed" [OBJ.KEY]: {...}

IDENTIFIER_SOURCES: dict[str, tuple[str, str, str, str, str]] = {
    "routes": (
        "Route pageIds",
        "src/App.jsx",
        "attribute",
        "pageId",
        "",
    ),
    "layout": (
        "Layout allPages",
        "src/v3-app/components/Layout.jsx",
        "object",
        "allPages",
        "quoted",
    ),
    "permissions": (
        "Permissions ALL_PAGES",
        "src/v3-app/pages/PermissionsManager.jsx",
        "object",
        "ALL_PAGES",
        "quoted",
    ),
    "modules": (
        "Module registry IDs",
        "src/modules/registry.js",
        "object",
        "modules",
        "quoted",
    ),
    "feature_constants": (
        "FEATURE_PERMISSIONS constants",
        "src/contexts/PermissionsContext.js",
        "object",
        "FEATURE_PERMISSIONS",
        "bare",
    ),
    "feature_map": (
        "Permissions ALL_FEATURES",
        "src/v3-app/pages/PermissionsManager.jsx",
        "object",
        "ALL_FEATURES",
        "computed",
    ),
}


# =============================================================================
# 2. ALWAYS ALLOWED
# =============================================================================
# Shared pages that deliberately have no counterpart in some surfaces
# (dashboard has no module-registry entry).

ALWAYS_ALLOWED = frozenset({
    "dashboard",
})


# =============================================================================
# 3. COMPARISONS
# =============================================================================
# Tuple: (left, right, severity, title, extra allowed tokens)
#
# ERROR - access-control surfaces (routes, page grants, feature grants)
# WARN  - navigation-only listings
# INFO  - informational, never affects the result

COMPARISONS: tuple[tuple[str, str, str, str, tuple[str, ...]], ...] = (
    ("routes", "layout", "WARN",
     "Route IDs missing in Layout allPages", ()),
    ("routes", "permissions", "ERROR",
     "Route IDs missing in Permissions ALL_PAGES", ()),
    # permissions is an admin-only nav entry with no ALL_PAGES grant
    ("layout", "permissions", "ERROR",
     "Layout allPages IDs missing in Permissions ALL_PAGES", ("permissions",)),
    ("modules", "layout", "WARN",
     "Module IDs missing in Layout allPages", ()),
    ("feature_constants", "feature_map", "ERROR",
     "FEATURE_PERMISSIONS not mapped in ALL_FEATURES", ()),
    ("modules", "permissions", "ERROR",
     "Registry modules missing in Permissions ALL_PAGES", ()),
    ("permissions", "modules", "ERROR",
     "Permissions ALL_PAGES keys not in module registry", ()),
    ("routes", "modules", "ERROR",
     "Route pageIds not in module registry", ()),
    # time-off routes to /my-time-off outside PermissionRoute
    ("modules", "routes", "WARN",
     "Registry modules with no PermissionRoute",
     ("time-off", "my-clients", "instagram-reports")),
    ("layout", "modules", "INFO",
     "Layout allPages keys outside the module registry",
     ("permissions",)),
)


# =============================================================================
# 4. SECRET / ENDPOINT PATTERNS
# =============================================================================
# Tuple: (category, regex)

SECRET_PATTERNS: tuple[tuple[str, str], ...] = (
    ("google_api_key", r"AIza[0-9A-Za-z_-]{10,}"),
    ("google_apps_script_url", r"script\.google\.com/macros/s/"),
    ("firebase_cloudfunctions_url", r"cloudfunctions\.net/"),
)
