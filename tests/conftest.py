"""
Pytest configuration and shared fixtures.
"""

import sys
import textwrap
from pathlib import Path

import pytest

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from portal_cohesion.config import AuditConfig


# =============================================================================
# PORTAL SOURCE FIXTURES
# =============================================================================

APP_JSX = """\
import React from 'react';
import PermissionRoute from './v3-app/components/PermissionRoute';

export default function App() {
  return (
    <Routes>
      <Route path="/dashboard" element={<PermissionRoute pageId="dashboard" pageName="Dashboard"><Dashboard /></PermissionRoute>} />
      <Route path="/tasks" element={<PermissionRoute pageId="tasks" pageName="Tasks"><Tasks /></PermissionRoute>} />
      <Route path="/clients" element={<PermissionRoute pageId="clients" pageName="Clients"><Clients /></PermissionRoute>} />
      <Route path="/crm" element={<PermissionRoute pageId="crm" pageName="CRM"><CRM /></PermissionRoute>} />
      <Route path="/permissions" element={<AdminRoute><PermissionsManager /></AdminRoute>} />
      <Route path="/my-time-off" element={<MyTimeOff />} />
    </Routes>
  );
}
"""

LAYOUT_JSX = """\
const Layout = ({ children }) => {
  // Don't add pages here without a matching ALL_PAGES entry
  const allPages = {
    'dashboard': { name: 'Dashboard', icon: Home, path: '/dashboard' },
    'tasks': { name: 'Tasks', icon: CheckSquare, path: '/tasks' },
    'clients': { name: 'Clients {directory}', icon: User, path: '/clients' },
    'crm': { name: 'CRM', icon: Target, path: '/crm' },
    'time-off': { name: 'Time Off', icon: Calendar, path: '/my-time-off' },
    'permissions': { name: 'Users & Permissions', icon: Settings, path: '/permissions' },
  };
  return <div>{children}</div>;
};
"""

PERMISSIONS_MANAGER_JSX = """\
import { FEATURE_PERMISSIONS } from '../../contexts/PermissionsContext';

const ALL_PAGES = {
  'dashboard': { name: 'Dashboard', icon: Home, description: 'Main dashboard overview' },
  'tasks': { name: 'Tasks', icon: CheckSquare, description: 'Task management' },
  'clients': { name: 'Clients', icon: User, description: "Client's directory" },
  'crm': { name: 'CRM', icon: Target, description: `Leads ${'{'} pipeline` },
  'time-off': { name: 'Time Off', icon: Calendar, description: 'Leave requests' },
};

const ALL_FEATURES = {
  [FEATURE_PERMISSIONS.VIEW_FINANCIALS]: { name: 'View financials', description: 'See package pricing' },
  [FEATURE_PERMISSIONS.MANAGE_USERS]: { name: 'Manage users', description: 'Approve new accounts' },
};
"""

REGISTRY_JS = """\
// Module registry: one entry per grantable module
export const modules = {
  // -------------------------------------------------------------------------
  // BASE MODULES (included for all users)
  // -------------------------------------------------------------------------
  'time-off': {
    id: 'time-off',
    name: 'Time Off',
    routes: ['/my-time-off'],
  },
  'tasks': {
    id: 'tasks',
    name: 'Tasks',
    routes: ['/tasks'],
  },
  'clients': {
    id: 'clients',
    name: 'Clients',
    routes: ['/clients'],
  },
  'crm': {
    id: 'crm',
    name: 'CRM',
    routes: ['/crm'],
  },
};
"""

PERMISSIONS_CONTEXT_JS = """\
export const FEATURE_PERMISSIONS = {
  VIEW_FINANCIALS: 'view_financials',
  MANAGE_USERS: 'manage_users',
};
"""

PORTAL_FILES = {
    "src/App.jsx": APP_JSX,
    "src/v3-app/components/Layout.jsx": LAYOUT_JSX,
    "src/v3-app/pages/PermissionsManager.jsx": PERMISSIONS_MANAGER_JSX,
    "src/modules/registry.js": REGISTRY_JS,
    "src/contexts/PermissionsContext.js": PERMISSIONS_CONTEXT_JS,
}


def write_files(root: Path, files: dict[str, str]) -> None:
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(textwrap.dedent(content), encoding="utf-8")


@pytest.fixture
def portal_tree(tmp_path: Path) -> Path:
    """A minimal portal source tree in which every comparison is clean."""
    root = tmp_path / "portal"
    root.mkdir()
    write_files(root, PORTAL_FILES)
    return root


@pytest.fixture
def portal_config(portal_tree: Path) -> AuditConfig:
    return AuditConfig(root=portal_tree)
