"""
Registry location for unplan.

Lookup order for the registry file:
    1. --registry on the command line
    2. UNPLAN_REGISTRY environment variable
    3. .unplan.local in the checkout, when running from ./bin/unplan
    4. /var/lib/unplan/components.xml on a system installation
    5. ~/.local/share/unplan-dev/components.xml otherwise

.unplan.local format (one key=value per line, # starts a comment):
    registry=/path/to/components.yaml
    base_dir=/path/holding/components.xml
"""

import os
import sys
from pathlib import Path
from typing import Dict, Optional

LOCAL_CONFIG_FILE = ".unplan.local"
REGISTRY_ENV = "UNPLAN_REGISTRY"
REGISTRY_FILE = "components.xml"

PROD_BASE_DIR = Path("/var/lib/unplan")
DEV_BASE_DIR = Path("~/.local/share/unplan-dev").expanduser()

# Detected default registry, filesystem checks run once per process
_cached_registry: Optional[Path] = None


def _get_project_root() -> Optional[Path]:
    """Checkout root when the script runs from its bin/ directory."""
    if not sys.argv or not sys.argv[0]:
        return None
    script = Path(sys.argv[0]).resolve()
    if script.parent.name != 'bin':
        return None
    return script.parent.parent


def _read_local_config(project_root: Path) -> Optional[Dict[str, str]]:
    """Parse .unplan.local, None when the checkout has none."""
    path = project_root / LOCAL_CONFIG_FILE
    try:
        lines = path.read_text().splitlines()
    except OSError:
        return None

    settings = {}
    for line in lines:
        line = line.strip()
        if line.startswith('#') or '=' not in line:
            continue
        key, value = line.split('=', 1)
        settings[key.strip()] = value.strip()
    return settings


def _is_system_install() -> bool:
    return Path("/usr/bin/unplan").exists()


def _default_registry() -> Path:
    global _cached_registry
    if _cached_registry is not None:
        return _cached_registry

    project_root = _get_project_root()
    settings = _read_local_config(project_root) if project_root else None

    if settings is not None:
        if 'registry' in settings:
            registry = Path(settings['registry']).expanduser()
        else:
            registry = Path(settings.get('base_dir', DEV_BASE_DIR)).expanduser() / REGISTRY_FILE
    elif _is_system_install():
        registry = PROD_BASE_DIR / REGISTRY_FILE
    else:
        registry = DEV_BASE_DIR / REGISTRY_FILE

    _cached_registry = registry
    return registry


def reset_cache():
    """Forget the detected registry (used by tests)."""
    global _cached_registry
    _cached_registry = None


def get_registry_path(override: Optional[str] = None) -> Path:
    """Get the component registry file.

    Args:
        override: Explicit path (from --registry), wins over everything

    Returns:
        Registry path (may not exist)
    """
    if override:
        return Path(override).expanduser()
    env_path = os.environ.get(REGISTRY_ENV)
    if env_path:
        return Path(env_path).expanduser()
    return _default_registry()
