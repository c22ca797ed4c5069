"""Registry loading from components.xml or YAML description files.

YAML format:

    application: Example
    components:
      - name: org.example.core
        version: 1.2.0
        dependencies: [org.example.base]
        auto_dependencies: org.example.a, org.example.b
      - name: org.example.base
        virtual: true
"""

import logging
from pathlib import Path
from typing import Any, Dict, Iterable

from .component import Component, parse_names
from .components_xml import FALSE_VALUES, TRUE_VALUES, parse_components_xml, write_components_xml
from .registry import ComponentRegistry, RegistryError

logger = logging.getLogger(__name__)

XML_SUFFIXES = ('.xml',)
YAML_SUFFIXES = ('.yaml', '.yml')

LIST_FIELDS = ('dependencies', 'auto_dependencies', 'replaces')
BOOL_FIELDS = ('installed', 'virtual', 'forced_installation')


def _flag(name: str, key: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in TRUE_VALUES:
        return True
    if text in FALSE_VALUES:
        return False
    raise RegistryError(f"Component {name}: {key} must be true or false, got {value!r}")


def component_from_dict(data: Dict[str, Any]) -> Component:
    """Build a Component from a YAML mapping.

    Raises:
        RegistryError: if the mapping has no name or a flag is not a boolean
    """
    name = str(data.get('name') or '').strip()
    if not name:
        raise RegistryError(f"Component entry without name: {data!r}")

    kwargs = {
        'name': name,
        'version': str(data.get('version') or ''),
        'display_name': str(data.get('display_name') or ''),
        'description': str(data.get('description') or ''),
    }
    for key in BOOL_FIELDS:
        if key in data:
            kwargs[key] = _flag(name, key, data[key])
    for key in LIST_FIELDS:
        kwargs[key] = parse_names(data.get(key))

    return Component(**kwargs)


def load_components_yaml(path: Path) -> ComponentRegistry:
    """Load a registry from a YAML description file.

    Raises:
        RegistryError: if the file is missing or malformed
    """
    import yaml

    if not path.exists():
        raise RegistryError(f"Registry not found: {path}")

    try:
        with open(path, 'r') as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise RegistryError(f"Invalid registry {path}: {e}") from e

    if not isinstance(data, dict) or not isinstance(data.get('components', []), list):
        raise RegistryError(f"Invalid registry {path}: expected a 'components' list")

    registry = ComponentRegistry(application_name=str(data.get('application') or ''))
    for entry in data.get('components') or []:
        if not isinstance(entry, dict):
            raise RegistryError(f"Invalid registry {path}: component entries must be mappings")
        registry.add(component_from_dict(entry))

    logger.debug(f"Loaded {len(registry)} components from {path}")
    return registry


def load_registry(path: Path) -> ComponentRegistry:
    """Load a registry, picking the format from the file suffix.

    Raises:
        RegistryError: on unknown suffix, missing or malformed file
    """
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix in XML_SUFFIXES:
        return parse_components_xml(path)
    if suffix in YAML_SUFFIXES:
        return load_components_yaml(path)
    raise RegistryError(f"Unsupported registry format: {path} (use .xml, .yaml or .yml)")


def save_registry(registry: ComponentRegistry, path: Path,
                  removed: Iterable[Component] = ()) -> Path:
    """Save a registry after uninstallation.

    Only components.xml is written back; a YAML description is left
    untouched and the registry goes to a components.xml next to it.
    Removed components are left out of the file, other components that are
    not installed keep their entry.

    Returns:
        Path actually written
    """
    path = Path(path)
    if path.suffix.lower() not in XML_SUFFIXES:
        path = path.with_name('components.xml')
    write_components_xml(registry, path, dropped=[c.name for c in removed])
    return path
