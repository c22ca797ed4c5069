"""
Reader and writer for components.xml registries

The installed-component registry kept next to an installation:

    <?xml version="1.0" encoding="UTF-8"?>
    <Packages>
        <ApplicationName>Example</ApplicationName>
        <Package>
            <Name>org.example.core</Name>
            <Title>Core</Title>
            <Version>1.2.0</Version>
            <Virtual>false</Virtual>
            <Dependencies>org.example.base</Dependencies>
            <AutoDependOn>org.example.a, org.example.b</AutoDependOn>
            <Replaces>org.example.legacy</Replaces>
        </Package>
    </Packages>

Every <Package> of a local registry is installed unless it carries
<Installed>false</Installed>.
"""

import logging
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Iterable, List, Optional

from .component import Component, parse_names
from .registry import ComponentRegistry, RegistryError

logger = logging.getLogger(__name__)

TRUE_VALUES = ('true', 'yes', '1')
FALSE_VALUES = ('false', 'no', '0')


def _text(elem: ET.Element, tag: str) -> str:
    child = elem.find(tag)
    if child is None or child.text is None:
        return ''
    return child.text.strip()


def _flag(elem: ET.Element, tag: str, default: bool = False) -> bool:
    value = _text(elem, tag)
    if not value:
        return default
    return value.lower() in TRUE_VALUES


def parse_package(elem: ET.Element) -> Optional[Component]:
    """Build a Component from a <Package> element.

    Returns:
        Component, or None if the element has no <Name>
    """
    name = _text(elem, 'Name')
    if not name:
        return None

    return Component(
        name=name,
        version=_text(elem, 'Version'),
        display_name=_text(elem, 'Title'),
        description=_text(elem, 'Description'),
        installed=_flag(elem, 'Installed', default=True),
        virtual=_flag(elem, 'Virtual'),
        forced_installation=_flag(elem, 'ForcedInstallation'),
        dependencies=parse_names(_text(elem, 'Dependencies')),
        auto_dependencies=parse_names(_text(elem, 'AutoDependOn')),
        replaces=parse_names(_text(elem, 'Replaces')),
    )


def parse_components_xml(path: Path) -> ComponentRegistry:
    """Load a registry from a components.xml file.

    Packages without a name are skipped with a warning.

    Raises:
        RegistryError: if the file is missing, not XML, or not a <Packages>
            document, or names a package twice
    """
    if not path.exists():
        raise RegistryError(f"Registry not found: {path}")

    try:
        tree = ET.parse(path)
    except ET.ParseError as e:
        raise RegistryError(f"Invalid registry {path}: {e}") from e

    root = tree.getroot()
    if root.tag != 'Packages':
        raise RegistryError(f"Invalid registry {path}: expected <Packages>, got <{root.tag}>")

    registry = ComponentRegistry()
    registry.application_name = _text(root, 'ApplicationName')

    for elem in root.findall('Package'):
        component = parse_package(elem)
        if component is None:
            logger.warning(f"Skipping <Package> without <Name> in {path}")
            continue
        registry.add(component)

    logger.debug(f"Loaded {len(registry)} components from {path}")
    return registry


def _join(values: List[str]) -> str:
    return ', '.join(values)


def build_components_xml(registry: ComponentRegistry, dropped: Iterable[str] = ()) -> str:
    """Serialize a registry to components.xml text.

    Components that are not installed are kept with <Installed>false</Installed>.

    Args:
        registry: Registry to write
        dropped: Names of components to leave out, e.g. the ones just removed
    """
    dropped = set(dropped)
    root = ET.Element('Packages')
    if registry.application_name:
        ET.SubElement(root, 'ApplicationName').text = registry.application_name

    for component in registry:
        if component.name in dropped:
            continue

        package = ET.SubElement(root, 'Package')
        ET.SubElement(package, 'Name').text = component.name
        if component.display_name:
            ET.SubElement(package, 'Title').text = component.display_name
        if component.description:
            ET.SubElement(package, 'Description').text = component.description
        if component.version:
            ET.SubElement(package, 'Version').text = component.version
        if not component.installed:
            ET.SubElement(package, 'Installed').text = 'false'
        if component.virtual:
            ET.SubElement(package, 'Virtual').text = 'true'
        if component.forced_installation:
            ET.SubElement(package, 'ForcedInstallation').text = 'true'
        if component.dependencies:
            ET.SubElement(package, 'Dependencies').text = _join(component.dependencies)
        if component.auto_dependencies:
            ET.SubElement(package, 'AutoDependOn').text = _join(component.auto_dependencies)
        if component.replaces:
            ET.SubElement(package, 'Replaces').text = _join(component.replaces)

    ET.indent(root, space='    ')
    xml_str = ET.tostring(root, encoding='unicode')
    return '<?xml version="1.0" encoding="UTF-8"?>\n' + xml_str + '\n'


def write_components_xml(registry: ComponentRegistry, path: Path,
                         dropped: Iterable[str] = ()) -> None:
    """Write a registry to path, replacing it atomically."""
    tmp_path = path.with_suffix(path.suffix + '.tmp')
    tmp_path.write_text(build_components_xml(registry, dropped=dropped),
                        encoding='utf-8')
    tmp_path.replace(path)
    logger.debug(f"Wrote registry to {path}")
