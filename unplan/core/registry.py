"""
Component registry

Holds every known component in an index-addressed table (the arena) and
answers the graph queries used by uninstall planning:
- dependees: who depends on a component
- install_dependants: who still needs a (virtual) component
- component_by_name: name / alias lookup within a candidate list
"""

import logging
from typing import Dict, Iterable, Iterator, List, Optional

from .component import (
    Component,
    InstallAction,
    parse_name_and_version,
    version_matches,
)

logger = logging.getLogger(__name__)


class RegistryError(Exception):
    """Raised on inconsistent registry content or unknown component names."""
    pass


class ComponentRegistry:
    """Arena of components owned by one installation."""

    def __init__(self, components: Iterable[Component] = (), application_name: str = ""):
        self.application_name = application_name
        self._components: List[Component] = []
        self._by_name: Dict[str, int] = {}
        for component in components:
            self.add(component)

    def add(self, component: Component) -> Component:
        """Add a component and assign its arena slot.

        Raises:
            RegistryError: if a component with the same name exists
        """
        if component.name in self._by_name:
            raise RegistryError(f"Duplicate component name: {component.name}")
        component.index = len(self._components)
        self._components.append(component)
        self._by_name[component.name] = component.index
        return component

    def get(self, name: str) -> Optional[Component]:
        """Get a component by exact name."""
        index = self._by_name.get(name)
        if index is None:
            return None
        return self._components[index]

    def resolve(self, names: Iterable[str]) -> List[Component]:
        """Map names to components.

        Raises:
            RegistryError: listing every name that is not in the registry
        """
        found = []
        missing = []
        for name in names:
            component = self.get(name)
            if component is None:
                missing.append(name)
            else:
                found.append(component)
        if missing:
            raise RegistryError(f"Unknown component(s): {', '.join(missing)}")
        return found

    def __getitem__(self, index: int) -> Component:
        return self._components[index]

    def __iter__(self) -> Iterator[Component]:
        return iter(self._components)

    def __len__(self) -> int:
        return len(self._components)

    def __contains__(self, name: str) -> bool:
        return name in self._by_name

    def installed_components(self) -> List[Component]:
        return [c for c in self._components if c.installed]

    # =========================================================================
    # Graph queries
    # =========================================================================

    def _requires(self, requirer: Component, component: Component) -> bool:
        """True if one of requirer's dependencies names component."""
        for requirement in requirer.dependencies:
            name, constraint = parse_name_and_version(requirement)
            if name != component.name:
                continue
            if version_matches(component.version, constraint):
                return True
        return False

    def dependees(self, component: Component) -> List[Component]:
        """Installed components whose dependencies name component."""
        if component is None:
            return []
        return [c for c in self._components
                if c.installed and c is not component and self._requires(c, component)]

    def install_dependants(self, component: Component) -> List[Component]:
        """Components installed or about to be installed that need component.

        Components already requested for uninstallation do not count.
        """
        if component is None:
            return []
        dependants = []
        for c in self._components:
            if c is component or c.install_action == InstallAction.UNINSTALL:
                continue
            if not (c.installed or c.install_action == InstallAction.INSTALL):
                continue
            if self._requires(c, component):
                dependants.append(c)
        return dependants

    @staticmethod
    def component_by_name(name: str, candidates: Iterable[Component]) -> Optional[Component]:
        """Find a component by name or replaced alias among candidates.

        Exact name matches win over components that merely replace the
        name. A version constraint in name filters the matches.
        """
        if not name:
            return None
        fixed_name, constraint = parse_name_and_version(name)
        candidates = list(candidates)

        for c in candidates:
            if c.name == fixed_name and version_matches(c.version, constraint):
                return c
        for c in candidates:
            if fixed_name in c.replaces and version_matches(c.version, constraint):
                return c
        return None

    def replaced_by(self, replacement: Component) -> List[Component]:
        """Installed components named in replacement's replaces list."""
        replaced = []
        for alias in replacement.replaces:
            c = self.get(alias)
            if c is not None and c.installed and c is not replacement and c not in replaced:
                replaced.append(c)
        return replaced

    # =========================================================================
    # Install bookkeeping
    # =========================================================================

    def request_uninstall(self, components: Iterable[Component]) -> None:
        """Flag components as explicitly requested for removal."""
        for c in components:
            c.install_action = InstallAction.UNINSTALL

    def apply_uninstall(self, components: Iterable[Component]) -> int:
        """Mark components as no longer installed.

        Returns:
            Number of components whose state changed
        """
        count = 0
        for c in components:
            if c.installed:
                count += 1
            c.installed = False
            c.install_action = InstallAction.UNINSTALL
            logger.debug(f"Marked {c.name} uninstalled")
        return count
