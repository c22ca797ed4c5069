"""
Uninstall closure calculator

Given components the user deselected, computes everything that has to be
removed with them, and remembers why each component was added:

1. Reverse dependencies (dependees) of removed components, depth-first
2. Components whose auto-dependencies are no longer satisfied
3. Virtual components that no remaining component needs

Steps 2 and 3 can trigger each other and step 1 again, so the three
sweeps run until none of them finds new work.
"""

import logging
from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Set, Tuple

from .component import Component, InstallAction, DYNAMIC_TOKEN
from .registry import ComponentRegistry

logger = logging.getLogger(__name__)


class UninstallReason(Enum):
    """Why a component ends up in the removal set."""
    SELECTED = "selected"                    # User deselected it
    REPLACED = "replaced"                    # Superseded by another component
    VIRTUAL_DEPENDENT = "virtual-dependent"  # Virtual, nothing needs it anymore
    DEPENDENT = "dependent"                  # Depends on a removed component
    AUTO_DEPENDENT = "auto-dependent"        # Its auto-dependencies are gone


# Reasons whose label names the component that triggered the removal
REASON_LABELS = {
    UninstallReason.SELECTED: "Deselected Components:",
    UninstallReason.REPLACED: 'Components replaced by "{ref}":',
    UninstallReason.VIRTUAL_DEPENDENT: "Removing virtual components without existing dependencies:",
    UninstallReason.DEPENDENT: 'Components dependency "{ref}" removed:',
    UninstallReason.AUTO_DEPENDENT: 'Components autodependency "{ref}" removed:',
}

# Decides whether a component with a dynamic auto-dependency goes away
DynamicDependencyPolicy = Callable[[Component], bool]


def never_auto_remove(component: Component) -> bool:
    """Default dynamic policy: keep the component."""
    return False


class UninstallCalculator:
    """Computes the uninstall closure for one planning pass.

    Not thread-safe. Marking flags auto-removed components with
    InstallAction.AUTODEPEND_UNINSTALLATION on the registry's objects.
    """

    def __init__(self, installed_components: Iterable[Component],
                 registry: ComponentRegistry,
                 policy: Optional[DynamicDependencyPolicy] = None):
        """Initialize calculator.

        Args:
            installed_components: Candidate universe for the sweeps, usually
                installed components not requested for uninstallation
            registry: Registry owning the components
            policy: Decision for components whose first auto-dependency is
                the dynamic token (default: never auto-remove)
        """
        self.installed_components: Tuple[Component, ...] = tuple(installed_components)
        self.registry = registry
        self.policy = policy or never_auto_remove
        self._to_uninstall: Set[int] = set()
        self._reasons: Dict[str, Tuple[UninstallReason, str]] = {}

    def components_to_uninstall(self) -> Set[Component]:
        """Components in the removal set."""
        return {self.registry[index] for index in self._to_uninstall}

    def is_marked(self, component: Optional[Component]) -> bool:
        """True if component is in the removal set."""
        return component is not None and component.index in self._to_uninstall

    # =========================================================================
    # Dependee cascade
    # =========================================================================

    def _new_dependees(self, component: Component) -> List[Component]:
        return [d for d in self.registry.dependees(component)
                if not self.is_marked(d)]

    def mark_for_uninstall(self, component: Optional[Component]) -> None:
        """Add component and everything depending on it to the removal set.

        Dependees are resolved depth-first: a dependee's own dependees are
        all marked before its reason is recorded, and a component is only
        inserted once all of its dependees are. A dependee already on the
        current path (dependency cycle) is not entered again.
        """
        if component is None or not component.installed:
            return

        path = {component.index}
        stack = [(component, iter(self._new_dependees(component)))]

        while stack:
            current, dependees = stack[-1]
            dependee = next(dependees, None)

            if dependee is None:
                stack.pop()
                path.discard(current.index)
                self._to_uninstall.add(current.index)
                if stack:
                    self.insert_uninstall_reason(
                        current, UninstallReason.DEPENDENT, stack[-1][0].name)
                continue

            if dependee.index in path:
                logger.debug(f"Dependency cycle: {dependee.name} -> {current.name}")
                continue

            if not dependee.installed:
                self.insert_uninstall_reason(dependee, UninstallReason.DEPENDENT, current.name)
                continue

            path.add(dependee.index)
            stack.append((dependee, iter(self._new_dependees(dependee))))

    # =========================================================================
    # Fixed point
    # =========================================================================

    def mark_all_for_uninstall(self, components: Sequence[Optional[Component]]) -> None:
        """Mark components and compute the full uninstall closure.

        Each pass marks the pending components with their dependees, then
        looks for auto-dependent components; only when there are none left
        it looks for unneeded virtual components. Every pass adds at least
        one component to the removal set, so the loop ends.
        """
        pending = list(components)
        passes = 0

        while pending:
            passes += 1
            for component in pending:
                self.mark_for_uninstall(component)

            pending = self._collect_auto_dependants()
            if pending:
                logger.debug(f"Pass {passes}: {len(pending)} auto-dependent component(s)")
                continue

            pending = self._collect_unneeded_virtuals()
            if pending:
                logger.debug(f"Pass {passes}: {len(pending)} unneeded virtual component(s)")

        logger.debug(f"Uninstall closure: {len(self._to_uninstall)} component(s) "
                     f"after {passes} pass(es)")

    def _flag_auto_dependent(self, component: Component, referenced: str) -> None:
        self.insert_uninstall_reason(component, UninstallReason.AUTO_DEPENDENT, referenced)
        component.install_action = InstallAction.AUTODEPEND_UNINSTALLATION

    def _collect_auto_dependants(self) -> List[Component]:
        """Find components whose auto-dependencies are no longer all present.

        An auto-dependency counts as present when some component of the
        snapshot is known under that name (its own or a replaced one) and
        was not itself flagged for auto-removal. Flags are set while
        scanning, so later components see earlier decisions.
        """
        auto_depend_on = []

        for component in self.installed_components:
            if not component.installed or self.is_marked(component):
                continue

            auto_dependencies = list(component.auto_dependencies)
            if not auto_dependencies:
                continue

            if component.has_dynamic_auto_dependency():
                try:
                    remove = self.policy(component)
                except Exception as e:
                    # Keep the component, should do no harm
                    logger.warning(f"Dynamic dependency policy failed for {component.name}: {e}")
                    continue
                if remove:
                    auto_depend_on.append(component)
                    self._flag_auto_dependent(component, DYNAMIC_TOKEN)
                continue

            for other in self.installed_components:
                for alias in other.aliases():
                    if alias not in auto_dependencies:
                        continue
                    found = self.registry.component_by_name(alias, self.installed_components)
                    if found is not None and \
                            found.install_action != InstallAction.AUTODEPEND_UNINSTALLATION:
                        auto_dependencies = [d for d in auto_dependencies if d != alias]

            if auto_dependencies:
                auto_depend_on.append(component)
                self._flag_auto_dependent(component, ', '.join(auto_dependencies))

        return auto_depend_on

    def _collect_unneeded_virtuals(self) -> List[Component]:
        """Find virtual components no remaining component depends on."""
        unneeded = []

        for component in self.installed_components:
            if not (component.installed and component.virtual):
                continue
            if self.is_marked(component):
                continue
            # Auto-dependent components were handled by the auto sweep
            if component.auto_dependencies or component.forced_installation:
                continue

            required = False
            for dependant in self.registry.install_dependants(component):
                if dependant.installed and not self.is_marked(dependant):
                    required = True
                    break

            if not required:
                unneeded.append(component)
                self.insert_uninstall_reason(component, UninstallReason.VIRTUAL_DEPENDENT)

        return unneeded

    def sweep_unneeded_virtuals(self) -> None:
        """Remove virtual components left without dependants.

        Re-enters the full fixed point when something was found.
        """
        unneeded = self._collect_unneeded_virtuals()
        if unneeded:
            self.mark_all_for_uninstall(unneeded)

    # =========================================================================
    # Replacements
    # =========================================================================

    def mark_replaced(self, replacement: Component) -> List[Component]:
        """Record REPLACED for installed components superseded by replacement.

        Returns:
            The replaced components; pass them to mark_all_for_uninstall
        """
        replaced = self.registry.replaced_by(replacement)
        for component in replaced:
            self.insert_uninstall_reason(component, UninstallReason.REPLACED, replacement.name)
        return replaced

    # =========================================================================
    # Reasons
    # =========================================================================

    def insert_uninstall_reason(self, component: Component, reason: UninstallReason,
                                referenced: str = "") -> None:
        """Record why component is removed. The first reason is kept."""
        if component.name in self._reasons:
            return
        self._reasons[component.name] = (reason, referenced)

    def uninstall_reason_type(self, component: Component) -> Optional[UninstallReason]:
        """Recorded reason, or None if component is not being removed."""
        entry = self._reasons.get(component.name)
        return entry[0] if entry else None

    def uninstall_reason_referenced_component(self, component: Component) -> str:
        """Name of the component that triggered the removal, or ''."""
        entry = self._reasons.get(component.name)
        return entry[1] if entry else ""

    def uninstall_reason(self, component: Component) -> str:
        """Human-readable reason label, '' if none was recorded."""
        reason = self.uninstall_reason_type(component)
        if reason is None:
            return ""
        return REASON_LABELS[reason].format(
            ref=self.uninstall_reason_referenced_component(component))

    def reasons(self) -> Dict[str, Tuple[UninstallReason, str]]:
        """Copy of the reason map (component name -> (reason, referenced))."""
        return dict(self._reasons)


def plan_uninstall(registry: ComponentRegistry, names: Sequence[str],
                   replaced_by: Sequence[str] = (),
                   policy: Optional[DynamicDependencyPolicy] = None) -> UninstallCalculator:
    """Plan the removal of the named components.

    Deselected and replaced components are flagged UNINSTALL and left out of
    the sweep snapshot. Deselected components that are not installed are
    ignored. Replacement components that are not installed yet are flagged
    INSTALL so they count as dependants.

    Args:
        registry: Component registry
        names: Component names the user deselected
        replaced_by: Names of components whose replaces lists are removed
        policy: Dynamic auto-dependency policy

    Returns:
        Calculator holding the closure and the reasons

    Raises:
        RegistryError: if a name is not in the registry
    """
    selection = [c for c in registry.resolve(names) if c.installed]
    replacements = registry.resolve(replaced_by)

    replaced = []
    for replacement in replacements:
        if not replacement.installed:
            replacement.install_action = InstallAction.INSTALL
        replaced.extend(registry.replaced_by(replacement))

    registry.request_uninstall(selection)
    registry.request_uninstall(replaced)
    removing = {c.index for c in selection} | {c.index for c in replaced}

    snapshot = [c for c in registry.installed_components() if c.index not in removing]
    calculator = UninstallCalculator(snapshot, registry, policy=policy)

    for component in selection:
        calculator.insert_uninstall_reason(component, UninstallReason.SELECTED)
    for replacement in replacements:
        calculator.mark_replaced(replacement)

    logger.debug(f"Planning removal of {len(selection)} selected and "
                 f"{len(replaced)} replaced component(s)")
    calculator.mark_all_for_uninstall(selection + replaced)
    return calculator
