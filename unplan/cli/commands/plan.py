"""Uninstall planning command."""

from typing import TYPE_CHECKING, Dict, List, Tuple

if TYPE_CHECKING:
    from ...core.registry import ComponentRegistry
    from ...core.calculator import UninstallCalculator


def group_by_reason(calculator: 'UninstallCalculator') -> List[Tuple[str, List[str]]]:
    """Group planned components under their reason label.

    Groups follow reason order (selected first), then referenced name.
    Components without a recorded reason land in a trailing group.

    Returns:
        List of (label, sorted component names)
    """
    from ...core.calculator import UninstallReason

    order = {reason: i for i, reason in enumerate(UninstallReason)}
    groups: Dict[Tuple, List[str]] = {}
    labels: Dict[Tuple, str] = {}

    for component in calculator.components_to_uninstall():
        reason = calculator.uninstall_reason_type(component)
        ref = calculator.uninstall_reason_referenced_component(component)
        key = (order[reason] if reason else len(order), ref)
        groups.setdefault(key, []).append(component.name)
        labels[key] = calculator.uninstall_reason(component) or "Other components:"

    return [(labels[key], sorted(groups[key])) for key in sorted(groups)]


def plan_as_dict(calculator: 'UninstallCalculator') -> dict:
    """Plan summary for --json output."""
    components = []
    for component in sorted(calculator.components_to_uninstall(), key=lambda c: c.name):
        reason = calculator.uninstall_reason_type(component)
        components.append({
            'name': component.name,
            'version': component.version,
            'reason': reason.value if reason else None,
            'referenced': calculator.uninstall_reason_referenced_component(component),
            'label': calculator.uninstall_reason(component),
            'install_action': component.install_action.value,
        })
    return {'count': len(components), 'components': components}


def cmd_plan(args, registry: 'ComponentRegistry') -> int:
    """Handle plan command - compute what removing components drags along."""
    from ...core.calculator import plan_uninstall, REASON_LABELS, UninstallReason
    from ...core.loader import save_registry
    from .. import colors, display

    calculator = plan_uninstall(registry, args.components,
                                replaced_by=getattr(args, 'replace', None) or [])
    to_remove = calculator.components_to_uninstall()

    if display.get_mode() == display.DisplayMode.JSON:
        display.print_json(plan_as_dict(calculator))
    elif not to_remove:
        print(colors.info("Nothing to remove."))
        return 0
    else:
        print(f"\n{colors.bold(f'The following {len(to_remove)} component(s) will be removed:')}")
        for label, names in group_by_reason(calculator):
            selected = label == REASON_LABELS[UninstallReason.SELECTED]
            print(f"\n  {colors.info(label)} ({len(names)})")
            display.print_component_list(
                names, indent=4,
                color_func=lambda n, s=selected: colors.component_removed(n, selected=s))

    if not getattr(args, 'apply', False):
        return 0

    if not args.auto:
        try:
            response = input("\nProceed with removal? [y/N] ")
            if response.lower() not in ('y', 'yes'):
                print("Aborted.")
                return 0
        except (KeyboardInterrupt, EOFError):
            print("\nAborted.")
            return 130

    count = registry.apply_uninstall(to_remove)
    written = save_registry(registry, args.registry_path, removed=to_remove)
    print(colors.success(f"{count} component(s) removed, registry saved to {written}"))
    return 0

