"""Registry query commands (list, rdepends)."""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ...core.registry import ComponentRegistry


def cmd_list(args, registry: 'ComponentRegistry') -> int:
    """Handle list command - show installed components."""
    from .. import colors, display

    show_all = getattr(args, 'all', False)
    components = [c for c in registry if show_all or c.installed]

    if display.get_mode() == display.DisplayMode.JSON:
        display.print_json([{
            'name': c.name,
            'title': c.title,
            'version': c.version,
            'installed': c.installed,
            'virtual': c.virtual,
            'forced_installation': c.forced_installation,
        } for c in components])
        return 0

    if not components:
        print(colors.info("No components installed."))
        return 0

    names = sorted(c.name for c in components)
    if display.get_mode() == display.DisplayMode.COLUMNS and not args.quiet:
        title = registry.application_name or 'registry'
        print(colors.bold(f"{len(names)} component(s) in {title}:"))
    display.print_component_list(names)
    return 0


def cmd_rdepends(args, registry: 'ComponentRegistry') -> int:
    """Handle rdepends command - show who needs a component."""
    from ...core.registry import RegistryError
    from .. import colors, display

    component = registry.get(args.component)
    if component is None:
        raise RegistryError(f"Unknown component(s): {args.component}")

    dependees = sorted(c.name for c in registry.dependees(component))
    dependants = sorted(c.name for c in registry.install_dependants(component))

    if display.get_mode() == display.DisplayMode.JSON:
        display.print_json({
            'name': component.name,
            'dependees': dependees,
            'install_dependants': dependants,
        })
        return 0

    print(colors.bold(component.name))
    if not dependees and not dependants:
        print(f"  {colors.dim('nothing depends on it')}")
        return 0

    if dependees:
        print(f"\n  {colors.info(f'Installed dependees ({len(dependees)}):')}")
        display.print_component_list(dependees, indent=4)
    if dependants:
        print(f"\n  {colors.info(f'Install dependants ({len(dependants)}):')}")
        display.print_component_list(dependants, indent=4)
    return 0
