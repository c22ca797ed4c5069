"""
Main CLI entry point for unplan

Commands with short aliases:
- unplan list / unplan l          (installed components)
- unplan rdepends / unplan rd     (who needs a component)
- unplan plan / unplan p          (what removing components drags along)
"""

import argparse
import sys

from .. import __version__


def check_dependencies() -> list:
    """Check for required Python modules.

    Returns:
        List of (package, purpose) tuples for missing modules
    """
    missing = []

    try:
        import yaml
    except ImportError:
        missing.append(('PyYAML', 'YAML component registries'))

    return missing


def print_missing_dependencies(missing: list):
    """Print error message for missing dependencies."""
    print("ERROR: Missing required Python modules:\n", file=sys.stderr)
    for pkg, purpose in missing:
        print(f"  - {pkg} ({purpose})", file=sys.stderr)
    print("\nInstall with:", file=sys.stderr)
    print(f"  pip install {' '.join(pkg for pkg, _ in missing)}", file=sys.stderr)


class AliasedSubParsersAction(argparse._SubParsersAction):
    """Custom action to support command aliases in argparse."""

    def add_parser(self, name, **kwargs):
        aliases = kwargs.pop('aliases', [])
        parser = super().add_parser(name, **kwargs)

        for alias in aliases:
            self._name_parser_map[alias] = parser

        return parser


def create_parser() -> argparse.ArgumentParser:
    """Create the main argument parser with all commands and aliases."""

    parser = argparse.ArgumentParser(
        prog='unplan',
        description='Uninstall planner for installer component registries',
        epilog='Use "unplan <command> --help" for command-specific help.'
    )

    parser.add_argument(
        '--version', '-V',
        action='version',
        version=f'unplan {__version__}'
    )
    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Verbose output'
    )
    parser.add_argument(
        '--quiet', '-q',
        action='store_true',
        help='Quiet output'
    )
    parser.add_argument(
        '--nocolor',
        action='store_true',
        help='Disable colored output'
    )
    parser.add_argument(
        '--registry',
        metavar='PATH',
        help='Component registry (components.xml or .yaml)'
    )

    # Parent parser for display options (inherited by subparsers)
    display_parent = argparse.ArgumentParser(add_help=False)
    display_parent.add_argument(
        '--json',
        action='store_true',
        help='JSON output for scripting'
    )
    display_parent.add_argument(
        '--flat',
        action='store_true',
        help='Flat output (one item per line, parsable)'
    )
    display_parent.add_argument(
        '--show-all',
        action='store_true',
        help='Show all items without truncation'
    )

    parser.register('action', 'parsers', AliasedSubParsersAction)

    subparsers = parser.add_subparsers(
        dest='command',
        title='commands',
        metavar='<command>'
    )

    # =========================================================================
    # list / l
    # =========================================================================
    list_parser = subparsers.add_parser(
        'list', aliases=['l'],
        help='List installed components',
        parents=[display_parent]
    )
    list_parser.add_argument(
        '--all', '-a',
        action='store_true',
        help='Include components that are not installed'
    )

    # =========================================================================
    # rdepends / rd
    # =========================================================================
    rdepends_parser = subparsers.add_parser(
        'rdepends', aliases=['rd'],
        help='Show components depending on a component',
        parents=[display_parent]
    )
    rdepends_parser.add_argument(
        'component',
        help='Component name'
    )

    # =========================================================================
    # plan / p
    # =========================================================================
    plan_parser = subparsers.add_parser(
        'plan', aliases=['p'],
        help='Compute the components removed with a deselection',
        parents=[display_parent]
    )
    plan_parser.add_argument(
        'components', nargs='*',
        help='Component names to deselect'
    )
    plan_parser.add_argument(
        '--replace',
        action='append',
        metavar='NAME',
        help='Component whose replaced components are removed (repeatable)'
    )
    plan_parser.add_argument(
        '--apply',
        action='store_true',
        help='Mark the planned components uninstalled and save the registry'
    )
    plan_parser.add_argument(
        '--auto', '-y',
        action='store_true',
        help='No confirmation'
    )

    return parser


def main(argv=None) -> int:
    """Main CLI entry point."""
    missing = check_dependencies()
    if missing:
        print_missing_dependencies(missing)
        return 1

    parser = create_parser()
    args = parser.parse_args(argv)

    if getattr(args, 'verbose', False):
        import logging
        logging.basicConfig(
            level=logging.DEBUG,
            format='%(name)s - %(levelname)s - %(message)s',
            stream=sys.stderr
        )

    from . import colors
    colors.init(nocolor=getattr(args, 'nocolor', False))

    from . import display
    if getattr(args, 'json', False):
        display.init(mode='json', show_all=True)
    elif getattr(args, 'flat', False):
        display.init(mode='flat', show_all=True)
    else:
        display.init(mode='columns', show_all=getattr(args, 'show_all', False))

    if not args.command:
        parser.print_help()
        return 1

    from ..core.config import get_registry_path
    from ..core.loader import load_registry
    from .commands import cmd_list, cmd_plan, cmd_rdepends

    try:
        args.registry_path = get_registry_path(args.registry)
        registry = load_registry(args.registry_path)

        if args.command in ('list', 'l'):
            return cmd_list(args, registry)

        elif args.command in ('rdepends', 'rd'):
            return cmd_rdepends(args, registry)

        elif args.command in ('plan', 'p'):
            if not args.components and not args.replace:
                print(colors.error("Error: no components specified"))
                return 1
            return cmd_plan(args, registry)

        else:
            print(f"Command '{args.command}' not yet implemented")
            return 1

    except KeyboardInterrupt:
        print("\nInterrupted")
        return 130

    except Exception as e:
        if args.verbose:
            import traceback
            traceback.print_exc()
        else:
            print(f"Error: {e}")
        return 1


if __name__ == '__main__':
    sys.exit(main())
