"""Color output support for unplan CLI.

Color palette:
  - Red: errors and user-deselected components
  - Orange: warnings and components removed as a consequence
  - Green: success/ok
  - Blue: contextual information
"""

import os
import sys

# ANSI color codes
_COLORS = {
    'reset': '\033[0m',
    'bold': '\033[1m',
    'red': '\033[91m',
    'orange': '\033[93m',   # No true orange in ANSI
    'green': '\033[92m',
    'blue': '\033[94m',
    'dim': '\033[2m',
}

_colors_enabled = True


def init(nocolor: bool = False):
    """Initialize color support.

    Args:
        nocolor: If True, disable colors unconditionally
    """
    global _colors_enabled

    if nocolor:
        _colors_enabled = False
    elif os.environ.get('NO_COLOR'):
        # https://no-color.org/
        _colors_enabled = False
    elif not sys.stdout.isatty():
        _colors_enabled = False
    else:
        _colors_enabled = True


def enabled() -> bool:
    return _colors_enabled


def _wrap(text: str, color: str) -> str:
    if not _colors_enabled:
        return text
    return f"{_COLORS.get(color, '')}{text}{_COLORS['reset']}"


def error(text: str) -> str:
    """Format text as error (red)."""
    return _wrap(text, 'red')


def warning(text: str) -> str:
    """Format text as warning (orange/yellow)."""
    return _wrap(text, 'orange')


def success(text: str) -> str:
    return _wrap(text, 'green')


def info(text: str) -> str:
    return _wrap(text, 'blue')


def dim(text: str) -> str:
    return _wrap(text, 'dim')


def bold(text: str) -> str:
    return _wrap(text, 'bold')


def component_removed(name: str, selected: bool = False) -> str:
    """Format a component name in a removal plan.

    Deselected components are red, everything dragged along is orange.
    """
    return error(name) if selected else warning(name)
