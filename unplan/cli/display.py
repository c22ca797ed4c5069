"""Display utilities for unplan CLI.

Component lists are rendered in one of three modes:
- columns: Multi-column layout (default, human-friendly)
- flat: One item per line (parsable by scripts)
- json: JSON output (programmatic consumption)
"""

import json
import shutil
from enum import Enum
from typing import Any, Callable, List, Optional


class DisplayMode(Enum):
    """Output display mode."""
    COLUMNS = "columns"
    FLAT = "flat"
    JSON = "json"


# Global display settings
_display_mode = DisplayMode.COLUMNS
_show_all = False


def init(mode: str = "columns", show_all: bool = False):
    """Initialize display settings.

    Args:
        mode: Display mode ("columns", "flat", "json")
        show_all: If True, never truncate output
    """
    global _display_mode, _show_all
    _display_mode = DisplayMode(mode) if mode else DisplayMode.COLUMNS
    _show_all = show_all


def get_mode() -> DisplayMode:
    return _display_mode


def get_terminal_width() -> int:
    """Get terminal width, with fallback to 80 columns."""
    try:
        return shutil.get_terminal_size().columns
    except (OSError, ValueError):
        return 80


def format_component_list(
    names: List[str],
    max_lines: int = 10,
    show_all: Optional[bool] = None,
    indent: int = 2,
    column_gap: int = 2,
    color_func: Optional[Callable[[str], str]] = None,
    mode: Optional[DisplayMode] = None,
    terminal_width: Optional[int] = None
) -> List[str]:
    """Format a list of component names according to display mode.

    Args:
        names: Component names to display
        max_lines: Maximum lines before truncation (columns mode only)
        show_all: Override global show_all setting
        indent: Spaces to indent (columns mode only)
        column_gap: Gap between columns (columns mode only)
        color_func: Optional colorize function (columns mode only)
        mode: Override global display mode
        terminal_width: Override terminal width (for testing)

    Returns:
        List of formatted lines ready to print
    """
    if not names:
        return []

    effective_mode = mode if mode is not None else _display_mode
    effective_show_all = show_all if show_all is not None else _show_all

    if effective_mode == DisplayMode.JSON:
        return [json.dumps(names, ensure_ascii=False)]

    if effective_mode == DisplayMode.FLAT:
        return list(names)

    width = terminal_width or get_terminal_width()
    col_width = max(len(n) for n in names) + column_gap
    num_cols = max(1, (width - indent) // col_width)
    lines_needed = (len(names) + num_cols - 1) // num_cols

    lines_to_show = lines_needed if effective_show_all else min(max_lines, lines_needed)
    hidden_count = max(0, len(names) - lines_to_show * num_cols)

    result = []
    prefix = " " * indent
    for line_idx in range(lines_to_show):
        row = names[line_idx * num_cols:(line_idx + 1) * num_cols]
        cols = []
        for name in row:
            padding = " " * (col_width - len(name))
            # Pad on raw length, not colored length
            cols.append((color_func(name) if color_func else name) + padding)
        result.append(prefix + "".join(cols).rstrip())

    if hidden_count > 0:
        result.append(prefix + f"... and {hidden_count} more")

    return result


def print_component_list(names: List[str], **kwargs) -> None:
    """Print a list of component names (see format_component_list)."""
    for line in format_component_list(names, **kwargs):
        print(line)


def print_json(data: Any) -> None:
    print(json.dumps(data, ensure_ascii=False, indent=2))
