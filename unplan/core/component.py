"""
Component model for installer registries

A component is an installable unit: a name, an install state and the
metadata used to decide what else has to go when it is removed.

Requirement strings follow the installer convention:
    "name"            - any version
    "name-1.0"        - exactly version 1.0
    "name->=1.0"      - version 1.0 or newer (also <, <=, =, >)
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

# Auto-dependency token deferring the decision to a dynamic policy
DYNAMIC_TOKEN = "script"

# Separator used in Dependencies / AutoDependOn / Replaces lists
COMMA_REGEX = re.compile(r'\s*,\s*')

# "name-<op><version>", version must start with a digit
REQUIREMENT_REGEX = re.compile(r'^(.+?)-((?:<=|>=|<|>|=)?\d[^-]*)$')

OP_REGEX = re.compile(r'^(<=|>=|<|>|=)?(.+)$')


class InstallAction(Enum):
    """What the registry plans to do with a component."""
    NORMAL = "normal"
    INSTALL = "install"
    UNINSTALL = "uninstall"
    AUTODEPEND_UNINSTALLATION = "autodepend-uninstallation"


@dataclass(eq=False)
class Component:
    """An installable unit tracked by a ComponentRegistry.

    Components compare by identity: two registries may hold components with
    the same name, they are still different objects.
    """
    name: str
    version: str = ""
    display_name: str = ""
    description: str = ""
    installed: bool = True
    virtual: bool = False
    forced_installation: bool = False
    dependencies: List[str] = field(default_factory=list)
    auto_dependencies: List[str] = field(default_factory=list)
    replaces: List[str] = field(default_factory=list)
    install_action: InstallAction = InstallAction.NORMAL
    index: int = -1  # Arena slot, assigned by the registry

    def aliases(self) -> List[str]:
        """Names under which this component satisfies a requirement."""
        return list(self.replaces) + [self.name]

    def has_dynamic_auto_dependency(self) -> bool:
        """True if the auto-dependency decision is left to a policy."""
        if not self.auto_dependencies:
            return False
        return self.auto_dependencies[0].lower() == DYNAMIC_TOKEN

    @property
    def title(self) -> str:
        return self.display_name or self.name

    def __repr__(self):
        return f"Component({self.name!r})"


def parse_names(value) -> List[str]:
    """Split a comma-separated name list, skipping empty parts.

    Lists are accepted as well so loaders can pass either form.
    """
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [str(v).strip() for v in value if str(v).strip()]
    return [part for part in COMMA_REGEX.split(str(value).strip()) if part]


def parse_name_and_version(requirement: str) -> Tuple[str, str]:
    """Split a requirement into (name, version constraint).

    The constraint is empty when the requirement carries no version.
    """
    requirement = requirement.strip()
    match = REQUIREMENT_REGEX.match(requirement)
    if not match:
        return requirement, ""
    return match.group(1), match.group(2)


def _version_key(version: str) -> Tuple:
    parts = []
    for part in re.split(r'[.\-_+~]', version):
        if not part:
            continue
        if part.isdigit():
            parts.append((int(part), ''))
        else:
            parts.append((-1, part))
    return tuple(parts)


def compare_versions(a: str, b: str) -> int:
    """Compare dotted versions. Returns -1, 0 or 1."""
    ka, kb = _version_key(a), _version_key(b)
    if ka == kb:
        return 0
    return -1 if ka < kb else 1


def version_matches(version: Optional[str], constraint: str) -> bool:
    """Check a component version against a constraint like '>=1.2'.

    An empty constraint matches everything. So does an empty version:
    components without version metadata cannot be ruled out.
    """
    if not constraint or not version:
        return True

    match = OP_REGEX.match(constraint)
    op = match.group(1) or '='
    cmp = compare_versions(version, match.group(2))

    if op == '=':
        return cmp == 0
    if op == '<':
        return cmp < 0
    if op == '<=':
        return cmp <= 0
    if op == '>':
        return cmp > 0
    return cmp >= 0
