"""Core modules for unplan"""

from .component import Component, InstallAction
from .registry import ComponentRegistry, RegistryError
from .calculator import UninstallCalculator, UninstallReason, plan_uninstall
from .loader import load_registry, save_registry

__all__ = [
    'Component',
    'InstallAction',
    'ComponentRegistry',
    'RegistryError',
    'UninstallCalculator',
    'UninstallReason',
    'plan_uninstall',
    'load_registry',
    'save_registry',
]
