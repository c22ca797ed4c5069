"""
unplan - Uninstall planner for installer component registries

Computes which installed components must go when some are deselected:
- Reverse dependencies of removed components
- Components whose auto-dependencies are gone
- Virtual components nobody needs anymore
"""

__version__ = "0.1.0"
__author__ = "unplan contributors"
