"""
Graphstack configuration.

Settings are read from ``GRAPHSTACK_*`` environment variables or a ``.env`` file.
"""

from graphstack.config.settings import NodeLowererLookup, Settings, get_settings

__all__ = [
    "NodeLowererLookup",
    "Settings",
    "get_settings",
]
