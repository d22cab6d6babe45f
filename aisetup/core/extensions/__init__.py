"""
Extensions — named bundles of commands with their own install procedure.

    from aisetup.core.extensions import Extension, ExtensionContext
"""

from aisetup.core.extensions.base import Extension, ExtensionContext
from aisetup.core.extensions.builtin import CommandBundleExtension, CommandExtension

__all__ = [
    "CommandBundleExtension",
    "CommandExtension",
    "Extension",
    "ExtensionContext",
]
