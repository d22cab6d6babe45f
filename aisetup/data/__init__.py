"""
Static data shipped with the package.

``COMMANDS_DIR`` holds the command definitions installed by the
``custom-commands`` extension when no other source is configured.
"""

from __future__ import annotations

from pathlib import Path

DATA_DIR = Path(__file__).parent
COMMANDS_DIR = DATA_DIR / "commands"
