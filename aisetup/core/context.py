"""
Run context — the single source of truth for "whose home are we configuring."

Every core service that needs the home directory imports from here.
The home is set ONCE at startup by whichever entry point launches
the engine:

    - CLI:    main.py  → context.set_home(root)
    - Tests:  fixture  → context.set_home(tmp_path)

Module-level singleton (not a class). get_home() falls back to the
user's real home directory when nothing was registered.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional


_home: Optional[Path] = None


def set_home(root: Path) -> None:
    """Register the home directory for the current process."""
    global _home
    _home = root


def get_home() -> Path:
    """Return the registered home directory, or the user's home."""
    return _home if _home is not None else Path.home()


def reset() -> None:
    """Forget the registered home (tests)."""
    global _home
    _home = None
