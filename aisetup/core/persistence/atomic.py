"""
Atomic file replacement.

Writes go to a temp file in the target's directory, which is then
renamed over the target. A crash mid-write leaves either the old
file or the new one, never a half-written file.
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

logger = logging.getLogger(__name__)


def write_text_atomic(path: Path, content: str, *, prefix: str = ".aisetup_") -> None:
    """Replace ``path`` with ``content`` atomically.

    Creates the parent directory if needed. Preserves the file mode of
    an existing target (shell configs are sometimes 0600).

    Raises:
        OSError: If the temp file cannot be written or renamed.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    mode: int | None = None
    try:
        mode = path.stat().st_mode & 0o7777
    except OSError:
        pass

    fd, tmp_path = tempfile.mkstemp(dir=path.parent, prefix=prefix, suffix=".tmp")
    tmp = Path(tmp_path)
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())
        if mode is not None:
            os.chmod(tmp, mode)
        tmp.replace(path)
        logger.debug("Wrote %s (%d bytes)", path, len(content))
    except Exception:
        tmp.unlink(missing_ok=True)
        raise
