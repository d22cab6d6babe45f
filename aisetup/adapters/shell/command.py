"""
Command runner — execute external commands and capture output.

This is the SINGLE PLACE where ``subprocess.run`` is called. Package
manager calls, extension installers and the session alias probe all
go through it, so timeouts and missing executables are handled once.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
import time
from collections.abc import Mapping
from pathlib import Path

from aisetup.core.models.result import Receipt

logger = logging.getLogger(__name__)


class CommandRunner:
    """Run argv-style commands (never through a shell) and return receipts."""

    name = "command"

    def __init__(self, default_timeout: int = 300):
        self._default_timeout = default_timeout

    def which(self, executable: str) -> str | None:
        """Resolve ``executable`` on PATH."""
        return shutil.which(executable)

    def is_available(self, executable: str) -> bool:
        return self.which(executable) is not None

    def run(
        self,
        cmd: list[str],
        *,
        action_id: str = "",
        timeout: int | None = None,
        cwd: Path | None = None,
        env: Mapping[str, str] | None = None,
    ) -> Receipt:
        """Run ``cmd`` and capture its output.

        Never raises. A non-zero exit, a timeout or a missing executable
        all produce a failed receipt.
        """
        action_id = action_id or (cmd[0] if cmd else "")
        timeout = timeout or self._default_timeout

        if not cmd:
            return Receipt.failure(self.name, action_id, error="Empty command")

        logger.debug("Executing: %s (cwd=%s)", " ".join(cmd), cwd)
        start = time.monotonic()

        try:
            result = subprocess.run(
                cmd,
                cwd=str(cwd) if cwd else None,
                env=dict(env) if env is not None else None,
                capture_output=True,
                text=True,
                timeout=timeout,
            )
        except subprocess.TimeoutExpired:
            return Receipt.failure(
                self.name,
                action_id,
                error=f"Command timed out after {timeout}s",
                metadata={"command": cmd, "timeout": timeout},
            )
        except FileNotFoundError:
            return Receipt.failure(
                self.name,
                action_id,
                error=f"Executable not found: {cmd[0]}",
                metadata={"command": cmd},
            )
        except OSError as e:
            return Receipt.failure(
                self.name,
                action_id,
                error=f"Command execution error: {e}",
                metadata={"command": cmd},
            )

        elapsed_ms = int((time.monotonic() - start) * 1000)
        stdout = result.stdout.strip()
        stderr = result.stderr.strip()

        if result.returncode == 0:
            return Receipt.success(
                self.name,
                action_id,
                output=stdout,
                duration_ms=elapsed_ms,
                metadata={"command": cmd, "return_code": 0, "stderr": stderr},
            )

        return Receipt.failure(
            self.name,
            action_id,
            error=stderr or f"Command exited with code {result.returncode}",
            duration_ms=elapsed_ms,
            metadata={"command": cmd, "return_code": result.returncode, "stdout": stdout},
        )
