"""AI tools setup — converge a developer machine onto its desired AI CLI state."""

__version__ = "0.1.0"
