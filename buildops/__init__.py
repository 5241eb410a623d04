"""BuildOps: building maintenance platform with operator continuity tracking."""

__version__ = "0.1.0"
