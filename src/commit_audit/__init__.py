"""commit-audit: flag commit patterns inconsistent with incremental work."""

__version__ = "0.1.0"
