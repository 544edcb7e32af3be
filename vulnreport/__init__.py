"""GitHub organization vulnerability alert report."""

__version__ = "1.0.0"
