"""Stock Check — 43-factor next-day growth ranker."""

__version__ = "1.2.0"
