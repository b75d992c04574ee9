"""devlog: keep a beginner-friendly development log, one entry per change."""

__version__ = "0.1.0"
