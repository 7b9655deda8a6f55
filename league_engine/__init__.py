"""Rules engine for a fantasy F1 league: seasons, draft rules, scoring and standings."""

__version__ = "0.4.0"
