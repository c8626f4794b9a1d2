"""Convert LiveJournal XML exports into Hugo posts."""

__version__ = "0.1.0"
