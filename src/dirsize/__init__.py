"""dirsize - disk usage for a directory tree, tolerant of partial access failures."""

__version__ = "0.1.0"
