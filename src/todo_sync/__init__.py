"""Command-line synchronization of tasks against an Exchange task store."""

__version__ = "0.1.0"
