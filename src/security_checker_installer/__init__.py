"""Installs a verified local PHP security checker binary on install/update."""

__version__ = "0.1.0"
