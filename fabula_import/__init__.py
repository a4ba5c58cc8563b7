"""Fabula Ultima rulebook importer."""

__version__ = "0.1.0"
