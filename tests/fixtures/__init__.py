"""Test fixtures for fabula-import tests."""
