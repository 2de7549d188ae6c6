"""Wildtrip content backend: species, protected areas and news."""

__version__ = "0.1.0"
