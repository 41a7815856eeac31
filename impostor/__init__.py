"""Impostor word game backend"""

__version__ = "1.0.0"
