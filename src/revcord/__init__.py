"""Revcord: Discord–Revolt relay bridge with per-bridge masquerades."""

__version__ = "0.1.0"
