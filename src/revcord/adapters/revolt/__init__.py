"""Revolt adapter package."""

from revcord.adapters.revolt.adapter import RevoltAdapter, _masquerade_name

__all__ = ["RevoltAdapter", "_masquerade_name"]
