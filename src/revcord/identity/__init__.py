"""Identity resolution: masquerade overrides and native fallbacks."""

from revcord.identity.masquerade import MasqueradeResolver, masqueraded_identity, native_identity

__all__ = ["MasqueradeResolver", "masqueraded_identity", "native_identity"]
