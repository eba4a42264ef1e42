"""Gateway: bridge routing, relay coordinator, lifecycle supervisor."""

from revcord.gateway.lifecycle import BridgeSupervisor
from revcord.gateway.relay import Relay, RelayState, discord_to_revolt, revolt_to_discord
from revcord.gateway.router import BridgeRouter

__all__ = [
    "BridgeRouter",
    "BridgeSupervisor",
    "Relay",
    "RelayState",
    "discord_to_revolt",
    "revolt_to_discord",
]
