from radix_agent_kit.core.clients.GatewayClient import GatewayClient

__all__ = [
    "GatewayClient",
]
