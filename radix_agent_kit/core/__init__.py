from radix_agent_kit.core.adapters.BaseAdapter import BaseAdapter
from radix_agent_kit.core.adapters.models import OperationResult
from radix_agent_kit.core.wallet import Ed25519Wallet, RadixWallet

__all__ = [
    "BaseAdapter",
    "Ed25519Wallet",
    "OperationResult",
    "RadixWallet",
]
