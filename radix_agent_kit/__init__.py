__version__ = "0.1.0"

from radix_agent_kit.agent import RadixAgentKit
from radix_agent_kit.core import (
    BaseAdapter,
    Ed25519Wallet,
    OperationResult,
    RadixWallet,
)

__all__ = [
    "__version__",
    "BaseAdapter",
    "Ed25519Wallet",
    "OperationResult",
    "RadixAgentKit",
    "RadixWallet",
]
