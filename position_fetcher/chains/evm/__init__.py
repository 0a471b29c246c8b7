"""EVM contract access: JSON-RPC client, ABI codec, Multicall3 batching."""
from .abi import ContractCall, ContractFunction
from .client import EvmClient
from .multicall import CallOutcome, Multicall, gather_reads
from .toolkit import EvmToolkit

__all__ = [
    "CallOutcome",
    "ContractCall",
    "ContractFunction",
    "EvmClient",
    "EvmToolkit",
    "Multicall",
    "gather_reads",
]
