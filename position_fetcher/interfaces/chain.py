"""Contract reader protocol — where a contract handle sends its reads."""
from typing import Any, Protocol

from ..chains.evm.abi import ContractCall


class ContractReader(Protocol):
    """Executes one read-only contract call and returns decoded outputs."""

    @property
    def network(self) -> str: ...

    async def call(self, call: ContractCall) -> dict[str, Any]: ...
