"""Typed read-only contract handles."""
from __future__ import annotations

from typing import Any, TypeVar

from ..chains.evm.abi import ContractCall, ContractFunction
from ..interfaces.chain import ContractReader

C = TypeVar("C", bound="Contract")


class Contract:
    """A contract at ``address`` whose reads go through ``reader``.

    The reader is either an ``EvmClient`` (one round trip per read) or a
    ``Multicall`` (reads coalesced into batches).
    """

    def __init__(self, address: str, reader: ContractReader) -> None:
        self.address = address.lower()
        self._reader = reader

    @property
    def network(self) -> str:
        return self._reader.network

    def with_reader(self: C, reader: ContractReader) -> C:
        return type(self)(self.address, reader)

    async def _read(self, function: ContractFunction, *args: Any) -> dict[str, Any]:
        return await self._reader.call(ContractCall(self.address, function, args))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.address!r} on {self.network})"
