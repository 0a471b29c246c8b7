"""ERC-20 token handle."""
from __future__ import annotations

from ..chains.evm.abi import ContractFunction
from .base import Contract


class Erc20(Contract):
    SYMBOL = ContractFunction("symbol", outputs=(("symbol", "string"),))
    DECIMALS = ContractFunction("decimals", outputs=(("decimals", "uint8"),))
    TOTAL_SUPPLY = ContractFunction("totalSupply", outputs=(("totalSupply", "uint256"),))
    BALANCE_OF = ContractFunction(
        "balanceOf", inputs=("address",), outputs=(("balance", "uint256"),)
    )

    async def symbol(self) -> str:
        return (await self._read(self.SYMBOL))["symbol"]

    async def decimals(self) -> int:
        return (await self._read(self.DECIMALS))["decimals"]

    async def total_supply(self) -> int:
        return (await self._read(self.TOTAL_SUPPLY))["totalSupply"]

    async def balance_of(self, owner: str) -> int:
        return (await self._read(self.BALANCE_OF, owner))["balance"]
