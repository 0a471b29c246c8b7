"""Wallet balances in lending app tokens."""
from __future__ import annotations

import logging
from collections import defaultdict
from typing import Sequence

from eth_utils import is_hex_address

from ...chains.evm.abi import ContractCall
from ...chains.evm.toolkit import EvmToolkit
from ...contracts.erc20 import Erc20
from ...models import AppTokenPosition, TokenBalance

logger = logging.getLogger(__name__)


class LendingBalanceFetcher:
    """Reads ``balanceOf(wallet)`` for every position token, one batch per network."""

    def __init__(self, toolkit: EvmToolkit) -> None:
        self._toolkit = toolkit

    async def fetch_balances(
        self, wallet_address: str, positions: Sequence[AppTokenPosition]
    ) -> list[TokenBalance]:
        if not is_hex_address(wallet_address):
            raise ValueError(f"Malformed wallet address: {wallet_address!r}")
        wallet = wallet_address.lower()

        by_network: dict[str, list[AppTokenPosition]] = defaultdict(list)
        for position in positions:
            by_network[position.network].append(position)

        balances: list[TokenBalance] = []
        for network, network_positions in by_network.items():
            multicall = self._toolkit.get_multicall(network)
            outcomes = await multicall.aggregate(
                [ContractCall(p.address, Erc20.BALANCE_OF, (wallet,)) for p in network_positions]
            )
            for position, outcome in zip(network_positions, outcomes):
                if not outcome.ok:
                    logger.warning(
                        "Skipping balance of %s on %s: %s",
                        position.address, network, outcome.error,
                    )
                    continue
                raw_balance = outcome.unwrap()["balance"]
                if raw_balance == 0:
                    continue
                balance = raw_balance / 10**position.decimals
                sign = -1 if position.role.is_debt else 1
                balances.append(
                    TokenBalance(
                        position=position,
                        balance=balance,
                        balance_usd=sign * balance * position.price,
                    )
                )

        logger.info("Found %d non-zero balances for %s", len(balances), wallet)
        return balances
