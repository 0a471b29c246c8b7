"""Per-network chain access: RPC clients and block-pinned multicalls."""
from __future__ import annotations

import logging
from typing import Mapping

from ...config import NetworkConfig
from .client import EvmClient
from .multicall import Multicall

logger = logging.getLogger(__name__)


class EvmToolkit:
    """Holds one ``EvmClient`` per configured network."""

    def __init__(self, networks: Mapping[str, NetworkConfig]) -> None:
        self._networks = dict(networks)
        self._clients = {
            name: EvmClient(name, cfg) for name, cfg in self._networks.items()
        }

    @property
    def networks(self) -> tuple[str, ...]:
        return tuple(self._clients)

    def client(self, network: str) -> EvmClient:
        try:
            return self._clients[network]
        except KeyError:
            raise ValueError(f"Network '{network}' is not configured") from None

    def get_multicall(
        self, network: str, block_identifier: int | str = "latest"
    ) -> Multicall:
        client = self.client(network)
        cfg = self._networks[network]
        return Multicall(
            client,
            address=cfg.multicall_address,
            block_identifier=block_identifier,
            chunk_size=cfg.multicall_chunk_size,
        )

    async def pinned_multicall(self, network: str) -> Multicall:
        """A multicall whose every batch reads the current block."""
        block = await self.client(network).block_number()
        logger.debug("Pinned %s reads to block %d", network, block)
        return self.get_multicall(network, block)
