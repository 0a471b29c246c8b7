"""EVM JSON-RPC client with fallback support."""
import logging
import ssl
from typing import Any

import aiohttp
import certifi

from ...config import NetworkConfig
from ...errors import ContractCallError
from .abi import ContractCall

logger = logging.getLogger(__name__)


def _block_param(block_identifier: int | str) -> str:
    if isinstance(block_identifier, int):
        return hex(block_identifier)
    return block_identifier


class EvmClient:
    """EVM JSON-RPC client with automatic endpoint fallback."""

    def __init__(self, network: str, config: NetworkConfig) -> None:
        self.network = network
        self.endpoints = list(config.rpc_endpoints)
        self.timeout = config.rpc_timeout
        self.current_rpc_index = 0

    async def rpc_call(self, method: str, params: list[Any]) -> Any:
        """Make RPC call with fallback to alternative endpoints."""
        payload = {"jsonrpc": "2.0", "id": 1, "method": method, "params": params}

        ssl_context = ssl.create_default_context(cafile=certifi.where())

        last_error: Exception | None = None
        for attempt in range(len(self.endpoints)):
            rpc_index = (self.current_rpc_index + attempt) % len(self.endpoints)
            rpc_url = self.endpoints[rpc_index]

            try:
                connector = aiohttp.TCPConnector(ssl=ssl_context)
                async with aiohttp.ClientSession(connector=connector) as session:
                    async with session.post(
                        rpc_url,
                        json=payload,
                        timeout=aiohttp.ClientTimeout(total=self.timeout),
                    ) as response:
                        result = await response.json()
                        if "error" in result:
                            raise RuntimeError(f"RPC Error: {result['error']}")

                        if rpc_index != self.current_rpc_index:
                            logger.info("Switched to RPC endpoint: %s", rpc_url)
                            self.current_rpc_index = rpc_index

                        return result.get("result")
            except Exception as e:
                last_error = e
                logger.warning("RPC endpoint %s failed: %s", rpc_url, e)
                if attempt < len(self.endpoints) - 1:
                    logger.info("Trying next endpoint...")
                continue

        raise RuntimeError(f"All RPC endpoints failed. Last error: {last_error}")

    async def block_number(self) -> int:
        """Latest block number."""
        result = await self.rpc_call("eth_blockNumber", [])
        if not isinstance(result, str):
            raise RuntimeError(f"eth_blockNumber returned non-hex result: {result!r}")
        try:
            return int(result, 16)
        except ValueError as e:
            raise RuntimeError(f"eth_blockNumber returned non-hex result: {result!r}") from e

    async def eth_call(
        self, to: str, data: bytes, block_identifier: int | str = "latest"
    ) -> bytes:
        """Execute a read-only call and return the raw return data."""
        result = await self.rpc_call(
            "eth_call",
            [{"to": to, "data": "0x" + data.hex()}, _block_param(block_identifier)],
        )
        if not isinstance(result, str):
            raise RuntimeError(f"eth_call returned non-hex result: {result!r}")
        return bytes.fromhex(result[2:] if result.startswith("0x") else result)

    async def call(self, call: ContractCall) -> dict[str, Any]:
        """Single unbatched read against the latest block."""
        try:
            data = await self.eth_call(call.target, call.calldata())
        except RuntimeError as e:
            raise ContractCallError(call.address, call.function.name, str(e)) from e
        return call.function.decode_output(data)
