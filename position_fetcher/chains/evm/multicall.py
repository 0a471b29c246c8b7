"""Multicall3 batching — many reads, one eth_call, one block."""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Awaitable, Sequence, TypeVar

from ...config import MULTICALL3_ADDRESS
from ...errors import ContractCallError, MalformedResponseError, PositionFetcherError
from .abi import ContractCall, ContractFunction

if TYPE_CHECKING:
    from ...contracts.base import Contract
    from .client import EvmClient

logger = logging.getLogger(__name__)

T = TypeVar("T")
C = TypeVar("C", bound="Contract")

AGGREGATE3 = ContractFunction(
    "aggregate3",
    inputs=("(address,bool,bytes)[]",),
    outputs=(("returnData", "(bool,bytes)[]"),),
)


@dataclass(frozen=True)
class CallOutcome:
    """Result of one call inside a batch: a decoded value or an error."""

    call: ContractCall
    value: dict[str, Any] | None = None
    error: PositionFetcherError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> dict[str, Any]:
        if self.error is not None:
            raise self.error
        if self.value is None:
            raise MalformedResponseError(
                f"No result for {self.call.function.signature} on {self.call.address}"
            )
        return self.value


async def gather_reads(*reads: Awaitable[T]) -> list[T]:
    """Await all reads, then raise the first failure if any failed."""
    results = await asyncio.gather(*reads, return_exceptions=True)
    for result in results:
        if isinstance(result, BaseException):
            raise result
    return list(results)


class Multicall:
    """Batch builder over the Multicall3 ``aggregate3`` function.

    ``aggregate`` is the explicit form: submit descriptors, get outcomes back
    by index. ``wrap`` binds a contract handle to this batcher so reads issued
    in the same event-loop tick are coalesced into one ``aggregate3`` call.
    Every round trip is pinned to ``block_identifier``.
    """

    def __init__(
        self,
        client: EvmClient,
        address: str = MULTICALL3_ADDRESS,
        block_identifier: int | str = "latest",
        chunk_size: int = 200,
    ) -> None:
        self._client = client
        self.address = address
        self.block_identifier = block_identifier
        self.chunk_size = chunk_size
        self._queue: list[tuple[ContractCall, asyncio.Future[dict[str, Any]]]] = []
        self._dispatch_handle: asyncio.Handle | None = None
        self._inflight: set[asyncio.Task[None]] = set()

    @property
    def network(self) -> str:
        return self._client.network

    def wrap(self, contract: C) -> C:
        """Return ``contract`` with its reads routed through this batcher."""
        return contract.with_reader(self)

    async def aggregate(self, calls: Sequence[ContractCall]) -> list[CallOutcome]:
        """Execute ``calls`` in as few round trips as the chunk size allows."""
        outcomes: list[CallOutcome] = []
        for start in range(0, len(calls), self.chunk_size):
            chunk = calls[start:start + self.chunk_size]
            outcomes.extend(await self._aggregate_chunk(chunk))
        return outcomes

    async def _aggregate_chunk(self, calls: Sequence[ContractCall]) -> list[CallOutcome]:
        try:
            payload = [(call.target, True, call.calldata()) for call in calls]
        except MalformedResponseError as e:
            return [CallOutcome(call, error=e) for call in calls]

        try:
            raw = await self._client.eth_call(
                self.address, AGGREGATE3.encode_input(payload), self.block_identifier
            )
            return_data = AGGREGATE3.decode_output(raw)["returnData"]
        except RuntimeError as e:
            logger.warning(
                "Multicall of %d calls on %s failed: %s", len(calls), self.network, e
            )
            return [
                CallOutcome(call, error=ContractCallError(call.address, call.function.name, str(e)))
                for call in calls
            ]
        except MalformedResponseError as e:
            return [CallOutcome(call, error=e) for call in calls]

        if len(return_data) != len(calls):
            error = MalformedResponseError(
                f"aggregate3 returned {len(return_data)} results for {len(calls)} calls"
            )
            return [CallOutcome(call, error=error) for call in calls]

        outcomes: list[CallOutcome] = []
        for call, (success, data) in zip(calls, return_data):
            if not success:
                outcomes.append(
                    CallOutcome(
                        call,
                        error=ContractCallError(call.address, call.function.name, "reverted"),
                    )
                )
                continue
            try:
                outcomes.append(CallOutcome(call, value=call.function.decode_output(data)))
            except MalformedResponseError as e:
                outcomes.append(CallOutcome(call, error=e))
        return outcomes

    # ------------------------------------------------------------------
    # Coalescing reader
    # ------------------------------------------------------------------

    async def call(self, call: ContractCall) -> dict[str, Any]:
        """Queue one read for the next batch and wait for its result."""
        loop = asyncio.get_running_loop()
        future: asyncio.Future[dict[str, Any]] = loop.create_future()
        self._queue.append((call, future))
        if self._dispatch_handle is None:
            self._dispatch_handle = loop.call_soon(self._dispatch)
        return await future

    def _dispatch(self) -> None:
        batch, self._queue = self._queue, []
        self._dispatch_handle = None
        task = asyncio.ensure_future(self._resolve(batch))
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)

    async def _resolve(
        self, batch: list[tuple[ContractCall, asyncio.Future[dict[str, Any]]]]
    ) -> None:
        logger.debug("Dispatching batch of %d calls on %s", len(batch), self.network)
        try:
            outcomes = await self.aggregate([call for call, _ in batch])
        except Exception as e:
            for _, future in batch:
                if not future.done():
                    future.set_exception(e)
            return

        for (_, future), outcome in zip(batch, outcomes):
            if future.done():
                continue
            try:
                future.set_result(outcome.unwrap())
            except PositionFetcherError as e:
                future.set_exception(e)
