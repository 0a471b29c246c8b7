"""ABI encoding for read-only contract calls."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from eth_abi import decode, encode
from eth_abi.exceptions import DecodingError, EncodingError
from eth_utils import function_signature_to_4byte_selector, to_checksum_address

from ...errors import MalformedResponseError


@dataclass(frozen=True)
class ContractFunction:
    """A contract function with typed inputs and named outputs.

    Outputs are ``(name, type)`` pairs; decoded return data is a mapping keyed
    by output name, mirroring how the ABI names the fields.
    """

    name: str
    inputs: tuple[str, ...] = ()
    outputs: tuple[tuple[str, str], ...] = ()

    @property
    def signature(self) -> str:
        return f"{self.name}({','.join(self.inputs)})"

    @property
    def selector(self) -> bytes:
        return function_signature_to_4byte_selector(self.signature)

    def encode_input(self, *args: Any) -> bytes:
        if len(args) != len(self.inputs):
            raise TypeError(
                f"{self.signature} takes {len(self.inputs)} arguments, got {len(args)}"
            )
        return self.selector + encode(list(self.inputs), list(args))

    def decode_output(self, data: bytes) -> dict[str, Any]:
        types = [output_type for _, output_type in self.outputs]
        try:
            values = decode(types, data)
        except (DecodingError, ValueError) as e:
            raise MalformedResponseError(
                f"Cannot decode {self.signature} return data: {e}"
            ) from e
        return {name: value for (name, _), value in zip(self.outputs, values)}


@dataclass(frozen=True)
class ContractCall:
    """One read: a function applied to arguments on a contract."""

    address: str
    function: ContractFunction
    args: tuple[Any, ...] = ()

    @property
    def target(self) -> str:
        return to_checksum_address(self.address)

    def calldata(self) -> bytes:
        try:
            return self.function.encode_input(*self.args)
        except EncodingError as e:
            raise MalformedResponseError(
                f"Cannot encode {self.function.signature} arguments {self.args!r}: {e}"
            ) from e
