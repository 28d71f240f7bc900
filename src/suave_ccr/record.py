#!/usr/bin/env python3
"""Public record of a confidential compute request.

The record holds every field that ends up in the public, signed view of a
request. Most fields start out unset and are filled progressively by whoever
builds the request (nonce and fee lookups, kettle discovery) before it is
signed and encoded.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, ClassVar, Mapping

from eth_typing import ChecksumAddress
from hexbytes import HexBytes
from web3 import Web3
from web3.types import TxParams

from .errors import MissingFieldError, SignedRecordError
from .models import UNSIGNED, Signature, SignatureState, Signed, Unsigned
from .utils.encoding import (
    ZERO_ADDRESS,
    to_address,
    to_bytes_safe,
    to_fixed_bytes,
    to_hex_quantity,
    to_int_safe,
)

logger = logging.getLogger(__name__)

# keccak256(b"") - the commitment used when no confidential input is attached
EMPTY_BYTES_HASH: HexBytes = HexBytes(
    "0xc5d2460186f7233c927e7db2dcc703c0e500b653ca82273b7bfad8045d85a470"
)

# Fields covered by the signing digest. Changing one of them after signing
# would leave a stale signature behind.
PREIMAGE_FIELDS: frozenset[str] = frozenset({
    "kettle_address",
    "confidential_inputs_hash",
    "nonce",
    "gas_price",
    "gas",
    "to",
    "value",
    "input",
})

# Required before building the digest, in wire order
BUILD_FIELDS: tuple[str, ...] = ("nonce", "gas_price", "gas", "kettle_address")

# Required before the record can be encoded for submission, in wire order
SUBMIT_FIELDS: tuple[str, ...] = ("nonce", "gas_price", "gas", "kettle_address", "chain_id")

_UINT_BITS: dict[str, int] = {
    "nonce": 64,
    "chain_id": 64,
    "gas": 128,
    "gas_price": 128,
    "value": 256,
}

_MISSING = object()


@dataclass(slots=True)
class ConfidentialComputeRecord:
    """The public envelope of one confidential compute request.

    Values are normalized on assignment: addresses become checksummed
    strings, byte fields become HexBytes and integers are range checked.

    Once a signature is attached, assigning a different value to any field
    in PREIMAGE_FIELDS raises SignedRecordError. Use clear_signature() to
    downgrade the record explicitly before editing it.

    Attributes:
        nonce: Sender nonce
        to: Recipient address (zero address when unset)
        gas: Gas limit
        gas_price: Gas price in wei
        value: Value transferred in wei
        input: Public call payload
        kettle_address: Address of the execution endpoint
        chain_id: Chain ID, part of the record but not of the signing digest
        confidential_inputs_hash: keccak256 of the confidential inputs
        signature_state: Unsigned or Signed(signature)
        from_: Locally cached signer address, never serialized
    """

    TYPE: ClassVar[int] = 0x42

    nonce: int | None = None
    to: ChecksumAddress = ZERO_ADDRESS
    gas: int | None = None
    gas_price: int | None = None
    value: int = 0
    input: HexBytes = field(default_factory=lambda: HexBytes(b""))
    kettle_address: ChecksumAddress | None = None
    chain_id: int | None = None
    confidential_inputs_hash: HexBytes | None = None
    signature_state: SignatureState = UNSIGNED
    from_: ChecksumAddress | None = field(default=None, compare=False)

    def __setattr__(self, name: str, value: Any) -> None:
        value = _normalize(name, value)
        if name in PREIMAGE_FIELDS:
            state = getattr(self, "signature_state", UNSIGNED)
            if isinstance(state, Signed) and getattr(self, name, _MISSING) != value:
                raise SignedRecordError(name)
        object.__setattr__(self, name, value)

    def __str__(self) -> str:
        """Human-readable string representation."""
        return (
            f"ConfidentialComputeRecord(nonce={self.nonce}, "
            f"to={self.to[:10]}..., "
            f"kettle={self.kettle_address[:10] + '...' if self.kettle_address else None}, "
            f"chain={self.chain_id}, "
            f"signed={self.is_signed})"
        )

    @classmethod
    def from_tx_params(
        cls,
        tx: TxParams | Mapping[str, Any],
        kettle_address: str | None = None,
    ) -> "ConfidentialComputeRecord":
        """Create a record from a generic web3 transaction request.

        Only fields present in ``tx`` are copied. Fee and identity fields
        that are absent stay None so that later missing-field checks are
        accurate; ``to``, ``value`` and ``input`` fall back to the zero
        address, zero and empty bytes.

        Args:
            tx: Transaction parameters (web3 TxParams keys)
            kettle_address: Address of the execution endpoint

        Returns:
            A new unsigned record
        """
        record = cls(
            nonce=tx.get("nonce"),
            to=tx.get("to") or ZERO_ADDRESS,
            gas=tx.get("gas"),
            gas_price=tx.get("gasPrice"),
            value=tx.get("value", 0),
            input=tx.get("data", tx.get("input")),
            kettle_address=kettle_address,
            chain_id=tx.get("chainId"),
        )
        if sender := tx.get("from"):
            record.from_ = sender
        return record

    @property
    def signature(self) -> Signature | None:
        """The attached signature, if any."""
        match self.signature_state:
            case Signed(signature=signature):
                return signature
            case _:
                return None

    @property
    def is_signed(self) -> bool:
        return isinstance(self.signature_state, Signed)

    def set_signature(self, signature: Signature) -> None:
        """Attach a signature, replacing any previous one."""
        self.signature_state = Signed(signature)

    def clear_signature(self) -> None:
        """Drop the signature so pre-image fields may be edited again."""
        self.signature_state = UNSIGNED
        self.from_ = None

    def set_confidential_inputs_hash(self, confidential_inputs_hash: bytes | str) -> None:
        self.confidential_inputs_hash = confidential_inputs_hash

    def set_confidential_inputs_hash_from_bytes(self, confidential_inputs: bytes) -> None:
        self.set_confidential_inputs_hash(Web3.keccak(bytes(confidential_inputs)))

    def missing_fields(self, require_signature: bool = True) -> list[str]:
        """List required fields that are still unset.

        Args:
            require_signature: Include chain_id and signature, which are
                needed for encoding but not for the signing digest

        Returns:
            Field names in wire order
        """
        names = SUBMIT_FIELDS if require_signature else BUILD_FIELDS
        missing = [name for name in names if getattr(self, name) is None]
        if require_signature and not self.is_signed:
            missing.append("signature")
        return missing

    def require(self, *names: str) -> tuple[Any, ...]:
        """Return the values of the named fields, failing on the first unset one.

        Raises:
            MissingFieldError: If any of the named fields is None
        """
        values = []
        for name in names:
            value = self.signature if name == "signature" else getattr(self, name)
            if value is None:
                raise MissingFieldError(name)
            values.append(value)
        return tuple(values)

    def can_build(self) -> bool:
        """True when every field needed for encoding, apart from the signature, is set."""
        return all(getattr(self, name) is not None for name in SUBMIT_FIELDS)

    def is_submittable(self) -> bool:
        return not self.missing_fields()

    def to_json_dict(self) -> dict[str, Any]:
        """Convert to the JSON-RPC representation.

        Quantities are 0x-hex strings, byte fields 0x-hex, and the signature
        is flattened into v/r/s. Unset optional fields are omitted.
        """
        result: dict[str, Any] = {
            "type": to_hex_quantity(self.TYPE),
            "to": self.to,
            "value": to_hex_quantity(self.value),
            "input": Web3.to_hex(self.input),
        }
        for key, name in _JSON_QUANTITIES.items():
            if (quantity := getattr(self, name)) is not None:
                result[key] = to_hex_quantity(quantity)
        if self.kettle_address is not None:
            result["kettleAddress"] = self.kettle_address
        if self.confidential_inputs_hash is not None:
            result["confidentialInputsHash"] = Web3.to_hex(self.confidential_inputs_hash)
        if (signature := self.signature) is not None:
            result["v"] = to_hex_quantity(signature.v)
            result["r"] = to_hex_quantity(signature.r)
            result["s"] = to_hex_quantity(signature.s)
        return result

    @classmethod
    def from_json_dict(cls, data: Mapping[str, Any]) -> "ConfidentialComputeRecord":
        """Parse the JSON-RPC representation produced by to_json_dict or a node.

        Keys that are not part of the record (hash, type, fee market fields)
        are ignored.

        Raises:
            MissingFieldError: If only part of the v/r/s triple is present
            InvalidSignatureError: If v/r/s do not form a valid signature
            ValueError: If a value has the wrong shape
        """
        record = cls(
            to=data.get("to") or ZERO_ADDRESS,
            value=data.get("value") or 0,
            input=data.get("input"),
            kettle_address=data.get("kettleAddress"),
            confidential_inputs_hash=data.get("confidentialInputsHash"),
            **{
                name: data.get(key)
                for key, name in _JSON_QUANTITIES.items()
            },
        )

        vrs = [data.get(key) for key in ("v", "r", "s")]
        if any(part is not None for part in vrs):
            for key, part in zip(("v", "r", "s"), vrs):
                if part is None:
                    raise MissingFieldError(key)
            v, r, s = (to_int_safe(part) for part in vrs)
            record.set_signature(Signature.from_vrs(v, r, s, chain_id=record.chain_id))

        logger.debug(f"Parsed record from JSON: {record}")
        return record


_JSON_QUANTITIES: dict[str, str] = {
    "nonce": "nonce",
    "gas": "gas",
    "gasPrice": "gas_price",
    "chainId": "chain_id",
}


def _normalize(name: str, value: Any) -> Any:
    """Coerce a value assigned to a record field into its canonical type."""
    match name:
        case "to":
            return ZERO_ADDRESS if value is None else to_address(value)
        case "kettle_address" | "from_":
            return None if value is None else to_address(value)
        case "input":
            return to_bytes_safe(value)
        case "confidential_inputs_hash":
            return None if value is None else to_fixed_bytes(value, 32)
        case "value":
            return _check_uint(name, to_int_safe(0 if value is None else value))
        case "nonce" | "gas" | "gas_price" | "chain_id":
            return None if value is None else _check_uint(name, to_int_safe(value))
        case "signature_state":
            if not isinstance(value, (Signed, Unsigned)):
                raise TypeError(f"signature_state must be Signed or Unsigned, got {type(value).__name__}")
            return value
        case _:
            return value


def _check_uint(name: str, value: int) -> int:
    bits = _UINT_BITS[name]
    if value >= 1 << bits:
        raise ValueError(f"{name} does not fit in {bits} bits: {value}")
    return value
