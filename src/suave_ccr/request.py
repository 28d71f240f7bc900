#!/usr/bin/env python3
"""Confidential compute request.

A request owns a ConfidentialComputeRecord together with the confidential
input bytes. Only keccak256 of those bytes is part of the record; the bytes
themselves travel to the kettle in the request envelope.

Ordering contract for callers: attach the confidential inputs, then sign,
then encode. Encoding before signing fails with MissingFieldError; editing a
signed record raises SignedRecordError until clear_signature() is called.
"""

import copy
import logging
from typing import Any, ClassVar, Mapping, Union

from eth_typing import ChecksumAddress
from hexbytes import HexBytes
from web3 import Web3
from web3.types import TxParams

from .codec import (
    REQUEST_TYPE,
    CRequestRLP,
    decode_payload,
    encode_with_prefix,
    signing_digest,
    split_envelope,
)
from .record import ConfidentialComputeRecord
from .utils.encoding import to_bytes_safe

logger = logging.getLogger(__name__)


class ConfidentialComputeRequest:
    """A confidential compute record plus the confidential inputs it commits to.

    The confidential inputs hash on the record always matches the bytes held
    here: every way of setting the inputs recomputes it.
    """

    TYPE: ClassVar[int] = REQUEST_TYPE

    __slots__ = ("record", "_confidential_inputs")

    def __init__(
        self,
        record: ConfidentialComputeRecord | None = None,
        confidential_inputs: Union[bytes, str, None] = None,
    ) -> None:
        """
        Initialize the request.

        The record's confidential inputs hash is overwritten with
        keccak256(confidential_inputs), even if the record already had one.

        Args:
            record: Public record (a new empty record when omitted)
            confidential_inputs: Confidential payload (empty when omitted)
        """
        self.record: ConfidentialComputeRecord = (
            record if record is not None else ConfidentialComputeRecord()
        )
        self._confidential_inputs: HexBytes = HexBytes(b"")
        self.set_confidential_inputs(confidential_inputs)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ConfidentialComputeRequest):
            return NotImplemented
        return (
            self.record == other.record
            and self._confidential_inputs == other._confidential_inputs
        )

    def __repr__(self) -> str:
        return (
            f"ConfidentialComputeRequest(record={self.record!r}, "
            f"confidential_inputs={Web3.to_hex(self._confidential_inputs)})"
        )

    def __str__(self) -> str:
        """Human-readable string representation."""
        return (
            f"ConfidentialComputeRequest({self.record}, "
            f"confidential_inputs={len(self._confidential_inputs)} bytes)"
        )

    @classmethod
    def from_tx_params(
        cls,
        tx: TxParams | Mapping[str, Any],
        kettle_address: str | None = None,
        confidential_inputs: Union[bytes, str, None] = None,
    ) -> "ConfidentialComputeRequest":
        """Create a request from web3 transaction parameters and a kettle address."""
        record = ConfidentialComputeRecord.from_tx_params(tx, kettle_address)
        return cls(record, confidential_inputs)

    @classmethod
    def _from_wire(
        cls,
        record: ConfidentialComputeRecord,
        confidential_inputs: HexBytes,
    ) -> "ConfidentialComputeRequest":
        """Rebuild a request exactly as received, without re-deriving the hash."""
        request = cls.__new__(cls)
        request.record = record
        request._confidential_inputs = confidential_inputs
        return request

    @property
    def confidential_inputs(self) -> HexBytes:
        return self._confidential_inputs

    @confidential_inputs.setter
    def confidential_inputs(self, confidential_inputs: Union[bytes, str, None]) -> None:
        self.set_confidential_inputs(confidential_inputs)

    @property
    def kettle_address(self) -> ChecksumAddress | None:
        return self.record.kettle_address

    @property
    def from_address(self) -> ChecksumAddress | None:
        """Locally cached signer address (see recover_signer for the authoritative one)."""
        return self.record.from_

    def set_confidential_inputs(self, confidential_inputs: Union[bytes, str, None]) -> None:
        """Replace the confidential inputs and recompute their hash on the record."""
        data = to_bytes_safe(confidential_inputs)
        self.record.set_confidential_inputs_hash_from_bytes(data)
        self._confidential_inputs = data

    def set_kettle_address(self, kettle_address: str) -> None:
        self.record.kettle_address = kettle_address

    def set_fields(self, **fields: Any) -> None:
        """Assign record fields by name (nonce, gas, gas_price, chain_id, to, value, input, ...)."""
        for name, value in fields.items():
            if name not in ConfidentialComputeRecord.__dataclass_fields__:
                raise AttributeError(f"ConfidentialComputeRecord has no field {name!r}")
            setattr(self.record, name, value)

    def copy(self) -> "ConfidentialComputeRequest":
        """Deep copy, for handing the same request to independent signing paths."""
        return copy.deepcopy(self)

    def with_kettle_address(self, kettle_address: str) -> "ConfidentialComputeRequest":
        request = self.copy()
        request.set_kettle_address(kettle_address)
        return request

    def with_confidential_inputs(
        self, confidential_inputs: Union[bytes, str, None]
    ) -> "ConfidentialComputeRequest":
        request = self.copy()
        request.set_confidential_inputs(confidential_inputs)
        return request

    def with_fields(self, **fields: Any) -> "ConfidentialComputeRequest":
        """Return a copy with the given record fields replaced."""
        request = self.copy()
        request.set_fields(**fields)
        return request

    def digest(self) -> HexBytes:
        """
        The 32-byte signing digest: keccak256(0x42 || RLP(hash params)).

        Independent of chain_id and of the raw confidential inputs.

        Raises:
            MissingFieldError: If nonce, gas_price, gas or kettle_address is not set
        """
        return signing_digest(self.record)

    def encode(self) -> HexBytes:
        """
        Encode the full request in its 0x43 typed envelope.

        Raises:
            MissingFieldError: If the record is not submittable (unsigned or
                missing nonce, gas_price, gas, kettle_address or chain_id)
        """
        encoded = encode_with_prefix(self.TYPE, CRequestRLP.from_request(self))
        logger.debug(f"Encoded confidential compute request ({len(encoded)} bytes)")
        return encoded

    @classmethod
    def decode(cls, data: Union[bytes, str]) -> "ConfidentialComputeRequest":
        """
        Decode a 0x43 typed envelope.

        The record, hash and signature are taken from the wire as-is.

        Raises:
            UnsupportedEnvelopeTypeError: If the type byte is not 0x43
            StructuralDecodeError: If the RLP payload is malformed
            InvalidSignatureError: If v/r/s cannot form a valid signature
        """
        payload = split_envelope(data, cls.TYPE)
        wire: CRequestRLP = decode_payload(payload, CRequestRLP)
        request = wire.to_request()
        logger.debug(f"Decoded confidential compute request: {request.record}")
        return request

    def recover_signer(self) -> ChecksumAddress | None:
        """
        Recover the signer from the signature over digest().

        The signature is authoritative; the cached ``from_`` address is only
        compared against it and a disagreement is logged.

        Returns:
            The recovered address, or None for an unsigned request

        Raises:
            InvalidSignatureError: If the signature does not recover
        """
        signature = self.record.signature
        if signature is None:
            return None

        recovered = signature.recover_address(self.digest())
        if self.record.from_ is not None and self.record.from_ != recovered:
            logger.warning(
                f"Cached sender {self.record.from_} does not match "
                f"signature signer {recovered}"
            )
        return recovered

    def verify_confidential_inputs(self) -> bool:
        """Check that the record's hash matches the confidential inputs held here.

        Always true for requests built locally; decoded requests carry
        whatever hash was on the wire.
        """
        return self.record.confidential_inputs_hash == Web3.keccak(bytes(self._confidential_inputs))
