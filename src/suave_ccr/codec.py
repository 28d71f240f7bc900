"""
RLP codec for confidential compute requests.

Three RLP views are derived from the same request data and each has a fixed
field order that the kettle validates structurally:

- CRecordRLP: the signed public record
  [nonce, gas_price, gas, to, value, input, kettle_address,
   confidential_inputs_hash, chain_id, v, r, s]
- CRequestRLP: [CRecordRLP, confidential_inputs], the payload sent to the kettle
- CRequestHashParams: the signing digest pre-image
  [kettle_address, confidential_inputs_hash, nonce, gas_price, gas, to, value, input]

Every view is wrapped in a one-byte typed envelope: 0x43 for the full
request, 0x42 for the record and the digest pre-image.
"""

import logging
from typing import TYPE_CHECKING, Union

import rlp
from hexbytes import HexBytes
from rlp.codec import length_prefix
from rlp.exceptions import RLPException
from rlp.sedes import Binary, big_endian_int, binary
from web3 import Web3

from .errors import StructuralDecodeError, UnsupportedEnvelopeTypeError
from .models import Signature, Signed
from .record import EMPTY_BYTES_HASH, ConfidentialComputeRecord
from .utils.encoding import to_bytes_safe

if TYPE_CHECKING:
    from .request import ConfidentialComputeRequest

logger = logging.getLogger(__name__)

RECORD_TYPE: int = ConfidentialComputeRecord.TYPE
REQUEST_TYPE: int = 0x43

# RLP list prefix offset
LIST_OFFSET: int = 0xC0

address = Binary.fixed_length(20)
hash32 = Binary.fixed_length(32)


def _fields_len(item: rlp.Serializable) -> int:
    """Sum of the encoded lengths of each field, i.e. the RLP list payload length."""
    return sum(
        len(rlp.encode(getattr(item, name), sedes=sedes))
        for name, sedes in item._meta.fields
    )


def _encoded_length(item: rlp.Serializable) -> int:
    payload_length = _fields_len(item)
    return len(length_prefix(payload_length, LIST_OFFSET)) + payload_length


class CRecordRLP(rlp.Serializable):
    """Record-wire view: the signed public record."""

    fields = [
        ('nonce', big_endian_int),
        ('gas_price', big_endian_int),
        ('gas', big_endian_int),
        ('to', address),
        ('value', big_endian_int),
        ('input', binary),
        ('kettle_address', address),
        ('confidential_inputs_hash', hash32),
        ('chain_id', big_endian_int),
        ('v', big_endian_int),
        ('r', big_endian_int),
        ('s', big_endian_int),
    ]

    @classmethod
    def from_record(cls, record: ConfidentialComputeRecord) -> "CRecordRLP":
        """
        Build the wire view from a record.

        A missing confidential inputs hash means no confidential input was
        attached and is encoded as keccak256 of empty bytes.

        Raises:
            MissingFieldError: If nonce, gas_price, gas, kettle_address,
                chain_id or the signature is not set
        """
        nonce, gas_price, gas, kettle_address, chain_id, signature = record.require(
            "nonce", "gas_price", "gas", "kettle_address", "chain_id", "signature"
        )
        return cls(
            nonce=nonce,
            gas_price=gas_price,
            gas=gas,
            to=to_bytes_safe(record.to),
            value=record.value,
            input=bytes(record.input),
            kettle_address=to_bytes_safe(kettle_address),
            confidential_inputs_hash=bytes(record.confidential_inputs_hash or EMPTY_BYTES_HASH),
            chain_id=chain_id,
            v=signature.v,
            r=signature.r,
            s=signature.s,
        )

    def to_record(self) -> ConfidentialComputeRecord:
        """
        Map the wire view back onto a signed record.

        Raises:
            InvalidSignatureError: If v/r/s do not form a valid signature
            StructuralDecodeError: If an integer field is wider than its record type allows
        """
        signature = Signature.from_vrs(self.v, self.r, self.s, chain_id=self.chain_id)
        try:
            return ConfidentialComputeRecord(
                nonce=self.nonce,
                to=self.to,
                gas=self.gas,
                gas_price=self.gas_price,
                value=self.value,
                input=self.input,
                kettle_address=self.kettle_address,
                chain_id=self.chain_id,
                confidential_inputs_hash=self.confidential_inputs_hash,
                signature_state=Signed(signature),
            )
        except ValueError as e:
            raise StructuralDecodeError(f"Invalid CRecordRLP field: {e}") from e

    def fields_len(self) -> int:
        return _fields_len(self)

    def encoded_length(self) -> int:
        return _encoded_length(self)


class CRequestRLP(rlp.Serializable):
    """Request-wire view: the record followed by the raw confidential inputs."""

    fields = [
        ('request', CRecordRLP),
        ('confidential_inputs', binary),
    ]

    @classmethod
    def from_request(cls, request: "ConfidentialComputeRequest") -> "CRequestRLP":
        """
        Build the wire view from a request.

        Raises:
            MissingFieldError: If the record is not submittable
        """
        return cls(
            request=CRecordRLP.from_record(request.record),
            confidential_inputs=bytes(request.confidential_inputs),
        )

    def to_parts(self) -> tuple[ConfidentialComputeRecord, HexBytes]:
        """Return the decoded record and confidential inputs as stored on the wire."""
        return self.request.to_record(), HexBytes(self.confidential_inputs)

    def to_request(self) -> "ConfidentialComputeRequest":
        """Rebuild the request exactly as received, keeping the wire hash."""
        from .request import ConfidentialComputeRequest

        return ConfidentialComputeRequest._from_wire(*self.to_parts())

    def fields_len(self) -> int:
        return _fields_len(self)

    def encoded_length(self) -> int:
        return _encoded_length(self)


class CRequestHashParams(rlp.Serializable):
    """Signing digest pre-image. Never carries chain_id or the raw confidential inputs."""

    fields = [
        ('kettle_address', address),
        ('confidential_inputs_hash', hash32),
        ('nonce', big_endian_int),
        ('gas_price', big_endian_int),
        ('gas', big_endian_int),
        ('to', address),
        ('value', big_endian_int),
        ('input', binary),
    ]

    @classmethod
    def from_record(cls, record: ConfidentialComputeRecord) -> "CRequestHashParams":
        """
        Build the digest pre-image from a record.

        Raises:
            MissingFieldError: If nonce, gas_price, gas or kettle_address is not set
        """
        nonce, gas_price, gas, kettle_address = record.require(
            "nonce", "gas_price", "gas", "kettle_address"
        )
        return cls(
            kettle_address=to_bytes_safe(kettle_address),
            confidential_inputs_hash=bytes(record.confidential_inputs_hash or EMPTY_BYTES_HASH),
            nonce=nonce,
            gas_price=gas_price,
            gas=gas,
            to=to_bytes_safe(record.to),
            value=record.value,
            input=bytes(record.input),
        )

    @classmethod
    def from_request(cls, request: "ConfidentialComputeRequest") -> "CRequestHashParams":
        return cls.from_record(request.record)

    def fields_len(self) -> int:
        return _fields_len(self)

    def encoded_length(self) -> int:
        return _encoded_length(self)


def encode_with_prefix(prefix: int, item: rlp.Serializable) -> HexBytes:
    """
    RLP encode an item and prepend the typed envelope byte.

    Args:
        prefix: Envelope type byte
        item: RLP serializable view

    Returns:
        Type byte followed by the RLP encoding
    """
    return HexBytes(bytes([prefix]) + rlp.encode(item))


def split_envelope(data: Union[bytes, str], expected_type: int) -> bytes:
    """
    Strip and check the typed envelope byte.

    Args:
        data: Envelope as bytes or 0x-hex string
        expected_type: The only type byte accepted

    Returns:
        The RLP payload following the type byte

    Raises:
        StructuralDecodeError: If the data is empty or not valid hex
        UnsupportedEnvelopeTypeError: If the type byte is not expected_type
    """
    try:
        raw = to_bytes_safe(data)
    except (TypeError, ValueError) as e:
        raise StructuralDecodeError(f"Invalid envelope encoding: {e}") from e

    if not raw:
        raise StructuralDecodeError("Empty transaction envelope")
    if raw[0] != expected_type:
        raise UnsupportedEnvelopeTypeError(raw[0], expected_type)
    return bytes(raw[1:])


def decode_payload(payload: bytes, sedes: type[rlp.Serializable]) -> rlp.Serializable:
    """
    Decode an RLP payload into one of the wire views.

    Raises:
        StructuralDecodeError: If the payload is malformed or has the wrong shape
    """
    try:
        return rlp.decode(payload, sedes=sedes)
    except RLPException as e:
        logger.debug(f"RLP decode failed for {sedes.__name__}: {e}")
        raise StructuralDecodeError(f"Malformed {sedes.__name__} payload: {e}") from e


def encode_record(record: ConfidentialComputeRecord) -> HexBytes:
    """Encode a signed record in its 0x42 envelope."""
    return encode_with_prefix(RECORD_TYPE, CRecordRLP.from_record(record))


def decode_record(data: Union[bytes, str]) -> ConfidentialComputeRecord:
    """Decode a 0x42 record envelope back into a signed record."""
    payload = split_envelope(data, RECORD_TYPE)
    wire: CRecordRLP = decode_payload(payload, CRecordRLP)
    return wire.to_record()


def signing_digest(record: ConfidentialComputeRecord) -> HexBytes:
    """
    Compute keccak256(0x42 || RLP(CRequestHashParams)).

    This is the exact hash a signer signs. It commits to the confidential
    inputs through their hash only, so a verifier never needs the inputs.

    Raises:
        MissingFieldError: If nonce, gas_price, gas or kettle_address is not set
    """
    pre_image = encode_with_prefix(RECORD_TYPE, CRequestHashParams.from_record(record))
    digest = HexBytes(Web3.keccak(pre_image))
    logger.debug(f"Signing digest {Web3.to_hex(digest)} over {len(pre_image)} bytes")
    return digest
