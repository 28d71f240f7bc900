#!/usr/bin/env python3
"""Signature data models for confidential compute records.

This module provides the immutable signature value and the explicit
signed/unsigned state carried by a ConfidentialComputeRecord.
"""

from dataclasses import dataclass
from typing import Union

from eth_keys import keys
from eth_keys.constants import SECPK1_N
from eth_keys.exceptions import BadSignature, ValidationError
from eth_typing import ChecksumAddress

from .errors import InvalidSignatureError

# Replay-protected v values are 2 * chain_id + 35 + parity
EIP155_OFFSET: int = 35
LEGACY_V_OFFSET: int = 27


@dataclass(frozen=True, slots=True)
class Signature:
    """An ECDSA secp256k1 signature over a signing digest.

    Attributes:
        v: y-parity of the signature point (0 or 1), the value carried on the wire
        r: r component
        s: s component
    """

    v: int
    r: int
    s: int

    def __post_init__(self) -> None:
        """Validate signature components."""
        if self.v not in (0, 1):
            raise InvalidSignatureError(f"Invalid signature parity: {self.v}")
        if not 0 < self.r < SECPK1_N:
            raise InvalidSignatureError(f"Signature r out of range: {hex(self.r)}")
        if not 0 < self.s < SECPK1_N:
            raise InvalidSignatureError(f"Signature s out of range: {hex(self.s)}")

    def __str__(self) -> str:
        """Human-readable string representation."""
        return f"Signature(v={self.v}, r={hex(self.r)[:12]}..., s={hex(self.s)[:12]}...)"

    @classmethod
    def from_vrs(cls, v: int, r: int, s: int, chain_id: int | None = None) -> "Signature":
        """Build a signature from any common v encoding.

        Accepts the raw parity (0/1), the legacy offset form (27/28) and the
        replay-protected form ``2 * chain_id + 35 + parity``. The last one
        needs the chain id to be unfolded.

        Raises:
            InvalidSignatureError: If v does not match any accepted encoding
        """
        match v:
            case 0 | 1:
                parity = v
            case 27 | 28:
                parity = v - LEGACY_V_OFFSET
            case _ if chain_id is not None and v >= EIP155_OFFSET:
                parity = v - EIP155_OFFSET - 2 * chain_id
            case _:
                raise InvalidSignatureError(f"Invalid signature v value: {v}")

        if parity not in (0, 1):
            raise InvalidSignatureError(
                f"Signature v value {v} does not match chain id {chain_id}"
            )
        return cls(v=parity, r=r, s=s)

    @classmethod
    def from_bytes(cls, signature: bytes) -> "Signature":
        """Parse a 65-byte r || s || v signature."""
        if len(signature) != 65:
            raise InvalidSignatureError(f"Expected 65 signature bytes, got {len(signature)}")
        return cls.from_vrs(
            v=signature[64],
            r=int.from_bytes(signature[0:32], byteorder='big'),
            s=int.from_bytes(signature[32:64], byteorder='big'),
        )

    def to_bytes(self) -> bytes:
        """Serialize as 65-byte r || s || v with v as parity."""
        return (
            self.r.to_bytes(32, byteorder='big')
            + self.s.to_bytes(32, byteorder='big')
            + bytes([self.v])
        )

    def to_eip155_v(self, chain_id: int) -> int:
        """Fold the chain id into v (``2 * chain_id + 35 + parity``)."""
        return 2 * chain_id + EIP155_OFFSET + self.v

    def recover_address(self, message_hash: bytes) -> ChecksumAddress:
        """Recover the signer address from a 32-byte message hash.

        Raises:
            InvalidSignatureError: If no public key can be recovered
        """
        try:
            key_signature = keys.Signature(vrs=(self.v, self.r, self.s))
            public_key = key_signature.recover_public_key_from_msg_hash(bytes(message_hash))
        except (BadSignature, ValidationError) as e:
            raise InvalidSignatureError(f"Signature recovery failed: {e}") from e
        return public_key.to_checksum_address()


@dataclass(frozen=True, slots=True)
class Unsigned:
    """Marker state for a record that has not been signed yet."""


@dataclass(frozen=True, slots=True)
class Signed:
    """State of a record carrying a signature over its current pre-image."""

    signature: Signature


SignatureState = Union[Unsigned, Signed]

UNSIGNED = Unsigned()
