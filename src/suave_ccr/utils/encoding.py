"""
Value normalization helpers shared by the record, codec and response parsing.

Ethereum values arrive in several shapes depending on where they come from
(web3 TxParams, JSON-RPC responses, raw RLP fields), so everything is funneled
through these helpers before it reaches a ConfidentialComputeRecord.
"""

from typing import Any, Union

from eth_typing import ChecksumAddress
from hexbytes import HexBytes
from web3 import Web3

ZERO_ADDRESS: ChecksumAddress = Web3.to_checksum_address("0x" + "00" * 20)


def to_bytes_safe(value: Union[HexBytes, bytes, bytearray, str, None]) -> HexBytes:
    """
    Safely convert value to HexBytes, handling HexBytes, bytes and hex strings.

    Args:
        value: Value to convert (HexBytes, bytes, hex string or None)

    Returns:
        HexBytes representation (empty for None or "0x")
    """
    if value is None:
        return HexBytes(b"")
    if isinstance(value, (bytes, bytearray)):
        return HexBytes(value)
    if isinstance(value, str):
        return HexBytes(Web3.to_bytes(hexstr=value))
    raise TypeError(f"Cannot convert {type(value).__name__} to bytes")


def to_fixed_bytes(value: Union[HexBytes, bytes, str], size: int) -> HexBytes:
    """Convert value to bytes and require an exact length."""
    data = to_bytes_safe(value)
    if len(data) != size:
        raise ValueError(f"Expected {size} bytes, got {len(data)}")
    return data


def to_int_safe(value: Any) -> int:
    """
    Parse an integer quantity given as int, 0x-hex string, decimal string or bytes.

    JSON-RPC quantities are hex strings while some nodes return gas values
    in decimal, so both string forms are accepted.

    Raises:
        ValueError: If the value cannot be interpreted as a non-negative integer
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid integer quantity: {value!r}")
    if isinstance(value, int):
        result = value
    elif isinstance(value, (bytes, bytearray)):
        result = int.from_bytes(value, byteorder='big')
    elif isinstance(value, str):
        text = value.strip()
        if text.startswith(('0x', '0X')):
            result = int(text[2:], 16) if text[2:] else 0
        else:
            result = int(text, 10)
    else:
        raise ValueError(f"Invalid integer quantity: {value!r}")

    if result < 0:
        raise ValueError(f"Quantity must be non-negative, got {result}")
    return result


def to_address(value: Union[str, bytes]) -> ChecksumAddress:
    """
    Normalize an address given as hex string or 20 raw bytes to checksum form.

    Raises:
        ValueError: If the value is not a valid address
    """
    if isinstance(value, (bytes, bytearray)):
        if len(value) != 20:
            raise ValueError(f"Invalid address length: {len(value)} bytes")
        return Web3.to_checksum_address(HexBytes(value))
    if not Web3.is_address(value):
        raise ValueError(f"Invalid address: {value}")
    return Web3.to_checksum_address(value)


def to_hex_quantity(value: int) -> str:
    """Format an integer as a JSON-RPC hex quantity (0x0 for zero)."""
    return hex(value)
