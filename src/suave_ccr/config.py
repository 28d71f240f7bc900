#!/usr/bin/env python3
"""Configuration management for SUAVE confidential compute requests.

This module provides type-safe configuration dataclasses with validation
for building and signing requests. Configuration is loaded from environment
variables with sensible defaults where appropriate.
"""

import logging
import os
from dataclasses import dataclass

from web3 import Web3

from .utils.encoding import to_int_safe

# Get logger for this module
logger = logging.getLogger(__name__)

# Toliman testnet
DEFAULT_CHAIN_ID: int = 0x1008C45
DEFAULT_GAS_LIMIT: int = 1_000_000


@dataclass(frozen=True, slots=True)
class ChainConfig:
    """Configuration for the SUAVE chain and the kettle that executes requests.

    Attributes:
        chain_id: Chain ID written into every record
        kettle_address: Checksummed address of the execution endpoint
    """

    kettle_address: str
    chain_id: int = DEFAULT_CHAIN_ID

    def __post_init__(self) -> None:
        """Validate chain configuration."""
        if self.chain_id <= 0:
            raise ValueError(f"Chain ID must be positive, got {self.chain_id}")
        if self.chain_id >= 1 << 64:
            raise ValueError(f"Chain ID does not fit in 64 bits: {self.chain_id}")

        if not self.kettle_address:
            raise ValueError("Kettle address is required (KETTLE_ADDRESS)")

        if not Web3.is_address(self.kettle_address):
            raise ValueError(f"Invalid kettle address: {self.kettle_address}")

        checksummed = Web3.to_checksum_address(self.kettle_address)
        if checksummed != self.kettle_address:
            # Use object.__setattr__ since dataclass is frozen
            object.__setattr__(self, 'kettle_address', checksummed)


@dataclass(frozen=True, slots=True)
class GasConfig:
    """Gas settings applied to requests that do not carry their own."""
    gas_limit: int = DEFAULT_GAS_LIMIT
    gas_price: int | None = None  # left to the caller when unset

    def __post_init__(self) -> None:
        """Validate gas configuration."""
        if self.gas_limit <= 0:
            raise ValueError(f"Gas limit must be positive, got {self.gas_limit}")
        if self.gas_limit >= 1 << 128:
            raise ValueError(f"Gas limit too high, got {self.gas_limit}")

        if self.gas_price is not None and self.gas_price < 0:
            raise ValueError(f"Gas price must be non-negative, got {self.gas_price}")


@dataclass(frozen=True, slots=True)
class SigningConfig:
    """Private keys for local signing identities.

    The first key is the default identity.
    """
    private_keys: tuple[str, ...]

    def __post_init__(self) -> None:
        """Validate signing configuration."""
        if not self.private_keys:
            raise ValueError("At least one private key is required (PRIVATE_KEYS)")

        for index, private_key in enumerate(self.private_keys):
            # Should be 64 hex chars, optionally with 0x prefix
            key = private_key[2:] if private_key.startswith('0x') else private_key
            if len(key) != 64:
                raise ValueError(
                    f"Invalid private key #{index} length. "
                    f"Expected 64 hex characters, got {len(key)}"
                )
            try:
                int(key, 16)
            except ValueError:
                raise ValueError(
                    f"Invalid private key #{index} format. Must be hexadecimal"
                ) from None

    def __repr__(self) -> str:
        return f"SigningConfig(private_keys=[{len(self.private_keys)} REDACTED])"


@dataclass(frozen=True, slots=True)
class SuaveConfig:
    """Main configuration.

    Attributes:
        chain: Chain ID and kettle address
        gas: Default gas settings
        signing: Keys for the signer
    """

    chain: ChainConfig
    gas: GasConfig
    signing: SigningConfig

    @classmethod
    def from_env(cls) -> "SuaveConfig":
        """Load configuration from environment variables.

        Returns:
            SuaveConfig instance with loaded values

        Raises:
            ValueError: If required environment variables are missing or invalid
        """
        kettle_address = os.environ.get("KETTLE_ADDRESS", "")
        if not kettle_address:
            raise ValueError(
                "KETTLE_ADDRESS environment variable is required. "
                "This should be the address of the kettle executing requests."
            )

        chain_config = ChainConfig(
            kettle_address=kettle_address,
            chain_id=to_int_safe(os.environ.get("CHAIN_ID", hex(DEFAULT_CHAIN_ID))),
        )

        gas_price = os.environ.get("GAS_PRICE")
        gas_config = GasConfig(
            gas_limit=to_int_safe(os.environ.get("GAS_LIMIT", str(DEFAULT_GAS_LIMIT))),
            gas_price=to_int_safe(gas_price) if gas_price else None,
        )

        private_keys = os.environ.get("PRIVATE_KEYS", "")
        signing_config = SigningConfig(
            private_keys=tuple(key.strip() for key in private_keys.split(",") if key.strip())
        )

        return cls(chain=chain_config, gas=gas_config, signing=signing_config)

    def log_config(self) -> None:
        """Log the configuration in a readable format for debugging."""
        logger.info("=" * 60)
        logger.info("SUAVE CCR Configuration")
        logger.info("=" * 60)

        logger.info("Chain:")
        logger.info(f"  Chain ID: {self.chain.chain_id} ({hex(self.chain.chain_id)})")
        logger.info(f"  Kettle: {self.chain.kettle_address}")

        logger.info("Gas:")
        logger.info(f"  Gas Limit: {self.gas.gas_limit}")
        logger.info(f"  Gas Price: {self.gas.gas_price if self.gas.gas_price is not None else 'unset'}")

        logger.info("Signing:")
        logger.info(f"  Keys: [{len(self.signing.private_keys)} CONFIGURED]")

        logger.info("=" * 60)
