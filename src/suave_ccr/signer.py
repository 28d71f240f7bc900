"""
Signing for confidential compute requests.

SuaveSigner keeps a table of signing identities keyed by address and signs
the request digest with one of them. An identity is anything that can sign a
32-byte digest for a fixed address: a local eth-account key, or a remote key
service behind the same async interface.
"""

import asyncio
import logging
from typing import TYPE_CHECKING, Iterable, Protocol, runtime_checkable

from eth_account import Account
from eth_account.signers.local import LocalAccount
from eth_typing import ChecksumAddress
from web3 import Web3

from .errors import UnknownSignerError
from .models import Signature
from .request import ConfidentialComputeRequest
from .utils.encoding import to_address

if TYPE_CHECKING:
    from .config import SigningConfig

logger = logging.getLogger(__name__)


@runtime_checkable
class SigningIdentity(Protocol):
    """Capability to sign an arbitrary 32-byte digest for one address."""

    @property
    def address(self) -> ChecksumAddress:
        ...

    async def sign_hash(self, message_hash: bytes) -> Signature:
        ...


class LocalAccountIdentity:
    """Signing identity backed by an in-process eth-account key."""

    def __init__(self, account: LocalAccount) -> None:
        self._account = account

    @classmethod
    def from_key(cls, private_key: str | bytes) -> "LocalAccountIdentity":
        return cls(Account.from_key(private_key))

    def __repr__(self) -> str:
        return f"LocalAccountIdentity({self.address})"

    @property
    def address(self) -> ChecksumAddress:
        return self._account.address

    async def sign_hash(self, message_hash: bytes) -> Signature:
        """Sign the digest directly, without any message prefix."""
        signed = self._account.unsafe_sign_hash(bytes(message_hash))
        return Signature.from_vrs(signed.v, signed.r, signed.s)


class SuaveSigner:
    """
    Signs confidential compute requests with one of several registered identities.

    The identity table is only changed by register() and is guarded by an
    asyncio.Lock. sign_as() holds the lock just long enough to look up the
    identity, so signing for different addresses proceeds concurrently.

    Callers must not hand the same request object to concurrent signing
    calls; use request.copy() for each path instead.
    """

    def __init__(self, default: SigningIdentity, *identities: SigningIdentity) -> None:
        """
        Initialize the signer.

        Args:
            default: Identity used by sign()
            identities: Additional identities available to sign_as()
        """
        self._default_address: ChecksumAddress = to_address(default.address)
        self._identities: dict[ChecksumAddress, SigningIdentity] = {}
        for identity in (default, *identities):
            self._identities[to_address(identity.address)] = identity
        self._lock = asyncio.Lock()

        logger.info(
            f"SuaveSigner initialized with {len(self._identities)} identities, "
            f"default {self._default_address}"
        )

    def __repr__(self) -> str:
        return f"SuaveSigner(default={self._default_address}, identities={len(self._identities)})"

    @classmethod
    def from_private_keys(cls, private_keys: Iterable[str | bytes]) -> "SuaveSigner":
        """Create a signer with one local identity per key; the first key is the default."""
        identities = [LocalAccountIdentity.from_key(key) for key in private_keys]
        if not identities:
            raise ValueError("At least one private key is required")
        return cls(*identities)

    @classmethod
    def from_config(cls, config: "SigningConfig") -> "SuaveSigner":
        return cls.from_private_keys(config.private_keys)

    @property
    def default_address(self) -> ChecksumAddress:
        return self._default_address

    async def register(self, identity: SigningIdentity) -> None:
        """Add an identity, replacing any existing one for the same address."""
        address = to_address(identity.address)
        async with self._lock:
            replaced = address in self._identities
            self._identities[address] = identity
        logger.info(f"{'Replaced' if replaced else 'Registered'} signing identity {address}")

    def is_signer_for(self, address: str) -> bool:
        if not Web3.is_address(address):
            return False
        return Web3.to_checksum_address(address) in self._identities

    def identities(self) -> frozenset[ChecksumAddress]:
        return frozenset(self._identities)

    async def sign(self, request: ConfidentialComputeRequest) -> ConfidentialComputeRequest:
        """Sign with the default identity. See sign_as()."""
        return await self.sign_as(self._default_address, request)

    async def sign_as(
        self, address: str, request: ConfidentialComputeRequest
    ) -> ConfidentialComputeRequest:
        """
        Sign a request with the identity registered for address.

        The signature and the cached sender are written onto the record only
        after the identity returns, so a failed or cancelled signing attempt
        leaves the request exactly as it was.

        Args:
            address: Address of the identity to sign with
            request: Request to sign, modified in place

        Returns:
            The same request, now signed

        Raises:
            UnknownSignerError: If no identity is registered for address
            MissingFieldError: If the digest cannot be computed yet
        """
        if not Web3.is_address(address):
            raise UnknownSignerError(address)
        signer_address = Web3.to_checksum_address(address)

        async with self._lock:
            identity = self._identities.get(signer_address)
        if identity is None:
            raise UnknownSignerError(signer_address)

        digest = request.digest()
        logger.debug(f"Signing digest {Web3.to_hex(digest)} as {signer_address}")

        signature = await identity.sign_hash(digest)

        record = request.record
        record.set_signature(signature)
        record.from_ = signer_address

        logger.info(f"Signed confidential compute request as {signer_address} (nonce={record.nonce})")
        return request
