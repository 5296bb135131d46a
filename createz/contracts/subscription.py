"""
Subscription contract readers.

Snapshots are rebuilt from the on-chain metadata documents on every read;
nothing is cached here.
"""

import logging
from dataclasses import dataclass
from enum import IntFlag
from typing import List, Optional

from ..codec import AttributeType, DataUriTransport, MetadataRecord, MetadataTransport, decode
from ..errors import MalformedMetadata
from ..session import SessionContext
from ..types import Address, normalize_address
from .abis import SUBSCRIPTION_ABI
from .common import ContractHandle, connect, require_code
from .pagination import fetch_page

logger = logging.getLogger(__name__)

DEFAULT_TRANSPORT = DataUriTransport()


class FeatureFlags(IntFlag):
    """Independent switches packed into the contract's flags attribute."""
    MINTING_PAUSED = 1
    RENEWAL_PAUSED = 2
    TIPPING_PAUSED = 4


def is_flag_set(flags: int, flag: int) -> bool:
    return (flags & flag) == flag


def with_flag(flags: int, flag: int, enabled: bool) -> int:
    """Return flags with one flag switched on or off."""
    return flags | flag if enabled else flags & ~flag


@dataclass(frozen=True, kw_only=True)
class ContractSnapshot(MetadataRecord):
    """Point-in-time view of a subscription contract."""

    ATTRIBUTES = {
        "token": ("token", AttributeType.ADDRESS),
        "owner": ("owner", AttributeType.ADDRESS),
        "rate": ("rate", AttributeType.INTEGER),
        "lock": ("lock", AttributeType.INTEGER),
        "epoch_size": ("epoch_size", AttributeType.INTEGER),
        "max_supply": ("max_supply", AttributeType.INTEGER),
        "total_supply": ("total_supply", AttributeType.INTEGER),
        "claimable": ("claimable", AttributeType.INTEGER),
        "flags": ("flags", AttributeType.INTEGER),
    }

    address: Address
    token: Address
    owner: Address
    rate: int
    lock: int
    epoch_size: int
    max_supply: int
    total_supply: int
    claimable: int
    flags: int

    @property
    def minting_paused(self) -> bool:
        return is_flag_set(self.flags, FeatureFlags.MINTING_PAUSED)

    @property
    def renewal_paused(self) -> bool:
        return is_flag_set(self.flags, FeatureFlags.RENEWAL_PAUSED)

    @property
    def tipping_paused(self) -> bool:
        return is_flag_set(self.flags, FeatureFlags.TIPPING_PAUSED)


@dataclass(frozen=True, kw_only=True)
class TokenSnapshot(MetadataRecord):
    """Point-in-time view of one subscription token."""

    ATTRIBUTES = {
        "deposited": ("deposited", AttributeType.INTEGER),
        "spent": ("spent", AttributeType.INTEGER),
        "unspent": ("unspent", AttributeType.INTEGER),
        "withdrawable": ("withdrawable", AttributeType.INTEGER),
        "tips": ("tips", AttributeType.INTEGER),
        "active": ("active", AttributeType.BOOLEAN),
        "expiry": ("expiry", AttributeType.INTEGER),
    }

    address: Address
    token_id: int
    deposited: int
    spent: int
    unspent: int
    withdrawable: int
    tips: int
    active: bool
    expiry: int


async def create_subscription_contract(address: Address, session: SessionContext) -> ContractHandle:
    """
    Resolve a handle for the subscription contract at address.

    Raises:
        ContractNotFound: If nothing is deployed at address
    """
    address = normalize_address(address)
    await require_code(session, address)
    logger.debug(f"Created subscription contract handle for {address}")
    return connect(session, address, SUBSCRIPTION_ABI)


async def get_contract_data(
    handle: ContractHandle, transport: Optional[MetadataTransport] = None
) -> ContractSnapshot:
    """
    Read the contract-level snapshot from contractURI().

    Raises:
        MalformedMetadata: If the document is invalid, after logging it
    """
    transport = transport or DEFAULT_TRANSPORT
    uri = await handle.contract.functions.contractURI().call()
    document = await transport.resolve(uri)
    try:
        return decode(document, ContractSnapshot, address=handle.address)
    except MalformedMetadata as e:
        logger.error(
            f"Malformed contract metadata for {handle.address}: {e}",
            extra={"contract": handle.address, "payload": e.payload},
        )
        raise


async def get_subscription_data(
    handle: ContractHandle, token_id: int, transport: Optional[MetadataTransport] = None
) -> TokenSnapshot:
    """
    Read a token snapshot from tokenURI(token_id).

    Raises:
        MalformedMetadata: If the document is invalid, after logging it
    """
    transport = transport or DEFAULT_TRANSPORT
    uri = await handle.contract.functions.tokenURI(token_id).call()
    document = await transport.resolve(uri)
    try:
        return decode(document, TokenSnapshot, address=handle.address, token_id=token_id)
    except MalformedMetadata as e:
        logger.error(
            f"Malformed token metadata for {handle.address}#{token_id}: {e}",
            extra={"contract": handle.address, "token_id": token_id, "payload": e.payload},
        )
        raise


async def list_subscriptions(handle: ContractHandle, page: int, page_size: int) -> List[int]:
    """Token ids of one page of all subscriptions, newest first."""
    total = await handle.contract.functions.totalSupply().call()

    async def _token_at(index: int) -> int:
        return await handle.contract.functions.tokenByIndex(index).call()

    return await fetch_page(total, page, page_size, _token_at, newest_first=True)


async def list_owned_subscriptions(
    handle: ContractHandle, owner: Address, page: int, page_size: int
) -> List[int]:
    """Token ids of one page of the subscriptions held by owner."""
    owner = normalize_address(owner)
    total = await handle.contract.functions.balanceOf(owner).call()

    async def _token_at(index: int) -> int:
        return await handle.contract.functions.tokenOfOwnerByIndex(owner, index).call()

    return await fetch_page(total, page, page_size, _token_at)
