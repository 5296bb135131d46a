"""
Price lookups against Chainlink style AggregatorV3 feeds.

Prices stay integer mantissa plus decimals until they are converted for
display.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, Optional, Union

from ..session import SessionContext
from ..types import Address, normalize_address
from .abis import AGGREGATOR_V3_ABI
from .common import connect

logger = logging.getLogger(__name__)

ETHER_DECIMALS = 18


@dataclass(frozen=True)
class Price:
    """Price in USD as an integer and the number of decimals."""
    price: int
    decimals: int

    def as_decimal(self) -> Decimal:
        return Decimal(self.price).scaleb(-self.decimals)


async def find_price(
    asset: Address, price_feeds: Dict[Address, Address], session: SessionContext
) -> Optional[Price]:
    """
    Look up the USD price of asset.

    Args:
        asset: Token address
        price_feeds: Registry of asset -> feed address
        session: Session used to reach the feed

    Returns:
        Price, or None when the registry has no feed for the asset
    """
    asset = normalize_address(asset)
    feeds = {normalize_address(a): f for a, f in price_feeds.items()}
    feed_address = feeds.get(asset)
    if not feed_address:
        logger.debug(f"Matching price feed not found in local registry for {asset}")
        return None

    feed = connect(session, feed_address, AGGREGATOR_V3_ABI)
    logger.debug(f"Query price feed {feed.address} for {asset}")

    decimals = int(await feed.contract.functions.decimals().call())
    _, answer, _, _, _ = await feed.contract.functions.latestRoundData().call()

    logger.debug(f"Found price for {asset}: {answer} ({decimals} decimals)")
    return Price(price=int(answer), decimals=decimals)


def pretty_number(value: Union[Decimal, int, float]) -> str:
    """Two decimals with thousands separators."""
    return f"{Decimal(value):,.2f}"


def converted(amount: Union[Decimal, int, str], price: Price) -> Decimal:
    """Convert a human readable amount into the currency of price."""
    return Decimal(amount) * price.as_decimal()


def converted_pretty(amount: Union[Decimal, int, str], price: Price) -> str:
    return pretty_number(converted(amount, price))


def converted_ether_pretty(amount: int, price: Price, decimals: int = ETHER_DECIMALS) -> str:
    """Convert a base unit amount (wei by default) and pretty print it."""
    return converted_pretty(Decimal(amount).scaleb(-decimals), price)
