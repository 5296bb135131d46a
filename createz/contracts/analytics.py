"""
Warnings derived from a subscription contract snapshot.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from .subscription import ContractSnapshot

logger = logging.getLogger(__name__)


class Severity(Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class WarningMessage:
    severity: Severity
    message: str


async def analyze_subscription_contract(snapshot: Optional[ContractSnapshot]) -> List[WarningMessage]:
    """
    Collect the warnings a subscriber should see before minting or renewing.

    Returns an empty list when there is no snapshot yet.
    """
    if snapshot is None:
        return []

    warnings: List[WarningMessage] = []

    if snapshot.minting_paused:
        warnings.append(WarningMessage(Severity.WARNING, "Minting new subscriptions is paused"))
    if snapshot.renewal_paused:
        warnings.append(WarningMessage(Severity.WARNING, "Renewing subscriptions is paused"))
    if snapshot.tipping_paused:
        warnings.append(WarningMessage(Severity.INFO, "Tipping is paused"))

    if snapshot.max_supply > 0 and snapshot.total_supply >= snapshot.max_supply:
        warnings.append(WarningMessage(
            Severity.ERROR,
            f"All {snapshot.max_supply} subscriptions have been minted",
        ))
    if snapshot.rate == 0:
        warnings.append(WarningMessage(
            Severity.ERROR, "Subscription rate is zero, deposits are never spent"
        ))
    if snapshot.epoch_size == 0:
        warnings.append(WarningMessage(
            Severity.ERROR, "Epoch size is zero, funds can never be claimed"
        ))

    logger.debug(f"Found {len(warnings)} warnings for {snapshot.address}")
    return warnings
