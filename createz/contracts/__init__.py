"""
Readers producing typed snapshots of on-chain contract state.
"""

from .analytics import Severity, WarningMessage, analyze_subscription_contract
from .common import ContractHandle, connect, require_code
from .erc20 import Erc20Data, get_allowance, get_balance, get_erc20_contract, get_erc20_data
from .erc6551 import (
    TokenBoundAccount,
    encode_execute,
    find_default_profile_account,
    find_erc6551_account,
    get_erc6551_account,
    get_erc6551_registry,
    is_valid_signer,
)
from .oracle import Price, converted, converted_ether_pretty, converted_pretty, find_price
from .pagination import fetch_page, page_indices, page_range
from .subscription import (
    ContractSnapshot,
    FeatureFlags,
    TokenSnapshot,
    create_subscription_contract,
    get_contract_data,
    get_subscription_data,
    is_flag_set,
    list_owned_subscriptions,
    list_subscriptions,
    with_flag,
)

__all__ = [
    "ContractHandle",
    "ContractSnapshot",
    "Erc20Data",
    "FeatureFlags",
    "Price",
    "Severity",
    "TokenBoundAccount",
    "TokenSnapshot",
    "WarningMessage",
    "analyze_subscription_contract",
    "connect",
    "converted",
    "converted_ether_pretty",
    "converted_pretty",
    "create_subscription_contract",
    "encode_execute",
    "fetch_page",
    "find_default_profile_account",
    "find_erc6551_account",
    "find_price",
    "get_allowance",
    "get_balance",
    "get_contract_data",
    "get_erc20_contract",
    "get_erc20_data",
    "get_erc6551_account",
    "get_erc6551_registry",
    "get_subscription_data",
    "is_flag_set",
    "is_valid_signer",
    "list_owned_subscriptions",
    "list_subscriptions",
    "page_indices",
    "page_range",
    "require_code",
    "with_flag",
]
