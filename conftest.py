"""
Shared pytest fixtures: a fake web3 client, contract and sessions.
"""

import base64
import json
from unittest.mock import AsyncMock, MagicMock

import pytest
from hexbytes import HexBytes

from createz.config import ClientConfig
from createz.config.chains import ChainContracts, ChainData
from createz.session import SessionContext

ACCOUNT = "0x90F8bf6A479f320ead074411a4B0e7944Ea8c9C1"
OTHER_ACCOUNT = "0xFFcf8FDEE72ac11b5c542428B35EEF5769C409f0"
SUBSCRIPTION_ADDRESS = "0x5FbDB2315678afecb367f032d93F642f64180aa3"
TOKEN_ADDRESS = "0xe7f1725E7734CE288F8367e1Bb143E90bb3F0512"
FEED_ADDRESS = "0x9fE46736679d2D9a65F0992F2272dE9f3c7fa6e0"
TX_HASH = HexBytes(b"\x11" * 32)


def _to_data_uri(document: dict) -> str:
    payload = base64.b64encode(json.dumps(document).encode()).decode()
    return f"data:application/json;base64,{payload}"


@pytest.fixture
def addresses():
    """Well-known test addresses."""
    return {
        "account": ACCOUNT,
        "other": OTHER_ACCOUNT,
        "subscription": SUBSCRIPTION_ADDRESS,
        "token": TOKEN_ADDRESS,
        "feed": FEED_ADDRESS,
    }


@pytest.fixture
def tx_hash():
    return TX_HASH


@pytest.fixture
def contract_document():
    """Well-formed contract metadata document."""
    return {
        "name": "Creator Club",
        "description": "Monthly access",
        "image": "https://example.com/club.png",
        "external_url": "",
        "attributes": [
            {"trait_type": "token", "value": TOKEN_ADDRESS.lower()},
            {"trait_type": "owner", "value": OTHER_ACCOUNT},
            {"trait_type": "rate", "value": 1000},
            {"trait_type": "lock", "value": 10},
            {"trait_type": "epoch_size", "value": 3600},
            {"trait_type": "max_supply", "value": 0},
            {"trait_type": "total_supply", "value": 12},
            {"trait_type": "claimable", "value": "5000"},
            {"trait_type": "flags", "value": 0},
        ],
    }


@pytest.fixture
def token_document():
    """Well-formed token metadata document."""
    return {
        "name": "Creator Club #1",
        "attributes": [
            {"trait_type": "deposited", "value": 10000},
            {"trait_type": "spent", "value": 4000},
            {"trait_type": "unspent", "value": 6000},
            {"trait_type": "withdrawable", "value": 5000},
            {"trait_type": "tips", "value": 0},
            {"trait_type": "active", "value": 1},
            {"trait_type": "expiry", "value": 1735689600},
        ],
    }


@pytest.fixture
def data_uri():
    """Encode a document as a base64 data URI."""
    return _to_data_uri


@pytest.fixture
def mock_contract():
    """
    Fake web3 contract.

    Configure reads with
    contract.functions.<name>.return_value.call = AsyncMock(return_value=...)
    and receipts with
    contract.events.<name>.return_value.process_receipt.return_value = [...].
    """
    contract = MagicMock()
    return contract


@pytest.fixture
def receipt():
    return {"status": 1, "transactionHash": TX_HASH, "logs": []}


@pytest.fixture
def mock_web3(mock_contract, receipt):
    """Fake AsyncWeb3 whose every contract() binding is mock_contract."""
    web3 = MagicMock()
    web3.eth.contract.return_value = mock_contract
    web3.eth.get_code = AsyncMock(return_value=HexBytes(b"\x60\x80"))
    web3.eth.wait_for_transaction_receipt = AsyncMock(return_value=receipt)
    return web3


@pytest.fixture
def chain_data():
    return ChainData(
        name="testnet",
        chain_id=31337,
        rpc_url="http://127.0.0.1:8545",
        explorer_url="http://127.0.0.1",
        native_token="ETH",
        contracts=ChainContracts(
            erc6551_registry="0x000000006551c19487814612e58FE06813775758",
            default_erc6551_implementation="0x55266d75D1a14E4572138116aF39863Ed6596E7F",
            profile="0xCf7Ed3AccA5a467e9e704C703E8D87F634fB0Fc9",
        ),
        price_feeds={TOKEN_ADDRESS: FEED_ADDRESS},
    )


@pytest.fixture
def session(mock_web3, chain_data):
    """Session acting as ACCOUNT."""
    return SessionContext(web3=mock_web3, chain=chain_data, account=ACCOUNT)


@pytest.fixture
def readonly_session(mock_web3, chain_data):
    """Session without an acting account."""
    return SessionContext(web3=mock_web3, chain=chain_data)


@pytest.fixture
def client_config():
    """Query settings without backoff delays."""
    return ClientConfig(
        QUERY_MAX_RETRIES=3,
        QUERY_RETRY_DELAY=0.0,
        QUERY_STALE_TIME=0.0,
        TX_CONFIRMATION_TIMEOUT=5.0,
        CLAIM_GAS_MARGIN_PERCENT=110,
    )
