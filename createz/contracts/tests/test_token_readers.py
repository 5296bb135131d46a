"""
Tests for ERC20, price feed, ERC6551 and warning readers.
"""

from dataclasses import replace
from decimal import Decimal
from unittest.mock import ANY, AsyncMock

import pytest
from web3.exceptions import ContractLogicError

from createz.codec import decode
from createz.contracts import (
    ContractSnapshot,
    Price,
    Severity,
    analyze_subscription_contract,
    converted,
    converted_ether_pretty,
    converted_pretty,
    encode_execute,
    find_default_profile_account,
    find_price,
    get_erc20_contract,
    get_erc20_data,
    get_erc6551_account,
    is_valid_signer,
)
from createz.contracts.erc6551 import VALID_SIGNER_MAGIC


class TestErc20:
    """Test ERC20 readers."""

    @pytest.mark.asyncio
    async def test_get_erc20_data(self, session, mock_contract, addresses):
        mock_contract.functions.name.return_value.call = AsyncMock(return_value="USD Coin")
        mock_contract.functions.symbol.return_value.call = AsyncMock(return_value="USDC")
        mock_contract.functions.decimals.return_value.call = AsyncMock(return_value=6)

        data = await get_erc20_data(get_erc20_contract(addresses["token"], session))

        assert data.address == addresses["token"]
        assert (data.name, data.symbol, data.decimals) == ("USD Coin", "USDC", 6)


class TestOracle:
    """Test price lookup and conversion."""

    @pytest.mark.asyncio
    async def test_find_price(self, session, mock_contract, addresses):
        mock_contract.functions.decimals.return_value.call = AsyncMock(return_value=8)
        mock_contract.functions.latestRoundData.return_value.call = AsyncMock(
            return_value=(1, 100012345678, 0, 0, 1)
        )

        price = await find_price(addresses["token"].lower(), session.chain.price_feeds, session)

        assert price == Price(price=100012345678, decimals=8)
        session.web3.eth.contract.assert_called_with(address=addresses["feed"], abi=ANY)

    @pytest.mark.asyncio
    async def test_find_price_without_feed(self, session, addresses):
        assert await find_price(addresses["other"], session.chain.price_feeds, session) is None

    def test_conversion_is_exact(self):
        """Test conversion uses the integer mantissa and decimals exactly."""
        price = Price(price=100012345678, decimals=8)

        assert price.as_decimal() == Decimal("1000.12345678")
        assert converted(3, price) == Decimal("3000.37037034")
        assert converted_pretty("1.5", price) == "1,500.19"

    def test_converted_ether_pretty(self):
        price = Price(price=250000000000, decimals=8)

        assert converted_ether_pretty(2 * 10 ** 18, price) == "5,000.00"
        assert converted_ether_pretty(1500000, price, decimals=6) == "3,750.00"


class TestErc6551:
    """Test token-bound account readers."""

    @pytest.mark.asyncio
    async def test_find_default_profile_account(self, session, mock_contract, addresses):
        mock_contract.functions.account.return_value.call = AsyncMock(
            return_value=addresses["other"].lower()
        )

        assert await find_default_profile_account(session, 7) == addresses["other"]
        args = mock_contract.functions.account.call_args.args
        assert args[2] == session.chain.chain_id
        assert args[4] == 7

    @pytest.mark.asyncio
    async def test_no_profile_contract(self, session, chain_data):
        chain = replace(chain_data, contracts=replace(chain_data.contracts, profile=None))
        session = replace(session, chain=chain)

        assert await find_default_profile_account(session, 7) is None

    @pytest.mark.asyncio
    async def test_get_erc6551_account_not_deployed(self, session, mock_contract, addresses):
        mock_contract.functions.state.return_value.call = AsyncMock(
            side_effect=ContractLogicError("execution reverted")
        )

        assert await get_erc6551_account(addresses["other"], session) is None

    @pytest.mark.asyncio
    async def test_same_address_is_valid_signer(self, session, addresses):
        assert await is_valid_signer(addresses["account"], addresses["account"].lower(), session)

    @pytest.mark.asyncio
    async def test_token_bound_account_signer(self, session, mock_contract, addresses):
        mock_contract.functions.state.return_value.call = AsyncMock(return_value=1)
        mock_contract.functions.isValidSigner.return_value.call = AsyncMock(
            return_value=VALID_SIGNER_MAGIC
        )

        assert await is_valid_signer(addresses["account"], addresses["other"], session) is True

        mock_contract.functions.isValidSigner.return_value.call = AsyncMock(return_value=bytes(4))
        assert await is_valid_signer(addresses["account"], addresses["other"], session) is False

    @pytest.mark.asyncio
    async def test_encode_execute(self, session, mock_contract, addresses):
        mock_contract.functions.state.return_value.call = AsyncMock(return_value=1)
        mock_contract.encode_abi.return_value = "0xabcdef"
        account = await get_erc6551_account(addresses["other"], session)
        target = get_erc20_contract(addresses["token"], session)

        encode_execute(account, target, "approve", [addresses["subscription"], 10])

        mock_contract.encode_abi.assert_called_with("approve", args=[addresses["subscription"], 10])
        mock_contract.functions.execute.assert_called_with(addresses["token"], 0, "0xabcdef", 0)


class TestAnalytics:
    """Test contract warnings."""

    @pytest.mark.asyncio
    async def test_no_snapshot(self):
        assert await analyze_subscription_contract(None) == []

    @pytest.mark.asyncio
    async def test_healthy_contract(self, contract_document, addresses):
        snapshot = decode(contract_document, ContractSnapshot, address=addresses["subscription"])

        assert await analyze_subscription_contract(snapshot) == []

    @pytest.mark.asyncio
    async def test_paused_and_sold_out(self, contract_document, addresses):
        snapshot = decode(contract_document, ContractSnapshot, address=addresses["subscription"])
        snapshot = replace(snapshot, flags=1, max_supply=12)

        warnings = await analyze_subscription_contract(snapshot)

        assert [w.severity for w in warnings] == [Severity.WARNING, Severity.ERROR]
