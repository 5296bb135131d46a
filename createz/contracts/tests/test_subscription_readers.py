"""
Tests for subscription contract readers.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from createz.codec import decode
from createz.contracts import (
    ContractSnapshot,
    FeatureFlags,
    create_subscription_contract,
    get_contract_data,
    get_subscription_data,
    is_flag_set,
    list_owned_subscriptions,
    list_subscriptions,
    with_flag,
)
from createz.contracts.common import ContractHandle
from createz.errors import ContractNotFound, MalformedMetadata


def _returning(compute):
    """Contract function mock whose call() result depends on its arguments."""
    def _bind(*args):
        bound = MagicMock()
        bound.call = AsyncMock(return_value=compute(*args))
        return bound

    return MagicMock(side_effect=_bind)


@pytest.fixture
def handle(mock_contract, addresses):
    return ContractHandle(addresses["subscription"], mock_contract)


class TestFeatureFlags:
    """Test flag bit helpers."""

    def test_is_flag_set(self):
        assert is_flag_set(0b101, 0b100) is True
        assert is_flag_set(0b101, 0b010) is False

    @pytest.mark.parametrize("flags", range(8))
    def test_is_flag_set_matches_mask(self, flags):
        for flag in FeatureFlags:
            assert is_flag_set(flags, flag) == ((flags & flag) == flag)

    def test_with_flag(self):
        flags = with_flag(0, FeatureFlags.RENEWAL_PAUSED, True)

        assert flags == 2
        assert with_flag(flags, FeatureFlags.RENEWAL_PAUSED, False) == 0
        assert with_flag(flags, FeatureFlags.MINTING_PAUSED, True) == 3

    def test_snapshot_properties(self, contract_document, addresses):
        contract_document["attributes"][-1] = {"trait_type": "flags", "value": 5}
        snapshot = decode(contract_document, ContractSnapshot, address=addresses["subscription"])

        assert snapshot.minting_paused is True
        assert snapshot.renewal_paused is False
        assert snapshot.tipping_paused is True


class TestCreateSubscriptionContract:
    """Test resolving contract handles."""

    @pytest.mark.asyncio
    async def test_handle_is_checksummed(self, session, mock_contract, addresses):
        handle = await create_subscription_contract(addresses["subscription"].lower(), session)

        assert handle.address == addresses["subscription"]
        assert handle.contract is mock_contract

    @pytest.mark.asyncio
    async def test_no_code(self, session, mock_web3, addresses):
        mock_web3.eth.get_code = AsyncMock(return_value=b"")

        with pytest.raises(ContractNotFound):
            await create_subscription_contract(addresses["subscription"], session)


class TestSnapshotReaders:
    """Test contract and token snapshot reads."""

    @pytest.mark.asyncio
    async def test_get_contract_data(self, handle, mock_contract, data_uri, contract_document, addresses):
        mock_contract.functions.contractURI.return_value.call = AsyncMock(
            return_value=data_uri(contract_document)
        )

        snapshot = await get_contract_data(handle)

        assert snapshot.address == addresses["subscription"]
        assert snapshot.token == addresses["token"]
        assert snapshot.claimable == 5000

    @pytest.mark.asyncio
    async def test_get_subscription_data(self, handle, mock_contract, data_uri, token_document):
        mock_contract.functions.tokenURI.return_value.call = AsyncMock(
            return_value=data_uri(token_document)
        )

        snapshot = await get_subscription_data(handle, 3)

        mock_contract.functions.tokenURI.assert_called_with(3)
        assert snapshot.token_id == 3
        assert snapshot.withdrawable == 5000

    @pytest.mark.asyncio
    async def test_malformed_metadata_is_raised(self, handle, mock_contract, data_uri, contract_document):
        """Test decode failures are logged and re-raised, never swallowed."""
        contract_document["attributes"] = []
        mock_contract.functions.contractURI.return_value.call = AsyncMock(
            return_value=data_uri(contract_document)
        )

        with pytest.raises(MalformedMetadata):
            await get_contract_data(handle)

    @pytest.mark.asyncio
    async def test_transport_errors_propagate(self, handle, mock_contract):
        mock_contract.functions.contractURI.return_value.call = AsyncMock(
            side_effect=ConnectionError("node down")
        )

        with pytest.raises(ConnectionError):
            await get_contract_data(handle)


class TestListing:
    """Test paged token listings."""

    @pytest.mark.asyncio
    async def test_list_subscriptions_newest_first(self, handle, mock_contract):
        mock_contract.functions.totalSupply.return_value.call = AsyncMock(return_value=5)
        mock_contract.functions.tokenByIndex = _returning(lambda index: index + 100)

        assert await list_subscriptions(handle, 0, 2) == [104, 103]
        assert await list_subscriptions(handle, 2, 2) == [100]
        assert await list_subscriptions(handle, 3, 2) == []

    @pytest.mark.asyncio
    async def test_list_owned_subscriptions(self, handle, mock_contract, addresses):
        mock_contract.functions.balanceOf.return_value.call = AsyncMock(return_value=3)
        mock_contract.functions.tokenOfOwnerByIndex = _returning(lambda owner, index: index * 10)

        tokens = await list_owned_subscriptions(handle, addresses["account"].lower(), 0, 5)

        assert tokens == [0, 10, 20]
        mock_contract.functions.balanceOf.assert_called_with(addresses["account"])
