"""
Tests for metadata decoding and encoding.
"""

import json

import pytest

from createz.codec import decode, encode, parse_document, validate_metadata_update
from createz.contracts import ContractSnapshot, TokenSnapshot
from createz.errors import InvalidParameter, MalformedMetadata


class TestDecode:
    """Test decoding documents into snapshots."""

    def test_decode_contract_snapshot(self, contract_document, addresses):
        """Test a well-formed document decodes into the expected projection."""
        snapshot = decode(contract_document, ContractSnapshot, address=addresses["subscription"])

        assert snapshot == ContractSnapshot(
            name="Creator Club",
            description="Monthly access",
            image="https://example.com/club.png",
            external_url=None,
            address=addresses["subscription"],
            token=addresses["token"],
            owner=addresses["other"],
            rate=1000,
            lock=10,
            epoch_size=3600,
            max_supply=0,
            total_supply=12,
            claimable=5000,
            flags=0,
        )

    def test_decode_token_snapshot(self, token_document, addresses):
        """Test boolean and integer attributes of a token document."""
        snapshot = decode(
            token_document, TokenSnapshot, address=addresses["subscription"], token_id=1
        )

        assert snapshot.token_id == 1
        assert snapshot.active is True
        assert snapshot.unspent == 6000
        assert snapshot.description is None

    def test_decode_from_json_text(self, contract_document, addresses):
        """Test JSON text is accepted as well as parsed documents."""
        snapshot = decode(
            json.dumps(contract_document), ContractSnapshot, address=addresses["subscription"]
        )

        assert snapshot.rate == 1000

    def test_decode_forty_digit_amount(self, contract_document, addresses):
        """Test a 40 digit decimal amount is read as an integer, not an address."""
        amount = "1" + "0" * 39
        for attribute in contract_document["attributes"]:
            if attribute["trait_type"] == "claimable":
                attribute["value"] = amount

        snapshot = decode(contract_document, ContractSnapshot, address=addresses["subscription"])

        assert snapshot.claimable == 10 ** 39

    @pytest.mark.parametrize("missing", ["token", "rate", "flags"])
    def test_missing_attribute_is_malformed(self, contract_document, addresses, missing):
        """Test a document lacking a required attribute fails."""
        contract_document["attributes"] = [
            a for a in contract_document["attributes"] if a["trait_type"] != missing
        ]

        with pytest.raises(MalformedMetadata) as exc_info:
            decode(contract_document, ContractSnapshot, address=addresses["subscription"])

        assert missing in str(exc_info.value)
        assert exc_info.value.payload is contract_document

    def test_non_integer_attribute_is_malformed(self, contract_document, addresses):
        """Test numeric fields must parse as integers."""
        contract_document["attributes"][2] = {"trait_type": "rate", "value": "fast"}

        with pytest.raises(MalformedMetadata):
            decode(contract_document, ContractSnapshot, address=addresses["subscription"])

    def test_invalid_boolean_is_malformed(self, token_document, addresses):
        """Test an active flag other than 0 or 1 fails."""
        token_document["attributes"][5] = {"trait_type": "active", "value": 2}

        with pytest.raises(MalformedMetadata):
            decode(token_document, TokenSnapshot, address=addresses["subscription"], token_id=1)

    def test_invalid_image_url_is_malformed(self, contract_document, addresses):
        """Test URL shaped fields must be well-formed URLs."""
        contract_document["image"] = "not a url"

        with pytest.raises(MalformedMetadata):
            decode(contract_document, ContractSnapshot, address=addresses["subscription"])

    def test_short_name_is_malformed(self, contract_document):
        contract_document["name"] = "ab"

        with pytest.raises(MalformedMetadata):
            parse_document(contract_document)

    def test_invalid_json_is_malformed(self):
        with pytest.raises(MalformedMetadata) as exc_info:
            parse_document("{not json")

        assert exc_info.value.payload == "{not json"

    def test_duplicate_attribute_first_wins(self, contract_document, addresses):
        """Test the first occurrence of a trait name is authoritative."""
        contract_document["attributes"].append({"trait_type": "rate", "value": 1})

        snapshot = decode(contract_document, ContractSnapshot, address=addresses["subscription"])

        assert snapshot.rate == 1000


class TestEncode:
    """Test encoding snapshots back into documents."""

    def test_encode_omits_unset_fields(self, token_document, addresses):
        """Test unset display fields are left out and booleans become 1/0."""
        snapshot = decode(
            token_document, TokenSnapshot, address=addresses["subscription"], token_id=1
        )

        document = encode(snapshot)

        assert document["name"] == "Creator Club #1"
        assert "image" not in document
        assert "external_url" not in document
        assert {"trait_type": "active", "value": 1} in document["attributes"]

    def test_encode_decode_preserves_snapshot(self, contract_document, addresses):
        snapshot = decode(contract_document, ContractSnapshot, address=addresses["subscription"])

        assert decode(encode(snapshot), ContractSnapshot, address=addresses["subscription"]) == snapshot


class TestValidateMetadataUpdate:
    """Test validation of values sent with metadata update calls."""

    @pytest.mark.parametrize("value", ["", None])
    def test_empty_image_means_not_set(self, value):
        assert validate_metadata_update("image", value) == ""

    def test_valid_url_is_kept(self):
        assert validate_metadata_update("external_url", "https://example.com") == "https://example.com"

    def test_invalid_image_url(self):
        with pytest.raises(MalformedMetadata) as exc_info:
            validate_metadata_update("image", "not a url")

        assert "Image must be a URL" in str(exc_info.value)

    def test_invalid_external_url(self):
        with pytest.raises(MalformedMetadata) as exc_info:
            validate_metadata_update("external_url", "example")

        assert "External link must be a URL" in str(exc_info.value)

    def test_description_accepts_text(self):
        assert validate_metadata_update("description", "Weekly drops") == "Weekly drops"

    def test_unknown_field(self):
        with pytest.raises(InvalidParameter):
            validate_metadata_update("rate", "1")
