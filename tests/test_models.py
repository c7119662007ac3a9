"""Tests for decoded records and request models."""

from decimal import Decimal

import pytest

from xoxno import abi
from xoxno.exceptions import CodecError, UnsupportedOperationError
from xoxno.models import (
    AcceptGlobalOffer,
    AttributeFilter,
    Auction,
    AuctionType,
    BuyRequest,
    ChangeListing,
    GlobalOffer,
    Marketplace,
    NewListing,
    NFTBody,
    encode_attributes,
    parse_attributes,
)
from tests.conftest import ALICE, BOB, EGLD_UNIT, auction_bytes, global_offer_bytes

JSON_ATTRIBUTES = "eyJCYWNrZ3JvdW5kIjoiUmVkIiwiRXllcyI6Ikxhc2VyIn0="


class TestMarketplace:
    def test_parse(self) -> None:
        assert Marketplace.parse("XO") is Marketplace.XO
        assert Marketplace.parse(Marketplace.XO) is Marketplace.XO

    def test_unknown_market(self) -> None:
        with pytest.raises(UnsupportedOperationError) as exc_info:
            Marketplace.parse("FrameIt")
        assert exc_info.value.code == "MARKET_NOT_SUPPORTED"


class TestAttributes:
    def test_json_object(self) -> None:
        assert parse_attributes(JSON_ATTRIBUTES) == (
            AttributeFilter("Background", "Red"),
            AttributeFilter("Eyes", "Laser"),
        )

    def test_trait_list(self) -> None:
        assert parse_attributes(b"W3sidHJhaXRfdHlwZSI6IkhhdCIsInZhbHVlIjoiQ2FwIn1d") == (
            AttributeFilter("Hat", "Cap"),
        )

    def test_delimited_pairs(self) -> None:
        assert parse_attributes("QmFja2dyb3VuZDpSZWQ7RXllczpMYXNlcg==") == (
            AttributeFilter("Background", "Red"),
            AttributeFilter("Eyes", "Laser"),
        )

    def test_invalid_base64(self) -> None:
        with pytest.raises(CodecError):
            parse_attributes("not base64!")

    def test_encode_mapping(self) -> None:
        assert encode_attributes({"Background": "Red", "Eyes": "Laser"}) == JSON_ATTRIBUTES

    def test_encode_filters(self) -> None:
        filters = [AttributeFilter("Background", "Red"), AttributeFilter("Eyes", "Laser")]
        assert encode_attributes(filters) == JSON_ATTRIBUTES

    def test_encoded_string_passes_through(self) -> None:
        assert encode_attributes(JSON_ATTRIBUTES) == JSON_ATTRIBUTES


class TestAuction:
    def test_from_record(self) -> None:
        record = abi.AUCTION.decode_top(auction_bytes(current_bid=3 * EGLD_UNIT // 2))
        auction = Auction.from_record(42, record)
        assert auction.auction_id == 42
        assert auction.auction_type is AuctionType.NFT_BID
        assert auction.auctioned_token_type == "WEB-5d08be"
        assert auction.min_bid == "1000000000000000000"
        assert auction.max_bid == "5000000000000000000"
        assert auction.min_bid_short == Decimal(1)
        assert auction.max_bid_short == Decimal(5)
        assert auction.current_bid_short == Decimal("1.5")
        assert auction.original_owner == ALICE

    def test_no_max_bid(self) -> None:
        record = abi.AUCTION.decode_top(auction_bytes(max_bid=None))
        auction = Auction.from_record(1, record)
        assert auction.max_bid is None
        assert auction.max_bid_short is None

    def test_token_decimals(self) -> None:
        record = abi.AUCTION.decode_top(auction_bytes(payment_token="USDC-c76f1f", min_bid=25_000_000))
        assert Auction.from_record(1, record, decimals=6).min_bid_short == Decimal(25)


class TestGlobalOffer:
    def test_legacy_offer_backed_by_deposit(self) -> None:
        record = abi.GLOBAL_OFFER.decode_top(global_offer_bytes())
        offer = GlobalOffer.from_record(record, owner_balance=Decimal(3))
        assert offer.owner == BOB
        assert offer.short_price == Decimal(2)
        assert offer.is_active is True
        assert offer.new_version is False

    def test_legacy_offer_underfunded(self) -> None:
        record = abi.GLOBAL_OFFER.decode_top(global_offer_bytes())
        assert GlobalOffer.from_record(record, owner_balance=Decimal("1.5")).is_active is False
        assert GlobalOffer.from_record(record).is_active is False

    def test_new_version_is_always_active(self) -> None:
        record = abi.GLOBAL_OFFER.decode_top(global_offer_bytes(new_version=True))
        assert GlobalOffer.from_record(record, owner_balance=Decimal(0)).is_active is True

    def test_record_without_version_flag(self) -> None:
        record = abi.GLOBAL_OFFER.decode_top(global_offer_bytes(new_version=None))
        assert record["new_version"] is False

    def test_attributes(self) -> None:
        record = abi.GLOBAL_OFFER.decode_top(global_offer_bytes(attributes=JSON_ATTRIBUTES.encode()))
        offer = GlobalOffer.from_record(record)
        assert offer.attributes == (AttributeFilter("Background", "Red"), AttributeFilter("Eyes", "Laser"))


class TestRequests:
    def test_change_listing_scales_price(self) -> None:
        listing = ChangeListing("USDC-c76f1f", 25, auction_id=9, deadline=1_800_000_000, decimals=6)
        assert listing.to_struct() == {
            "payment_token_type": "USDC-c76f1f",
            "new_price": 25_000_000,
            "auction_id": 9,
            "deadline": 1_800_000_000,
        }

    def test_new_listing_struct(self) -> None:
        listing = NewListing("WEB-5d08be", 12, 1, min_bid="1.5")
        struct = listing.to_struct()
        assert struct["min_bid"] == 3 * EGLD_UNIT // 2
        assert struct["max_bid"] == 0
        assert struct["accepted_payment_token"] == "EGLD"
        assert struct["opt_start_time"] == 0
        assert abi.BULK_LISTING.encode_nested(struct)

    def test_signature_from_hex(self) -> None:
        assert AcceptGlobalOffer(1, signature="abcd").signature_bytes == b"\xab\xcd"
        assert AcceptGlobalOffer(1).signature_bytes is None
        with pytest.raises(CodecError):
            _ = AcceptGlobalOffer(1, signature="zz").signature_bytes

    def test_nft_body_transfer(self) -> None:
        transfer = NFTBody("WEB-5d08be", 12, 2).to_transfer()
        assert (transfer.token, transfer.nonce, transfer.amount) == ("WEB-5d08be", 12, 2)


class TestBuyRequest:
    def test_complete_unchecked_request_needs_no_read(self) -> None:
        request = BuyRequest(5, collection="WEB-5d08be", nonce=12, payment_amount=2, with_check=False)
        assert request.needs_live_auction is False

    def test_check_forces_read(self) -> None:
        request = BuyRequest(5, collection="WEB-5d08be", nonce=12, payment_amount=2)
        assert request.needs_live_auction is True

    @pytest.mark.parametrize("missing", ["collection", "nonce", "payment_amount"])
    def test_missing_field_forces_read(self, missing: str) -> None:
        fields = {"collection": "WEB-5d08be", "nonce": 12, "payment_amount": 2}
        fields[missing] = None
        assert BuyRequest(5, with_check=False, **fields).needs_live_auction is True
