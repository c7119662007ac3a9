"""Tests for the contract value codec."""

import pytest

from xoxno import abi
from xoxno.codec import (
    ADDRESS,
    BIG_UINT,
    BOOL,
    BYTES,
    TOKEN_IDENTIFIER,
    U64,
    ContractCall,
    EnumType,
    FieldDefinition,
    OptionalValueType,
    OptionType,
    StructType,
    TypedValue,
    decode_variadic,
)
from xoxno.exceptions import CodecError
from tests.conftest import ALICE, ALICE_PUBKEY, auction_bytes, big, buf, u64


class TestScalars:
    def test_u64_top_is_minimal(self) -> None:
        assert U64.encode_top(0) == b""
        assert U64.encode_top(1) == b"\x01"
        assert U64.encode_top(256) == b"\x01\x00"

    def test_u64_nested_is_eight_bytes(self) -> None:
        assert U64.encode_nested(5) == b"\x00" * 7 + b"\x05"

    def test_u64_rejects_overflow(self) -> None:
        with pytest.raises(CodecError):
            U64.encode_top(2**64)

    def test_u64_rejects_long_top_payload(self) -> None:
        with pytest.raises(CodecError):
            U64.decode_top(b"\x01" * 9)

    def test_big_uint_nested_has_length_prefix(self) -> None:
        assert BIG_UINT.encode_nested(256) == b"\x00\x00\x00\x02\x01\x00"
        assert BIG_UINT.encode_nested(0) == b"\x00\x00\x00\x00"

    def test_big_uint_top_decodes_empty_as_zero(self) -> None:
        assert BIG_UINT.decode_top(b"") == 0

    def test_negative_integer_is_rejected(self) -> None:
        with pytest.raises(CodecError):
            BIG_UINT.encode_top(-1)

    def test_bool(self) -> None:
        assert BOOL.encode_top(True) == b"\x01"
        assert BOOL.encode_top(False) == b""
        assert BOOL.decode_top(b"") is False
        assert BOOL.encode_nested(False) == b"\x00"
        with pytest.raises(CodecError):
            BOOL.decode_top(b"\x02")

    def test_token_identifier(self) -> None:
        assert TOKEN_IDENTIFIER.encode_top("EGLD") == b"EGLD"
        assert TOKEN_IDENTIFIER.encode_nested("EGLD") == b"\x00\x00\x00\x04EGLD"
        assert TOKEN_IDENTIFIER.decode_top(b"WEB-5d08be") == "WEB-5d08be"

    def test_address_decodes_to_bech32(self) -> None:
        assert ADDRESS.decode_top(ALICE_PUBKEY) == ALICE
        assert ADDRESS.encode_top(ALICE) == ALICE_PUBKEY


class TestComposite:
    def test_option_top(self) -> None:
        opt = OptionType(U64)
        assert opt.encode_top(None) == b""
        assert opt.encode_top(3) == b"\x01" + u64(3)
        assert opt.decode_top(b"") is None
        assert opt.decode_top(b"\x01" + u64(3)) == 3

    def test_option_rejects_bad_flag(self) -> None:
        with pytest.raises(CodecError):
            OptionType(U64).decode_top(b"\x02" + u64(3))

    def test_enum_by_name(self) -> None:
        color = EnumType("Color", ["Red", "Green"])
        assert color.decode_top(b"\x01") == "Green"
        assert color.decode_top(b"") == "Red"
        assert color.encode_top("Green") == b"\x01"
        with pytest.raises(CodecError):
            color.decode_top(b"\x05")

    def test_struct_trailing_default(self) -> None:
        point = StructType("Point", [
            FieldDefinition("x", U64),
            FieldDefinition("label", BYTES),
            FieldDefinition("flag", BOOL, default=False),
        ])
        assert point.decode_top(u64(1) + buf(b"a")) == {"x": 1, "label": b"a", "flag": False}
        assert point.decode_top(u64(1) + buf(b"a") + b"\x01")["flag"] is True

    def test_struct_truncated(self) -> None:
        with pytest.raises(CodecError):
            abi.AUCTION.decode_top(auction_bytes()[:-3])

    def test_struct_trailing_bytes(self) -> None:
        with pytest.raises(CodecError):
            abi.DEPOSIT_PAYMENT.decode_top(buf(b"EGLD") + u64(0) + big(1) + b"\x00")

    def test_struct_missing_field_on_encode(self) -> None:
        with pytest.raises(CodecError):
            abi.BULK_UPDATE_LISTING.encode_nested({"payment_token_type": "EGLD"})

    def test_auction_layout(self) -> None:
        record = abi.AUCTION.decode_top(auction_bytes(max_bid=None, auction_type=2))
        assert record["auction_type"] == "Nft"
        assert record["max_bid"] is None
        assert record["original_owner"] == ALICE
        assert record["marketplace_cut_percentage"] == 200

    def test_decode_variadic(self) -> None:
        assert decode_variadic(U64, [b"\x01", b"\x02", b""]) == [1, 2, 0]


class TestContractCall:
    def test_data(self) -> None:
        call = ContractCall("withdraw", (TypedValue(U64, 1), TypedValue(U64, 300)))
        assert call.data == "withdraw@01@012c"

    def test_zero_argument_is_empty_segment(self) -> None:
        assert ContractCall("endAuction", (TypedValue(U64, 0),)).data == "endAuction@"

    def test_no_arguments(self) -> None:
        assert ContractCall("getListingsCount").data == "getListingsCount"

    def test_absent_optional_value_is_dropped(self) -> None:
        call = ContractCall("acceptGlobalOffer", (
            TypedValue(U64, 5),
            TypedValue(OptionalValueType(BYTES), None),
        ))
        assert call.hex_args() == ["05"]
