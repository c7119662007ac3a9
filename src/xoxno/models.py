"""Value objects decoded from the marketplace and requests sent to it.

Everything here is immutable. Decoded records are built in one step from the
raw codec output, with display amounts and derived flags filled in at
construction time.
"""

from __future__ import annotations

import base64
import binascii
import json
import re
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any, Iterable, Mapping, Union

from xoxno.config import NATIVE_TOKEN
from xoxno.exceptions import CodecError, UnsupportedOperationError
from xoxno.transfers import DEFAULT_DECIMALS, Amount, TokenTransfer, from_smallest_unit, to_smallest_unit


class Marketplace(str, Enum):
    """Marketplaces whose contract this client can drive."""

    XO = "XO"

    @classmethod
    def parse(cls, value: "Marketplace | str") -> "Marketplace":
        try:
            return cls(value)
        except ValueError:
            raise UnsupportedOperationError(f"Market not supported: {value!r}", code="MARKET_NOT_SUPPORTED") from None


class AuctionType(str, Enum):
    NONE = "None"
    NFT_BID = "NftBid"
    NFT = "Nft"
    SFT_ALL = "SftAll"
    SFT_ONE_PER_PAYMENT = "SftOnePerPayment"


@dataclass(frozen=True)
class Sender:
    """Transaction sender; ``nonce`` is left to the signer when ``None``."""

    address: str
    nonce: int | None = None


@dataclass(frozen=True)
class NFTBody:
    collection: str
    nonce: int
    amount: int = 1

    def to_transfer(self) -> TokenTransfer:
        return TokenTransfer.semi_fungible(self.collection, self.nonce, self.amount)


@dataclass(frozen=True)
class Payment:
    """A payment expressed at display precision."""

    token: str = NATIVE_TOKEN
    amount: Amount | None = None
    decimals: int = DEFAULT_DECIMALS


# ---------------------------------------------------------------------------
# Attribute filters
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class AttributeFilter:
    key: str
    value: str


AttributesInput = Union[str, Mapping[str, Any], Iterable[Any]]

_DELIMITERS = re.compile(r"[;,]")


def _pairs_from_json(parsed: Any) -> list[AttributeFilter]:
    if isinstance(parsed, dict):
        return [AttributeFilter(str(k), str(v)) for k, v in parsed.items()]
    if isinstance(parsed, list):
        filters = []
        for item in parsed:
            if not isinstance(item, dict) or "value" not in item:
                raise CodecError(f"Unsupported attribute entry: {item!r}")
            key = item.get("trait_type", item.get("key"))
            filters.append(AttributeFilter(str(key), str(item["value"])))
        return filters
    raise CodecError(f"Unsupported attribute payload: {parsed!r}")


def parse_attributes(raw: bytes | str) -> tuple[AttributeFilter, ...]:
    """Decode a base64 attribute blob into key/value filters.

    The decoded text is JSON (an object, or a list of ``{trait_type, value}``
    entries); older offers carry a ``key:value`` list separated by ``;`` or
    ``,`` instead.
    """
    if isinstance(raw, bytes):
        raw = raw.decode("ascii", errors="strict")
    try:
        text = base64.b64decode(raw, validate=True).decode("utf-8")
    except (binascii.Error, ValueError) as exc:
        raise CodecError(f"Attributes are not valid base64: {raw!r}") from exc
    text = text.strip()
    if not text:
        return ()
    try:
        parsed = json.loads(text)
    except ValueError:
        parsed = None
    if parsed is not None:
        return tuple(_pairs_from_json(parsed))

    filters = []
    for chunk in _DELIMITERS.split(text):
        if not chunk.strip():
            continue
        key, sep, value = chunk.partition(":")
        if not sep:
            raise CodecError(f"Attribute {chunk!r} is not a key:value pair")
        filters.append(AttributeFilter(key.strip(), value.strip()))
    return tuple(filters)


def encode_attributes(attributes: AttributesInput) -> str:
    """Encode attribute filters the way :func:`parse_attributes` reads them.

    A string is taken to be already encoded and passed through.
    """
    if isinstance(attributes, str):
        return attributes
    if isinstance(attributes, Mapping):
        payload = {str(k): v for k, v in attributes.items()}
    else:
        payload = {}
        for item in attributes:
            if isinstance(item, AttributeFilter):
                payload[item.key] = item.value
            else:
                key, value = item
                payload[str(key)] = value
    text = json.dumps(payload, separators=(",", ":"))
    return base64.b64encode(text.encode("utf-8")).decode("ascii")


# ---------------------------------------------------------------------------
# Decoded records
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Auction:
    """Snapshot of one listing. Raw amounts are smallest-unit strings."""

    auction_id: int
    auctioned_token_type: str
    auctioned_token_nonce: int
    nr_auctioned_tokens: int
    auction_type: AuctionType
    payment_token_type: str
    payment_token_nonce: int
    min_bid: str
    max_bid: str | None
    start_time: int
    deadline: int
    original_owner: str
    current_winner: str
    current_bid: str
    marketplace_cut_percentage: int
    creator_royalties_percentage: int
    min_bid_short: Decimal
    max_bid_short: Decimal | None
    current_bid_short: Decimal
    decimals: int = DEFAULT_DECIMALS

    @classmethod
    def from_record(cls, auction_id: int, record: Mapping[str, Any], decimals: int = DEFAULT_DECIMALS) -> "Auction":
        max_bid = record["max_bid"]
        return cls(
            auction_id=auction_id,
            auctioned_token_type=record["auctioned_token_type"],
            auctioned_token_nonce=int(record["auctioned_token_nonce"]),
            nr_auctioned_tokens=int(record["nr_auctioned_tokens"]),
            auction_type=AuctionType(record["auction_type"]),
            payment_token_type=record["payment_token_type"],
            payment_token_nonce=int(record["payment_token_nonce"]),
            min_bid=str(record["min_bid"]),
            max_bid=None if max_bid is None else str(max_bid),
            start_time=int(record["start_time"]),
            deadline=int(record["deadline"]),
            original_owner=record["original_owner"],
            current_winner=record["current_winner"],
            current_bid=str(record["current_bid"]),
            marketplace_cut_percentage=int(record["marketplace_cut_percentage"]),
            creator_royalties_percentage=int(record["creator_royalties_percentage"]),
            min_bid_short=from_smallest_unit(record["min_bid"], decimals),
            max_bid_short=None if max_bid is None else from_smallest_unit(max_bid, decimals),
            current_bid_short=from_smallest_unit(record["current_bid"], decimals),
            decimals=decimals,
        )


def is_offer_active(short_price: Decimal, balance: Decimal) -> bool:
    """An offer is backed when the owner's pool balance covers its price."""
    return short_price <= balance


@dataclass(frozen=True)
class GlobalOffer:
    offer_id: int
    marketplace: Marketplace
    collection: str
    quantity: int
    payment_token: str
    payment_nonce: int
    price: str
    short_price: Decimal
    timestamp: int
    owner: str
    attributes: tuple[AttributeFilter, ...] | None
    new_version: bool
    is_active: bool

    @classmethod
    def from_record(
        cls,
        record: Mapping[str, Any],
        *,
        owner_balance: Decimal | None = None,
        decimals: int = DEFAULT_DECIMALS,
        marketplace: Marketplace = Marketplace.XO,
    ) -> "GlobalOffer":
        """Build an offer from its decoded record.

        ``owner_balance`` is only consulted for legacy offers; new-version
        offers escrow their funds on creation and are always active.
        """
        new_version = bool(record.get("new_version", False))
        short_price = from_smallest_unit(record["price"], decimals)
        if new_version:
            active = True
        else:
            active = is_offer_active(short_price, owner_balance or Decimal(0))
        raw_attributes = record.get("attributes")
        return cls(
            offer_id=int(record["offer_id"]),
            marketplace=marketplace,
            collection=record["collection"],
            quantity=int(record["quantity"]),
            payment_token=record["payment_token"],
            payment_nonce=int(record["payment_nonce"]),
            price=str(record["price"]),
            short_price=short_price,
            timestamp=int(record["timestamp"]),
            owner=record["owner"],
            attributes=parse_attributes(raw_attributes) if raw_attributes else None,
            new_version=new_version,
            is_active=active,
        )


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ChangeListing:
    """New terms for an existing listing; ``price`` is at display precision."""

    payment_token: str
    price: Amount
    auction_id: int
    deadline: int = 0
    decimals: int = DEFAULT_DECIMALS

    def to_struct(self) -> dict[str, Any]:
        return {
            "payment_token_type": self.payment_token,
            "new_price": to_smallest_unit(self.price, self.decimals),
            "auction_id": self.auction_id,
            "deadline": self.deadline,
        }


@dataclass(frozen=True)
class NewListing:
    collection: str
    nonce: int
    nft_amount: int
    min_bid: Amount
    max_bid: Amount | None = None
    deadline: int = 0
    accepted_payment_token: str = NATIVE_TOKEN
    accepted_payment_token_decimals: int = DEFAULT_DECIMALS
    bid: bool = False
    is_sft_pack: bool = False
    opt_start_time: int | None = None

    def to_struct(self) -> dict[str, Any]:
        decimals = self.accepted_payment_token_decimals
        return {
            "min_bid": to_smallest_unit(self.min_bid, decimals),
            "max_bid": to_smallest_unit(self.max_bid or 0, decimals),
            "deadline": self.deadline,
            "accepted_payment_token": self.accepted_payment_token,
            "bid": self.bid,
            "opt_sft_max_one_per_payment": self.is_sft_pack,
            "opt_start_time": self.opt_start_time or 0,
            "collection": self.collection,
            "nonce": self.nonce,
            "nft_amount": self.nft_amount,
        }

    def to_transfer(self) -> TokenTransfer:
        return TokenTransfer.semi_fungible(self.collection, self.nonce, self.nft_amount)


@dataclass(frozen=True)
class SendGlobalOffer:
    payment_token: str
    payment_nonce: int
    price: Amount
    collection: str
    attributes: AttributesInput | None = None
    deposit_amount: Amount | None = None
    decimals: int = DEFAULT_DECIMALS


@dataclass(frozen=True)
class SendCustomOffer:
    payment_token: str
    payment_nonce: int
    price: Amount
    deadline: int
    nft: NFTBody
    deposit_amount: Amount | None = None
    decimals: int = DEFAULT_DECIMALS


@dataclass(frozen=True)
class AcceptGlobalOffer:
    """Accept a global offer, optionally selling a listed item or a signed one."""

    offer_id: int
    auction_id: int | None = None
    signature: bytes | str | None = None
    nft: NFTBody | None = None

    @property
    def signature_bytes(self) -> bytes | None:
        if self.signature is None or isinstance(self.signature, bytes):
            return self.signature
        try:
            return bytes.fromhex(self.signature)
        except ValueError as exc:
            raise CodecError(f"Signature is not hex: {self.signature!r}") from exc


@dataclass(frozen=True)
class BuyRequest:
    """Buy (or bid on) a listing by id.

    Omitting any of ``payment_amount``, ``token``, ``collection`` or ``nonce``,
    or leaving ``with_check`` on, makes the client read the live auction and
    take those values from it.
    """

    auction_id: int
    collection: str | None = None
    nonce: int | None = None
    quantity: int = 1
    token: str = NATIVE_TOKEN
    payment_amount: Amount | None = None
    with_check: bool = True
    is_big_uint_payment: bool = False
    is_bid: bool = False
    decimals: int = DEFAULT_DECIMALS
    market: Marketplace | str = Marketplace.XO

    @property
    def needs_live_auction(self) -> bool:
        return (
            not self.payment_amount
            or not self.token
            or not self.collection
            or not self.nonce
            or self.with_check
        )
