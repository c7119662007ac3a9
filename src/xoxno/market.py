"""Marketplace API: typed reads and transaction builders for the XO contract.

Reads run one contract query each (a legacy global offer needs a second one
for the owner's deposit) and return immutable records from
:mod:`xoxno.models`. Writes are pure: they return a
:class:`~xoxno.transactions.Transaction` for an external signer.
``buy_auction_by_id`` is the only write that may query first.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Mapping, Sequence

from xoxno import abi
from xoxno.codec import (
    ADDRESS,
    BIG_UINT,
    BOOL,
    BYTES,
    EGLD_OR_ESDT_TOKEN_IDENTIFIER,
    TOKEN_IDENTIFIER,
    U64,
    ContractCall,
    OptionalValueType,
    OptionType,
    TypedValue,
    decode_variadic,
)
from xoxno.config import MAINNET, NetworkConfig
from xoxno.exceptions import AuctionNotFoundError, InvalidAuctionTypeError, MissingArgumentError
from xoxno.models import (
    AcceptGlobalOffer,
    Auction,
    AuctionType,
    BuyRequest,
    ChangeListing,
    GlobalOffer,
    Marketplace,
    NewListing,
    NFTBody,
    Payment,
    SendCustomOffer,
    SendGlobalOffer,
    Sender,
    encode_attributes,
)
from xoxno.query import AsyncQueryRunner, QueryResult, QueryRunner
from xoxno import transactions as gas
from xoxno.transactions import Transaction, build_transaction, bulk_gas_limit
from xoxno.transfers import DEFAULT_DECIMALS, Amount, TokenTransfer, from_smallest_unit, to_smallest_unit

logger = logging.getLogger(__name__)

_UNBUYABLE_AUCTION_TYPES = (AuctionType.NFT, AuctionType.SFT_ONE_PER_PAYMENT)

_OPTIONAL_BYTES = OptionalValueType(BYTES)


def _call(function: str, *args: TypedValue) -> ContractCall:
    return ContractCall(function, tuple(args))


# ---------------------------------------------------------------------------
# Result decoding
# ---------------------------------------------------------------------------

def _int_result(result: QueryResult) -> int:
    return BIG_UINT.decode_top(result.first) if result.first else 0


def _bool_result(result: QueryResult) -> bool:
    return BOOL.decode_top(result.first) if result.first else False


def _id_list(result: QueryResult) -> list[int]:
    return decode_variadic(U64, result.return_data)


def _auction_result(auction_id: int, result: QueryResult, decimals: int) -> Auction | None:
    if not result.first:
        return None
    return Auction.from_record(auction_id, abi.AUCTION.decode_top(result.first), decimals)


def _deposit_result(result: QueryResult, decimals: int) -> Decimal:
    if not result.first:
        return Decimal(0)
    return from_smallest_unit(abi.DEPOSIT_PAYMENT.decode_top(result.first)["amount"], decimals)


def _global_offer_record(result: QueryResult) -> dict[str, Any] | None:
    if not result.first:
        return None
    return abi.GLOBAL_OFFER.decode_top(result.first)


def _check_auction(auction_id: int, auction: Auction | None) -> Auction:
    if auction is None:
        raise AuctionNotFoundError(f"Auction not found: {auction_id}", code="AUCTION_NOT_FOUND")
    return auction


def _check_buyable(auction: Auction) -> Auction:
    # TODO: confirm with product whether this should reject the bid-style
    # kinds instead; today it rejects Nft and SftOnePerPayment.
    if auction.auction_type in _UNBUYABLE_AUCTION_TYPES:
        raise InvalidAuctionTypeError(
            "Auction type is not NFT or SftOnePerPayment",
            code="INVALID_AUCTION_TYPE",
            details={"auction_id": auction.auction_id, "auction_type": auction.auction_type.value},
        )
    return auction


# ---------------------------------------------------------------------------
# Shared: call construction and transaction builders
# ---------------------------------------------------------------------------

class _MarketplaceBase:
    def __init__(
        self,
        config: NetworkConfig = MAINNET,
        *,
        contracts: Mapping[Marketplace, str] | None = None,
    ) -> None:
        self.config = config
        self._contracts = dict(contracts or {Marketplace.XO: config.market_address})

    def contract_address(self, market: Marketplace | str = Marketplace.XO) -> str:
        """Contract address for ``market``; unknown markets are unsupported."""
        return self._contracts[Marketplace.parse(market)]

    @property
    def _address(self) -> str:
        return self.contract_address(Marketplace.XO)

    def _is_native(self, token: str) -> bool:
        return token == self.config.native_token

    def _transaction(
        self,
        call: ContractCall,
        sender: Sender,
        gas_limit: int,
        *,
        value: int = 0,
        token_transfers: Sequence[TokenTransfer] = (),
        market: Marketplace | str = Marketplace.XO,
    ) -> Transaction:
        return build_transaction(
            call,
            contract_address=self.contract_address(market),
            sender=sender.address,
            chain_id=self.config.chain_id,
            gas_limit=gas_limit,
            nonce=sender.nonce,
            value=value,
            token_transfers=token_transfers,
            gas_price=self.config.gas_price,
        )

    def _attach(
        self, token: str, amount: Amount | None, decimals: int = DEFAULT_DECIMALS
    ) -> tuple[int, tuple[TokenTransfer, ...]]:
        """Split a display amount into native ``value`` or a token transfer."""
        if not amount:
            return 0, ()
        if self._is_native(token):
            return to_smallest_unit(amount), ()
        return 0, (TokenTransfer.fungible_from_amount(token, amount, decimals),)

    def _attach_payment(self, payment: Payment) -> tuple[int, tuple[TokenTransfer, ...]]:
        if not payment.amount:
            raise MissingArgumentError("Payment amount is required", code="PAYMENT_AMOUNT_REQUIRED")
        return self._attach(payment.token, payment.amount, payment.decimals)

    # -- Read calls ----------------------------------------------------------

    @staticmethod
    def _user_deposit_call(address: str, token: str, nonce: int) -> ContractCall:
        return _call(
            abi.USER_DEPOSIT,
            TypedValue(ADDRESS, address),
            TypedValue(EGLD_OR_ESDT_TOKEN_IDENTIFIER, token),
            TypedValue(U64, nonce),
        )

    # -- Withdraw / end ------------------------------------------------------

    def withdraw_auctions(
        self, auction_ids: Sequence[int], sender: Sender, market: Marketplace | str = Marketplace.XO
    ) -> Transaction:
        """Withdraw listings; gas grows with the number of ids."""
        call = _call(abi.WITHDRAW, *(TypedValue(U64, i) for i in auction_ids))
        gas_limit = bulk_gas_limit(gas.GAS_WITHDRAW, gas.GAS_WITHDRAW_PER_ITEM, len(auction_ids))
        return self._transaction(call, sender, gas_limit, market=market)

    def end_auction(
        self, auction_id: int, sender: Sender, market: Marketplace | str = Marketplace.XO
    ) -> Transaction:
        call = _call(abi.END_AUCTION, TypedValue(U64, auction_id))
        return self._transaction(call, sender, gas.GAS_END_AUCTION, market=market)

    # -- Global offers -------------------------------------------------------

    def withdraw_global_offer(self, offer_id: int, sender: Sender) -> Transaction:
        call = _call(abi.WITHDRAW_GLOBAL_OFFER, TypedValue(U64, offer_id))
        return self._transaction(call, sender, gas.GAS_WITHDRAW_GLOBAL_OFFER)

    def accept_global_offer(self, request: AcceptGlobalOffer, sender: Sender) -> Transaction:
        """Sell into a global offer.

        The sold NFT/SFT, when given, travels with the call itself. A signed
        acceptance appends the signature as a trailing argument.
        """
        call = _call(
            abi.ACCEPT_GLOBAL_OFFER,
            TypedValue(U64, request.offer_id),
            TypedValue(OptionType(U64), request.auction_id),
            TypedValue(_OPTIONAL_BYTES, request.signature_bytes),
        )
        transfers = (request.nft.to_transfer(),) if request.nft else ()
        return self._transaction(call, sender, gas.GAS_ACCEPT_GLOBAL_OFFER, token_transfers=transfers)

    def send_global_offer(self, request: SendGlobalOffer, sender: Sender) -> Transaction:
        attributes = encode_attributes(request.attributes) if request.attributes else None
        call = _call(
            abi.SEND_GLOBAL_OFFER,
            TypedValue(EGLD_OR_ESDT_TOKEN_IDENTIFIER, request.payment_token),
            TypedValue(U64, request.payment_nonce),
            TypedValue(BIG_UINT, to_smallest_unit(request.price, request.decimals)),
            TypedValue(TOKEN_IDENTIFIER, request.collection),
            TypedValue(_OPTIONAL_BYTES, attributes),
        )
        value, transfers = self._attach(request.payment_token, request.deposit_amount, request.decimals)
        return self._transaction(call, sender, gas.GAS_SEND_GLOBAL_OFFER, value=value, token_transfers=transfers)

    # -- Custom offers -------------------------------------------------------

    def send_custom_offer(self, request: SendCustomOffer, sender: Sender) -> Transaction:
        call = _call(
            abi.SEND_OFFER,
            TypedValue(EGLD_OR_ESDT_TOKEN_IDENTIFIER, request.payment_token),
            TypedValue(U64, request.payment_nonce),
            TypedValue(BIG_UINT, to_smallest_unit(request.price, request.decimals)),
            TypedValue(TOKEN_IDENTIFIER, request.nft.collection),
            TypedValue(U64, request.nft.nonce),
            TypedValue(BIG_UINT, request.nft.amount),
            TypedValue(U64, request.deadline),
        )
        value, transfers = self._attach(request.payment_token, request.deposit_amount, request.decimals)
        return self._transaction(call, sender, gas.GAS_SEND_OFFER, value=value, token_transfers=transfers)

    def withdraw_custom_offer(self, offer_id: int, sender: Sender) -> Transaction:
        call = _call(abi.WITHDRAW_OFFER, TypedValue(U64, offer_id))
        return self._transaction(call, sender, gas.GAS_WITHDRAW_OFFER)

    def decline_custom_offer(self, offer_id: int, sender: Sender, nft: NFTBody | None = None) -> Transaction:
        call = _call(abi.DECLINE_OFFER, TypedValue(U64, offer_id))
        transfers = (nft.to_transfer(),) if nft else ()
        return self._transaction(call, sender, gas.GAS_DECLINE_OFFER, token_transfers=transfers)

    def accept_custom_offer(self, offer_id: int, sender: Sender, nft: NFTBody | None = None) -> Transaction:
        call = _call(abi.ACCEPT_OFFER, TypedValue(U64, offer_id))
        transfers = (nft.to_transfer(),) if nft else ()
        return self._transaction(call, sender, gas.GAS_ACCEPT_OFFER, token_transfers=transfers)

    # -- Buying --------------------------------------------------------------

    def bid_on_auction(
        self, auction_id: int, collection: str, nonce: int, payment: Payment, sender: Sender
    ) -> Transaction:
        value, transfers = self._attach_payment(payment)
        call = _call(
            abi.BID,
            TypedValue(U64, auction_id),
            TypedValue(TOKEN_IDENTIFIER, collection),
            TypedValue(U64, nonce),
        )
        return self._transaction(call, sender, gas.GAS_BID, value=value, token_transfers=transfers)

    def bulk_buy(self, auction_ids: Sequence[int], payment: Payment, sender: Sender) -> Transaction:
        """Buy several listings in one call, paying ``payment`` in total."""
        value, transfers = self._attach_payment(payment)
        call = _call(abi.BID, *(TypedValue(U64, i) for i in auction_ids))
        gas_limit = bulk_gas_limit(gas.GAS_BULK_BUY, gas.GAS_BULK_BUY_PER_ITEM, len(auction_ids))
        return self._transaction(call, sender, gas_limit, value=value, token_transfers=transfers)

    @staticmethod
    def _validate_buy(request: BuyRequest) -> Marketplace:
        market = Marketplace.parse(request.market)
        if not request.auction_id:
            raise MissingArgumentError("AuctionID not provided", code="AUCTION_ID_REQUIRED")
        return market

    def _needs_refetch(self, request: BuyRequest, auction: Auction | None) -> bool:
        # A token payment must carry the exact smallest-unit price, so a
        # caller-supplied display amount is replaced by the live one.
        return auction is None and not request.is_big_uint_payment and not self._is_native(request.token)

    def _build_buy(
        self, request: BuyRequest, sender: Sender, auction: Auction | None, market: Marketplace
    ) -> Transaction:
        if auction is not None:
            live_price = auction.max_bid if request.is_bid else auction.min_bid
            if live_price is None:
                raise MissingArgumentError(
                    f"Auction {request.auction_id} has no max bid",
                    code="PAYMENT_AMOUNT_REQUIRED",
                    details={"auction_id": request.auction_id},
                )
            price = int(live_price)
        elif not request.payment_amount:
            raise MissingArgumentError("Payment amount not provided", code="PAYMENT_AMOUNT_REQUIRED")
        elif request.is_big_uint_payment:
            price = int(Decimal(str(request.payment_amount)))
        else:
            price = to_smallest_unit(request.payment_amount, request.decimals)

        payment_token = auction.payment_token_type if auction else request.token
        quantity = request.quantity or 1
        call = _call(
            abi.BUY,
            TypedValue(U64, request.auction_id),
            TypedValue(TOKEN_IDENTIFIER, auction.auctioned_token_type if auction else request.collection),
            TypedValue(U64, auction.auctioned_token_nonce if auction else request.nonce),
            TypedValue(BIG_UINT, quantity),
        )
        logger.debug(
            "Resolved buy of auction %d: token=%s price=%d quantity=%d live=%s",
            request.auction_id, payment_token, price, quantity, auction is not None,
        )
        # Only native payments scale with quantity; a token payment carries the price as-is.
        if self._is_native(payment_token):
            return self._transaction(call, sender, gas.GAS_BUY, value=price * quantity, market=market)
        transfer = TokenTransfer.fungible_from_big_integer(payment_token, price, request.decimals)
        return self._transaction(call, sender, gas.GAS_BUY, token_transfers=(transfer,), market=market)

    # -- Listings ------------------------------------------------------------

    def change_listing(self, listings: Sequence[ChangeListing], sender: Sender) -> Transaction:
        """Update price, payment token and deadline of several listings."""
        call = _call(
            abi.CHANGE_LISTING,
            *(TypedValue(abi.BULK_UPDATE_LISTING, listing.to_struct()) for listing in listings),
        )
        gas_limit = bulk_gas_limit(gas.GAS_LISTING, gas.GAS_LISTING_PER_ITEM, len(listings))
        return self._transaction(call, sender, gas_limit)

    def list_nfts(self, listings: Sequence[NewListing], sender: Sender) -> Transaction:
        """List NFTs/SFTs for sale; every listed token is sent along with the call."""
        call = _call(
            abi.LISTINGS,
            *(TypedValue(abi.BULK_LISTING, listing.to_struct()) for listing in listings),
        )
        transfers = tuple(listing.to_transfer() for listing in listings)
        gas_limit = bulk_gas_limit(gas.GAS_LISTING, gas.GAS_LISTING_PER_ITEM, len(listings))
        return self._transaction(call, sender, gas_limit, token_transfers=transfers)


# ===========================================================================
# Synchronous
# ===========================================================================

class MarketplaceApi(_MarketplaceBase):
    """Synchronous marketplace API."""

    def __init__(
        self,
        runner: QueryRunner,
        config: NetworkConfig = MAINNET,
        *,
        contracts: Mapping[Marketplace, str] | None = None,
    ) -> None:
        super().__init__(config, contracts=contracts)
        self._runner = runner

    def _query(self, call: ContractCall) -> QueryResult:
        return self._runner.run_query(self._address, call)

    def get_marketplace_fees(self) -> int:
        """Percentage of each sale kept by the marketplace."""
        return _int_result(self._query(_call(abi.GET_MARKETPLACE_CUT_PERCENTAGE)))

    def get_accepted_payment_tokens(self) -> list[str]:
        result = self._query(_call(abi.GET_ACCEPTED_TOKENS))
        return decode_variadic(EGLD_OR_ESDT_TOKEN_IDENTIFIER, result.return_data)

    def get_global_offer_ids(self) -> list[int]:
        return _id_list(self._query(_call(abi.GET_GLOBAL_OFFERS)))

    def get_user_pool_balance(
        self, address: str, token: str, nonce: int, decimals: int = DEFAULT_DECIMALS
    ) -> Decimal:
        """Deposited balance of ``address`` in ``token``; zero when nothing is deposited."""
        result = self._query(self._user_deposit_call(address, token, nonce))
        return _deposit_result(result, decimals)

    def get_global_offer(self, offer_id: int, decimals: int = DEFAULT_DECIMALS) -> GlobalOffer | None:
        """Global offer by id, or ``None`` if it does not exist."""
        record = _global_offer_record(self._query(_call(abi.GET_GLOBAL_OFFER, TypedValue(U64, offer_id))))
        if record is None:
            return None
        balance = None
        if not record["new_version"]:
            balance = self.get_user_pool_balance(
                record["owner"], record["payment_token"], record["payment_nonce"], decimals
            )
        return GlobalOffer.from_record(record, owner_balance=balance, decimals=decimals)

    def get_auction_info(self, auction_id: int, decimals: int = DEFAULT_DECIMALS) -> Auction | None:
        """Auction by id, or ``None`` if the id does not resolve to a listing."""
        result = self._query(_call(abi.GET_FULL_AUCTION_DATA, TypedValue(U64, auction_id)))
        return _auction_result(auction_id, result, decimals)

    def get_listings_count(self) -> int:
        return _int_result(self._query(_call(abi.GET_LISTINGS_COUNT)))

    def get_offers_count(self) -> int:
        return _int_result(self._query(_call(abi.GET_OFFERS_COUNT)))

    def get_global_offers_count(self) -> int:
        return _int_result(self._query(_call(abi.GET_GLOBAL_OFFERS_COUNT)))

    def get_collections_count(self) -> int:
        return _int_result(self._query(_call(abi.GET_COLLECTIONS_COUNT)))

    def is_collection_listed(self, collection: str) -> bool:
        """Whether at least one item of ``collection`` is listed."""
        result = self._query(_call(abi.IS_COLLECTION_LISTED, TypedValue(TOKEN_IDENTIFIER, collection)))
        return _bool_result(result)

    def get_collection_nfts_on_sale_count(self, collection: str) -> int:
        result = self._query(_call(abi.GET_TOKEN_ITEMS_FOR_SALE_COUNT, TypedValue(TOKEN_IDENTIFIER, collection)))
        return _int_result(result)

    def get_auction_ids_for_collection(self, collection: str) -> list[int]:
        result = self._query(_call(abi.GET_AUCTIONS_FOR_TICKER, TypedValue(TOKEN_IDENTIFIER, collection)))
        return _id_list(result)

    def buy_auction_by_id(self, request: BuyRequest, sender: Sender) -> Transaction:
        """Buy a listing, reading the live auction when the request is incomplete.

        Raises :class:`~xoxno.exceptions.UnsupportedOperationError` for any
        market but XO, :class:`~xoxno.exceptions.AuctionNotFoundError` when
        the auction is gone and :class:`~xoxno.exceptions.MissingArgumentError`
        when no amount can be determined.
        """
        market = self._validate_buy(request)
        auction = None
        if request.needs_live_auction:
            auction = _check_buyable(
                _check_auction(request.auction_id, self.get_auction_info(request.auction_id, request.decimals))
            )
        if self._needs_refetch(request, auction):
            auction = _check_auction(request.auction_id, self.get_auction_info(request.auction_id, request.decimals))
        return self._build_buy(request, sender, auction, market)


# ===========================================================================
# Asynchronous
# ===========================================================================

class AsyncMarketplaceApi(_MarketplaceBase):
    """Asynchronous marketplace API; builders are shared with the sync API."""

    def __init__(
        self,
        runner: AsyncQueryRunner,
        config: NetworkConfig = MAINNET,
        *,
        contracts: Mapping[Marketplace, str] | None = None,
    ) -> None:
        super().__init__(config, contracts=contracts)
        self._runner = runner

    async def _query(self, call: ContractCall) -> QueryResult:
        return await self._runner.run_query(self._address, call)

    async def get_marketplace_fees(self) -> int:
        return _int_result(await self._query(_call(abi.GET_MARKETPLACE_CUT_PERCENTAGE)))

    async def get_accepted_payment_tokens(self) -> list[str]:
        result = await self._query(_call(abi.GET_ACCEPTED_TOKENS))
        return decode_variadic(EGLD_OR_ESDT_TOKEN_IDENTIFIER, result.return_data)

    async def get_global_offer_ids(self) -> list[int]:
        return _id_list(await self._query(_call(abi.GET_GLOBAL_OFFERS)))

    async def get_user_pool_balance(
        self, address: str, token: str, nonce: int, decimals: int = DEFAULT_DECIMALS
    ) -> Decimal:
        result = await self._query(self._user_deposit_call(address, token, nonce))
        return _deposit_result(result, decimals)

    async def get_global_offer(self, offer_id: int, decimals: int = DEFAULT_DECIMALS) -> GlobalOffer | None:
        record = _global_offer_record(await self._query(_call(abi.GET_GLOBAL_OFFER, TypedValue(U64, offer_id))))
        if record is None:
            return None
        balance = None
        if not record["new_version"]:
            balance = await self.get_user_pool_balance(
                record["owner"], record["payment_token"], record["payment_nonce"], decimals
            )
        return GlobalOffer.from_record(record, owner_balance=balance, decimals=decimals)

    async def get_auction_info(self, auction_id: int, decimals: int = DEFAULT_DECIMALS) -> Auction | None:
        result = await self._query(_call(abi.GET_FULL_AUCTION_DATA, TypedValue(U64, auction_id)))
        return _auction_result(auction_id, result, decimals)

    async def get_listings_count(self) -> int:
        return _int_result(await self._query(_call(abi.GET_LISTINGS_COUNT)))

    async def get_offers_count(self) -> int:
        return _int_result(await self._query(_call(abi.GET_OFFERS_COUNT)))

    async def get_global_offers_count(self) -> int:
        return _int_result(await self._query(_call(abi.GET_GLOBAL_OFFERS_COUNT)))

    async def get_collections_count(self) -> int:
        return _int_result(await self._query(_call(abi.GET_COLLECTIONS_COUNT)))

    async def is_collection_listed(self, collection: str) -> bool:
        result = await self._query(_call(abi.IS_COLLECTION_LISTED, TypedValue(TOKEN_IDENTIFIER, collection)))
        return _bool_result(result)

    async def get_collection_nfts_on_sale_count(self, collection: str) -> int:
        result = await self._query(
            _call(abi.GET_TOKEN_ITEMS_FOR_SALE_COUNT, TypedValue(TOKEN_IDENTIFIER, collection))
        )
        return _int_result(result)

    async def get_auction_ids_for_collection(self, collection: str) -> list[int]:
        result = await self._query(_call(abi.GET_AUCTIONS_FOR_TICKER, TypedValue(TOKEN_IDENTIFIER, collection)))
        return _id_list(result)

    async def buy_auction_by_id(self, request: BuyRequest, sender: Sender) -> Transaction:
        market = self._validate_buy(request)
        auction = None
        if request.needs_live_auction:
            auction = _check_buyable(
                _check_auction(request.auction_id, await self.get_auction_info(request.auction_id, request.decimals))
            )
        if self._needs_refetch(request, auction):
            auction = _check_auction(
                request.auction_id, await self.get_auction_info(request.auction_id, request.decimals)
            )
        return self._build_buy(request, sender, auction, market)
