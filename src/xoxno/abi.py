"""Endpoints and structured types of the XOXNO marketplace contract."""

from __future__ import annotations

from xoxno.codec import (
    ADDRESS,
    BIG_UINT,
    BOOL,
    BYTES,
    EGLD_OR_ESDT_TOKEN_IDENTIFIER,
    TOKEN_IDENTIFIER,
    U64,
    EnumType,
    FieldDefinition,
    OptionType,
    StructType,
)

# -- Views -------------------------------------------------------------------

GET_MARKETPLACE_CUT_PERCENTAGE = "getMarketplaceCutPercentage"
GET_ACCEPTED_TOKENS = "getAcceptedTokens"
GET_GLOBAL_OFFERS = "getGlobalOffers"
USER_DEPOSIT = "userDeposit"
GET_GLOBAL_OFFER = "getGlobalOffer"
GET_FULL_AUCTION_DATA = "getFullAuctionData"
GET_LISTINGS_COUNT = "getListingsCount"
GET_OFFERS_COUNT = "getOffersCount"
GET_GLOBAL_OFFERS_COUNT = "getGlobalOffersCount"
GET_COLLECTIONS_COUNT = "getCollectionsCount"
IS_COLLECTION_LISTED = "isCollectionListed"
GET_TOKEN_ITEMS_FOR_SALE_COUNT = "getTokenItemsForSaleCount"
GET_AUCTIONS_FOR_TICKER = "getAuctionsForTicker"

# -- Endpoints ---------------------------------------------------------------

WITHDRAW = "withdraw"
WITHDRAW_GLOBAL_OFFER = "withdrawGlobalOffer"
ACCEPT_GLOBAL_OFFER = "acceptGlobalOffer"
SEND_GLOBAL_OFFER = "sendGlobalOffer"
SEND_OFFER = "sendOffer"
WITHDRAW_OFFER = "withdrawOffer"
DECLINE_OFFER = "declineOffer"
ACCEPT_OFFER = "acceptOffer"
END_AUCTION = "endAuction"
BID = "bid"
BUY = "buy"
CHANGE_LISTING = "changeListing"
LISTINGS = "listings"

# -- Types -------------------------------------------------------------------

AUCTION_TYPE = EnumType(
    "AuctionType",
    ["None", "NftBid", "Nft", "SftAll", "SftOnePerPayment"],
)

AUCTION = StructType(
    "Auction",
    [
        FieldDefinition("auctioned_token_type", TOKEN_IDENTIFIER),
        FieldDefinition("auctioned_token_nonce", U64),
        FieldDefinition("nr_auctioned_tokens", BIG_UINT),
        FieldDefinition("auction_type", AUCTION_TYPE),
        FieldDefinition("payment_token_type", EGLD_OR_ESDT_TOKEN_IDENTIFIER),
        FieldDefinition("payment_token_nonce", U64),
        FieldDefinition("min_bid", BIG_UINT),
        FieldDefinition("max_bid", OptionType(BIG_UINT)),
        FieldDefinition("start_time", U64),
        FieldDefinition("deadline", U64),
        FieldDefinition("original_owner", ADDRESS),
        FieldDefinition("current_bid", BIG_UINT),
        FieldDefinition("current_winner", ADDRESS),
        FieldDefinition("marketplace_cut_percentage", BIG_UINT),
        FieldDefinition("creator_royalties_percentage", BIG_UINT),
    ],
)

GLOBAL_OFFER = StructType(
    "GlobalOffer",
    [
        FieldDefinition("offer_id", U64),
        FieldDefinition("collection", TOKEN_IDENTIFIER),
        FieldDefinition("quantity", BIG_UINT),
        FieldDefinition("payment_token", EGLD_OR_ESDT_TOKEN_IDENTIFIER),
        FieldDefinition("payment_nonce", U64),
        FieldDefinition("price", BIG_UINT),
        FieldDefinition("timestamp", U64),
        FieldDefinition("owner", ADDRESS),
        FieldDefinition("attributes", OptionType(BYTES)),
        FieldDefinition("new_version", BOOL, default=False),
    ],
)

DEPOSIT_PAYMENT = StructType(
    "DepositPayment",
    [
        FieldDefinition("token_identifier", EGLD_OR_ESDT_TOKEN_IDENTIFIER),
        FieldDefinition("token_nonce", U64),
        FieldDefinition("amount", BIG_UINT),
    ],
)

BULK_UPDATE_LISTING = StructType(
    "BulkUpdateListing",
    [
        FieldDefinition("payment_token_type", TOKEN_IDENTIFIER),
        FieldDefinition("new_price", BIG_UINT),
        FieldDefinition("auction_id", U64),
        FieldDefinition("deadline", U64),
    ],
)

BULK_LISTING = StructType(
    "BulkListing",
    [
        FieldDefinition("min_bid", BIG_UINT),
        FieldDefinition("max_bid", BIG_UINT),
        FieldDefinition("deadline", U64),
        FieldDefinition("accepted_payment_token", TOKEN_IDENTIFIER),
        FieldDefinition("bid", BOOL),
        FieldDefinition("opt_sft_max_one_per_payment", BOOL),
        FieldDefinition("opt_start_time", U64),
        FieldDefinition("collection", TOKEN_IDENTIFIER),
        FieldDefinition("nonce", U64),
        FieldDefinition("nft_amount", BIG_UINT),
    ],
)
