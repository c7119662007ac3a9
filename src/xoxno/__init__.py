"""XOXNO Python SDK: typed client for the XOXNO marketplace contract."""

from xoxno.client import AsyncXOXNOClient, XOXNOClient
from xoxno.config import MAINNET, NetworkConfig
from xoxno.exceptions import (
    AuctionNotFoundError,
    CodecError,
    GatewayError,
    InvalidAuctionTypeError,
    MissingArgumentError,
    NotFoundError,
    QueryError,
    UnsupportedOperationError,
    XOXNOError,
)
from xoxno.http import AsyncHttpClient, HttpClient
from xoxno.market import AsyncMarketplaceApi, MarketplaceApi
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
    Payment,
    SendCustomOffer,
    SendGlobalOffer,
    Sender,
)
from xoxno.query import AsyncContractQueryRunner, ContractQueryRunner, QueryResult
from xoxno.transactions import Transaction
from xoxno.transfers import TokenTransfer

__all__ = [
    "XOXNOClient",
    "AsyncXOXNOClient",
    "MarketplaceApi",
    "AsyncMarketplaceApi",
    "ContractQueryRunner",
    "AsyncContractQueryRunner",
    "QueryResult",
    "HttpClient",
    "AsyncHttpClient",
    "NetworkConfig",
    "MAINNET",
    "Transaction",
    "TokenTransfer",
    # Models
    "AcceptGlobalOffer",
    "AttributeFilter",
    "Auction",
    "AuctionType",
    "BuyRequest",
    "ChangeListing",
    "GlobalOffer",
    "Marketplace",
    "NewListing",
    "NFTBody",
    "Payment",
    "SendCustomOffer",
    "SendGlobalOffer",
    "Sender",
    # Errors
    "XOXNOError",
    "UnsupportedOperationError",
    "InvalidAuctionTypeError",
    "MissingArgumentError",
    "NotFoundError",
    "AuctionNotFoundError",
    "GatewayError",
    "QueryError",
    "CodecError",
]

__version__ = "0.1.0"
