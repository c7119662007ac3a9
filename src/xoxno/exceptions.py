"""Custom exceptions for the XOXNO SDK."""

from __future__ import annotations

from typing import Any


class XOXNOError(Exception):
    """Base class for every error raised by the SDK."""

    def __init__(
        self,
        message: str,
        *,
        status: int = 0,
        code: str | None = None,
        details: Any = None,
    ) -> None:
        super().__init__(message)
        self.status = status
        self.code = code
        self.details = details

    def __repr__(self) -> str:
        return f"{type(self).__name__}(status={self.status}, code={self.code!r}, message={str(self)!r})"


class UnsupportedOperationError(XOXNOError):
    """Raised when an operation targets a marketplace the client cannot drive."""


class InvalidAuctionTypeError(UnsupportedOperationError):
    """Raised when an auction's kind cannot be bought through ``buy_auction_by_id``."""


class MissingArgumentError(XOXNOError):
    """Raised when a required argument (auction id, payment amount) is absent."""


class NotFoundError(XOXNOError):
    """Raised when a record required to build a transaction does not exist."""


class AuctionNotFoundError(NotFoundError):
    pass


class GatewayError(XOXNOError):
    """Raised when the gateway returns an error response."""


class QueryError(GatewayError):
    """Raised when a contract query finishes with a non-``ok`` return code."""


class CodecError(XOXNOError, ValueError):
    """Raised on malformed contract payloads or unencodable argument values."""
