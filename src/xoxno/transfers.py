"""Token transfers and conversion between smallest-unit and display amounts."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_DOWN, Decimal
from typing import Union

DEFAULT_DECIMALS = 18

Amount = Union[int, float, str, Decimal]


def to_smallest_unit(amount: Amount, decimals: int = DEFAULT_DECIMALS) -> int:
    """Scale a display amount up to the token's base denomination.

    Digits beyond ``decimals`` are truncated.
    """
    # str() keeps floats like 0.1 from dragging binary noise into the result
    scaled = Decimal(str(amount)).scaleb(decimals)
    return int(scaled.to_integral_value(rounding=ROUND_DOWN))


def from_smallest_unit(amount: int | str, decimals: int = DEFAULT_DECIMALS) -> Decimal:
    """Scale a base-denomination integer down to its display amount."""
    return Decimal(int(amount)).scaleb(-decimals)


@dataclass(frozen=True)
class TokenTransfer:
    """A quantity of one token attached to a transaction.

    ``amount`` is always in the token's smallest unit; ``nonce`` is zero for
    fungible tokens and the native currency.
    """

    token: str
    amount: int
    nonce: int = 0
    decimals: int = DEFAULT_DECIMALS

    @property
    def is_fungible(self) -> bool:
        return self.nonce == 0

    @classmethod
    def fungible_from_amount(
        cls, token: str, amount: Amount, decimals: int = DEFAULT_DECIMALS
    ) -> "TokenTransfer":
        return cls(token, to_smallest_unit(amount, decimals), decimals=decimals)

    @classmethod
    def fungible_from_big_integer(
        cls, token: str, amount: int | str, decimals: int = DEFAULT_DECIMALS
    ) -> "TokenTransfer":
        return cls(token, int(amount), decimals=decimals)

    @classmethod
    def semi_fungible(cls, collection: str, nonce: int, quantity: int) -> "TokenTransfer":
        return cls(collection, int(quantity), nonce=nonce, decimals=0)
