"""Transaction descriptors handed to an external signer.

The client never signs or broadcasts. It produces a :class:`Transaction` whose
``data`` already routes any token transfer through the chain's built-in
transfer functions, so a signer only needs to add the signature.
"""

from __future__ import annotations

import base64
import logging
from dataclasses import dataclass, field
from typing import Sequence

from xoxno.address import address_to_pubkey
from xoxno.codec import ContractCall, encode_unsigned
from xoxno.config import DEFAULT_GAS_PRICE
from xoxno.transfers import TokenTransfer
from xoxno.types import TransactionPayload

logger = logging.getLogger(__name__)

TRANSACTION_VERSION = 2

# -- Gas policy --------------------------------------------------------------

MAX_GAS_LIMIT = 600_000_000

GAS_WITHDRAW = 15_000_000
GAS_WITHDRAW_PER_ITEM = 5_000_000
GAS_END_AUCTION = 15_000_000
GAS_WITHDRAW_GLOBAL_OFFER = 15_000_000
GAS_WITHDRAW_OFFER = 15_000_000
GAS_DECLINE_OFFER = 20_000_000
GAS_ACCEPT_OFFER = 30_000_000
GAS_ACCEPT_GLOBAL_OFFER = 30_000_000
GAS_SEND_OFFER = 30_000_000
GAS_SEND_GLOBAL_OFFER = 30_000_000
GAS_BID = 30_000_000
GAS_BUY = 20_000_000
GAS_BULK_BUY = 20_000_000
GAS_BULK_BUY_PER_ITEM = 5_000_000
GAS_LISTING = 8_000_000
GAS_LISTING_PER_ITEM = 2_000_000


def bulk_gas_limit(base: int, per_item: int, count: int) -> int:
    """Linear per-item gas estimate, capped at :data:`MAX_GAS_LIMIT`."""
    return min(MAX_GAS_LIMIT, base + per_item * count)


# -- Descriptor --------------------------------------------------------------

@dataclass(frozen=True)
class Transaction:
    sender: str
    receiver: str
    chain_id: str
    gas_limit: int
    data: str
    value: int = 0
    nonce: int | None = None
    gas_price: int = DEFAULT_GAS_PRICE
    version: int = TRANSACTION_VERSION
    call: ContractCall | None = None
    token_transfers: tuple[TokenTransfer, ...] = field(default_factory=tuple)

    def to_dict(self) -> TransactionPayload:
        """Render the gateway's JSON transaction shape (unsigned)."""
        body: TransactionPayload = {
            "value": str(self.value),
            "receiver": self.receiver,
            "sender": self.sender,
            "gasPrice": self.gas_price,
            "gasLimit": self.gas_limit,
            "data": base64.b64encode(self.data.encode("utf-8")).decode("ascii"),
            "chainID": self.chain_id,
            "version": self.version,
        }
        if self.nonce is not None:
            body["nonce"] = self.nonce
        return body


def _hex(raw: bytes) -> str:
    return raw.hex()


def _int_hex(value: int) -> str:
    return encode_unsigned(value).hex()


def _token_hex(token: str) -> str:
    return token.encode("ascii").hex()


def transfer_payload(
    call: ContractCall,
    contract_address: str,
    sender: str,
    transfers: Sequence[TokenTransfer],
) -> tuple[str, str]:
    """Return ``(receiver, data)`` for ``call`` carrying ``transfers``."""
    if not transfers:
        return contract_address, call.data

    function_and_args = [_hex(call.function.encode("utf-8")), *call.hex_args()]
    if len(transfers) == 1:
        transfer = transfers[0]
        if transfer.is_fungible:
            parts = ["ESDTTransfer", _token_hex(transfer.token), _int_hex(transfer.amount)]
            return contract_address, "@".join(parts + function_and_args)
        parts = [
            "ESDTNFTTransfer",
            _token_hex(transfer.token),
            _int_hex(transfer.nonce),
            _int_hex(transfer.amount),
            _hex(address_to_pubkey(contract_address)),
        ]
        return sender, "@".join(parts + function_and_args)

    parts = ["MultiESDTNFTTransfer", _hex(address_to_pubkey(contract_address)), _int_hex(len(transfers))]
    for transfer in transfers:
        parts += [_token_hex(transfer.token), _int_hex(transfer.nonce), _int_hex(transfer.amount)]
    return sender, "@".join(parts + function_and_args)


def build_transaction(
    call: ContractCall,
    *,
    contract_address: str,
    sender: str,
    chain_id: str,
    gas_limit: int,
    nonce: int | None = None,
    value: int = 0,
    token_transfers: Sequence[TokenTransfer] = (),
    gas_price: int = DEFAULT_GAS_PRICE,
) -> Transaction:
    receiver, data = transfer_payload(call, contract_address, sender, token_transfers)
    logger.debug(
        "Built %s transaction: gas_limit=%d value=%d transfers=%d",
        call.function, gas_limit, value, len(token_transfers),
    )
    return Transaction(
        sender=sender,
        receiver=receiver,
        chain_id=chain_id,
        gas_limit=gas_limit,
        data=data,
        value=value,
        nonce=nonce,
        gas_price=gas_price,
        call=call,
        token_transfers=tuple(token_transfers),
    )
