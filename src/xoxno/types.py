"""Type definitions mirroring the MultiversX gateway JSON schema.

These ``TypedDict`` shapes describe raw request and response bodies; decoded
contract records are the dataclasses in :mod:`xoxno.models`.
"""

from __future__ import annotations

from typing import List, Optional, TypedDict


# ---------------------------------------------------------------------------
# Contract queries (POST /vm-values/query)
# ---------------------------------------------------------------------------

class _VmQueryRequestBase(TypedDict):
    scAddress: str
    funcName: str
    args: List[str]


class VmQueryRequest(_VmQueryRequestBase, total=False):
    caller: str
    value: str


class VmQueryData(TypedDict, total=False):
    returnData: List[Optional[str]]
    returnCode: str
    returnMessage: str
    gasRemaining: int
    gasRefund: int


# ---------------------------------------------------------------------------
# Transactions
# ---------------------------------------------------------------------------

class _TransactionBase(TypedDict):
    value: str
    receiver: str
    sender: str
    gasPrice: int
    gasLimit: int
    data: str
    chainID: str
    version: int


class TransactionPayload(_TransactionBase, total=False):
    nonce: int
