"""Shared fixtures: a fake gateway, a fake query runner and payload builders."""

from __future__ import annotations

import base64
import json
from typing import Any

import pytest
from pytest_httpserver import HTTPServer
from werkzeug import Request, Response

from xoxno.codec import ContractCall
from xoxno.query import QueryResult

ALICE = "erd1qyu5wthldzr8wx5c9ucg8kjagg0jfs53s8nr3zpz3hypefsdd8ssycr6th"
ALICE_PUBKEY = bytes.fromhex("0139472eff6886771a982f3083da5d421f24c29181e63888228dc81ca60d69e1")
BOB = "erd1spyavw0956vq68xj8y4tenjpq2wd5a9p2c6j8gsz7ztyrnpxrruqzu66jx"
BOB_PUBKEY = bytes.fromhex("8049d639e5a6980d1cd2392abcce41029cda74a1563523a202f09641cc2618f8")
MARKET = "erd1qqqqqqqqqqqqqpgq6wegs2xkypfpync8mn2sa5cmpqjlvrhwz5nqgepyg8"
MARKET_PUBKEY_HEX = "00000000000000000500d3b28828d62052124f07dcd50ed31b0825f60eee1526"
ZERO_PUBKEY = bytes(32)

EGLD_UNIT = 10**18


def json_response(data: Any, status: int = 200) -> Response:
    """Build a Werkzeug JSON response."""
    return Response(
        json.dumps(data),
        status=status,
        content_type="application/json",
    )


# ---------------------------------------------------------------------------
# Nested-encoding helpers for fixtures
# ---------------------------------------------------------------------------

def u64(value: int) -> bytes:
    return value.to_bytes(8, "big")


def buf(raw: bytes) -> bytes:
    return len(raw).to_bytes(4, "big") + raw


def big(value: int) -> bytes:
    return buf(value.to_bytes((value.bit_length() + 7) // 8, "big"))


def auction_bytes(
    *,
    collection: str = "WEB-5d08be",
    nonce: int = 12,
    quantity: int = 1,
    auction_type: int = 1,
    payment_token: str = "EGLD",
    payment_nonce: int = 0,
    min_bid: int = EGLD_UNIT,
    max_bid: int | None = 5 * EGLD_UNIT,
    start_time: int = 1_700_000_000,
    deadline: int = 1_700_086_400,
    owner: bytes = ALICE_PUBKEY,
    current_bid: int = 0,
    winner: bytes = ZERO_PUBKEY,
    cut: int = 200,
    royalties: int = 500,
) -> bytes:
    """``Auction`` record; ``auction_type`` 1 is ``NftBid``."""
    return b"".join([
        buf(collection.encode()),
        u64(nonce),
        big(quantity),
        bytes([auction_type]),
        buf(payment_token.encode()),
        u64(payment_nonce),
        big(min_bid),
        b"\x00" if max_bid is None else b"\x01" + big(max_bid),
        u64(start_time),
        u64(deadline),
        owner,
        big(current_bid),
        winner,
        big(cut),
        big(royalties),
    ])


def global_offer_bytes(
    *,
    offer_id: int = 7,
    collection: str = "WEB-5d08be",
    quantity: int = 1,
    payment_token: str = "EGLD",
    payment_nonce: int = 0,
    price: int = 2 * EGLD_UNIT,
    timestamp: int = 1_700_000_000,
    owner: bytes = BOB_PUBKEY,
    attributes: bytes | None = None,
    new_version: bool | None = False,
) -> bytes:
    """``GlobalOffer`` record; ``new_version=None`` leaves the trailing flag out."""
    parts = [
        u64(offer_id),
        buf(collection.encode()),
        big(quantity),
        buf(payment_token.encode()),
        u64(payment_nonce),
        big(price),
        u64(timestamp),
        owner,
        b"\x00" if attributes is None else b"\x01" + buf(attributes),
    ]
    if new_version is not None:
        parts.append(b"\x01" if new_version else b"\x00")
    return b"".join(parts)


def deposit_bytes(amount: int, token: str = "EGLD", nonce: int = 0) -> bytes:
    return buf(token.encode()) + u64(nonce) + big(amount)


def b64(raw: bytes) -> str:
    return base64.b64encode(raw).decode("ascii")


def query_envelope(*items: bytes, code: str = "ok", message: str = "") -> dict[str, Any]:
    """Gateway answer to ``POST /vm-values/query``."""
    return {
        "data": {
            "data": {
                "returnData": [b64(item) for item in items],
                "returnCode": code,
                "returnMessage": message,
            }
        },
        "error": "",
        "code": "successful",
    }


# ---------------------------------------------------------------------------
# Fake gateway and runner
# ---------------------------------------------------------------------------

class FakeGateway:
    """Answers contract queries by function name and records request bodies."""

    def __init__(self) -> None:
        self.responses: dict[str, dict[str, Any]] = {}
        self.requests: list[dict[str, Any]] = []

    def reply(self, function: str, *items: bytes, code: str = "ok", message: str = "") -> None:
        self.responses[function] = query_envelope(*items, code=code, message=message)

    def calls(self, function: str) -> list[dict[str, Any]]:
        return [r for r in self.requests if r["funcName"] == function]

    def __call__(self, request: Request) -> Response:
        body = json.loads(request.get_data())
        self.requests.append(body)
        if body["funcName"] not in self.responses:
            return json_response({"data": None, "error": "function not found", "code": "internal_issue"}, 400)
        return json_response(self.responses[body["funcName"]])


@pytest.fixture()
def gateway(httpserver: HTTPServer) -> FakeGateway:
    fake = FakeGateway()
    httpserver.expect_request("/vm-values/query", method="POST").respond_with_handler(fake)
    return fake


class FakeRunner:
    """In-process query runner for builder tests."""

    def __init__(self, results: dict[str, QueryResult] | None = None) -> None:
        self.results = results or {}
        self.calls: list[tuple[str, ContractCall]] = []

    def run_query(self, contract_address: str, call: ContractCall) -> QueryResult:
        self.calls.append((contract_address, call))
        return self.results.get(call.function, QueryResult())


@pytest.fixture()
def runner() -> FakeRunner:
    return FakeRunner()
