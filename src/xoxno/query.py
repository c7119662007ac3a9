"""Contract query execution against the gateway (sync + async)."""

from __future__ import annotations

import base64
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Protocol

from xoxno.codec import ContractCall
from xoxno.exceptions import QueryError
from xoxno.http import AsyncHttpClient, HttpClient
from xoxno.types import VmQueryData, VmQueryRequest

logger = logging.getLogger(__name__)

VM_QUERY_PATH = "/vm-values/query"
RETURN_CODE_OK = "ok"


@dataclass(frozen=True)
class QueryResult:
    return_data: tuple[bytes, ...] = ()
    return_code: str = RETURN_CODE_OK
    return_message: str = ""

    @property
    def first(self) -> bytes | None:
        """First return-data item, or ``None`` when the query returned nothing."""
        return self.return_data[0] if self.return_data else None


class QueryRunner(Protocol):
    def run_query(self, contract_address: str, call: ContractCall) -> QueryResult: ...


class AsyncQueryRunner(Protocol):
    def run_query(self, contract_address: str, call: ContractCall) -> Awaitable[QueryResult]: ...


def build_query_body(contract_address: str, call: ContractCall, caller: str | None = None) -> VmQueryRequest:
    body: VmQueryRequest = {
        "scAddress": contract_address,
        "funcName": call.function,
        "args": call.hex_args(),
        "value": "0",
    }
    if caller:
        body["caller"] = caller
    return body


def parse_query_response(data: Any, function: str = "") -> QueryResult:
    """Turn the unwrapped gateway payload into a :class:`QueryResult`.

    Accepts both ``{"data": {...}}`` and the bare query data.
    """
    payload = data.get("data", data) if isinstance(data, dict) else {}
    inner: VmQueryData = payload or {}
    return_code = inner.get("returnCode") or RETURN_CODE_OK
    return_message = inner.get("returnMessage") or ""
    if return_code != RETURN_CODE_OK:
        raise QueryError(
            f"Query {function or '?'} failed: {return_message or return_code}",
            code=return_code,
            details=inner,
        )
    return_data = tuple(
        base64.b64decode(item) if item else b"" for item in inner.get("returnData") or []
    )
    return QueryResult(return_data, return_code, return_message)


class ContractQueryRunner:
    """Runs read-only contract calls through ``/vm-values/query``."""

    def __init__(self, http: HttpClient, *, caller: str | None = None) -> None:
        self._http = http
        self._caller = caller

    def run_query(self, contract_address: str, call: ContractCall) -> QueryResult:
        logger.debug("Querying %s on %s with %d args", call.function, contract_address, len(call.args))
        data = self._http.post(VM_QUERY_PATH, dict(build_query_body(contract_address, call, self._caller)))
        return parse_query_response(data, call.function)


class AsyncContractQueryRunner:
    def __init__(self, http: AsyncHttpClient, *, caller: str | None = None) -> None:
        self._http = http
        self._caller = caller

    async def run_query(self, contract_address: str, call: ContractCall) -> QueryResult:
        logger.debug("Querying %s on %s with %d args", call.function, contract_address, len(call.args))
        data = await self._http.post(VM_QUERY_PATH, dict(build_query_body(contract_address, call, self._caller)))
        return parse_query_response(data, call.function)
