"""Top-level XOXNO client (sync + async)."""

from __future__ import annotations

from xoxno.config import MAINNET, NetworkConfig
from xoxno.http import AsyncHttpClient, HttpClient
from xoxno.market import AsyncMarketplaceApi, MarketplaceApi
from xoxno.query import AsyncContractQueryRunner, ContractQueryRunner


class XOXNOClient:
    """Synchronous client for the XOXNO marketplace contract.

    Usage::

        client = XOXNOClient()
        auction = client.market.get_auction_info(42)
        tx = client.market.withdraw_auctions([42], Sender("erd1..."))
    """

    def __init__(
        self,
        config: NetworkConfig = MAINNET,
        *,
        gateway_url: str | None = None,
        chain_id: str | None = None,
        timeout: float | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        self.config = config.with_overrides(gateway_url=gateway_url, chain_id=chain_id, timeout=timeout)
        self.http = HttpClient(self.config.gateway_url, timeout=self.config.timeout, headers=headers)
        self.query = ContractQueryRunner(self.http)
        self.market = MarketplaceApi(self.query, self.config)

    @property
    def chain(self) -> str:
        return self.config.chain_id

    def close(self) -> None:
        self.http.close()

    def __enter__(self) -> "XOXNOClient":
        return self

    def __exit__(self, *args: object) -> None:
        self.close()


class AsyncXOXNOClient:
    """Asynchronous client for the XOXNO marketplace contract.

    Usage::

        async with AsyncXOXNOClient() as client:
            offer = await client.market.get_global_offer(7)
    """

    def __init__(
        self,
        config: NetworkConfig = MAINNET,
        *,
        gateway_url: str | None = None,
        chain_id: str | None = None,
        timeout: float | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        self.config = config.with_overrides(gateway_url=gateway_url, chain_id=chain_id, timeout=timeout)
        self.http = AsyncHttpClient(self.config.gateway_url, timeout=self.config.timeout, headers=headers)
        self.query = AsyncContractQueryRunner(self.http)
        self.market = AsyncMarketplaceApi(self.query, self.config)

    @property
    def chain(self) -> str:
        return self.config.chain_id

    async def aclose(self) -> None:
        await self.http.aclose()

    async def __aenter__(self) -> "AsyncXOXNOClient":
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()
