"""Network configuration: chain identifier, gateway endpoint and contract address."""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Mapping

DEFAULT_GATEWAY_URL = "https://gateway.multiversx.com"
DEFAULT_TIMEOUT = 30.0
DEFAULT_GAS_PRICE = 1_000_000_000
NATIVE_TOKEN = "EGLD"

XO_MARKET_ADDRESS = "erd1qqqqqqqqqqqqqpgq6wegs2xkypfpync8mn2sa5cmpqjlvrhwz5nqgepyg8"


@dataclass(frozen=True)
class NetworkConfig:
    """Everything a client needs to know about the chain it talks to.

    Resolved once when a client is constructed; transactions built by the
    client carry ``chain_id`` and ``gas_price`` from here.
    """

    chain_id: str
    gateway_url: str
    market_address: str
    native_token: str = NATIVE_TOKEN
    gas_price: int = DEFAULT_GAS_PRICE
    timeout: float = DEFAULT_TIMEOUT

    def with_overrides(self, **changes: object) -> "NetworkConfig":
        """Return a copy with the non-``None`` keyword arguments applied."""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})

    @classmethod
    def from_env(
        cls,
        base: "NetworkConfig | None" = None,
        environ: Mapping[str, str] | None = None,
    ) -> "NetworkConfig":
        """Overlay ``XOXNO_*`` environment variables on ``base`` (mainnet by default)."""
        env = os.environ if environ is None else environ
        config = base or MAINNET
        gas_price = env.get("XOXNO_GAS_PRICE")
        timeout = env.get("XOXNO_TIMEOUT")
        return config.with_overrides(
            chain_id=env.get("XOXNO_CHAIN_ID"),
            gateway_url=env.get("XOXNO_GATEWAY_URL"),
            market_address=env.get("XOXNO_MARKET_ADDRESS"),
            gas_price=int(gas_price) if gas_price else None,
            timeout=float(timeout) if timeout else None,
        )


MAINNET = NetworkConfig(
    chain_id="1",
    gateway_url=DEFAULT_GATEWAY_URL,
    market_address=XO_MARKET_ADDRESS,
)
