#!/usr/bin/env python3
"""
Async example using AsyncXOXNOClient.

Lists the global offers on the XO marketplace, reading them concurrently.
"""

from __future__ import annotations

import asyncio
import sys

from xoxno import AsyncXOXNOClient, NetworkConfig, XOXNOError


async def main() -> None:
    async with AsyncXOXNOClient(NetworkConfig.from_env()) as client:
        try:
            fees, offer_ids = await asyncio.gather(
                client.market.get_marketplace_fees(),
                client.market.get_global_offer_ids(),
            )
            offers = await asyncio.gather(*(client.market.get_global_offer(i) for i in offer_ids[:20]))
        except XOXNOError as exc:
            print(f"Error ({exc.code}): {exc}", file=sys.stderr)
            sys.exit(1)

    print(f"Marketplace cut: {fees / 100}%")
    for offer in offers:
        if offer is None:
            continue
        state = "active" if offer.is_active else "unfunded"
        print(
            f"#{offer.offer_id:<6} {offer.collection:<20} {offer.short_price} {offer.payment_token}"
            f"  x{offer.quantity}  {state}"
        )


if __name__ == "__main__":
    asyncio.run(main())
