#!/usr/bin/env python3
"""Quick helper: show an auction and the transaction that would buy it."""

from __future__ import annotations

import json
import logging
import os
import sys

from xoxno import BuyRequest, NetworkConfig, Sender, XOXNOClient, XOXNOError

BUYER = os.environ.get("XOXNO_BUYER", "erd1qyu5wthldzr8wx5c9ucg8kjagg0jfs53s8nr3zpz3hypefsdd8ssycr6th")


def main() -> None:
    if len(sys.argv) < 2:
        print("usage: check_auction.py AUCTION_ID", file=sys.stderr)
        sys.exit(2)
    auction_id = int(sys.argv[1])
    logging.basicConfig(level=os.environ.get("XOXNO_LOG_LEVEL", "WARNING"))

    with XOXNOClient(NetworkConfig.from_env()) as client:
        try:
            auction = client.market.get_auction_info(auction_id)
            if auction is None:
                print(f"Auction {auction_id} does not exist")
                return
            print(f"Item      : {auction.auctioned_token_type} #{auction.auctioned_token_nonce}")
            print(f"Kind      : {auction.auction_type.value}")
            print(f"Price     : {auction.min_bid_short} {auction.payment_token_type}")
            print(f"Deadline  : {auction.deadline}")

            tx = client.market.buy_auction_by_id(BuyRequest(auction_id), Sender(BUYER))
            print(json.dumps(tx.to_dict(), indent=2))
        except XOXNOError as exc:
            print(f"Error ({exc.code}): {exc}", file=sys.stderr)
            sys.exit(1)


if __name__ == "__main__":
    main()
