#!/usr/bin/env python3
"""Dump the lists shopsync keeps in sync.

Loads the notification feed, the shift list, the orders of the open shift
and the product catalogue (with units), then prints the parsed items
alongside the unread counter. Useful to check how a backend's envelopes are
normalized.

Usage
-----
Install the package (``pip install -e .``), set the environment and run::

    export SHOPSYNC_BASE_URL="https://pos.example.com"
    export SHOPSYNC_TOKEN="..."
    export SHOPSYNC_SHOP_ID=12
    export SHOPSYNC_USER_ID=34
    python scripts/dump_feeds.py

Options::

    --pages N          Fetch up to N pages of each list (default: 1)
    --search TEXT      Also run an order search for TEXT
    --json             Output machine-readable JSON
    --debug            Enable DEBUG logging (tokens are redacted)
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import os
import sys
from typing import Any

from shopsync import QueryKey, Session, ShopSyncClient, ShopSyncConfig, StaticSessionProvider
from shopsync.exceptions import ShopSyncError


def _section(title: str) -> str:
    line = "=" * 60
    return f"\n{line}\n  {title}\n{line}"


def _dump_item(item: Any) -> dict[str, Any]:
    return item.model_dump(mode="json", exclude={"raw"})


async def _collect(client: ShopSyncClient, key: QueryKey, pages: int) -> list[dict[str, Any]]:
    snapshot = await client.refetch(key)
    for _ in range(pages - 1):
        if not snapshot.has_more:
            break
        snapshot = await client.fetch_next_page(key)
    if snapshot.last_error:
        print(f"  !! {key} failed: {snapshot.last_error}", file=sys.stderr)
    return [_dump_item(item) for item in snapshot.items]


async def main() -> int:
    parser = argparse.ArgumentParser(description="Dump shop lists for debugging / development.")
    parser.add_argument("--pages", type=int, default=1, help="Pages to fetch per list")
    parser.add_argument("--search", help="Order search text to run against the open shift")
    parser.add_argument("--json", action="store_true", dest="json_mode", help="Output machine-readable JSON")
    parser.add_argument("--debug", action="store_true", help="Enable DEBUG logging")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    session = Session(
        access_token=os.environ.get("SHOPSYNC_TOKEN", ""),
        shop_id=int(os.environ.get("SHOPSYNC_SHOP_ID", "0")),
        user_id=int(os.environ["SHOPSYNC_USER_ID"]) if os.environ.get("SHOPSYNC_USER_ID") else None,
    )
    if not session.is_usable:
        print("SHOPSYNC_TOKEN and SHOPSYNC_SHOP_ID must be set", file=sys.stderr)
        return 2

    def _on_error(key: QueryKey, exc: ShopSyncError) -> None:
        print(f"  !! {key}: {exc}", file=sys.stderr)

    result: dict[str, Any] = {}
    async with ShopSyncClient(ShopSyncConfig.from_env(), StaticSessionProvider(session), on_error=_on_error) as client:
        if session.user_id is not None:
            result["notifications"] = await _collect(client, await client.notifications_key(), args.pages)
            result["unread"] = client.unread_counter.get()

        result["shifts"] = await _collect(client, await client.shifts_key(), args.pages)
        open_shift = await client.get_open_shift()
        if open_shift is not None:
            orders_key = await client.orders_key(open_shift.id)
            result["orders"] = await _collect(client, orders_key, args.pages)
            if args.search is not None:
                snapshot = await client.coordinator.search_now(orders_key, args.search)
                result["search"] = [_dump_item(item) for item in snapshot.items]

        products = await client.list_products_with_units()
        result["products"] = [_dump_item(product) for product in products]

    if args.json_mode:
        print(json.dumps(result, indent=2, ensure_ascii=False, default=str))
        return 0

    for name, value in result.items():
        print(_section(name.upper()))
        if isinstance(value, list):
            for item in value:
                print(json.dumps(item, ensure_ascii=False, default=str))
        else:
            print(f"  {value}")
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
