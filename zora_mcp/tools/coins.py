"""Coin query tools."""

from __future__ import annotations

from typing import Any, Dict, List

from zora_mcp.context import EnvironmentContext


def _chain(args: Dict[str, Any], context: EnvironmentContext) -> int:
    chain_id = args.get("chainId")
    return context.chain_id if chain_id is None else chain_id


async def get_coin(args: Dict[str, Any], *, context: EnvironmentContext, platform) -> Any:
    """Fetch metadata, market data and creator info for a coin."""
    return await platform.get_coin(args["address"], chain=_chain(args, context))


async def get_coins(args: Dict[str, Any], *, context: EnvironmentContext, platform) -> Any:
    """Batch fetch coins; entries without a chainId use the configured chain."""
    coins: List[Dict[str, Any]] = [
        {"collectionAddress": entry["collectionAddress"], "chainId": _chain(entry, context)}
        for entry in args["coins"]
    ]
    return await platform.get_coins(coins)


async def get_coin_holders(args: Dict[str, Any], *, context: EnvironmentContext, platform) -> Any:
    return await platform.get_coin_holders(
        args["address"],
        chain_id=_chain(args, context),
        after=args.get("after"),
        count=args.get("count"),
    )


async def get_coin_swaps(args: Dict[str, Any], *, context: EnvironmentContext, platform) -> Any:
    # The swaps feed pages with ``first`` rather than ``count``.
    return await platform.get_coin_swaps(
        args["address"],
        chain=_chain(args, context),
        after=args.get("after"),
        first=args.get("first"),
    )


async def get_coin_comments(args: Dict[str, Any], *, context: EnvironmentContext, platform) -> Any:
    return await platform.get_coin_comments(
        args["address"],
        chain=_chain(args, context),
        after=args.get("after"),
        count=args.get("count"),
    )
