"""Profile query tools. Identifiers are wallet addresses or @handles, already trimmed by validation."""

from __future__ import annotations

from typing import Any, Dict

from zora_mcp.context import EnvironmentContext


async def get_profile(args: Dict[str, Any], *, context: EnvironmentContext, platform) -> Any:
    return await platform.get_profile(args["identifier"])


async def get_profile_coins(args: Dict[str, Any], *, context: EnvironmentContext, platform) -> Any:
    """List coins created by a profile."""
    return await platform.get_profile_coins(
        args["identifier"],
        count=args.get("count"),
        after=args.get("after"),
        chain_ids=args.get("chainIds"),
        platform_referrer_address=args.get("platformReferrerAddress"),
    )


async def get_profile_balances(args: Dict[str, Any], *, context: EnvironmentContext, platform) -> Any:
    """List coin balances held by a profile."""
    return await platform.get_profile_balances(
        args["identifier"],
        count=args.get("count"),
        after=args.get("after"),
    )
