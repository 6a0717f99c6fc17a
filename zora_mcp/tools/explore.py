"""Explore feeds. All six share the same {count, after} contract and one handler template."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Tuple

from zora_mcp.context import EnvironmentContext


@dataclass(frozen=True, slots=True)
class ExploreFeed:
    name: str
    platform_method: str
    title: str
    description: str


EXPLORE_FEEDS: Tuple[ExploreFeed, ...] = (
    ExploreFeed(
        "explore_top_gainers",
        "explore_top_gainers",
        "Top gainers (24h)",
        "Coins with highest market cap delta over last 24h.",
    ),
    ExploreFeed(
        "explore_top_volume_24h",
        "explore_top_volume_24h",
        "Top 24h volume",
        "Coins with highest trading volume in last 24 hours.",
    ),
    ExploreFeed(
        "explore_most_valuable",
        "explore_most_valuable",
        "Most valuable",
        "Coins with highest market capitalization.",
    ),
    ExploreFeed("explore_new", "explore_new", "New coins", "Most recently created coins."),
    ExploreFeed(
        "explore_last_traded",
        "explore_last_traded",
        "Last traded",
        "Coins most recently traded.",
    ),
    ExploreFeed(
        "explore_last_traded_unique",
        "explore_last_traded_unique",
        "Last traded (unique traders)",
        "Coins most recently traded by unique traders.",
    ),
)

ExploreHandler = Callable[..., Awaitable[Any]]


def make_explore_handler(feed: ExploreFeed) -> ExploreHandler:
    async def handler(args: Dict[str, Any], *, context: EnvironmentContext, platform) -> Any:
        fetch = getattr(platform, feed.platform_method)
        return await fetch(count=args.get("count"), after=args.get("after"))

    handler.__name__ = feed.name
    handler.__doc__ = feed.description
    return handler
