import pytest

from zora_mcp.errors import DuplicateToolError, StartupError
from zora_mcp.mcp import ToolDefinition, ToolRegistry, build_registry, list_tools

EXPECTED_TOOLS = [
    "health",
    "get_coin",
    "get_coins",
    "get_coin_holders",
    "get_coin_swaps",
    "get_coin_comments",
    "get_profile",
    "get_profile_coins",
    "get_profile_balances",
    "explore_top_gainers",
    "explore_top_volume_24h",
    "explore_most_valuable",
    "explore_new",
    "explore_last_traded",
    "explore_last_traded_unique",
    "create_coin",
    "update_coin_uri",
    "update_payout_recipient",
    "trade_coin",
]
WRITE_TOOLS = {"create_coin", "update_coin_uri", "update_payout_recipient", "trade_coin"}


async def _noop(args, **_kwargs):
    return args


def _definition(name):
    return ToolDefinition(name=name, title=name, description="", fields=(), handler=_noop)


def test_registry_contains_all_tools_in_order():
    registry = build_registry()
    assert registry.names() == EXPECTED_TOOLS
    assert len(registry) == len(EXPECTED_TOOLS)


def test_only_write_family_is_mutating():
    registry = build_registry()
    mutating = {tool.name for tool in registry if tool.mutating}
    assert mutating == WRITE_TOOLS


def test_explore_feeds_share_pagination_contract():
    registry = build_registry()
    explore = [tool for tool in registry if tool.name.startswith("explore_")]
    assert len(explore) == 6
    for tool in explore:
        props = tool.input_schema["properties"]
        assert set(props) == {"count", "after"}
        assert props["count"]["minimum"] == 1
        assert props["count"]["maximum"] == 100
        assert tool.input_schema["required"] == []


def test_duplicate_registration_is_fatal():
    registry = ToolRegistry()
    registry.register(_definition("a"))
    with pytest.raises(DuplicateToolError):
        registry.register(_definition("a"))


def test_frozen_registry_rejects_additions():
    registry = build_registry()
    with pytest.raises(StartupError):
        registry.register(_definition("late_tool"))
    assert "late_tool" not in registry


def test_lookup_unknown_returns_none():
    assert build_registry().lookup("nope") is None


def test_list_tools_publishes_schemas():
    tools = {tool["name"]: tool for tool in list_tools(build_registry())}
    trade = tools["trade_coin"]["inputSchema"]
    assert trade["required"] == ["sellType", "buyType", "amount"]
    assert trade["properties"]["slippage"]["default"] == 0.05
    assert trade["properties"]["sellType"]["enum"] == ["eth", "erc20"]
    create = tools["create_coin"]["inputSchema"]
    assert create["properties"]["gasMultiplier"]["minimum"] == 50
    assert create["properties"]["gasMultiplier"]["maximum"] == 500
    assert create["properties"]["currency"]["enum"] == ["ZORA", "ETH"]
    assert tools["health"]["title"] == "Zora Coins server health"
