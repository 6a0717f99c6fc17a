import json

import pytest

from conftest import COIN, TOKEN, FakePlatform, make_context
from zora_mcp.mcp import Dispatcher, build_registry
from zora_mcp.metrics import MetricsRecorder
from zora_mcp.zora_api.chain import ChainError
from zora_mcp.zora_api.client import ApiUnreachableError, ZoraApiError

# Minimal valid arguments for every tool.
VALID_ARGS = {
    "health": {},
    "get_coin": {"address": COIN},
    "get_coins": {"coins": [{"collectionAddress": COIN}]},
    "get_coin_holders": {"address": COIN},
    "get_coin_swaps": {"address": COIN},
    "get_coin_comments": {"address": COIN},
    "get_profile": {"identifier": "@jacob"},
    "get_profile_coins": {"identifier": "@jacob"},
    "get_profile_balances": {"identifier": "@jacob"},
    "explore_top_gainers": {},
    "explore_top_volume_24h": {},
    "explore_most_valuable": {},
    "explore_new": {},
    "explore_last_traded": {},
    "explore_last_traded_unique": {},
    "create_coin": {"name": "Coin", "symbol": "CN", "uri": "ipfs://meta", "payoutRecipient": COIN},
    "update_coin_uri": {"coin": COIN, "newURI": "ipfs://new"},
    "update_payout_recipient": {"coin": COIN, "newPayoutRecipient": COIN},
    "trade_coin": {"sellType": "eth", "buyType": "erc20", "buyAddress": TOKEN, "amount": "0.01"},
}
WRITE_TOOLS = ["create_coin", "update_coin_uri", "update_payout_recipient", "trade_coin"]
REQUIRED_FIELDS = [
    (tool, field)
    for tool, definition in ((t.name, t) for t in build_registry())
    for field in definition.input_schema["required"]
]
PAGINATED = [
    (tool.name, field)
    for tool in build_registry()
    for field, schema in tool.input_schema["properties"].items()
    if schema.get("minimum") == 1 and schema.get("maximum") == 100
]


def _payload(envelope):
    assert envelope["content"][0]["type"] == "text"
    return json.loads(envelope["content"][0]["text"])


def _error(envelope):
    assert envelope.get("isError") is True
    return _payload(envelope)["error"]


def test_every_tool_has_valid_args_fixture():
    assert set(VALID_ARGS) == set(build_registry().names())


@pytest.mark.asyncio
@pytest.mark.parametrize("tool", WRITE_TOOLS)
async def test_write_tools_require_signing_identity(tool, readonly_dispatcher, platform):
    error = _error(await readonly_dispatcher.invoke(tool, VALID_ARGS[tool]))
    assert error["code"] == "CREDENTIAL_MISSING"
    assert "PRIVATE_KEY" in error["hint"]
    assert platform.calls == []


@pytest.mark.asyncio
@pytest.mark.parametrize("tool", sorted(set(VALID_ARGS) - set(WRITE_TOOLS)))
async def test_read_tools_work_without_signing_identity(tool, readonly_dispatcher):
    envelope = await readonly_dispatcher.invoke(tool, VALID_ARGS[tool])
    assert "isError" not in envelope


@pytest.mark.asyncio
@pytest.mark.parametrize("tool,field", REQUIRED_FIELDS)
async def test_missing_required_field_is_validation_error(tool, field, dispatcher, platform):
    args = dict(VALID_ARGS[tool])
    args.pop(field)
    error = _error(await dispatcher.invoke(tool, args))
    assert error["code"] == "VALIDATION_ERROR"
    assert error["field"] == field
    assert platform.calls == []


@pytest.mark.asyncio
@pytest.mark.parametrize("tool", WRITE_TOOLS)
async def test_validation_precedes_credential_gate(tool, readonly_dispatcher):
    args = dict(VALID_ARGS[tool])
    missing = build_registry().lookup(tool).input_schema["required"][0]
    args.pop(missing)
    error = _error(await readonly_dispatcher.invoke(tool, args))
    assert error["code"] == "VALIDATION_ERROR"


def test_paginated_tools_discovered():
    names = {tool for tool, _ in PAGINATED}
    assert {"get_coin_holders", "get_coin_swaps", "get_profile_coins", "explore_new"} <= names
    assert len(PAGINATED) == 11


@pytest.mark.asyncio
@pytest.mark.parametrize("tool,field", PAGINATED)
@pytest.mark.parametrize("value", [0, 101])
async def test_page_size_out_of_range_rejected(tool, field, value, dispatcher, platform):
    args = {**VALID_ARGS[tool], field: value}
    error = _error(await dispatcher.invoke(tool, args))
    assert error["code"] == "VALIDATION_ERROR"
    assert error["field"] == field
    assert platform.calls == []


@pytest.mark.asyncio
@pytest.mark.parametrize("tool,field", PAGINATED)
@pytest.mark.parametrize("value", [1, 100])
async def test_page_size_bounds_accepted(tool, field, value, dispatcher, platform):
    envelope = await dispatcher.invoke(tool, {**VALID_ARGS[tool], field: value})
    assert "isError" not in envelope
    assert len(platform.calls) == 1
    assert platform.calls[0][2][field] == value


@pytest.mark.asyncio
async def test_unknown_tool(dispatcher):
    error = _error(await dispatcher.invoke("zora_get_coin", {}))
    assert error["code"] == "UNKNOWN_TOOL"
    assert "zora_get_coin" in error["message"]


@pytest.mark.asyncio
async def test_unknown_fields_are_ignored(dispatcher, platform):
    envelope = await dispatcher.invoke("get_coin", {"address": COIN, "surprise": True})
    assert "isError" not in envelope
    name, args, kwargs = platform.calls[0]
    assert "surprise" not in kwargs


@pytest.mark.asyncio
async def test_non_object_arguments_rejected(dispatcher):
    error = _error(await dispatcher.invoke("get_coin", ["not", "a", "dict"]))
    assert error["code"] == "VALIDATION_ERROR"
    assert error["field"] == "arguments"


@pytest.mark.asyncio
async def test_success_envelope_renders_result(registry, signer_context):
    platform = FakePlatform(result={"zora20Token": {"totalSupply": 10**27, "name": "Coin"}})
    dispatcher = Dispatcher(registry, signer_context, platform)
    envelope = await dispatcher.invoke("get_coin", {"address": COIN})
    assert set(envelope) == {"content"}
    assert '"1000000000000000000000000000"' in envelope["content"][0]["text"]
    assert _payload(envelope)["zora20Token"]["name"] == "Coin"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "exc,source",
    [
        (ZoraApiError("Zora API error (HTTP 500)."), "ZoraApiError"),
        (ApiUnreachableError("Zora API unreachable"), "ApiUnreachableError"),
        (ChainError("Transaction 0xabc reverted"), "ChainError"),
        (RuntimeError("boom"), "RuntimeError"),
    ],
)
async def test_external_failures_are_wrapped(exc, source, registry, signer_context):
    platform = FakePlatform(error=exc)
    dispatcher = Dispatcher(registry, signer_context, platform)
    error = _error(await dispatcher.invoke("get_coin", {"address": COIN}))
    assert error["code"] == "EXTERNAL_CALL_FAILED"
    assert error["message"] == str(exc)
    assert error["source"] == source
    assert len(platform.calls) == 1


@pytest.mark.asyncio
async def test_metrics_record_outcomes(registry, signer_context, platform):
    metrics = MetricsRecorder()
    dispatcher = Dispatcher(registry, signer_context, platform, metrics=metrics)
    await dispatcher.invoke("get_coin", {"address": COIN})
    await dispatcher.invoke("get_coin", {})
    await dispatcher.invoke("nope", {})
    snapshot = metrics.snapshot()
    assert snapshot["tool_success"] == {"get_coin": 1}
    assert snapshot["tool_error"] == {"get_coin": 1, "nope": 1}
    assert snapshot["error_codes"] == {"VALIDATION_ERROR": 1, "UNKNOWN_TOOL": 1}


@pytest.mark.asyncio
async def test_health_reports_environment(readonly_dispatcher, dispatcher):
    data = _payload(await readonly_dispatcher.invoke("health"))
    assert data["server"]["name"] == "zora-coins-mcp"
    assert data["chainId"] == 8453
    assert data["walletAddress"] is None
    assert data["writeToolsEnabled"] is False

    data = _payload(await dispatcher.invoke("health", {}))
    assert data["walletAddress"] == make_context(with_signer=True).wallet_address
    assert data["writeToolsEnabled"] is True
