import json

import pytest

from conftest import TEST_ADDRESS, TOKEN, COIN, make_context
from zora_mcp.errors import CredentialMissingError, ValidationError
from zora_mcp.tools.trade import TradePlan, plan_trade, resolve_leg, trade_coin
from zora_mcp.zora_api.platform import LegKind, TradeLeg


def _error(envelope):
    assert envelope["isError"] is True
    return json.loads(envelope["content"][0]["text"])["error"]


@pytest.mark.asyncio
async def test_eth_to_token_trade_submits_once(dispatcher, platform):
    envelope = await dispatcher.invoke(
        "trade_coin",
        {"sellType": "eth", "buyType": "erc20", "buyAddress": TOKEN, "amount": "0.01", "slippage": 0.1},
    )
    assert "isError" not in envelope
    assert len(platform.calls) == 1
    name, args, kwargs = platform.calls[0]
    assert name == "trade_coin"
    assert args[0].address == TEST_ADDRESS
    assert kwargs["sell"] == TradeLeg(LegKind.ETH)
    assert kwargs["buy"] == TradeLeg(LegKind.TOKEN, TOKEN)
    assert kwargs["amount_in"] == 10**16
    assert kwargs["slippage"] == 0.1
    assert kwargs["sender"] == TEST_ADDRESS
    assert kwargs["recipient"] == TEST_ADDRESS
    assert kwargs["chain_id"] == 8453


@pytest.mark.asyncio
async def test_token_sell_uses_declared_decimals(dispatcher, platform):
    await dispatcher.invoke(
        "trade_coin",
        {
            "sellType": "erc20",
            "sellAddress": COIN,
            "sellDecimals": 6,
            "buyType": "eth",
            "amount": "1.5",
            "recipient": TOKEN,
        },
    )
    _, _, kwargs = platform.calls_to("trade_coin")[0]
    assert kwargs["amount_in"] == 1_500_000
    assert kwargs["sell"] == TradeLeg(LegKind.TOKEN, COIN)
    assert kwargs["buy"].kind is LegKind.ETH
    assert kwargs["recipient"] == TOKEN
    assert kwargs["slippage"] == 0.05


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "args,field",
    [
        ({"sellType": "erc20", "buyType": "eth", "amount": "1"}, "sellAddress"),
        ({"sellType": "eth", "buyType": "erc20", "amount": "1"}, "buyAddress"),
        ({"sellType": "eth", "buyType": "erc20", "buyAddress": "  ", "amount": "1"}, "buyAddress"),
        ({"sellType": "eth", "buyType": "erc20", "buyAddress": TOKEN, "amount": "abc"}, "amount"),
        ({"sellType": "eth", "buyType": "erc20", "buyAddress": TOKEN, "amount": "0"}, "amount"),
        ({"sellType": "eth", "buyType": "erc20", "buyAddress": TOKEN, "amount": "0.0000000000000000001"}, "amount"),
        ({"sellType": "btc", "buyType": "erc20", "buyAddress": TOKEN, "amount": "1"}, "sellType"),
        ({"sellType": "eth", "buyType": "erc20", "buyAddress": TOKEN, "amount": "1", "slippage": 1}, "slippage"),
    ],
)
async def test_invalid_trades_never_reach_platform(args, field, dispatcher, platform):
    error = _error(await dispatcher.invoke("trade_coin", args))
    assert error["code"] == "VALIDATION_ERROR"
    assert error["field"] == field
    assert platform.calls == []


@pytest.mark.asyncio
async def test_incomplete_leg_reported_before_missing_credentials(readonly_dispatcher, platform):
    error = _error(
        await readonly_dispatcher.invoke("trade_coin", {"sellType": "eth", "buyType": "erc20", "amount": "1"})
    )
    assert error["code"] == "VALIDATION_ERROR"
    assert platform.calls == []


def test_resolve_leg():
    assert resolve_leg("eth", TOKEN, field="sellAddress") == TradeLeg(LegKind.ETH)
    assert resolve_leg("erc20", f" {TOKEN} ", field="buyAddress").token_address == TOKEN
    with pytest.raises(ValidationError) as excinfo:
        resolve_leg("erc20", None, field="sellAddress")
    assert excinfo.value.constraint == "is required when sellType is erc20"


def test_token_leg_requires_address():
    with pytest.raises(ValueError):
        TradeLeg(LegKind.TOKEN)
    assert TradeLeg(LegKind.TOKEN, TOKEN).to_wire() == {"type": "erc20", "address": TOKEN}
    assert TradeLeg(LegKind.ETH).to_wire() == {"type": "eth"}


def test_plan_trade_keeps_arguments():
    planned = plan_trade({"sellType": "eth", "buyType": "erc20", "buyAddress": TOKEN, "amount": "2"})
    plan = planned["plan"]
    assert isinstance(plan, TradePlan)
    assert plan.amount_in == 2 * 10**18
    assert plan.sender is None
    assert planned["amount"] == "2"


@pytest.mark.asyncio
async def test_handler_rechecks_identity(platform):
    args = plan_trade({"sellType": "eth", "buyType": "erc20", "buyAddress": TOKEN, "amount": "1"})
    with pytest.raises(CredentialMissingError):
        await trade_coin(args, context=make_context(with_signer=False), platform=platform)
    assert platform.calls == []


@pytest.mark.asyncio
@pytest.mark.parametrize("slippage", [float("nan"), float("inf")])
async def test_non_finite_slippage_rejected(slippage, dispatcher, platform):
    error = _error(
        await dispatcher.invoke(
            "trade_coin",
            {"sellType": "eth", "buyType": "erc20", "buyAddress": TOKEN, "amount": "0.01", "slippage": slippage},
        )
    )
    assert error["code"] == "VALIDATION_ERROR"
    assert error["field"] == "slippage"
    assert platform.calls == []
