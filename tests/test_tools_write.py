import pytest

from conftest import COIN, TEST_ADDRESS, TOKEN, make_context
from zora_mcp.errors import CredentialMissingError
from zora_mcp.mcp import Dispatcher
from zora_mcp.tools.write import create_coin, update_coin_uri


@pytest.mark.asyncio
async def test_create_coin_applies_defaults(dispatcher, platform):
    envelope = await dispatcher.invoke(
        "create_coin",
        {"name": "My Coin", "symbol": "MINE", "uri": "ipfs://meta", "payoutRecipient": COIN},
    )
    assert "isError" not in envelope
    name, args, kwargs = platform.calls[0]
    assert name == "create_coin"
    assert args[0].address == TEST_ADDRESS
    assert kwargs == {
        "name": "My Coin",
        "symbol": "MINE",
        "uri": "ipfs://meta",
        "payout_recipient": COIN,
        "platform_referrer": None,
        "chain_id": 8453,
        "currency": "ZORA",
        "gas_multiplier": 120,
    }


@pytest.mark.asyncio
async def test_create_coin_passes_overrides(registry, platform):
    dispatcher = Dispatcher(registry, make_context(with_signer=True, chain_id=84532), platform)
    await dispatcher.invoke(
        "create_coin",
        {
            "name": "My Coin",
            "symbol": "MINE",
            "uri": "ipfs://meta",
            "payoutRecipient": COIN,
            "platformReferrer": TOKEN,
            "currency": "ETH",
            "gasMultiplier": 200,
        },
    )
    kwargs = platform.calls[0][2]
    assert kwargs["chain_id"] == 84532
    assert kwargs["currency"] == "ETH"
    assert kwargs["gas_multiplier"] == 200
    assert kwargs["platform_referrer"] == TOKEN


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "override,field",
    [
        ({"currency": "USDC"}, "currency"),
        ({"gasMultiplier": 10}, "gasMultiplier"),
        ({"gasMultiplier": 501}, "gasMultiplier"),
        ({"symbol": ""}, "symbol"),
    ],
)
async def test_create_coin_rejects_bad_arguments(override, field, dispatcher, platform):
    args = {"name": "My Coin", "symbol": "MINE", "uri": "ipfs://meta", "payoutRecipient": COIN}
    envelope = await dispatcher.invoke("create_coin", {**args, **override})
    assert envelope["isError"] is True
    assert f"'{field}'" in envelope["content"][0]["text"]
    assert platform.calls == []


@pytest.mark.asyncio
async def test_update_tools_forward_coin_and_value(dispatcher, platform):
    await dispatcher.invoke("update_coin_uri", {"coin": COIN, "newURI": "ipfs://new"})
    await dispatcher.invoke("update_payout_recipient", {"coin": COIN, "newPayoutRecipient": TOKEN})
    assert platform.calls_to("update_coin_uri")[0][2] == {"coin": COIN, "new_uri": "ipfs://new"}
    assert platform.calls_to("update_payout_recipient")[0][2] == {
        "coin": COIN,
        "new_payout_recipient": TOKEN,
    }


@pytest.mark.asyncio
async def test_write_handlers_recheck_identity(platform):
    context = make_context(with_signer=False)
    with pytest.raises(CredentialMissingError):
        await create_coin(
            {"name": "x", "symbol": "x", "uri": "x", "payoutRecipient": COIN},
            context=context,
            platform=platform,
        )
    with pytest.raises(CredentialMissingError):
        await update_coin_uri({"coin": COIN, "newURI": "x"}, context=context, platform=platform)
    assert platform.calls == []
