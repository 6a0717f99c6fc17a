"""
Boundary to the external coin platform.

``CoinPlatform`` lists exactly the remote operations the tools call. The
concrete ``ZoraCoinPlatform`` combines the HTTP API client (queries, deployment
and quote calldata) with the chain client (signing and submission). Tests use
a fake implementation of the same protocol.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Protocol, Sequence

from zora_mcp.config import ZoraConfig
from zora_mcp.context import EnvironmentContext, SigningIdentity
from zora_mcp.zora_api.chain import ChainClient, ChainError, to_checksum
from zora_mcp.zora_api.client import ZoraApiClient, ZoraApiError

logger = logging.getLogger(__name__)

DEPLOY_CURRENCIES = ("ZORA", "ETH")
DEFAULT_DEPLOY_CURRENCY = "ZORA"

EXPLORE_LIST_TYPES = {
    "top_gainers": "TOP_GAINERS",
    "top_volume_24h": "TOP_VOLUME_24H",
    "most_valuable": "MOST_VALUABLE",
    "new": "NEW",
    "last_traded": "LAST_TRADED",
    "last_traded_unique": "LAST_TRADED_UNIQUE",
}

# Owner-only setters on a deployed coin.
COIN_ABI = [
    {
        "name": "setContractURI",
        "type": "function",
        "stateMutability": "nonpayable",
        "inputs": [{"name": "newURI", "type": "string"}],
        "outputs": [],
    },
    {
        "name": "setPayoutRecipient",
        "type": "function",
        "stateMutability": "nonpayable",
        "inputs": [{"name": "newPayoutRecipient", "type": "address"}],
        "outputs": [],
    },
]

# Token sells are pulled by the router through Permit2 signatures.
PERMIT2_ADDRESS = "0x000000000022D473030F116dDEE9F6B43aC78BA3"
PERMIT_TYPES = {
    "PermitSingle": [
        {"name": "details", "type": "PermitDetails"},
        {"name": "spender", "type": "address"},
        {"name": "sigDeadline", "type": "uint256"},
    ],
    "PermitDetails": [
        {"name": "token", "type": "address"},
        {"name": "amount", "type": "uint160"},
        {"name": "expiration", "type": "uint48"},
        {"name": "nonce", "type": "uint48"},
    ],
}


class LegKind(str, Enum):
    ETH = "eth"
    TOKEN = "erc20"


@dataclass(frozen=True, slots=True)
class TradeLeg:
    """One side of a trade: the native coin or a specific token contract."""

    kind: LegKind
    token_address: Optional[str] = None

    def __post_init__(self) -> None:
        if self.kind is LegKind.TOKEN and not self.token_address:
            raise ValueError("token legs require a token address")

    def to_wire(self) -> Dict[str, str]:
        if self.kind is LegKind.ETH:
            return {"type": "eth"}
        return {"type": "erc20", "address": self.token_address or ""}


class CoinPlatform(Protocol):
    async def get_coin(self, address: str, *, chain: int) -> Any: ...

    async def get_coins(self, coins: Sequence[Dict[str, Any]]) -> Any: ...

    async def get_coin_holders(
        self, address: str, *, chain_id: int, after: Optional[str], count: Optional[int]
    ) -> Any: ...

    async def get_coin_swaps(
        self, address: str, *, chain: int, after: Optional[str], first: Optional[int]
    ) -> Any: ...

    async def get_coin_comments(
        self, address: str, *, chain: int, after: Optional[str], count: Optional[int]
    ) -> Any: ...

    async def get_profile(self, identifier: str) -> Any: ...

    async def get_profile_coins(
        self,
        identifier: str,
        *,
        count: Optional[int],
        after: Optional[str],
        chain_ids: Optional[List[int]],
        platform_referrer_address: Optional[List[str]],
    ) -> Any: ...

    async def get_profile_balances(
        self, identifier: str, *, count: Optional[int], after: Optional[str]
    ) -> Any: ...

    async def explore_top_gainers(self, *, count: Optional[int], after: Optional[str]) -> Any: ...

    async def explore_top_volume_24h(self, *, count: Optional[int], after: Optional[str]) -> Any: ...

    async def explore_most_valuable(self, *, count: Optional[int], after: Optional[str]) -> Any: ...

    async def explore_new(self, *, count: Optional[int], after: Optional[str]) -> Any: ...

    async def explore_last_traded(self, *, count: Optional[int], after: Optional[str]) -> Any: ...

    async def explore_last_traded_unique(
        self, *, count: Optional[int], after: Optional[str]
    ) -> Any: ...

    async def create_coin(
        self,
        identity: SigningIdentity,
        *,
        name: str,
        symbol: str,
        uri: str,
        payout_recipient: str,
        platform_referrer: Optional[str],
        chain_id: int,
        currency: str,
        gas_multiplier: int,
    ) -> Any: ...

    async def update_coin_uri(self, identity: SigningIdentity, *, coin: str, new_uri: str) -> Any: ...

    async def update_payout_recipient(
        self, identity: SigningIdentity, *, coin: str, new_payout_recipient: str
    ) -> Any: ...

    async def trade_coin(
        self,
        identity: SigningIdentity,
        *,
        sell: TradeLeg,
        buy: TradeLeg,
        amount_in: int,
        slippage: float,
        sender: str,
        recipient: str,
        chain_id: int,
    ) -> Any: ...

    async def aclose(self) -> None: ...


def _tx_summary(receipt: Dict[str, Any]) -> Dict[str, Any]:
    return {"hash": receipt.get("transactionHash"), "receipt": receipt}


def sign_permit(identity: SigningIdentity, entry: Dict[str, Any], chain_id: int) -> Dict[str, Any]:
    """Sign one Permit2 ``PermitSingle`` from a quote and pair it with its signature."""
    permit = entry.get("permit", entry) if isinstance(entry, dict) else None
    try:
        details = permit["details"]
        message = {
            "details": {
                "token": to_checksum(details["token"], field="permit.details.token"),
                "amount": int(details["amount"]),
                "expiration": int(details["expiration"]),
                "nonce": int(details["nonce"]),
            },
            "spender": to_checksum(permit["spender"], field="permit.spender"),
            "sigDeadline": int(permit["sigDeadline"]),
        }
    except (KeyError, TypeError, ValueError, ChainError) as exc:
        raise ZoraApiError(f"Quote returned a malformed permit: {exc}") from exc
    signed = identity.signer.sign_typed_data(
        domain_data={"name": "Permit2", "chainId": chain_id, "verifyingContract": PERMIT2_ADDRESS},
        message_types=PERMIT_TYPES,
        message_data=message,
    )
    return {"signature": "0x" + bytes(signed.signature).hex(), "permit": permit}


class ZoraCoinPlatform:
    """Concrete coin platform backed by the Zora SDK API and a web3 chain client."""

    def __init__(self, api: ZoraApiClient, chain: ChainClient) -> None:
        self.api = api
        self.chain = chain

    async def aclose(self) -> None:
        await self.api.aclose()
        await self.chain.aclose()

    # ---- queries ----

    async def get_coin(self, address: str, *, chain: int) -> Any:
        return await self.api.fetch_coin(address, chain=chain)

    async def get_coins(self, coins: Sequence[Dict[str, Any]]) -> Any:
        return await self.api.fetch_coins(coins)

    async def get_coin_holders(
        self, address: str, *, chain_id: int, after: Optional[str], count: Optional[int]
    ) -> Any:
        return await self.api.fetch_coin_holders(address, chain_id=chain_id, after=after, count=count)

    async def get_coin_swaps(
        self, address: str, *, chain: int, after: Optional[str], first: Optional[int]
    ) -> Any:
        return await self.api.fetch_coin_swaps(address, chain=chain, after=after, first=first)

    async def get_coin_comments(
        self, address: str, *, chain: int, after: Optional[str], count: Optional[int]
    ) -> Any:
        return await self.api.fetch_coin_comments(address, chain=chain, after=after, count=count)

    async def get_profile(self, identifier: str) -> Any:
        return await self.api.fetch_profile(identifier)

    async def get_profile_coins(
        self,
        identifier: str,
        *,
        count: Optional[int],
        after: Optional[str],
        chain_ids: Optional[List[int]],
        platform_referrer_address: Optional[List[str]],
    ) -> Any:
        return await self.api.fetch_profile_coins(
            identifier,
            count=count,
            after=after,
            chain_ids=chain_ids,
            platform_referrer_address=platform_referrer_address,
        )

    async def get_profile_balances(
        self, identifier: str, *, count: Optional[int], after: Optional[str]
    ) -> Any:
        return await self.api.fetch_profile_balances(identifier, count=count, after=after)

    async def _explore(self, feed: str, *, count: Optional[int], after: Optional[str]) -> Any:
        return await self.api.fetch_explore(EXPLORE_LIST_TYPES[feed], count=count, after=after)

    async def explore_top_gainers(self, *, count: Optional[int], after: Optional[str]) -> Any:
        return await self._explore("top_gainers", count=count, after=after)

    async def explore_top_volume_24h(self, *, count: Optional[int], after: Optional[str]) -> Any:
        return await self._explore("top_volume_24h", count=count, after=after)

    async def explore_most_valuable(self, *, count: Optional[int], after: Optional[str]) -> Any:
        return await self._explore("most_valuable", count=count, after=after)

    async def explore_new(self, *, count: Optional[int], after: Optional[str]) -> Any:
        return await self._explore("new", count=count, after=after)

    async def explore_last_traded(self, *, count: Optional[int], after: Optional[str]) -> Any:
        return await self._explore("last_traded", count=count, after=after)

    async def explore_last_traded_unique(
        self, *, count: Optional[int], after: Optional[str]
    ) -> Any:
        return await self._explore("last_traded_unique", count=count, after=after)

    # ---- writes ----

    async def create_coin(
        self,
        identity: SigningIdentity,
        *,
        name: str,
        symbol: str,
        uri: str,
        payout_recipient: str,
        platform_referrer: Optional[str],
        chain_id: int,
        currency: str,
        gas_multiplier: int,
    ) -> Any:
        """
        Deploy a new coin.

        The platform returns the factory calls for the deployment; each is
        signed and submitted in order and the last receipt is reported along
        with the predicted coin address.
        """
        response = await self.api.create_content_calldata(
            {
                "creator": identity.address,
                "name": name,
                "symbol": symbol,
                "metadata": {"type": "RAW_URI", "uri": uri},
                "currency": currency,
                "chainId": chain_id,
                "payoutRecipient": payout_recipient,
                "platformReferrer": platform_referrer,
            }
        )
        calls = response.get("calls") if isinstance(response, dict) else None
        if not isinstance(calls, list) or not calls:
            raise ZoraApiError("Create response did not include deployment calls.")

        receipt: Dict[str, Any] = {}
        for call in calls:
            if not isinstance(call, dict) or not call.get("to") or not call.get("data"):
                raise ZoraApiError("Create response contained a malformed call.")
            receipt = await self.chain.send_call(
                identity,
                to=call["to"],
                data=call["data"],
                value=int(call.get("value") or 0),
                gas_multiplier=gas_multiplier,
            )
        result = _tx_summary(receipt)
        result["address"] = response.get("predictedCoinAddress")
        return result

    async def update_coin_uri(self, identity: SigningIdentity, *, coin: str, new_uri: str) -> Any:
        receipt = await self.chain.call_contract(identity, coin, COIN_ABI, "setContractURI", [new_uri])
        return _tx_summary(receipt)

    async def update_payout_recipient(
        self, identity: SigningIdentity, *, coin: str, new_payout_recipient: str
    ) -> Any:
        recipient = to_checksum(new_payout_recipient, field="newPayoutRecipient")
        receipt = await self.chain.call_contract(identity, coin, COIN_ABI, "setPayoutRecipient", [recipient])
        return _tx_summary(receipt)

    async def trade_coin(
        self,
        identity: SigningIdentity,
        *,
        sell: TradeLeg,
        buy: TradeLeg,
        amount_in: int,
        slippage: float,
        sender: str,
        recipient: str,
        chain_id: int,
    ) -> Any:
        """Quote a swap through the platform router, then sign and submit it.

        When the quote asks for Permit2 permits (token sells), each one is
        signed and the quote is requested again with the signatures so the
        returned call can pull the sold token.
        """
        request = {
            "type": "exactIn",
            "chainId": chain_id,
            "tokenIn": sell.to_wire(),
            "tokenOut": buy.to_wire(),
            "amountIn": str(amount_in),
            "slippage": slippage,
            "sender": sender,
            "recipient": recipient,
        }
        quote = await self.api.fetch_trade_quote(request)
        permits = quote.get("permits") if isinstance(quote, dict) else None
        if permits:
            signatures = [sign_permit(identity, entry, chain_id) for entry in permits]
            logger.info("signed %d permit(s) for trade quote", len(signatures))
            quote = await self.api.fetch_trade_quote({**request, "signatures": signatures})
        call = quote.get("call") if isinstance(quote, dict) else None
        if not isinstance(call, dict) or not call.get("target") or not call.get("data"):
            raise ZoraApiError("Quote response did not include a trade call.")
        logger.info(
            "submitting trade sell=%s buy=%s amount_in=%s", sell.kind.value, buy.kind.value, amount_in
        )
        return await self.chain.send_call(
            identity,
            to=call["target"],
            data=call["data"],
            value=int(call.get("value") or 0),
        )


def build_platform(config: ZoraConfig, context: EnvironmentContext) -> ZoraCoinPlatform:
    """Wire the concrete platform from configuration and the environment context."""
    api = ZoraApiClient(config)
    chain = ChainClient(context.rpc_url, context.chain_id, timeout=config.timeout)
    return ZoraCoinPlatform(api, chain)
