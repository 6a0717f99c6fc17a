"""
State-mutating coin tools.

These run only after the dispatcher's credential gate has confirmed a signing
identity; ``require_identity`` repeats the check for direct callers.
"""

from __future__ import annotations

import logging
from typing import Any, Dict

from zora_mcp.config import DEFAULT_GAS_MULTIPLIER
from zora_mcp.context import EnvironmentContext, SigningIdentity
from zora_mcp.errors import CredentialMissingError
from zora_mcp.zora_api.platform import DEFAULT_DEPLOY_CURRENCY

logger = logging.getLogger(__name__)


def require_identity(context: EnvironmentContext, tool: str) -> SigningIdentity:
    if context.signing_identity is None:
        raise CredentialMissingError(tool)
    return context.signing_identity


async def create_coin(args: Dict[str, Any], *, context: EnvironmentContext, platform) -> Any:
    """Deploy a new coin paid out to ``payoutRecipient``."""
    identity = require_identity(context, "create_coin")
    chain_id = args.get("chainId")
    logger.info("creating coin symbol=%s chain_id=%s", args["symbol"], chain_id or context.chain_id)
    return await platform.create_coin(
        identity,
        name=args["name"],
        symbol=args["symbol"],
        uri=args["uri"],
        payout_recipient=args["payoutRecipient"],
        platform_referrer=args.get("platformReferrer"),
        chain_id=context.chain_id if chain_id is None else chain_id,
        currency=args.get("currency") or DEFAULT_DEPLOY_CURRENCY,
        gas_multiplier=args.get("gasMultiplier") or DEFAULT_GAS_MULTIPLIER,
    )


async def update_coin_uri(args: Dict[str, Any], *, context: EnvironmentContext, platform) -> Any:
    identity = require_identity(context, "update_coin_uri")
    return await platform.update_coin_uri(identity, coin=args["coin"], new_uri=args["newURI"])


async def update_payout_recipient(args: Dict[str, Any], *, context: EnvironmentContext, platform) -> Any:
    identity = require_identity(context, "update_payout_recipient")
    return await platform.update_payout_recipient(
        identity, coin=args["coin"], new_payout_recipient=args["newPayoutRecipient"]
    )
