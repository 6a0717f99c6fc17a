"""
Trade tool.

A trade is planned locally before anything leaves the process: the sell leg
is resolved, then the buy leg, then the human-readable amount is normalized
with the sell leg's precision. Only a complete plan is submitted to the
platform, once.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from zora_mcp.config import DEFAULT_SLIPPAGE
from zora_mcp.context import EnvironmentContext
from zora_mcp.errors import ValidationError
from zora_mcp.tools.amounts import normalize_amount
from zora_mcp.tools.write import require_identity
from zora_mcp.zora_api.platform import LegKind, TradeLeg

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class TradePlan:
    sell: TradeLeg
    buy: TradeLeg
    amount_in: int
    slippage: float
    sender: Optional[str] = None
    recipient: Optional[str] = None


def resolve_leg(leg_type: str, address: Optional[str], *, field: str) -> TradeLeg:
    """Build a leg from ``eth``/``erc20`` plus the token address when needed."""
    kind = LegKind(leg_type)
    if kind is LegKind.ETH:
        return TradeLeg(LegKind.ETH)
    token = (address or "").strip()
    if not token:
        raise ValidationError(field, f"is required when {field.replace('Address', 'Type')} is erc20")
    return TradeLeg(LegKind.TOKEN, token)


def plan_trade(args: Dict[str, Any]) -> Dict[str, Any]:
    """
    Resolve both legs and the exact input amount from validated arguments.

    Runs as part of argument validation, so an incomplete leg or bad amount is
    reported as a validation error before any credential check or network call.
    """
    sell = resolve_leg(args["sellType"], args.get("sellAddress"), field="sellAddress")
    buy = resolve_leg(args["buyType"], args.get("buyAddress"), field="buyAddress")
    amount_in = normalize_amount(args["amount"], sell.kind, args.get("sellDecimals"))
    if amount_in <= 0:
        raise ValidationError("amount", "must be greater than zero")

    slippage = args.get("slippage")
    plan = TradePlan(
        sell=sell,
        buy=buy,
        amount_in=amount_in,
        slippage=DEFAULT_SLIPPAGE if slippage is None else float(slippage),
        sender=args.get("sender") or None,
        recipient=args.get("recipient") or None,
    )
    return {**args, "plan": plan}


async def trade_coin(args: Dict[str, Any], *, context: EnvironmentContext, platform) -> Any:
    """Submit a planned trade; sender and recipient default to the signing address."""
    identity = require_identity(context, "trade_coin")
    plan: TradePlan = args["plan"] if "plan" in args else plan_trade(args)["plan"]
    logger.debug(
        "trade planned sell=%s buy=%s amount_in=%s slippage=%s",
        plan.sell.to_wire(),
        plan.buy.to_wire(),
        plan.amount_in,
        plan.slippage,
    )
    return await platform.trade_coin(
        identity,
        sell=plan.sell,
        buy=plan.buy,
        amount_in=plan.amount_in,
        slippage=plan.slippage,
        sender=plan.sender or identity.address,
        recipient=plan.recipient or identity.address,
        chain_id=context.chain_id,
    )
