"""LLM-facing tool implementations."""

from .diagnostics import health
from .coins import get_coin, get_coins, get_coin_holders, get_coin_swaps, get_coin_comments
from .profiles import get_profile, get_profile_coins, get_profile_balances
from .explore import EXPLORE_FEEDS, make_explore_handler
from .write import create_coin, update_coin_uri, update_payout_recipient
from .trade import plan_trade, trade_coin
from . import validators

__all__ = [
    "health",
    "get_coin",
    "get_coins",
    "get_coin_holders",
    "get_coin_swaps",
    "get_coin_comments",
    "get_profile",
    "get_profile_coins",
    "get_profile_balances",
    "EXPLORE_FEEDS",
    "make_explore_handler",
    "create_coin",
    "update_coin_uri",
    "update_payout_recipient",
    "plan_trade",
    "trade_coin",
    "validators",
]
