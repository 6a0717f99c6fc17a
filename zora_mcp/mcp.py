"""
Tool registry and dispatcher for MCP-style tooling.

The registry maps tool names to their input contract and handler; it is built
once at startup and frozen. The dispatcher validates arguments, applies the
credential gate for write tools, runs the handler and wraps every outcome,
success or failure, in the same response envelope.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Iterator, List, Mapping, Optional, Tuple

from zora_mcp.codec import render
from zora_mcp.config import DEFAULT_GAS_MULTIPLIER, DEFAULT_SLIPPAGE, MAX_PAGE_SIZE
from zora_mcp.context import EnvironmentContext
from zora_mcp.errors import (
    CredentialMissingError,
    DuplicateToolError,
    ExternalCallError,
    StartupError,
    ToolError,
    UnknownToolError,
)
from zora_mcp.metrics import MetricsRecorder, default_metrics
from zora_mcp.tools import (
    EXPLORE_FEEDS,
    create_coin,
    get_coin,
    get_coin_comments,
    get_coin_holders,
    get_coin_swaps,
    get_coins,
    get_profile,
    get_profile_balances,
    get_profile_coins,
    health,
    make_explore_handler,
    plan_trade,
    trade_coin,
    update_coin_uri,
    update_payout_recipient,
)
from zora_mcp.tools.validators import (
    FieldSpec,
    contract_to_schema,
    cursor_field,
    page_size_field,
    validate_args,
)
from zora_mcp.zora_api.chain import ChainError
from zora_mcp.zora_api.client import ZoraApiError
from zora_mcp.zora_api.platform import DEFAULT_DEPLOY_CURRENCY, DEPLOY_CURRENCIES

logger = logging.getLogger(__name__)

ToolHandler = Callable[..., Awaitable[Any]]
PrepareHook = Callable[[Dict[str, Any]], Dict[str, Any]]


@dataclass(frozen=True, slots=True)
class ToolDefinition:
    name: str
    title: str
    description: str
    fields: Tuple[FieldSpec, ...]
    handler: ToolHandler
    mutating: bool = False
    prepare: Optional[PrepareHook] = None

    @property
    def input_schema(self) -> Dict[str, Any]:
        return contract_to_schema(self.fields)


class ToolRegistry:
    """Ordered, write-once mapping of tool name to definition."""

    def __init__(self) -> None:
        self._tools: Dict[str, ToolDefinition] = {}
        self._frozen = False

    def register(self, definition: ToolDefinition) -> None:
        if self._frozen:
            raise StartupError(f"Cannot register {definition.name!r}: registry is frozen")
        if definition.name in self._tools:
            raise DuplicateToolError(f"Tool {definition.name!r} is already registered")
        self._tools[definition.name] = definition

    def freeze(self) -> None:
        self._frozen = True

    def lookup(self, name: str) -> Optional[ToolDefinition]:
        return self._tools.get(name)

    def names(self) -> List[str]:
        return list(self._tools)

    def __iter__(self) -> Iterator[ToolDefinition]:
        return iter(self._tools.values())

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools


# ---- input contracts ----

CHAIN_ID = FieldSpec("chainId", "integer", minimum=1, description="Chain id (defaults to the configured chain)")
COIN_ADDRESS = FieldSpec(
    "address", "string", required=True, min_length=1, strip=True, description="Coin contract address"
)
IDENTIFIER = FieldSpec(
    "identifier",
    "string",
    required=True,
    min_length=1,
    strip=True,
    description="Wallet address or @handle",
)
PAGE_SIZE = page_size_field(maximum=MAX_PAGE_SIZE)
AFTER = cursor_field()
LEG_TYPES = ("eth", "erc20")


def _required_string(name: str, description: str = "") -> FieldSpec:
    return FieldSpec(name, "string", required=True, min_length=1, description=description)


def _optional_string(name: str, description: str = "") -> FieldSpec:
    return FieldSpec(name, "string", description=description)


COIN_PAGE_FIELDS = (COIN_ADDRESS, CHAIN_ID, AFTER, PAGE_SIZE)

CREATE_COIN_FIELDS = (
    _required_string("name", "Coin name"),
    _required_string("symbol", "Ticker symbol"),
    _required_string("uri", "Metadata URI (ipfs:// or https://)"),
    _required_string("payoutRecipient", "Address receiving creator earnings"),
    _optional_string("platformReferrer", "Platform referrer address"),
    CHAIN_ID,
    FieldSpec(
        "currency",
        "string",
        enum=DEPLOY_CURRENCIES,
        default=DEFAULT_DEPLOY_CURRENCY,
        description="Backing currency of the coin's liquidity pool",
    ),
    FieldSpec(
        "gasMultiplier",
        "integer",
        minimum=50,
        maximum=500,
        default=DEFAULT_GAS_MULTIPLIER,
        description="Percentage applied to the gas estimate",
    ),
)

TRADE_COIN_FIELDS = (
    FieldSpec("sellType", "string", required=True, enum=LEG_TYPES, description="Asset being sold"),
    _optional_string("sellAddress", "Token address; required when sellType is erc20"),
    FieldSpec(
        "sellDecimals",
        "integer",
        minimum=0,
        maximum=36,
        description="Decimals of the sold token; defaults to 18, set it for tokens with other precisions",
    ),
    FieldSpec("buyType", "string", required=True, enum=LEG_TYPES, description="Asset being bought"),
    _optional_string("buyAddress", "Token address; required when buyType is erc20"),
    _required_string("amount", "Human-readable amount to sell, e.g. '0.001'"),
    FieldSpec(
        "slippage",
        "number",
        minimum=0,
        maximum=0.99,
        default=DEFAULT_SLIPPAGE,
        description="Maximum slippage as a fraction",
    ),
    _optional_string("recipient", "Recipient of the bought asset (default: signer)"),
    _optional_string("sender", "Sender of the sold asset (default: signer)"),
)


def _query_tools() -> List[ToolDefinition]:
    return [
        ToolDefinition(
            name="get_coin",
            title="Get coin details",
            description="Fetch metadata, market data & creator info for a coin.",
            fields=(COIN_ADDRESS, CHAIN_ID),
            handler=get_coin,
        ),
        ToolDefinition(
            name="get_coins",
            title="Get multiple coins",
            description="Batch fetch coins by address and chainId.",
            fields=(
                FieldSpec(
                    "coins",
                    "array",
                    required=True,
                    min_items=1,
                    items=FieldSpec(
                        "coin",
                        "object",
                        properties=(_required_string("collectionAddress"), CHAIN_ID),
                    ),
                ),
            ),
            handler=get_coins,
        ),
        ToolDefinition(
            name="get_coin_holders",
            title="Get coin holders",
            description="List holders of a coin with balances and profile data.",
            fields=COIN_PAGE_FIELDS,
            handler=get_coin_holders,
        ),
        ToolDefinition(
            name="get_coin_swaps",
            title="Get coin swaps",
            description="Fetch recent buy/sell swap activity for a coin.",
            fields=(COIN_ADDRESS, CHAIN_ID, AFTER, page_size_field("first", maximum=MAX_PAGE_SIZE)),
            handler=get_coin_swaps,
        ),
        ToolDefinition(
            name="get_coin_comments",
            title="Get coin comments",
            description="Fetch comments associated with a coin (paginated).",
            fields=COIN_PAGE_FIELDS,
            handler=get_coin_comments,
        ),
        ToolDefinition(
            name="get_profile",
            title="Get profile",
            description="Fetch profile for a wallet or @handle.",
            fields=(IDENTIFIER,),
            handler=get_profile,
        ),
        ToolDefinition(
            name="get_profile_coins",
            title="Get profile-created coins",
            description="List coins created by a profile.",
            fields=(
                IDENTIFIER,
                PAGE_SIZE,
                AFTER,
                FieldSpec("chainIds", "array", items=FieldSpec("chainId", "integer", minimum=1)),
                FieldSpec("platformReferrerAddress", "array", items=FieldSpec("address", "string")),
            ),
            handler=get_profile_coins,
        ),
        ToolDefinition(
            name="get_profile_balances",
            title="Get profile balances",
            description="List coin balances for a wallet or handle.",
            fields=(IDENTIFIER, PAGE_SIZE, AFTER),
            handler=get_profile_balances,
        ),
    ]


def _explore_tools() -> List[ToolDefinition]:
    return [
        ToolDefinition(
            name=feed.name,
            title=feed.title,
            description=feed.description,
            fields=(PAGE_SIZE, AFTER),
            handler=make_explore_handler(feed),
        )
        for feed in EXPLORE_FEEDS
    ]


def _write_tools() -> List[ToolDefinition]:
    return [
        ToolDefinition(
            name="create_coin",
            title="Create a new coin",
            description="Deploy a new Zora coin. Requires PRIVATE_KEY.",
            fields=CREATE_COIN_FIELDS,
            handler=create_coin,
            mutating=True,
        ),
        ToolDefinition(
            name="update_coin_uri",
            title="Update coin metadata URI",
            description="Update the token metadata URI for an existing coin. Requires owner wallet.",
            fields=(_required_string("coin", "Coin address"), _required_string("newURI", "New metadata URI")),
            handler=update_coin_uri,
            mutating=True,
        ),
        ToolDefinition(
            name="update_payout_recipient",
            title="Update payout recipient",
            description="Change the payout recipient address (creator earnings). Requires owner wallet.",
            fields=(
                _required_string("coin", "Coin address"),
                _required_string("newPayoutRecipient", "New payout recipient address"),
            ),
            handler=update_payout_recipient,
            mutating=True,
        ),
        ToolDefinition(
            name="trade_coin",
            title="Trade coin",
            description="Swap ETH or ERC20 for a coin (or back). Requires PRIVATE_KEY.",
            fields=TRADE_COIN_FIELDS,
            handler=trade_coin,
            mutating=True,
            prepare=plan_trade,
        ),
    ]


def build_registry() -> ToolRegistry:
    """Register all tools in listing order and freeze the registry."""
    registry = ToolRegistry()
    registry.register(
        ToolDefinition(
            name="health",
            title="Zora Coins server health",
            description="Returns server and environment diagnostics (API key present, wallet, RPC, chain).",
            fields=(),
            handler=health,
        )
    )
    for definition in [*_query_tools(), *_explore_tools(), *_write_tools()]:
        registry.register(definition)
    registry.freeze()
    return registry


def list_tools(registry: ToolRegistry) -> List[Dict[str, Any]]:
    """Return the tool listing exposed to MCP clients."""
    return [
        {
            "name": tool.name,
            "title": tool.title,
            "description": tool.description,
            "inputSchema": tool.input_schema,
        }
        for tool in registry
    ]


def success_envelope(result: Any) -> Dict[str, Any]:
    return {"content": [{"type": "text", "text": render(result)}]}


def error_envelope(error: ToolError) -> Dict[str, Any]:
    return {
        "content": [{"type": "text", "text": render({"error": error.to_dict()})}],
        "isError": True,
    }


class Dispatcher:
    """Validate, gate, run and wrap tool calls."""

    def __init__(
        self,
        registry: ToolRegistry,
        context: EnvironmentContext,
        platform: Any,
        *,
        metrics: MetricsRecorder = default_metrics,
    ) -> None:
        self.registry = registry
        self.context = context
        self.platform = platform
        self.metrics = metrics

    def list_tools(self) -> List[Dict[str, Any]]:
        return list_tools(self.registry)

    def _prepare(self, name: str, raw_args: Optional[Mapping[str, Any]]) -> Tuple[ToolDefinition, Dict[str, Any]]:
        tool = self.registry.lookup(name)
        if tool is None:
            raise UnknownToolError(name)
        args = validate_args(tool.fields, raw_args)
        if tool.prepare is not None:
            args = tool.prepare(args)
        if tool.mutating and self.context.signing_identity is None:
            raise CredentialMissingError(name)
        return tool, args

    async def invoke(self, name: str, raw_args: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        """
        Run one tool call and return the response envelope.

        Validation and the credential gate are purely local; the handler (and
        therefore any external call) only runs once both have passed.
        """
        start = time.monotonic()
        try:
            tool, args = self._prepare(name, raw_args)
            try:
                result = await tool.handler(args, context=self.context, platform=self.platform)
            except ToolError:
                raise
            except (ZoraApiError, ChainError) as exc:
                raise ExternalCallError(str(exc), source=type(exc).__name__) from exc
            except Exception as exc:
                logger.exception("Unexpected error in tool %s", name)
                raise ExternalCallError(str(exc) or type(exc).__name__, source=type(exc).__name__) from exc
        except ToolError as error:
            self._log_outcome(name, start, error)
            return error_envelope(error)

        self._log_outcome(name, start, None)
        return success_envelope(result)

    def _log_outcome(self, name: str, start: float, error: Optional[ToolError]) -> None:
        duration_ms = (time.monotonic() - start) * 1000
        if error is not None:
            logger.warning(
                "tool=%s outcome=error error=%s duration_ms=%.2f",
                name,
                error.code,
                duration_ms,
                extra={"tool": name, "error": error.code, "outcome": "error"},
            )
            self.metrics.record_tool(name, success=False, error_code=error.code, duration_ms=duration_ms)
        else:
            logger.info(
                "tool=%s outcome=success duration_ms=%.2f",
                name,
                duration_ms,
                extra={"tool": name, "outcome": "success"},
            )
            self.metrics.record_tool(name, success=True, duration_ms=duration_ms)
