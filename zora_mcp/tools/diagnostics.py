"""Diagnostics tool."""

from __future__ import annotations

from typing import Any, Dict

from zora_mcp import __version__
from zora_mcp.config import SERVER_NAME
from zora_mcp.context import EnvironmentContext


async def health(args: Dict[str, Any], *, context: EnvironmentContext, platform=None) -> Dict[str, Any]:
    """
    Report server and environment diagnostics without touching the network.

    The API key and private key are reported only as present/absent.
    """
    return {
        "server": {"name": SERVER_NAME, "version": __version__},
        "apiKeyConfigured": context.api_key_present,
        "rpcUrl": context.rpc_url,
        "chainId": context.chain_id,
        "walletAddress": context.wallet_address,
        "writeToolsEnabled": context.signing_identity is not None,
    }
