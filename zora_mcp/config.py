"""
Configuration helpers for the Zora Coins MCP server.

This module centralizes API base URL selection, API key loading, chain and RPC
selection, the optional signing key, timeouts and logging settings. No secrets
are stored in the repository; keys are read from the environment or a local
file if present.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from zora_mcp.errors import StartupError

SERVER_NAME = "zora-coins-mcp"

# Default connection settings
DEFAULT_API_BASE_URL = "https://api-sdk.zora.engineering"
BASE_MAINNET_CHAIN_ID = 8453
DEFAULT_RPC_URL = "https://mainnet.base.org"
DEFAULT_TIMEOUT = 10.0

# API key handling
API_KEY_ENV_VAR = "ZORA_API_KEY"
API_KEY_FILE_ENV_VAR = "ZORA_API_KEY_FILE"
DEFAULT_API_KEY_FILE = "apikey.txt"
PRIVATE_KEY_ENV_VAR = "PRIVATE_KEY"

# Tool limits
MAX_PAGE_SIZE = 100
DEFAULT_GAS_MULTIPLIER = 120
DEFAULT_SLIPPAGE = 0.05

TRANSPORTS = ("stdio", "http")


def _load_timeout() -> float:
    raw_timeout = os.getenv("ZORA_HTTP_TIMEOUT")
    if raw_timeout:
        try:
            return float(raw_timeout)
        except ValueError:
            return DEFAULT_TIMEOUT
    return DEFAULT_TIMEOUT


def _load_chain_id() -> int:
    raw = os.getenv("CHAIN_ID")
    if raw is None or not raw.strip():
        return BASE_MAINNET_CHAIN_ID
    try:
        chain_id = int(raw.strip())
    except ValueError as exc:
        raise StartupError(f"CHAIN_ID must be an integer, got {raw!r}") from exc
    if chain_id <= 0:
        raise StartupError(f"CHAIN_ID must be positive, got {chain_id}")
    return chain_id


def _load_port() -> int:
    raw = os.getenv("ZORA_MCP_PORT", "8000")
    try:
        return int(raw)
    except ValueError as exc:
        raise StartupError(f"ZORA_MCP_PORT must be an integer, got {raw!r}") from exc


def load_api_key() -> Optional[str]:
    """
    Load the Zora API key from environment or a local file.

    Returns:
        The API key string if available, otherwise None. The key is never logged
        or returned to callers.
    """
    env_key = os.getenv(API_KEY_ENV_VAR)
    if env_key:
        return env_key.strip()

    key_path = os.getenv(API_KEY_FILE_ENV_VAR, DEFAULT_API_KEY_FILE)
    if key_path:
        path = Path(key_path)
        if path.is_file():
            return path.read_text(encoding="utf-8").strip() or None

    return None


def load_private_key() -> Optional[str]:
    """Return the signing key with a 0x prefix, or None when unset."""
    raw = (os.getenv(PRIVATE_KEY_ENV_VAR) or "").strip()
    if not raw:
        return None
    return raw if raw.startswith("0x") else f"0x{raw}"


@dataclass(slots=True)
class ZoraConfig:
    """Runtime configuration for Zora API and chain access."""

    api_base_url: str = DEFAULT_API_BASE_URL
    api_key: Optional[str] = None
    chain_id: int = BASE_MAINNET_CHAIN_ID
    rpc_url: str = DEFAULT_RPC_URL
    private_key: Optional[str] = None
    timeout: float = DEFAULT_TIMEOUT
    log_level: str = "INFO"
    log_format: str = "json"
    transport: str = "stdio"
    host: str = "127.0.0.1"
    port: int = 8000

    def __repr__(self) -> str:
        # Keep secrets out of logs and tracebacks.
        return (
            f"ZoraConfig(api_base_url={self.api_base_url!r}, chain_id={self.chain_id}, "
            f"rpc_url={self.rpc_url!r}, api_key={'set' if self.api_key else None}, "
            f"private_key={'set' if self.private_key else None}, transport={self.transport!r})"
        )


def load_config() -> ZoraConfig:
    """
    Build a ZoraConfig from the process environment.

    Raises:
        StartupError: if a setting is present but malformed.
    """
    transport = os.getenv("ZORA_MCP_TRANSPORT", "stdio").strip().lower()
    if transport not in TRANSPORTS:
        raise StartupError(f"ZORA_MCP_TRANSPORT must be one of {TRANSPORTS}, got {transport!r}")
    return ZoraConfig(
        api_base_url=os.getenv("ZORA_API_BASE_URL", DEFAULT_API_BASE_URL).rstrip("/"),
        api_key=load_api_key(),
        chain_id=_load_chain_id(),
        rpc_url=os.getenv("BASE_RPC_URL") or DEFAULT_RPC_URL,
        private_key=load_private_key(),
        timeout=_load_timeout(),
        log_level=os.getenv("ZORA_MCP_LOG_LEVEL", "INFO"),
        log_format=os.getenv("ZORA_MCP_LOG_FORMAT", "json"),
        transport=transport,
        host=os.getenv("ZORA_MCP_HOST", "127.0.0.1"),
        port=_load_port(),
    )
