"""Immutable per-process environment shared by every tool handler."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from eth_account import Account
from eth_account.signers.local import LocalAccount

from zora_mcp.config import ZoraConfig
from zora_mcp.errors import StartupError

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SigningIdentity:
    """Key material and derived address used to authorize write calls."""

    address: str
    signer: LocalAccount

    def __repr__(self) -> str:
        return f"SigningIdentity(address={self.address!r})"


@dataclass(frozen=True, slots=True)
class EnvironmentContext:
    chain_id: int
    rpc_url: str
    api_key_present: bool
    signing_identity: Optional[SigningIdentity] = None

    @property
    def wallet_address(self) -> Optional[str]:
        return self.signing_identity.address if self.signing_identity else None


def load_signing_identity(private_key: Optional[str]) -> Optional[SigningIdentity]:
    """
    Derive the signing identity from a hex private key.

    Returns None when no key is configured; raises StartupError when the key
    cannot be parsed so a typo never silently disables write tools.
    """
    if not private_key:
        return None
    try:
        account = Account.from_key(private_key)
    except Exception as exc:  # eth-keys raises its own ValidationError
        raise StartupError("PRIVATE_KEY is not a valid 32-byte hex private key") from exc
    return SigningIdentity(address=account.address, signer=account)


def build_context(config: ZoraConfig) -> EnvironmentContext:
    identity = load_signing_identity(config.private_key)
    context = EnvironmentContext(
        chain_id=config.chain_id,
        rpc_url=config.rpc_url,
        api_key_present=bool(config.api_key),
        signing_identity=identity,
    )
    logger.info(
        "environment ready chain_id=%s api_key=%s write_tools=%s",
        context.chain_id,
        "set" if context.api_key_present else "unset",
        "enabled" if identity else "disabled",
    )
    return context
