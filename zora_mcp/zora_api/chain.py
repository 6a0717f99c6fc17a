"""
Blockchain client: signs and submits transactions to the configured RPC.

Transaction signing is delegated to eth-account; this module only fills in the
nonce, gas and chain fields, submits the raw transaction and waits for the
receipt.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Optional, Sequence

from web3 import AsyncHTTPProvider, AsyncWeb3, Web3
from web3.exceptions import Web3Exception

from zora_mcp.context import SigningIdentity

logger = logging.getLogger(__name__)

DEFAULT_RECEIPT_TIMEOUT = 120.0


class ChainError(Exception):
    """Raised when the RPC rejects, times out, or reverts a transaction."""

    def __init__(self, message: str, *, tx_hash: Optional[str] = None) -> None:
        super().__init__(message)
        self.tx_hash = tx_hash


def to_checksum(address: str, *, field: str = "address") -> str:
    try:
        return Web3.to_checksum_address(address)
    except (ValueError, TypeError) as exc:
        raise ChainError(f"Invalid {field}: {address!r}") from exc


class ChainClient:
    """Async wrapper around web3 for submitting signed transactions."""

    def __init__(
        self,
        rpc_url: str,
        chain_id: int,
        *,
        web3: Optional[Any] = None,
        timeout: float = 10.0,
        receipt_timeout: float = DEFAULT_RECEIPT_TIMEOUT,
    ) -> None:
        self.rpc_url = rpc_url
        self.chain_id = chain_id
        self.receipt_timeout = receipt_timeout
        self._w3 = web3 or AsyncWeb3(
            AsyncHTTPProvider(rpc_url, request_kwargs={"timeout": timeout})
        )

    async def aclose(self) -> None:
        """Release the provider's cached HTTP sessions."""
        provider = getattr(self._w3, "provider", None)
        if provider is not None and hasattr(provider, "disconnect"):
            await provider.disconnect()

    async def send_call(
        self,
        identity: SigningIdentity,
        *,
        to: str,
        data: bytes | str,
        value: int = 0,
        gas_multiplier: int = 100,
    ) -> Dict[str, Any]:
        """
        Sign and submit a call from the signing identity, then wait for its receipt.

        Args:
            identity: configured signer.
            to: target contract address.
            data: ABI-encoded calldata.
            value: native coin amount in wei.
            gas_multiplier: percentage applied to the node's gas estimate.

        Returns:
            The transaction receipt as a mapping.
        """
        eth = self._w3.eth
        tx: Dict[str, Any] = {
            "from": identity.address,
            "to": to_checksum(to, field="to"),
            "data": data,
            "value": int(value),
            "chainId": self.chain_id,
        }
        try:
            tx["nonce"] = await eth.get_transaction_count(identity.address, "pending")
            tx["gasPrice"] = await eth.gas_price
            estimate = await eth.estimate_gas(tx)
            tx["gas"] = estimate * gas_multiplier // 100
            signed = identity.signer.sign_transaction(tx)
            tx_hash = await eth.send_raw_transaction(signed.raw_transaction)
        except (Web3Exception, ValueError, OSError, asyncio.TimeoutError) as exc:
            logger.warning("transaction submission failed to=%s error=%s", tx["to"], exc)
            raise ChainError(f"Transaction submission failed: {exc}") from exc

        hash_hex = "0x" + bytes(tx_hash).hex()
        logger.info("transaction submitted hash=%s to=%s", hash_hex, tx["to"])
        try:
            receipt = await eth.wait_for_transaction_receipt(tx_hash, timeout=self.receipt_timeout)
        except (Web3Exception, ValueError, OSError, asyncio.TimeoutError) as exc:
            raise ChainError(f"Waiting for receipt failed: {exc}", tx_hash=hash_hex) from exc

        if receipt.get("status") == 0:
            raise ChainError(f"Transaction {hash_hex} reverted", tx_hash=hash_hex)
        return dict(receipt)

    def encode_call(
        self,
        address: str,
        abi: Sequence[Dict[str, Any]],
        function: str,
        args: Sequence[Any],
    ) -> str:
        """ABI-encode ``function(*args)`` against a minimal inline ABI."""
        contract = self._w3.eth.contract(address=to_checksum(address), abi=list(abi))
        try:
            return contract.encode_abi(function, args=list(args))
        except (Web3Exception, ValueError, TypeError) as exc:
            raise ChainError(f"Cannot encode {function}: {exc}") from exc

    async def call_contract(
        self,
        identity: SigningIdentity,
        address: str,
        abi: Sequence[Dict[str, Any]],
        function: str,
        args: Sequence[Any],
    ) -> Dict[str, Any]:
        """Submit a state-changing contract call and return the receipt."""
        data = self.encode_call(address, abi, function, args)
        return await self.send_call(identity, to=address, data=data)
