"""
Thin HTTP client for the Zora coin-platform SDK API.

Query endpoints work without an API key (the platform applies stricter rate
limits); when a key is configured it is sent on every request. Errors are
mapped to internal exceptions that the dispatcher turns into safe,
user-facing messages.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

import httpx

from zora_mcp.config import ZoraConfig

logger = logging.getLogger(__name__)

API_KEY_HEADER = "api-key"


class ZoraApiError(Exception):
    """Base exception for Zora API errors."""

    def __init__(
        self,
        message: str,
        *,
        code: Optional[str] = None,
        status_code: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.status_code = status_code


class UnauthorizedError(ZoraApiError):
    """Raised when the API rejects the request due to a missing or bad key."""


class NotFoundError(ZoraApiError):
    """Raised when the requested coin or profile does not exist."""


class RateLimitedError(ZoraApiError):
    """Raised when the API throttles the caller."""


class ApiUnreachableError(ZoraApiError):
    """Raised when the API cannot be reached."""


def _drop_none(params: Dict[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in params.items() if value is not None}


class ZoraApiClient:
    """Async client for the subset of the Zora SDK API used by the tools."""

    def __init__(
        self,
        config: ZoraConfig,
        *,
        async_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.config = config
        self._client: Optional[httpx.AsyncClient] = async_client
        self._owns_client = async_client is None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.config.api_base_url, timeout=self.config.timeout
            )
            self._owns_client = True
        return self._client

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    def _build_headers(self) -> Dict[str, str]:
        headers: Dict[str, str] = {"Accept": "application/json"}
        if self.config.api_key:
            headers[API_KEY_HEADER] = self.config.api_key
        return headers

    def _map_error(self, status_code: int, data: Any) -> ZoraApiError:
        code: Optional[str] = None
        message: Optional[str] = None
        if isinstance(data, dict):
            raw_code = data.get("code") or data.get("error")
            if isinstance(raw_code, (str, int)):
                code = str(raw_code)
            raw_message = data.get("message") or data.get("error")
            if isinstance(raw_message, str):
                message = raw_message

        if status_code in {401, 403}:
            return UnauthorizedError(
                message or "Unauthorized or API key required.",
                code=code,
                status_code=status_code,
            )
        if status_code == 404:
            return NotFoundError(message or "Resource not found.", code=code, status_code=status_code)
        if status_code == 429:
            return RateLimitedError(
                "Zora API rate limit exceeded; configure ZORA_API_KEY for higher limits.",
                code=code,
                status_code=status_code,
            )
        return ZoraApiError(
            message or f"Zora API error (HTTP {status_code}).", code=code, status_code=status_code
        )

    def _process_response(self, response: httpx.Response) -> Any:
        try:
            data: Any = response.json()
        except ValueError:
            data = None

        if response.status_code >= 400:
            raise self._map_error(response.status_code, data)

        if data is None:
            raise ZoraApiError("Unexpected response from API.", status_code=response.status_code)
        return data

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json_body: Optional[Dict[str, Any]] = None,
    ) -> Any:
        client = await self._get_client()
        try:
            response = await client.request(
                method,
                path,
                params=_drop_none(params) if params else None,
                json=json_body,
                headers=self._build_headers(),
            )
        except httpx.TimeoutException as exc:
            logger.warning("Zora API timed out for path %s", path)
            raise ApiUnreachableError("Zora API request timed out") from exc
        except httpx.RequestError as exc:
            logger.warning("Zora API unreachable for path %s", path)
            raise ApiUnreachableError("Zora API unreachable") from exc
        return self._process_response(response)

    async def fetch_coin(self, address: str, *, chain: int) -> Dict[str, Any]:
        """Retrieve metadata, market data and creator info for one coin."""
        return await self._request("GET", "/coin", params={"address": address, "chain": chain})

    async def fetch_coins(self, coins: Sequence[Dict[str, Any]]) -> Dict[str, Any]:
        return await self._request("POST", "/coins", json_body={"coins": list(coins)})

    async def fetch_coin_holders(
        self,
        address: str,
        *,
        chain_id: int,
        after: Optional[str] = None,
        count: Optional[int] = None,
    ) -> Dict[str, Any]:
        params = {"address": address, "chainId": chain_id, "after": after, "count": count}
        return await self._request("GET", "/coinHolders", params=params)

    async def fetch_coin_swaps(
        self,
        address: str,
        *,
        chain: int,
        after: Optional[str] = None,
        first: Optional[int] = None,
    ) -> Dict[str, Any]:
        params = {"address": address, "chain": chain, "after": after, "first": first}
        return await self._request("GET", "/coinSwaps", params=params)

    async def fetch_coin_comments(
        self,
        address: str,
        *,
        chain: int,
        after: Optional[str] = None,
        count: Optional[int] = None,
    ) -> Dict[str, Any]:
        params = {"address": address, "chain": chain, "after": after, "count": count}
        return await self._request("GET", "/coinComments", params=params)

    async def fetch_profile(self, identifier: str) -> Dict[str, Any]:
        """Retrieve a profile by wallet address or handle."""
        return await self._request("GET", "/profile", params={"identifier": identifier})

    async def fetch_profile_coins(
        self,
        identifier: str,
        *,
        count: Optional[int] = None,
        after: Optional[str] = None,
        chain_ids: Optional[List[int]] = None,
        platform_referrer_address: Optional[List[str]] = None,
    ) -> Dict[str, Any]:
        params = {
            "identifier": identifier,
            "count": count,
            "after": after,
            "chainIds": chain_ids,
            "platformReferrerAddress": platform_referrer_address,
        }
        return await self._request("GET", "/profileCoins", params=params)

    async def fetch_profile_balances(
        self,
        identifier: str,
        *,
        count: Optional[int] = None,
        after: Optional[str] = None,
    ) -> Dict[str, Any]:
        params = {"identifier": identifier, "count": count, "after": after}
        return await self._request("GET", "/profileBalances", params=params)

    async def fetch_explore(
        self,
        list_type: str,
        *,
        count: Optional[int] = None,
        after: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Retrieve one page of an explore feed (TOP_GAINERS, NEW, ...)."""
        params = {"listType": list_type, "count": count, "after": after}
        return await self._request("GET", "/explore", params=params)

    async def create_content_calldata(self, request: Dict[str, Any]) -> Dict[str, Any]:
        """Ask the platform for the deployment calls of a new coin."""
        return await self._request("POST", "/create/content", json_body=_drop_none(request))

    async def fetch_trade_quote(self, request: Dict[str, Any]) -> Dict[str, Any]:
        """Ask the platform for a routed swap and its calldata."""
        return await self._request("POST", "/quote", json_body=_drop_none(request))
