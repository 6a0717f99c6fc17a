"""Clients for the Zora coin-platform API and the chain RPC."""

from .chain import ChainClient, ChainError
from .client import (
    ApiUnreachableError,
    NotFoundError,
    RateLimitedError,
    UnauthorizedError,
    ZoraApiClient,
    ZoraApiError,
)
from .platform import CoinPlatform, LegKind, TradeLeg, ZoraCoinPlatform, build_platform

__all__ = [
    "ChainClient",
    "ChainError",
    "ZoraApiClient",
    "ZoraApiError",
    "UnauthorizedError",
    "NotFoundError",
    "RateLimitedError",
    "ApiUnreachableError",
    "CoinPlatform",
    "ZoraCoinPlatform",
    "LegKind",
    "TradeLeg",
    "build_platform",
]
