"""Minimal live sanity checks for the read-only Zora Coins tools."""

from __future__ import annotations

import asyncio
import os
import sys

REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)

from zora_mcp.__main__ import build_dispatcher  # noqa: E402
from zora_mcp.config import load_config  # noqa: E402

# Override via env to check a different coin or profile.
SAMPLE_COIN = os.getenv("ZORA_SAMPLE_COIN")
SAMPLE_PROFILE = os.getenv("ZORA_SAMPLE_PROFILE", "@zora")


def _text(envelope) -> str:
    marker = " [error]" if envelope.get("isError") else ""
    return envelope["content"][0]["text"] + marker


async def main() -> None:
    config = load_config()
    # Never sign anything from the sanity script.
    config.private_key = None
    dispatcher = build_dispatcher(config)
    try:
        print("Health:", _text(await dispatcher.invoke("health")))
        print("New coins (3):", _text(await dispatcher.invoke("explore_new", {"count": 3})))
        print("Profile:", _text(await dispatcher.invoke("get_profile", {"identifier": SAMPLE_PROFILE})))
        if SAMPLE_COIN:
            print("Coin:", _text(await dispatcher.invoke("get_coin", {"address": SAMPLE_COIN})))
            print(
                "Swaps (first 3):",
                _text(await dispatcher.invoke("get_coin_swaps", {"address": SAMPLE_COIN, "first": 3})),
            )
    finally:
        await dispatcher.platform.aclose()


if __name__ == "__main__":
    asyncio.run(main())
