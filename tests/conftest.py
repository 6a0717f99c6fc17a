import logging
import os
import sys

import pytest
from eth_account import Account

# Ensure repository root is on sys.path before importing project modules.
repo_root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if repo_root not in sys.path:
    sys.path.insert(0, repo_root)

from zora_mcp.context import EnvironmentContext, load_signing_identity  # noqa: E402
from zora_mcp.mcp import Dispatcher, build_registry  # noqa: E402
from zora_mcp.metrics import default_metrics  # noqa: E402

# Throwaway key used only in tests.
TEST_PRIVATE_KEY = "0x4c0883a69102937d6231471b5dbb6204fe5129617082792ae468d01a3f362318"
TEST_ADDRESS = Account.from_key(TEST_PRIVATE_KEY).address
COIN = "0x1111111111111111111111111111111111111111"
TOKEN = "0x" + "aa" * 20


class FakePlatform:
    """Records every platform call; returns ``result`` or raises ``error``."""

    def __init__(self, result=None, error=None):
        self.calls = []
        self.result = {"ok": True} if result is None else result
        self.error = error

    def __getattr__(self, name):
        if name.startswith("_"):
            raise AttributeError(name)

        async def method(*args, **kwargs):
            self.calls.append((name, args, kwargs))
            if self.error is not None:
                raise self.error
            return self.result

        return method

    def calls_to(self, name):
        return [call for call in self.calls if call[0] == name]


def make_context(*, with_signer: bool, chain_id: int = 8453) -> EnvironmentContext:
    return EnvironmentContext(
        chain_id=chain_id,
        rpc_url="https://rpc.example",
        api_key_present=False,
        signing_identity=load_signing_identity(TEST_PRIVATE_KEY) if with_signer else None,
    )


@pytest.fixture(autouse=True)
def reset_metrics():
    default_metrics.reset()
    yield
    default_metrics.reset()


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def platform():
    return FakePlatform()


@pytest.fixture
def signer_context():
    return make_context(with_signer=True)


@pytest.fixture
def readonly_context():
    return make_context(with_signer=False)


@pytest.fixture
def registry():
    return build_registry()


@pytest.fixture
def dispatcher(registry, signer_context, platform):
    return Dispatcher(registry, signer_context, platform)


@pytest.fixture
def readonly_dispatcher(registry, readonly_context, platform):
    return Dispatcher(registry, readonly_context, platform)
