"""
Pytest fixtures for the LuckyDraw SDK tests.
"""
import asyncio
import base64
from typing import Any, Dict, List, Optional

import cbor2
import pytest

from luckydraw_sdk._rate_limited_log import reset_rate_limits
from luckydraw_sdk.config import NetworkConfig
from luckydraw_sdk.models import CallReceipt, MessageDescriptor
from luckydraw_sdk.workflow import LuckyDrawWorkflow

# Constants for testing
TEST_RPC_URL = "http://127.0.0.1:1234/rpc/v0"
TEST_RPC_TOKEN = "test-token"
TEST_ACTOR = "t01003"
TEST_OWNER = "f1joi27fay5otrjkn6r3ak4fwxyolkifbz3dlcwdi"
TEST_CODE_CID = "bafk2bzacebdn2tibnzokjprdzmbaghmr7grv4esaezer6lnn2wubk4rwmhobc"
TEST_CANDIDATES = [
    "f12zrfpwtuasimdmyuimdravhciaesljapklhd7ea",
    "f13arowvbfjgdy3hqmzujfvknuxn2wts77l5ths3q",
    "f13cp7xurexqvs33h2nh3d5ujzg4mwc4rtrvijw7q",
    "f13tgop5lqasp3dbwxjizzkcol5du6avjqtgrvojy",
    "f14tik37yu7gejv6ifo7r2n4pcaaoyqocd74xv2zq",
    "f15am4vztyfiu3y4yiyhgawrkyz44lsxgvr3dzqmi",
]
TEST_ACTOR_ADDRESS = "f2ceirceirceirceirceirceirceirceirbcteffa"
TEST_DELEGATED = "f410fvov2xk5lvov2xk5lvov2xk5lvov2xk5lc6wbxja"


def cbor_text_return(text: str) -> str:
    """Base64 of a CBOR text string, as the actor returns it."""
    return base64.b64encode(cbor2.dumps(text)).decode("ascii")


def run(coro):
    return asyncio.run(coro)


class FakeWallet:
    """
    In-memory wallet standing in for a Lotus node.

    Receipts are queued per method number; every call is recorded.
    """

    def __init__(self, default_address: str = TEST_OWNER):
        self.default_address = default_address
        self.receipts: Dict[int, List[CallReceipt]] = {}
        self.calls: List[str] = []
        self.descriptors: List[MessageDescriptor] = []
        self.confirmations: List[int] = []
        self.fail_on: Dict[str, Exception] = {}
        self.gate: Optional[asyncio.Event] = None
        self._counter = 0

    def queue(self, method: int, exit_code: int = 0, return_data: Optional[str] = None) -> None:
        self.receipts.setdefault(int(method), []).append(
            CallReceipt(exit_code=exit_code, return_data=return_data, gas_used=1000)
        )

    def _check(self, stage: str) -> None:
        self.calls.append(stage)
        if stage in self.fail_on:
            raise self.fail_on[stage]

    async def get_default_address(self) -> str:
        self._check("get_default_address")
        return self.default_address

    async def create_message(self, descriptor: MessageDescriptor) -> Dict[str, Any]:
        self._check("create_message")
        self.descriptors.append(descriptor)
        return {**descriptor.to_lotus(), "Nonce": len(self.descriptors)}

    async def sign_message(self, message: Dict[str, Any]) -> Dict[str, Any]:
        self._check("sign_message")
        return {"Message": message, "Signature": {"Type": 1, "Data": "c2ln"}}

    async def send_signed_message(self, signed: Dict[str, Any]) -> str:
        self._check("send_signed_message")
        self._counter += 1
        return f"bafy2bzacemessage{self._counter}"

    async def wait_for_confirmation(self, message_cid: str, confirmations: int) -> CallReceipt:
        self._check("wait_for_confirmation")
        self.confirmations.append(confirmations)
        if self.gate is not None:
            await self.gate.wait()
        method = self.descriptors[-1].method
        queued = self.receipts.get(method) or [CallReceipt(exit_code=0)]
        return queued.pop(0) if len(queued) > 1 else queued[0]


@pytest.fixture(autouse=True)
def _reset_state():
    """Keep module-level caches from leaking between tests."""
    reset_rate_limits()
    NetworkConfig._networks_cache = None
    yield
    NetworkConfig._networks_cache = None


@pytest.fixture
def fake_wallet():
    return FakeWallet()


@pytest.fixture
def workflow(fake_wallet):
    """Workflow wired to the fake wallet, with no grace delay."""
    return LuckyDrawWorkflow(wallet_factory=lambda url, token: fake_wallet, grace_delay=0)


@pytest.fixture
def ready_workflow(workflow):
    """Workflow that has completed Setup."""
    outcome = run(workflow.setup(TEST_ACTOR, TEST_RPC_URL, TEST_RPC_TOKEN))
    assert outcome.ok, outcome.message
    return workflow
