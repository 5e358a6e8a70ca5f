"""
Tests for the ActorCallInvoker.
"""
import pytest

from luckydraw_sdk.address import validate, validate_many
from luckydraw_sdk.exceptions import (
    SigningError, SubmissionError, TransactionFailed, WalletError
)
from luckydraw_sdk.invoker import ActorCallInvoker
from luckydraw_sdk.models import ActorMethod
from luckydraw_sdk.params import AddCandidatesParams
from conftest import TEST_ACTOR, TEST_CANDIDATES, TEST_OWNER, run

ACTOR = validate(TEST_ACTOR)
OWNER = validate(TEST_OWNER)


class TestBuildDescriptor:
    """Test unsigned descriptor construction."""

    def test_with_params(self):
        envelope = AddCandidatesParams(addresses=validate_many(TEST_CANDIDATES[:3])).envelope()
        descriptor = ActorCallInvoker.build_descriptor(ACTOR, OWNER, ActorMethod.ADD_CANDIDATES, envelope)
        assert descriptor.to == TEST_ACTOR
        assert descriptor.from_address == TEST_OWNER
        assert descriptor.value == "0"
        assert descriptor.method == 2
        assert descriptor.params == envelope.base64

    def test_without_params(self):
        descriptor = ActorCallInvoker.build_descriptor(ACTOR, OWNER, ActorMethod.SET_READY)
        assert descriptor.method == 3
        assert descriptor.params == ""
        assert descriptor.value == "0"

    def test_requires_addresses(self):
        with pytest.raises(TypeError):
            ActorCallInvoker.build_descriptor(TEST_ACTOR, OWNER, ActorMethod.SET_READY)


class TestInvoke:
    """Test the prepare/sign/submit/wait sequence."""

    def test_success(self, fake_wallet):
        fake_wallet.queue(ActorMethod.SET_READY, 0)
        invoker = ActorCallInvoker(fake_wallet)

        receipt = run(invoker.invoke(ACTOR, OWNER, ActorMethod.SET_READY))

        assert receipt.exit_code == 0
        assert receipt.message_cid == "bafy2bzacemessage1"
        assert fake_wallet.calls == [
            "create_message", "sign_message", "send_signed_message", "wait_for_confirmation"
        ]
        assert fake_wallet.confirmations == [1]
        assert fake_wallet.descriptors[0].params == ""

    def test_non_zero_exit_is_returned(self, fake_wallet):
        """The invoker hands back failed receipts; classification happens later"""
        fake_wallet.queue(ActorMethod.SET_READY, 33, "AAEC")
        receipt = run(ActorCallInvoker(fake_wallet).invoke(ACTOR, OWNER, ActorMethod.SET_READY))
        assert receipt.exit_code == 33
        assert receipt.return_data == "AAEC"

    def test_custom_confirmations(self, fake_wallet):
        run(ActorCallInvoker(fake_wallet, confirmations=5).invoke(ACTOR, OWNER, ActorMethod.SET_READY))
        assert fake_wallet.confirmations == [5]

    def test_invalid_confirmations(self, fake_wallet):
        with pytest.raises(ValueError, match="at least 1"):
            ActorCallInvoker(fake_wallet, confirmations=0)

    def test_prepare_failure(self, fake_wallet):
        fake_wallet.fail_on["create_message"] = RuntimeError("nonce lookup failed")
        with pytest.raises(TransactionFailed) as exc_info:
            run(ActorCallInvoker(fake_wallet).invoke(ACTOR, OWNER, ActorMethod.SET_READY))
        assert exc_info.value.stage == "prepare"
        assert "nonce lookup failed" in str(exc_info.value)
        assert fake_wallet.calls == ["create_message"]

    def test_sign_failure(self, fake_wallet):
        fake_wallet.fail_on["sign_message"] = RuntimeError("key not found")
        with pytest.raises(SigningError) as exc_info:
            run(ActorCallInvoker(fake_wallet).invoke(ACTOR, OWNER, ActorMethod.SET_READY))
        assert exc_info.value.stage == "sign"
        assert isinstance(exc_info.value, WalletError)
        assert "send_signed_message" not in fake_wallet.calls

    def test_submit_failure(self, fake_wallet):
        fake_wallet.fail_on["send_signed_message"] = RuntimeError("mpool full")
        with pytest.raises(SubmissionError) as exc_info:
            run(ActorCallInvoker(fake_wallet).invoke(ACTOR, OWNER, ActorMethod.SET_READY))
        assert exc_info.value.stage == "submit"
        assert isinstance(exc_info.value.cause, RuntimeError)

    def test_wait_failure_does_not_resubmit(self, fake_wallet):
        fake_wallet.fail_on["wait_for_confirmation"] = TimeoutError("no receipt")
        with pytest.raises(SubmissionError) as exc_info:
            run(ActorCallInvoker(fake_wallet).invoke(ACTOR, OWNER, ActorMethod.SET_READY))
        assert exc_info.value.stage == "wait"
        assert fake_wallet.calls.count("send_signed_message") == 1
