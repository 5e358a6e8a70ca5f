"""
Tests for the data models.
"""
import pytest
from pydantic import ValidationError as PydanticValidationError

from luckydraw_sdk.models import ActorMethod, CallReceipt, EncodedEnvelope, MessageDescriptor
from conftest import TEST_ACTOR, TEST_OWNER


def test_method_numbers():
    assert ActorMethod.ADD_CANDIDATES == 2
    assert ActorMethod.SET_READY == 3
    assert ActorMethod.LUCKY_DRAW == 4
    assert ActorMethod.READ_CURRENT_STATE == 5


def test_envelope_base64():
    envelope = EncodedEnvelope(data=b"\x81\x80")
    assert envelope.base64 == "gYA="


def test_descriptor_lotus_shape():
    descriptor = MessageDescriptor(to=TEST_ACTOR, from_address=TEST_OWNER, method=3)
    assert descriptor.to_lotus() == {
        "To": TEST_ACTOR,
        "From": TEST_OWNER,
        "Value": "0",
        "Method": 3,
        "Params": "",
    }


def test_descriptor_accepts_aliases():
    descriptor = MessageDescriptor.model_validate(
        {"To": TEST_ACTOR, "From": TEST_OWNER, "Method": 2, "Params": "gYA="}
    )
    assert descriptor.from_address == TEST_OWNER
    assert descriptor.params == "gYA="


def test_descriptor_is_frozen():
    descriptor = MessageDescriptor(to=TEST_ACTOR, from_address=TEST_OWNER, method=3)
    with pytest.raises(PydanticValidationError):
        descriptor.method = 4


def test_receipt_from_lookup():
    lookup = {
        "Message": {"/": "bafy2bzacemessage"},
        "Receipt": {"ExitCode": 0, "Return": "gYA=", "GasUsed": 1234},
        "ReturnDec": None,
        "TipSet": [{"/": "bafy2bzaceblock"}],
        "Height": 4096,
    }
    receipt = CallReceipt.from_lookup(lookup)
    assert receipt.ok
    assert receipt.return_data == "gYA="
    assert receipt.gas_used == 1234
    assert receipt.message_cid == "bafy2bzacemessage"
    assert receipt.height == 4096


def test_receipt_failure():
    receipt = CallReceipt.model_validate({"ExitCode": 33, "Return": None})
    assert not receipt.ok
    assert receipt.return_data is None
