"""
Tests for receipt interpretation.
"""
import base64

import cbor2
import pytest

from luckydraw_sdk.address import validate
from luckydraw_sdk.exceptions import ActorCallRejected, EnvelopeError
from luckydraw_sdk.models import ActorMethod, CallReceipt, InitActorMethod
from luckydraw_sdk.receipt import (
    ReceiptInterpreter, decode_exec_return, decode_return_text, trim_enclosing
)
from conftest import TEST_ACTOR_ADDRESS, TEST_CANDIDATES, cbor_text_return

WINNER = TEST_CANDIDATES[0]


def b64(text: str) -> str:
    return base64.b64encode(text.encode("utf-8")).decode("ascii")


class TestDecodeReturnText:
    """Test rendering of return payloads as text."""

    def test_empty(self):
        assert decode_return_text(None) == ""
        assert decode_return_text("") == ""

    def test_cbor_text_is_unwrapped(self):
        assert decode_return_text(cbor_text_return(WINNER)) == WINNER

    def test_raw_utf8(self):
        assert decode_return_text(b64(f'"{WINNER}"')) == f'"{WINNER}"'

    def test_raw_utf8_starting_like_cbor_text(self):
        # 'f' (0x66) reads as a 6-byte CBOR text header; the rest must not be dropped
        assert decode_return_text(b64(WINNER)) == WINNER

    def test_invalid_base64(self):
        with pytest.raises(EnvelopeError):
            decode_return_text("not base64!")


class TestTrimEnclosing:
    """Test cleanup of the drawn winner text."""

    @pytest.mark.parametrize("text,expected", [
        (f'"{WINNER}"', WINNER),
        (f"'{WINNER}'", WINNER),
        (f"[{WINNER}]", WINNER),
        (f'Winner: "{WINNER}"', WINNER),
        (f'winner: {WINNER}', WINNER),
        (f'  "{WINNER}"\n', WINNER),
        (WINNER, WINNER),
        ('"', '"'),
        ("", ""),
    ])
    def test_trim(self, text, expected):
        assert trim_enclosing(text) == expected

    def test_idempotent(self):
        text = f'Winner: "{WINNER}"'
        assert trim_enclosing(trim_enclosing(text)) == trim_enclosing(text)

    @pytest.mark.parametrize("text", [
        f'"[{WINNER}]"',
        f"('{WINNER}')",
        f'Winner: ["{WINNER}"]',
    ])
    def test_nested_layers_all_stripped(self, text):
        # Every enclosing layer goes, not just the outermost
        assert trim_enclosing(text) == WINNER


class TestReceiptInterpreter:
    """Test classification of receipts per method."""

    def test_rejection_keeps_raw_payload(self):
        receipt = CallReceipt(exit_code=33, return_data="AAEC")
        with pytest.raises(ActorCallRejected) as exc_info:
            ReceiptInterpreter().interpret(receipt, ActorMethod.SET_READY)
        assert exc_info.value.exit_code == 33
        assert exc_info.value.raw_return == "AAEC"
        assert str(exc_info.value) == "Actor call rejected with exit code 33: AAEC"

    def test_rejection_without_payload(self):
        with pytest.raises(ActorCallRejected, match="exit code 18$"):
            ReceiptInterpreter().interpret(CallReceipt(exit_code=18), ActorMethod.LUCKY_DRAW)

    def test_no_return_methods(self):
        result = ReceiptInterpreter().interpret(CallReceipt(exit_code=0), ActorMethod.SET_READY)
        assert result.ok
        assert result.value is None
        assert result.method == 3

    def test_draw_quoted_utf8(self):
        receipt = CallReceipt(exit_code=0, return_data=b64(f'"{WINNER}"'))
        assert ReceiptInterpreter().interpret(receipt, ActorMethod.LUCKY_DRAW).value == WINNER

    def test_draw_cbor_text(self):
        receipt = CallReceipt(exit_code=0, return_data=cbor_text_return(f'Winner: "{WINNER}"'))
        assert ReceiptInterpreter().interpret(receipt, ActorMethod.LUCKY_DRAW).value == WINNER

    def test_read_state_is_untrimmed(self):
        state = 'LuckyDraw { ready: true, candidates: ["f01"] }'
        receipt = CallReceipt(exit_code=0, return_data=cbor_text_return(state))
        assert ReceiptInterpreter().interpret(receipt, ActorMethod.READ_CURRENT_STATE).value == state

    def test_exec_return(self):
        id_address = validate("t01005")
        robust = validate("t" + TEST_ACTOR_ADDRESS[1:])
        payload = base64.b64encode(cbor2.dumps([id_address.to_bytes(), robust.to_bytes()])).decode("ascii")

        result = ReceiptInterpreter(network="t").interpret(
            CallReceipt(exit_code=0, return_data=payload), InitActorMethod.EXEC
        )
        assert result.value == (id_address, robust)

    def test_exec_number_alone_is_not_exec(self):
        """Method 2 on the lucky draw actor is add_candidates, which returns nothing"""
        payload = base64.b64encode(cbor2.dumps([b"\x00\x01", b"\x00\x02"])).decode("ascii")
        result = ReceiptInterpreter().interpret(
            CallReceipt(exit_code=0, return_data=payload), ActorMethod.ADD_CANDIDATES
        )
        assert result.value is None


@pytest.mark.parametrize("value", [
    [b"\x00\x01"],
    ["t01005", "t2abc"],
    {"id": b"\x00\x01"},
])
def test_decode_exec_return_invalid(value):
    payload = base64.b64encode(cbor2.dumps(value)).decode("ascii")
    with pytest.raises(EnvelopeError, match="pair of addresses"):
        decode_exec_return(payload)
