"""
Data models for the LuckyDraw SDK.
"""
from enum import IntEnum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from .utils import b64encode_str


class ActorMethod(IntEnum):
    """Method numbers exported by the lucky draw actor."""
    CONSTRUCTOR = 1
    ADD_CANDIDATES = 2
    SET_READY = 3
    LUCKY_DRAW = 4
    READ_CURRENT_STATE = 5


class InitActorMethod(IntEnum):
    """Method numbers of the builtin Init actor used for deployment."""
    EXEC = 2


class EncodedEnvelope(BaseModel):
    """CBOR-encoded method parameters"""
    model_config = ConfigDict(frozen=True)

    data: bytes

    @property
    def base64(self) -> str:
        """Text rendering placed in a message's Params field"""
        return b64encode_str(self.data)


class MessageDescriptor(BaseModel):
    """Unsigned call descriptor handed to the wallet"""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    to: str = Field(..., alias="To")
    from_address: str = Field(..., alias="From")
    value: str = Field("0", alias="Value")
    method: int = Field(..., alias="Method")
    params: str = Field("", alias="Params")

    def to_lotus(self) -> Dict[str, Any]:
        """JSON shape expected by the Lotus API"""
        return self.model_dump(by_alias=True)


class CallReceipt(BaseModel):
    """Execution receipt of a confirmed message"""
    model_config = ConfigDict(populate_by_name=True)

    exit_code: int = Field(..., alias="ExitCode")
    return_data: Optional[str] = Field(None, alias="Return")
    gas_used: int = Field(0, alias="GasUsed")
    message_cid: Optional[str] = None
    height: Optional[int] = None

    @property
    def ok(self) -> bool:
        return self.exit_code == 0

    @classmethod
    def from_lookup(cls, lookup: Dict[str, Any]) -> "CallReceipt":
        """
        Build a receipt from a Lotus ``StateWaitMsg`` result.

        Args:
            lookup: The ``MsgLookup`` JSON object

        Returns:
            CallReceipt instance
        """
        receipt = dict(lookup["Receipt"])
        message = lookup.get("Message") or {}
        if isinstance(message, dict):
            receipt["message_cid"] = message.get("/")
        receipt["height"] = lookup.get("Height")
        return cls.model_validate(receipt)


class DecodedResult(BaseModel):
    """Interpreted outcome of a successful call"""
    method: int
    value: Optional[Any] = None
    receipt: CallReceipt

    @property
    def ok(self) -> bool:
        return True
