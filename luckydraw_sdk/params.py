"""
Parameter encoders for the lucky draw actor methods.

Every params class serializes to a DAG-CBOR tuple with a fixed field order
and back. Encoding is deterministic: equal inputs give byte-identical
envelopes.
"""
import logging
from dataclasses import dataclass
from typing import Any, List, Sequence, Tuple, Union

import cbor2

from .address import Address, MAINNET_PREFIX
from .exceptions import EnvelopeError
from .models import EncodedEnvelope
from .utils import b64decode_str, bytes_to_cid, cid_to_bytes

logger = logging.getLogger(__name__)

# DAG-CBOR tag for CID links
CID_TAG = 42
MAX_U32 = 2 ** 32 - 1

EnvelopeInput = Union[EncodedEnvelope, bytes, str]


def _require_addresses(field: str, values: Sequence[Any]) -> Tuple[Address, ...]:
    items = tuple(values)
    for item in items:
        if not isinstance(item, Address):
            raise TypeError(
                f"{field} must contain validated Address objects, got {type(item).__name__}"
            )
    return items


def _load(envelope: EnvelopeInput) -> Any:
    """Decode envelope input (model, raw bytes or base64 text) into a CBOR value."""
    if isinstance(envelope, EncodedEnvelope):
        data = envelope.data
    elif isinstance(envelope, (bytes, bytearray)):
        data = bytes(envelope)
    elif isinstance(envelope, str):
        data = b64decode_str(envelope)
    else:
        raise TypeError(f"Cannot decode envelope from {type(envelope).__name__}")

    try:
        return cbor2.loads(data)
    except (cbor2.CBORDecodeError, ValueError) as e:
        raise EnvelopeError(f"Invalid CBOR envelope: {str(e)}")


def _decode_address_list(items: Any, network: str) -> Tuple[Address, ...]:
    if not isinstance(items, list):
        raise EnvelopeError(f"Expected a list of addresses, got {type(items).__name__}")
    out = []
    for raw in items:
        if not isinstance(raw, bytes):
            raise EnvelopeError(f"Expected address bytes, got {type(raw).__name__}")
        out.append(Address.from_bytes(raw, network))
    return tuple(out)


def _envelope(value: Any) -> EncodedEnvelope:
    return EncodedEnvelope(data=cbor2.dumps(value))


@dataclass(frozen=True)
class AddCandidatesParams:
    """
    Parameters of ``add_candidates`` (method 2).

    Wire shape: ``[[address bytes, ...]]``
    """
    addresses: Tuple[Address, ...]

    def __post_init__(self):
        object.__setattr__(self, "addresses", _require_addresses("addresses", self.addresses))

    def to_cbor(self) -> List[Any]:
        return [[a.to_bytes() for a in self.addresses]]

    def envelope(self) -> EncodedEnvelope:
        return _envelope(self.to_cbor())

    @classmethod
    def decode(cls, envelope: EnvelopeInput, network: str = MAINNET_PREFIX) -> "AddCandidatesParams":
        value = _load(envelope)
        if not isinstance(value, list) or len(value) != 1:
            raise EnvelopeError("AddCandidatesParams must be a 1-tuple")
        return cls(addresses=_decode_address_list(value[0], network))


@dataclass(frozen=True)
class InitParams:
    """
    Constructor parameters of the lucky draw actor.

    Wire shape: ``[owner bytes, winners count, [address bytes, ...]]``
    """
    owner: Address
    winners_count: int
    candidates: Tuple[Address, ...] = ()

    def __post_init__(self):
        if not isinstance(self.owner, Address):
            raise TypeError(f"owner must be a validated Address, got {type(self.owner).__name__}")
        if isinstance(self.winners_count, bool) or not isinstance(self.winners_count, int):
            raise TypeError("winners_count must be an integer")
        if not 0 <= self.winners_count <= MAX_U32:
            raise ValueError(f"winners_count must be between 0 and {MAX_U32}, got {self.winners_count}")
        object.__setattr__(self, "candidates", _require_addresses("candidates", self.candidates))

    def to_cbor(self) -> List[Any]:
        return [
            self.owner.to_bytes(),
            self.winners_count,
            [a.to_bytes() for a in self.candidates],
        ]

    def envelope(self) -> EncodedEnvelope:
        return _envelope(self.to_cbor())

    @classmethod
    def decode(cls, envelope: EnvelopeInput, network: str = MAINNET_PREFIX) -> "InitParams":
        value = _load(envelope)
        if not isinstance(value, list) or len(value) != 3:
            raise EnvelopeError("InitParams must be a 3-tuple")
        owner_raw, winners_count, candidates = value
        if not isinstance(owner_raw, bytes):
            raise EnvelopeError("InitParams owner must be address bytes")
        if not isinstance(winners_count, int):
            raise EnvelopeError("InitParams winners count must be an integer")
        return cls(
            owner=Address.from_bytes(owner_raw, network),
            winners_count=winners_count,
            candidates=_decode_address_list(candidates, network),
        )


@dataclass(frozen=True)
class ExecParams:
    """
    Parameters of the Init actor's ``exec`` method, used to instantiate the
    lucky draw actor from installed code.

    Wire shape: ``[CID link, constructor params bytes]``
    """
    code_cid: str
    constructor_params: bytes

    def __post_init__(self):
        if not isinstance(self.constructor_params, (bytes, bytearray)):
            raise TypeError("constructor_params must be bytes")
        object.__setattr__(self, "constructor_params", bytes(self.constructor_params))
        # Canonical text form, so decode(envelope()) compares equal
        object.__setattr__(self, "code_cid", bytes_to_cid(cid_to_bytes(self.code_cid)))

    def to_cbor(self) -> List[Any]:
        link = cbor2.CBORTag(CID_TAG, b"\x00" + cid_to_bytes(self.code_cid))
        return [link, self.constructor_params]

    def envelope(self) -> EncodedEnvelope:
        return _envelope(self.to_cbor())

    @classmethod
    def decode(cls, envelope: EnvelopeInput) -> "ExecParams":
        value = _load(envelope)
        if not isinstance(value, list) or len(value) != 2:
            raise EnvelopeError("ExecParams must be a 2-tuple")
        link, constructor_params = value
        if not isinstance(link, cbor2.CBORTag) or link.tag != CID_TAG:
            raise EnvelopeError("ExecParams code CID must be a CID link")
        if not isinstance(link.value, bytes) or link.value[:1] != b"\x00":
            raise EnvelopeError("ExecParams CID link must be identity-multibase bytes")
        if not isinstance(constructor_params, bytes):
            raise EnvelopeError("ExecParams constructor params must be bytes")
        return cls(code_cid=bytes_to_cid(link.value[1:]), constructor_params=constructor_params)
