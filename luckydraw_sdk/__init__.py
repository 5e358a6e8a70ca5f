"""
LuckyDraw SDK - client-side protocol for calling the FVM lucky draw actor.
"""
from .version import __version__
from .address import Address, validate, validate_many, split_address_list
from .models import (
    ActorMethod, InitActorMethod, EncodedEnvelope, MessageDescriptor,
    CallReceipt, DecodedResult
)
from .params import AddCandidatesParams, InitParams, ExecParams
from .invoker import ActorCallInvoker
from .receipt import ReceiptInterpreter, decode_return_text, trim_enclosing
from .workflow import LuckyDrawWorkflow, WorkflowState, Session, Step, StepOutcome
from .deploy import deploy_actor, build_exec_params
from .config import NetworkConfig
from .wallet import WalletProvider, LotusClient, LotusWalletProvider
from .exceptions import (
    LuckyDrawError, ValidationError, InvalidAddressFormat, EnvelopeError,
    WalletError, TransactionFailed, SigningError, SubmissionError,
    ActorCallRejected, CallInProgressError
)

__all__ = [
    "Address",
    "validate",
    "validate_many",
    "split_address_list",
    "ActorMethod",
    "InitActorMethod",
    "EncodedEnvelope",
    "MessageDescriptor",
    "CallReceipt",
    "DecodedResult",
    "AddCandidatesParams",
    "InitParams",
    "ExecParams",
    "ActorCallInvoker",
    "ReceiptInterpreter",
    "decode_return_text",
    "trim_enclosing",
    "LuckyDrawWorkflow",
    "WorkflowState",
    "Session",
    "Step",
    "StepOutcome",
    "deploy_actor",
    "build_exec_params",
    "NetworkConfig",
    "WalletProvider",
    "LotusClient",
    "LotusWalletProvider",
    "LuckyDrawError",
    "ValidationError",
    "InvalidAddressFormat",
    "EnvelopeError",
    "WalletError",
    "TransactionFailed",
    "SigningError",
    "SubmissionError",
    "ActorCallRejected",
    "CallInProgressError",
    "__version__",
]
