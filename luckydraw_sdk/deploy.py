"""
Deployment of the lucky draw actor through the builtin Init actor.
"""
import logging
from typing import Sequence, Tuple

from .address import Address
from .invoker import ActorCallInvoker, DEFAULT_CONFIRMATIONS
from .models import InitActorMethod
from .params import ExecParams, InitParams
from .receipt import ReceiptInterpreter
from .wallet.provider import WalletProvider

logger = logging.getLogger(__name__)


def build_exec_params(
    code_cid: str,
    owner: Address,
    winners_count: int,
    candidates: Sequence[Address] = ()
) -> ExecParams:
    """
    Wrap the actor constructor parameters into Init actor exec parameters.

    Args:
        code_cid: CID of the installed actor code
        owner: Owner allowed to call add-candidates, ready and draw
        winners_count: Maximum number of winners
        candidates: Initial candidates

    Returns:
        ExecParams ready to encode
    """
    constructor = InitParams(owner=owner, winners_count=winners_count, candidates=tuple(candidates))
    return ExecParams(code_cid=code_cid, constructor_params=constructor.envelope().data)


async def deploy_actor(
    wallet: WalletProvider,
    init_actor: Address,
    caller: Address,
    code_cid: str,
    owner: Address,
    winners_count: int,
    candidates: Sequence[Address] = (),
    confirmations: int = DEFAULT_CONFIRMATIONS
) -> Tuple[Address, Address]:
    """
    Instantiate a lucky draw actor.

    Args:
        wallet: Wallet/RPC collaborator
        init_actor: Init actor address (``f01`` or ``t01``)
        caller: Account paying for the message
        code_cid: CID of the installed actor code
        owner: Owner of the new actor
        winners_count: Maximum number of winners
        candidates: Initial candidates
        confirmations: Confirmation depth to wait for

    Returns:
        ``(id_address, robust_address)`` of the new actor

    Raises:
        TransactionFailed: If the message could not be signed, pushed or confirmed
        ActorCallRejected: If the Init actor rejected the call
    """
    params = build_exec_params(code_cid, owner, winners_count, candidates)
    invoker = ActorCallInvoker(wallet, confirmations=confirmations)
    receipt = await invoker.invoke(init_actor, caller, InitActorMethod.EXEC, params.envelope())
    result = ReceiptInterpreter(network=init_actor.network).interpret(receipt, InitActorMethod.EXEC)
    id_address, robust_address = result.value
    logger.info(f"Created actor {id_address} ({robust_address})")
    return id_address, robust_address
