"""
Lucky draw call workflow.

Sequences the four actor calls (setup, add candidates, mark ready, draw)
plus the read-state side query. State values are immutable; every
successful transition produces a new ``WorkflowState`` that is pushed to
subscribers. Failures never move the workflow off its current step.
"""
import asyncio
import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Awaitable, Callable, Iterable, List, Optional, Tuple

from ._rate_limited_log import rate_limited_log
from .address import Address, split_address_list, validate, validate_many
from .config import rpc_timeout_from_env
from .credentials import check_token_permissions
from .exceptions import (
    ActorCallRejected, CallInProgressError, EnvelopeError, LuckyDrawError,
    ValidationError, WalletError
)
from .invoker import ActorCallInvoker, DEFAULT_CONFIRMATIONS
from .models import ActorMethod, DecodedResult
from .params import AddCandidatesParams
from .receipt import ReceiptInterpreter
from .wallet.lotus import LotusClient, LotusWalletProvider, validate_rpc_url
from .wallet.provider import WalletProvider

DEFAULT_GRACE_DELAY = 0.2

WalletFactory = Callable[[str, str], WalletProvider]
Subscriber = Callable[["WorkflowState"], None]


class Step(str, Enum):
    """Wizard steps, in order."""
    SETUP = "Setup"
    COLLECT_CANDIDATES = "CollectCandidates"
    MARK_READY = "MarkReady"
    DRAW = "Draw"


@dataclass(frozen=True)
class WorkflowState:
    """Snapshot of the wizard as shown to the user"""
    step: Step = Step.SETUP
    actor: Optional[str] = None
    owner: Optional[str] = None
    rpc_url: Optional[str] = None
    candidates: Tuple[str, ...] = ()
    winners: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Session:
    """
    Connection context built once Setup succeeds.

    Carries the endpoint, credential, actor and resolved owner together with
    the invoker bound to the wallet, and is passed to every later call.
    """
    actor: Address
    owner: Address
    rpc_url: str
    rpc_token: str = field(repr=False)
    invoker: ActorCallInvoker = field(repr=False, compare=False)
    interpreter: ReceiptInterpreter = field(repr=False, compare=False)


@dataclass(frozen=True)
class StepOutcome:
    """Result of one workflow operation, suitable for display"""
    ok: bool
    message: str
    state: WorkflowState
    value: Optional[Any] = None
    error: Optional[LuckyDrawError] = None


def complete_setup(state: WorkflowState, actor: Address, owner: Address, rpc_url: str) -> WorkflowState:
    return replace(
        state,
        step=Step.COLLECT_CANDIDATES,
        actor=str(actor),
        owner=str(owner),
        rpc_url=rpc_url,
    )


def accept_candidates(state: WorkflowState, candidates: Iterable[Address]) -> WorkflowState:
    return replace(
        state,
        step=Step.MARK_READY,
        candidates=state.candidates + tuple(str(c) for c in candidates),
    )


def mark_ready(state: WorkflowState) -> WorkflowState:
    return replace(state, step=Step.DRAW)


def record_winner(state: WorkflowState, winner: str) -> WorkflowState:
    return replace(state, winners=state.winners + (winner,))


def lotus_wallet_factory(rpc_url: str, rpc_token: str) -> WalletProvider:
    """Default wallet: a Lotus node reached over JSON-RPC."""
    return LotusWalletProvider(LotusClient(rpc_url, token=rpc_token, timeout=rpc_timeout_from_env()))


def describe_error(error: LuckyDrawError) -> str:
    """User-facing text for a failure."""
    if isinstance(error, ActorCallRejected):
        detail = f": {error.raw_return}" if error.raw_return else ""
        return f"call failed with exit code {error.exit_code}{detail}"
    return str(error)


class LuckyDrawWorkflow:
    """
    Drives the lucky draw wizard against one actor.

    Only one operation runs at a time. While a call is in flight every other
    operation is rejected with ``CallInProgressError`` before anything is sent.
    """

    def __init__(
        self,
        wallet_factory: WalletFactory = lotus_wallet_factory,
        confirmations: int = DEFAULT_CONFIRMATIONS,
        grace_delay: float = DEFAULT_GRACE_DELAY,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize the workflow

        Args:
            wallet_factory: Builds the wallet from (rpc_url, rpc_token) at Setup
            confirmations: Confirmation depth for every call
            grace_delay: Seconds to keep the busy flag after a call resolves
            logger: Optional logger instance
        """
        self.wallet_factory = wallet_factory
        self.confirmations = confirmations
        self.grace_delay = grace_delay
        self.logger = logger or logging.getLogger(__name__)
        self.state = WorkflowState()
        self.session: Optional[Session] = None
        self._busy = False
        self._subscribers: List[Subscriber] = []

    @property
    def busy(self) -> bool:
        """True while a call is in flight"""
        return self._busy

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """
        Register a callback for state changes.

        Returns:
            A function that removes the callback
        """
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _set_state(self, new_state: WorkflowState) -> None:
        self.state = new_state
        for callback in list(self._subscribers):
            try:
                callback(new_state)
            except Exception:
                self.logger.exception("State subscriber failed")

    async def _guarded(self, operation: str, action: Callable[[], Awaitable[StepOutcome]]) -> StepOutcome:
        if self._busy:
            rate_limited_log(
                f"Rejected {operation}: another call is in flight",
                logger_instance=self.logger
            )
            error = CallInProgressError(f"Cannot {operation} while another call is in flight")
            return StepOutcome(ok=False, message=str(error), state=self.state, error=error)

        self._busy = True
        try:
            return await action()
        except LuckyDrawError as e:
            self.logger.warning(f"{operation} failed: {e}")
            return StepOutcome(ok=False, message=describe_error(e), state=self.state, error=e)
        except Exception as e:
            self.logger.exception(f"Unexpected error during {operation}")
            error = LuckyDrawError(f"Unexpected error during {operation}: {e}")
            error.__cause__ = e
            return StepOutcome(ok=False, message=str(error), state=self.state, error=error)
        finally:
            try:
                if self.grace_delay > 0:
                    await asyncio.sleep(self.grace_delay)
            finally:
                self._busy = False

    def _require_step(self, *steps: Step) -> Session:
        if self.state.step not in steps:
            allowed = ", ".join(s.value for s in steps)
            raise ValidationError(f"Operation not available in step {self.state.step.value} (needs {allowed})")
        if self.session is None:
            raise ValidationError("Setup has not been completed")
        return self.session

    async def _call(self, session: Session, method: ActorMethod, params=None) -> DecodedResult:
        receipt = await session.invoker.invoke(session.actor, session.owner, method, params)
        return session.interpreter.interpret(receipt, method)

    async def setup(self, actor: str, rpc_url: str, rpc_token: str) -> StepOutcome:
        """
        Validate the Setup fields and resolve the owner address.

        Args:
            actor: Lucky draw actor address
            rpc_url: Lotus API endpoint
            rpc_token: Lotus API token

        Returns:
            StepOutcome; on success the workflow moves to CollectCandidates
        """
        async def action() -> StepOutcome:
            if self.state.step != Step.SETUP:
                raise ValidationError("Setup has already been completed")
            if not actor or not rpc_url or not rpc_token:
                raise ValidationError("Please fill the setup info: actor, rpc url and rpc token are required")

            actor_address = validate(actor)
            try:
                validate_rpc_url(rpc_url)
            except ValueError as e:
                raise ValidationError(str(e))
            check_token_permissions(rpc_token)

            try:
                wallet = self.wallet_factory(rpc_url, rpc_token)
            except Exception as e:
                raise WalletError(f"Failed to open wallet: {e}") from e
            try:
                owner_text = await wallet.get_default_address()
            except Exception as e:
                raise WalletError(f"Failed to get owner address: {e}") from e
            if not owner_text:
                raise WalletError("Wallet has no default address")
            owner = validate(owner_text)
            if owner.network != actor_address.network:
                self.logger.warning(f"Owner {owner} and actor {actor_address} use different network prefixes")

            self.session = Session(
                actor=actor_address,
                owner=owner,
                rpc_url=rpc_url,
                rpc_token=rpc_token,
                invoker=ActorCallInvoker(wallet, confirmations=self.confirmations, logger=self.logger),
                interpreter=ReceiptInterpreter(network=actor_address.network),
            )
            self._set_state(complete_setup(self.state, actor_address, owner, rpc_url))
            self.logger.info(f"Setup complete for actor {actor_address}, owner {owner}")
            return StepOutcome(ok=True, message=f"owner address: {owner}", state=self.state, value=str(owner))

        return await self._guarded("setup", action)

    async def add_candidates(self, candidates_text: str) -> StepOutcome:
        """
        Register candidates from a comma-separated address list.

        Returns:
            StepOutcome; on success the workflow moves to MarkReady
        """
        async def action() -> StepOutcome:
            session = self._require_step(Step.COLLECT_CANDIDATES)
            items = split_address_list(candidates_text or "")
            if not items:
                raise ValidationError("Please provide at least one candidate address")
            addresses = validate_many(items)

            params = AddCandidatesParams(addresses=tuple(addresses)).envelope()
            await self._call(session, ActorMethod.ADD_CANDIDATES, params)

            self._set_state(accept_candidates(self.state, addresses))
            return StepOutcome(ok=True, message="add candidates success", state=self.state)

        return await self._guarded("add candidates", action)

    async def mark_ready(self) -> StepOutcome:
        """
        Mark the lucky draw as ready.

        Returns:
            StepOutcome; on success the workflow moves to Draw
        """
        async def action() -> StepOutcome:
            session = self._require_step(Step.MARK_READY)
            await self._call(session, ActorMethod.SET_READY)
            self._set_state(mark_ready(self.state))
            return StepOutcome(ok=True, message="lucky draw is ready", state=self.state)

        return await self._guarded("set ready", action)

    async def draw(self) -> StepOutcome:
        """
        Draw one winner. Repeatable while in the Draw step.

        Returns:
            StepOutcome whose value is the winner address string
        """
        async def action() -> StepOutcome:
            session = self._require_step(Step.DRAW)
            result = await self._call(session, ActorMethod.LUCKY_DRAW)
            winner = result.value
            if not winner:
                raise EnvelopeError("Lucky draw returned no winner")
            self._set_state(record_winner(self.state, winner))
            return StepOutcome(ok=True, message=f"winner: {winner}", state=self.state, value=winner)

        return await self._guarded("draw", action)

    async def read_current_state(self) -> StepOutcome:
        """
        Read the actor's state summary without changing the step.

        Returns:
            StepOutcome whose value is the actor's state text
        """
        async def action() -> StepOutcome:
            session = self._require_step(Step.COLLECT_CANDIDATES, Step.MARK_READY, Step.DRAW)
            result = await self._call(session, ActorMethod.READ_CURRENT_STATE)
            return StepOutcome(ok=True, message=result.value, state=self.state, value=result.value)

        return await self._guarded("read current state", action)
