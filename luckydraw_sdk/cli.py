"""
Interactive console wizard for the lucky draw workflow.
"""
import argparse
import asyncio
import logging
import sys
from typing import Callable, List, Optional

from .config import setup_from_env
from .version import __version__
from .workflow import LuckyDrawWorkflow, Step, StepOutcome, WorkflowState

QUIT = {"q", "quit", "exit"}
SHOW_STATE = {"s", "state"}

STEP_TITLES = {
    Step.SETUP: "Setup",
    Step.COLLECT_CANDIDATES: "Add Candidates",
    Step.MARK_READY: "Set state ready",
    Step.DRAW: "Lucky Draw",
}

InputFn = Callable[[str], str]
OutputFn = Callable[[str], None]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="luckydraw",
        description="Run a lucky draw against an FVM actor step by step."
    )
    parser.add_argument("--actor", help="lucky draw actor address (env: LUCKYDRAW_ACTOR)")
    parser.add_argument("--rpc-url", help="Lotus API endpoint (env: LUCKYDRAW_RPC_URL)")
    parser.add_argument("--rpc-token", help="Lotus API token (env: LUCKYDRAW_RPC_TOKEN)")
    parser.add_argument("--confirmations", type=int, default=1, help="confirmation depth (default: 1)")
    parser.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def _report(outcome: StepOutcome, output: OutputFn) -> None:
    prefix = "ok" if outcome.ok else "error"
    output(f"[{prefix}] {outcome.message}")


async def _ask(input_fn: InputFn, prompt: str) -> Optional[str]:
    try:
        answer = await asyncio.to_thread(input_fn, prompt)
    except EOFError:
        return None
    return answer.strip()


async def run_wizard(
    workflow: LuckyDrawWorkflow,
    actor: Optional[str] = None,
    rpc_url: Optional[str] = None,
    rpc_token: Optional[str] = None,
    input_fn: InputFn = input,
    output: OutputFn = print
) -> WorkflowState:
    """
    Walk the user through the four steps until they quit.

    Returns:
        The final workflow state
    """
    workflow.subscribe(lambda state: output(f"--- step: {STEP_TITLES[state.step]} ---"))

    while workflow.state.step == Step.SETUP:
        actor = actor or await _ask(input_fn, "actor: ")
        rpc_url = rpc_url or await _ask(input_fn, "rpc url: ")
        rpc_token = rpc_token or await _ask(input_fn, "rpc token: ")
        if actor is None or rpc_url is None or rpc_token is None:
            return workflow.state
        outcome = await workflow.setup(actor, rpc_url, rpc_token)
        _report(outcome, output)
        if not outcome.ok:
            actor = rpc_url = rpc_token = None
            answer = await _ask(input_fn, "retry setup? [Y/n] ")
            if answer is None or answer.lower() in QUIT | {"n", "no"}:
                return workflow.state

    while True:
        step = workflow.state.step
        if step == Step.COLLECT_CANDIDATES:
            prompt = "candidates (comma separated, s = show state, q = quit): "
        elif step == Step.MARK_READY:
            prompt = "press enter to set state ready (s = show state, q = quit): "
        else:
            prompt = "press enter to draw a winner (s = show state, q = quit): "

        answer = await _ask(input_fn, prompt)
        if answer is None or answer.lower() in QUIT:
            break
        if answer.lower() in SHOW_STATE:
            _report(await workflow.read_current_state(), output)
            continue

        if step == Step.COLLECT_CANDIDATES:
            outcome = await workflow.add_candidates(answer)
        elif step == Step.MARK_READY:
            outcome = await workflow.mark_ready()
        else:
            outcome = await workflow.draw()
        _report(outcome, output)

    state = workflow.state
    if state.winners:
        output("winners:")
        for i, winner in enumerate(state.winners, 1):
            output(f"  {i}. {winner}")
    return state


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )

    env = setup_from_env()
    workflow = LuckyDrawWorkflow(confirmations=args.confirmations)
    try:
        asyncio.run(run_wizard(
            workflow,
            actor=args.actor or env["actor"],
            rpc_url=args.rpc_url or env["rpc_url"],
            rpc_token=args.rpc_token or env["rpc_token"],
        ))
    except KeyboardInterrupt:
        print()
        return 130
    return 0


if __name__ == "__main__":
    sys.exit(main())
