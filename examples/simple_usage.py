#!/usr/bin/env python3
"""
Simple example of using the LuckyDraw SDK.
"""
import asyncio
import os

from luckydraw_sdk import LuckyDrawWorkflow


async def run():
    """
    Demonstrate one full lucky draw without the interactive wizard.

    This example shows how to:
    1. Connect to a Lotus node and resolve the owner address
    2. Register candidates
    3. Mark the draw as ready
    4. Draw winners and read the actor state
    """
    # Read configuration from environment
    RPC_URL = os.environ.get("LUCKYDRAW_RPC_URL", "http://127.0.0.1:1234/rpc/v0")
    RPC_TOKEN = os.environ.get("LUCKYDRAW_RPC_TOKEN")
    ACTOR = os.environ.get("LUCKYDRAW_ACTOR")
    CANDIDATES = os.environ.get("LUCKYDRAW_CANDIDATES", "")
    WINNERS = int(os.environ.get("LUCKYDRAW_WINNERS", "1"))

    # Verify configuration
    if not ACTOR:
        print("ERROR: LUCKYDRAW_ACTOR environment variable is required")
        return

    if not RPC_TOKEN:
        print("ERROR: LUCKYDRAW_RPC_TOKEN environment variable is required")
        return

    workflow = LuckyDrawWorkflow()
    workflow.subscribe(lambda state: print(f"  -> step {state.step.value}"))

    outcome = await workflow.setup(ACTOR, RPC_URL, RPC_TOKEN)
    print(outcome.message)
    if not outcome.ok:
        return

    for operation in (
        lambda: workflow.add_candidates(CANDIDATES),
        workflow.mark_ready,
    ):
        outcome = await operation()
        print(outcome.message)
        if not outcome.ok:
            return

    for _ in range(WINNERS):
        outcome = await workflow.draw()
        print(outcome.message)

    state = await workflow.read_current_state()
    print(f"Actor state: {state.message}")
    print(f"Winners: {', '.join(workflow.state.winners) or 'none'}")


def main():
    asyncio.run(run())


if __name__ == "__main__":
    main()
