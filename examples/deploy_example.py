#!/usr/bin/env python3
"""
Example of deploying a lucky draw actor with network configuration.
"""
import asyncio
import os

from luckydraw_sdk import (
    LotusClient,
    LotusWalletProvider,
    NetworkConfig,
    deploy_actor,
    split_address_list,
    validate,
    validate_many,
)


async def run():
    """
    Instantiate a lucky draw actor from installed code.

    This example shows how to:
    1. Pick a network from the bundled configuration
    2. Resolve the caller from the node's default wallet
    3. Call the Init actor's exec method and print the new addresses
    """
    NETWORK = os.environ.get("LUCKYDRAW_NETWORK", "calibration")
    RPC_TOKEN = os.environ.get("LUCKYDRAW_RPC_TOKEN")
    CODE_CID = os.environ.get("LUCKYDRAW_CODE_CID")
    WINNERS = int(os.environ.get("LUCKYDRAW_WINNERS", "3"))
    CANDIDATES = os.environ.get("LUCKYDRAW_CANDIDATES", "")

    if not CODE_CID:
        print("ERROR: LUCKYDRAW_CODE_CID environment variable is required (see `lotus chain install-actor`)")
        return

    print("Available networks:")
    for network_name in NetworkConfig.load_networks().keys():
        print(f"  - {network_name}")
    print()

    rpc_url = NetworkConfig.get_rpc_url(NETWORK)
    wallet = LotusWalletProvider(LotusClient(rpc_url, token=RPC_TOKEN))
    print(f"Connected to {NETWORK} at {rpc_url}, chain height {await wallet.chain_height()}")

    caller = validate(await wallet.get_default_address())
    init_actor = validate(NetworkConfig.get_init_actor(NETWORK))

    id_address, robust_address = await deploy_actor(
        wallet,
        init_actor=init_actor,
        caller=caller,
        code_cid=CODE_CID,
        owner=caller,
        winners_count=WINNERS,
        candidates=validate_many(split_address_list(CANDIDATES)),
    )
    print(f"Actor ID address: {id_address}")
    print(f"Actor robust address: {robust_address}")


def main():
    asyncio.run(run())


if __name__ == "__main__":
    main()
