"""End-to-end spawn, use and teardown of real clusters."""

import time

import pytest

from lncluster import ClusterRequest, ProvisioningFailure, spawn_cluster
from lncluster.core.cluster.orchestrator import ClusterOrchestrator

SPAWN_TIMEOUT = 600


def wait_for_height(node, height, timeout=60):
    deadline = time.time() + timeout
    while time.time() < deadline:
        if node.chain.get_block_info()["current_block_height"] >= height:
            return
        time.sleep(0.5)
    raise AssertionError(f"{node.chain.socket} never reached height {height}")


def test_two_node_cluster(ctx):
    """Test nodes come up, share a chain, and mature coinbase outputs."""
    cluster = spawn_cluster(size=2, ctx=ctx).result(timeout=SPAWN_TIMEOUT)
    try:
        alice, bob = cluster.nodes
        assert alice.id != bob.id
        assert alice.lnd.get_identity()["public_key"] == alice.id

        start = alice.chain.get_block_info()["current_block_height"]
        alice.generate(count=101)

        wait_for_height(bob, start + 101)
        assert alice.lnd.get_utxos()["utxos"]
    finally:
        cluster.kill()


def test_bad_lnd_configuration_rolls_back(ctx):
    """Test a node that cannot start leaves nothing behind."""
    orchestrator = ClusterOrchestrator(ctx)
    request = ClusterRequest(lnd_configuration="--no-such-flag", size=1)

    with pytest.raises(ProvisioningFailure):
        orchestrator.spawn(request).result(timeout=SPAWN_TIMEOUT)
