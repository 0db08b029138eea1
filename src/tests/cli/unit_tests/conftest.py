"""Shared pytest fixtures for lncluster unit tests."""

import itertools
import threading
from unittest.mock import MagicMock, Mock

import pytest

from lncluster.core.cluster.ports import PortGroup
from lncluster.core.node.environment import NodeEnvironment


def sequential_probe(count, start_port):
    """Port probe that reports every port from `start_port` upward as free."""
    return list(range(start_port, start_port + count))


class FakeBackend:
    """In-memory node runtimes that record every call made against them.

    Attributes
    ----------
    fail_spawn_at : set[int]
        1-based spawn call numbers that raise.
    fail_auth : set[str]
        Node names whose authentication raises.
    fail_kill : set[str]
        Node names whose teardown raises.
    fail_peer : set[str]
        Node names whose chain backend rejects peer-adds.
    mature : bool
        If True, generating 100 blocks or more credits a UTXO.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._calls = itertools.count(1)
        self.spawned = []
        self.killed = []
        self.peer_adds = []
        self.generated = []
        self.lnd_configurations = []
        self.utxos = {}
        self.fail_spawn_at = set()
        self.fail_auth = set()
        self.fail_kill = set()
        self.fail_peer = set()
        self.mature = True

    def spawn(self, ports, lnd_configuration=None):
        with self._lock:
            n = next(self._calls)
            self.lnd_configurations.append(lnd_configuration)
        if n in self.fail_spawn_at:
            raise RuntimeError(f"runtime {n} failed to start")

        name = f"node{n}"
        env = NodeEnvironment(
            cert=f"cert-{name}",
            macaroon=f"macaroon-{name}",
            socket=f"localhost:{ports.lightning_rpc}",
            chain_socket=f"{name}-chain:18444",
            ln_socket=f"127.0.0.1:{ports.lightning_p2p}",
            add_chain_peer=lambda socket: self._add_peer(name, socket),
            generate=lambda count, address: self._generate(name, count, address),
            get_block_info=lambda: {"current_block_height": 1},
            kill=lambda: self._kill(name),
        )
        with self._lock:
            self.spawned.append(name)
        return env

    def authenticate(self, cert, macaroon, socket):
        name = cert[len("cert-") :]
        if name in self.fail_auth:
            raise RuntimeError(f"{name} rejected the macaroon")
        rpc = Mock()
        rpc.macaroon = macaroon
        rpc.get_identity.return_value = {
            "public_key": f"{int(name[4:]):02x}" * 33
        }
        rpc.create_chain_address.return_value = {"address": f"bcrt1q{name}"}
        rpc.get_utxos.side_effect = lambda: {"utxos": list(self.utxos.get(name, []))}
        return rpc

    def _add_peer(self, name, socket):
        if name in self.fail_peer:
            raise RuntimeError(f"{name} refused peer {socket}")
        with self._lock:
            self.peer_adds.append((f"{name}-chain:18444", socket))

    def _generate(self, name, count, address):
        with self._lock:
            self.generated.append((name, count, address))
            if self.mature and count >= 100:
                self.utxos.setdefault(name, []).append({"address": address})

    def _kill(self, name):
        with self._lock:
            self.killed.append(name)
        if name in self.fail_kill:
            raise RuntimeError(f"{name} would not stop")


@pytest.fixture
def mock_ctx():
    """Provide a mock LNClusterContext."""
    ctx = Mock()
    ctx.logger = MagicMock()
    ctx.env = {}
    ctx.docker_client = MagicMock()
    return ctx


@pytest.fixture
def backend():
    """Provide a fresh fake node backend."""
    return FakeBackend()


@pytest.fixture
def ports():
    """Provide a single port group."""
    return PortGroup(20001, 20002, 20003, 20004, 20005, 20006)


@pytest.fixture
def probe():
    """Provide a port probe that never reports a conflict."""
    return sequential_probe
