"""Port allocation for lncluster nodes.

Every node needs six host ports. All ports for one cluster come out of a
single probe so that no two nodes ever share a port.
"""

from __future__ import annotations

import random
import socket
from collections.abc import Callable
from typing import NamedTuple

from lncluster import settings
from lncluster.core.errors import LNClusterError, ResourceContention, RetryExhausted
from lncluster.core.logging.utils import get_logger
from lncluster.core.retry import retry

PortProbe = Callable[[int, int], list[int]]


class PortGroup(NamedTuple):
    """The six host ports assigned to one node, in allocation order."""

    chain_p2p: int
    chain_rpc: int
    chain_zmq_block: int
    chain_zmq_tx: int
    lightning_p2p: int
    lightning_rpc: int


def is_port_in_use(port: int) -> bool:
    """Check if a port is in use on the local machine."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        try:
            s.bind(("127.0.0.1", port))
            return False
        except OSError:
            return True


def find_free_ports(count: int, start_port: int) -> list[int]:
    """Return `count` free ports, scanning upward from `start_port`.

    Parameters
    ----------
    count : int
        Number of ports required.
    start_port : int
        First port to try.

    Returns
    -------
    list[int]
        Free ports in ascending order.

    Raises
    ------
    LNClusterError
        If fewer than `count` free ports exist between `start_port` and
        the top of the port range.
    """
    ports: list[int] = []
    candidate = start_port
    while len(ports) < count and candidate <= 65535:
        if not is_port_in_use(candidate):
            ports.append(candidate)
        candidate += 1
    if len(ports) < count:
        raise LNClusterError(
            f"Only found {len(ports)} of {count} free ports above {start_port}."
        )
    return ports


class PortAllocator:
    """Allocate disjoint `PortGroup`s for a batch of nodes.

    Parameters
    ----------
    probe : PortProbe, optional
        Callable `(count, start_port) -> list[int]` returning free ports.
        Defaults to `find_free_ports`.
    attempts : int, optional
        Number of allocation attempts before giving up.
    interval : float, optional
        Seconds between attempts.
    """

    def __init__(
        self,
        probe: PortProbe | None = None,
        attempts: int = settings.PORT_ATTEMPTS,
        interval: float = settings.RETRY_INTERVAL,
    ) -> None:
        self._probe = probe or find_free_ports
        self.attempts = attempts
        self.interval = interval
        self._logger = get_logger()

    def allocate(self, node_count: int) -> list[PortGroup]:
        """Allocate one `PortGroup` per node.

        Each attempt starts from a fresh random offset. A probe that
        raises, comes up short or repeats a port fails the attempt.

        Raises
        ------
        ResourceContention
            If no attempt succeeded.
        """
        try:
            return retry(
                lambda: self._attempt(node_count),
                attempts=self.attempts,
                interval=self.interval,
                desc="Port allocation",
            )
        except RetryExhausted as e:
            raise ResourceContention(
                f"Could not allocate {settings.PORTS_PER_NODE * node_count} free "
                f"ports after {e.attempts} attempts: {e.last_error}"
            ) from e

    def _attempt(self, node_count: int) -> list[PortGroup]:
        needed = settings.PORTS_PER_NODE * node_count
        start_port = random.randint(settings.START_PORT, settings.END_PORT - 1)
        self._logger.debug(f"Probing {needed} free ports from port {start_port}...")

        ports = list(self._probe(needed, start_port))
        if len(ports) != needed:
            raise LNClusterError(f"Port probe returned {len(ports)} of {needed} ports.")
        if len(set(ports)) != needed:
            raise LNClusterError("Port probe returned duplicate ports.")

        n = settings.PORTS_PER_NODE
        groups = [PortGroup(*ports[i * n : (i + 1) * n]) for i in range(node_count)]
        self._logger.debug(f"Allocated port groups: {groups}")
        return groups
