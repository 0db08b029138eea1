"""Full-mesh chain peering between cluster nodes."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, as_completed
from itertools import combinations
from typing import TYPE_CHECKING, TypeVar

from lncluster import settings
from lncluster.core.errors import ConnectionFailure, RetryExhausted
from lncluster.core.retry import retry

if TYPE_CHECKING:
    from lncluster.core.cluster.node import Node
    from lncluster.core.context import LNClusterContext

T = TypeVar("T")


def pairs(items: list[T]) -> list[tuple[T, T]]:
    """Return every unordered pair, earlier item first.

    Examples
    --------
    >>> pairs(["a", "b", "c"])
    [('a', 'b'), ('a', 'c'), ('b', 'c')]
    """
    return list(combinations(items, 2))


class TopologyConnector:
    """Peer every node's chain backend with every other node's.

    Parameters
    ----------
    ctx : LNClusterContext
        Context providing the logger.
    peer_attempts : int, optional
        Attempts per peer-add call. Defaults to a single attempt.
    interval : float, optional
        Seconds between attempts when `peer_attempts` > 1.
    """

    def __init__(
        self,
        ctx: LNClusterContext,
        peer_attempts: int = 1,
        interval: float = settings.RETRY_INTERVAL,
    ):
        self._ctx = ctx
        self.peer_attempts = peer_attempts
        self.interval = interval

    def connect_all(self, nodes: list[Node]) -> None:
        """Issue one peer-add per node pair, all pairs concurrently.

        Raises
        ------
        ConnectionFailure
            If any peer-add call fails.
        """
        links = pairs(nodes)
        if not links:
            return

        self._ctx.logger.info(f"Connecting {len(nodes)} nodes ({len(links)} links)...")
        with ThreadPoolExecutor(max_workers=len(links)) as executor:
            futures = {executor.submit(self._connect, a, b): (a, b) for a, b in links}
            for future in as_completed(futures):
                a, b = futures[future]
                try:
                    future.result()
                except Exception as e:
                    raise ConnectionFailure(
                        f"Failed to peer {a.chain.socket} with {b.chain.socket}: {e}"
                    ) from e

    def _connect(self, a: Node, b: Node) -> None:
        try:
            retry(
                lambda: a.chain.add_peer(b.chain.socket),
                attempts=self.peer_attempts,
                interval=self.interval,
                desc="Peer add",
            )
        except RetryExhausted as e:
            raise e.last_error or e
        self._ctx.logger.debug(f"Peered {a.chain.socket} -> {b.chain.socket}")
