"""The assembled cluster handed back to callers."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from lncluster.core.errors import TeardownFailure

if TYPE_CHECKING:
    from lncluster.core.cluster.node import Node
    from lncluster.core.logging.logger import LNClusterLogger


@dataclass
class Cluster:
    """Connected nodes, in provisioning order, plus aggregate teardown.

    Attributes
    ----------
    nodes : list[Node]
        The cluster's nodes.
    """

    nodes: list[Node]
    _logger: LNClusterLogger | None = field(default=None, repr=False)

    def __len__(self) -> int:
        return len(self.nodes)

    def __iter__(self):
        return iter(self.nodes)

    def kill(self) -> None:
        """Tear down every node concurrently.

        All teardowns are attempted and awaited before reporting.

        Raises
        ------
        TeardownFailure
            If any node failed to tear down. The first failure is
            chained.
        """
        if not self.nodes:
            return
        with ThreadPoolExecutor(max_workers=len(self.nodes)) as executor:
            futures = [executor.submit(node.kill) for node in self.nodes]
            wait(futures)

        errors = [f.exception() for f in futures if f.exception() is not None]
        if self._logger:
            self._logger.info(
                f"Tore down {len(self.nodes) - len(errors)} of {len(self.nodes)} nodes."
            )
        if errors:
            raise TeardownFailure(
                f"{len(errors)} node(s) failed to tear down: {errors[0]}"
            ) from errors[0]

    def to_dict(self) -> dict:
        """Return the cluster as JSON-serializable data."""
        return {"nodes": [node.to_dict() for node in self.nodes]}


def assemble(nodes: list[Node], logger: LNClusterLogger | None = None) -> Cluster:
    """Build the final `Cluster` from connected nodes."""
    return Cluster(nodes=list(nodes), _logger=logger)
