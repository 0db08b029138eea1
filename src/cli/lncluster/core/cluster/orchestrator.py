"""Spawn a fully connected cluster of nodes.

The workflow is a small dependency graph::

    ports -> spawn -> connect -> nodes
                  \\__________/

`nodes` depends on both `spawn` and `connect`. A stage starts only once
all of its dependencies succeeded; the first failure stops the graph.
"""

from __future__ import annotations

import asyncio
import threading
from collections.abc import Callable
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from lncluster.core.cluster.cluster import Cluster, assemble
from lncluster.core.cluster.ports import PortAllocator, PortGroup, PortProbe
from lncluster.core.cluster.provisioner import NodeProvisioner
from lncluster.core.cluster.topology import TopologyConnector
from lncluster.core.errors import LNClusterError, UserError
from lncluster.shutdown import shutdown_event

if TYPE_CHECKING:
    from lncluster.core.cluster.node import Node
    from lncluster.core.context import LNClusterContext
    from lncluster.core.node.environment import Authenticator, NodeSpawner

SpawnCallback = Callable[[BaseException | None, Cluster | None], None]


@dataclass
class ClusterRequest:
    """What to spawn.

    Attributes
    ----------
    lnd_configuration : str, optional
        Opaque node configuration passed to the spawner.
    size : int, optional
        Number of nodes. Absent or zero means one node.
    """

    lnd_configuration: str | None = None
    size: int | None = None

    @property
    def count(self) -> int:
        """Number of nodes to spawn."""
        if self.size is not None and self.size < 0:
            raise UserError(
                f"Cluster size must not be negative, got {self.size}.",
                "Omit the size or pass 0 to spawn a single node.",
            )
        return self.size or 1


@dataclass
class Stage:
    """A named unit of work and the stages it waits for."""

    name: str
    fn: Callable[[dict[str, Any]], Any]
    depends_on: tuple[str, ...] = ()


class StageGraph:
    """Run stages in dependency order.

    Stages whose dependencies are met run concurrently. When a stage
    fails, no further stages are started, running stages are awaited,
    and the first failure is raised from `run()`.

    Dependencies must be declared before their dependents, which rules
    out cycles.
    """

    def __init__(self, ctx: LNClusterContext):
        self._ctx = ctx
        self._stages: dict[str, Stage] = {}

    def add(
        self,
        name: str,
        fn: Callable[[dict[str, Any]], Any],
        depends_on: tuple[str, ...] = (),
    ) -> StageGraph:
        """Declare a stage.

        Parameters
        ----------
        name : str
            Unique stage name; also the key of its result.
        fn : Callable[[dict[str, Any]], Any]
            Called with the results of `depends_on`, keyed by name.
        depends_on : tuple[str, ...], optional
            Names of previously declared stages.
        """
        if name in self._stages:
            raise LNClusterError(f"Stage '{name}' is already declared.")
        unknown = [d for d in depends_on if d not in self._stages]
        if unknown:
            raise LNClusterError(
                f"Stage '{name}' depends on undeclared stage(s): {', '.join(unknown)}"
            )
        self._stages[name] = Stage(name, fn, tuple(depends_on))
        return self

    def run(self) -> dict[str, Any]:
        """Execute the graph and return every stage's result by name."""
        results: dict[str, Any] = {}
        pending = dict(self._stages)
        running: dict[Future, str] = {}
        error: BaseException | None = None

        with ThreadPoolExecutor(max_workers=max(len(pending), 1)) as executor:
            while True:
                if error is None and shutdown_event.is_set():
                    error = LNClusterError("Shutdown requested; cluster spawn aborted.")
                if error is None:
                    for name, stage in list(pending.items()):
                        if all(d in results for d in stage.depends_on):
                            del pending[name]
                            inputs = {d: results[d] for d in stage.depends_on}
                            self._ctx.logger.debug(f"Starting stage '{name}'...")
                            running[executor.submit(stage.fn, inputs)] = name
                if not running:
                    break
                done, _ = wait(running, return_when=FIRST_COMPLETED)
                for future in done:
                    name = running.pop(future)
                    try:
                        results[name] = future.result()
                        self._ctx.logger.debug(f"Stage '{name}' complete.")
                    except Exception as e:
                        self._ctx.logger.debug(f"Stage '{name}' failed: {e}")
                        if error is None:
                            error = e

        if error is not None:
            raise error
        return results


class ClusterOrchestrator:
    """Allocate ports, provision nodes, peer them and assemble the cluster.

    Parameters
    ----------
    ctx : LNClusterContext
        An initialized context.
    probe : PortProbe, optional
        Free-port probe. Defaults to a local socket-bind scan.
    spawner : NodeSpawner, optional
        Node runtime spawner. Defaults to `DockerNodeSpawner`.
    authenticator : Authenticator, optional
        RPC authenticator. Defaults to the LND REST client.
    no_rollback : bool, optional
        If True, runtimes started by a failed spawn are left running.
    peer_attempts : int, optional
        Attempts per peer-add call.
    """

    def __init__(
        self,
        ctx: LNClusterContext,
        probe: PortProbe | None = None,
        spawner: NodeSpawner | None = None,
        authenticator: Authenticator | None = None,
        no_rollback: bool = False,
        peer_attempts: int = 1,
    ):
        if spawner is None:
            from lncluster.core.node.spawner import DockerNodeSpawner

            spawner = DockerNodeSpawner(ctx)
        if authenticator is None:
            from lncluster.core.node.rpc import authenticate

            authenticator = authenticate

        self._ctx = ctx
        self._spawner = spawner
        self._authenticator = authenticator
        self.no_rollback = no_rollback
        self.allocator = PortAllocator(probe)
        self.provisioner: NodeProvisioner | None = None
        self.topology = TopologyConnector(ctx, peer_attempts=peer_attempts)

    def build(self, request: ClusterRequest) -> Cluster:
        """Run the whole workflow on the calling thread.

        Raises
        ------
        ResourceContention
            If ports could not be allocated.
        ProvisioningFailure
            If any node failed to come up.
        ConnectionFailure
            If any peer-add failed.
        """
        count = request.count
        self._ctx.logger.info(f"Spawning cluster of {count} node(s)...")

        # Rollback only reaches runtimes started by this build
        provisioner = NodeProvisioner(self._ctx, self._spawner, self._authenticator)
        self.provisioner = provisioner

        graph = StageGraph(self._ctx)
        graph.add("ports", lambda _: self.allocator.allocate(count))
        graph.add(
            "spawn",
            lambda r: self._spawn_nodes(
                provisioner, r["ports"], request.lnd_configuration
            ),
            depends_on=("ports",),
        )
        graph.add(
            "connect",
            lambda r: self.topology.connect_all(r["spawn"]),
            depends_on=("spawn",),
        )
        graph.add(
            "nodes",
            lambda r: assemble(r["spawn"], self._ctx.logger),
            depends_on=("spawn", "connect"),
        )

        try:
            cluster = graph.run()["nodes"]
        except Exception as e:
            self._ctx.logger.error(f"Cluster spawn failed: {e}")
            self._rollback(provisioner)
            raise
        self._ctx.logger.info(f"Cluster of {len(cluster)} node(s) is ready.")
        return cluster

    def _spawn_nodes(
        self,
        provisioner: NodeProvisioner,
        groups: list[PortGroup],
        lnd_configuration: str | None,
    ) -> list[Node]:
        """Provision one node per port group, all at once.

        Every provisioning call is awaited before a failure is raised so
        that rollback sees every runtime that was started.
        """
        with ThreadPoolExecutor(max_workers=len(groups)) as executor:
            futures = [
                executor.submit(provisioner.provision, ports, lnd_configuration)
                for ports in groups
            ]
            wait(futures)
        for future in futures:
            error = future.exception()
            if error is not None:
                raise error
        return [future.result() for future in futures]

    def _rollback(self, provisioner: NodeProvisioner) -> None:
        if self.no_rollback:
            if provisioner.started:
                self._ctx.logger.warn(
                    f"Rollback is disabled; {len(provisioner.started)} node "
                    "runtime(s) remain running."
                )
            return
        provisioner.rollback()

    def spawn(
        self,
        request: ClusterRequest | None = None,
        callback: SpawnCallback | None = None,
    ) -> Future[Cluster]:
        """Start the workflow in the background.

        Parameters
        ----------
        request : ClusterRequest, optional
            Defaults to a single node with no extra configuration.
        callback : SpawnCallback, optional
            Called exactly once with `(error, cluster)`; one of the two
            is always None.

        Returns
        -------
        Future[Cluster]
            Settles with the cluster or the first construction error.
        """
        request = request or ClusterRequest()
        future: Future[Cluster] = Future()

        if callback is not None:

            def _notify(f: Future[Cluster]) -> None:
                if f.cancelled():
                    callback(LNClusterError("Cluster spawn was cancelled."), None)
                elif f.exception() is not None:
                    callback(f.exception(), None)
                else:
                    callback(None, f.result())

            future.add_done_callback(_notify)

        def _run() -> None:
            if not future.set_running_or_notify_cancel():
                return
            try:
                cluster = self.build(request)
            except BaseException as e:
                future.set_exception(e)
            else:
                future.set_result(cluster)

        threading.Thread(target=_run, name="SpawnClusterThread", daemon=True).start()
        return future


def spawn_cluster(
    request: ClusterRequest | None = None,
    callback: SpawnCallback | None = None,
    *,
    size: int | None = None,
    lnd_configuration: str | None = None,
    ctx: LNClusterContext | None = None,
    **options: Any,
) -> Future[Cluster]:
    """Spawn a cluster; see `ClusterOrchestrator` for `options`.

    Examples
    --------
    >>> cluster = spawn_cluster(size=3).result()
    >>> cluster.nodes[0].generate(count=150)
    >>> cluster.kill()
    """
    if request is None:
        request = ClusterRequest(lnd_configuration=lnd_configuration, size=size)
    if ctx is None:
        from lncluster.core.context import LNClusterContext

        ctx = LNClusterContext()
        ctx.initialize()
    return ClusterOrchestrator(ctx, **options).spawn(request, callback)


async def aspawn_cluster(
    request: ClusterRequest | None = None, **kwargs: Any
) -> Cluster:
    """Awaitable form of `spawn_cluster`."""
    return await asyncio.wrap_future(spawn_cluster(request, **kwargs))
