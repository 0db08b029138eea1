"""Provision individual cluster nodes."""

from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import TYPE_CHECKING

from lncluster import settings, utils
from lncluster.core.cluster.node import ChainFacade, Node
from lncluster.core.errors import (
    LNClusterError,
    MaturityTimeout,
    ProvisioningFailure,
    RetryExhausted,
)
from lncluster.core.retry import retry

if TYPE_CHECKING:
    from lncluster.core.cluster.ports import PortGroup
    from lncluster.core.context import LNClusterContext
    from lncluster.core.node.environment import (
        Authenticator,
        NodeEnvironment,
        NodeSpawner,
        RpcHandle,
    )


class NodeProvisioner:
    """Turn a `PortGroup` into a running, authenticated `Node`.

    Parameters
    ----------
    ctx : LNClusterContext
        Context providing the logger.
    spawner : NodeSpawner
        Starts the node runtime.
    authenticator : Authenticator
        Builds an RPC handle from cert, macaroon and socket.
    identity_attempts : int, optional
        Identity lookups made before a freshly authenticated node is
        given up on.
    maturity_attempts : int, optional
        UTXO polls made by `generate` after a maturity-crossing request.
    interval : float, optional
        Seconds between identity and UTXO polls.

    Notes
    -----
    `provision()` is safe to call from several threads at once. Every
    runtime it starts is recorded in `started` until `rollback()` reaps
    it, including runtimes whose authentication or identity lookup then
    failed.
    """

    def __init__(
        self,
        ctx: LNClusterContext,
        spawner: NodeSpawner,
        authenticator: Authenticator,
        identity_attempts: int = settings.IDENTITY_ATTEMPTS,
        maturity_attempts: int = settings.MATURITY_POLL_ATTEMPTS,
        interval: float = settings.RETRY_INTERVAL,
    ):
        self._ctx = ctx
        self._spawner = spawner
        self._authenticator = authenticator
        self.identity_attempts = identity_attempts
        self.maturity_attempts = maturity_attempts
        self.interval = interval
        self.started: list[NodeEnvironment] = []
        self._lock = threading.Lock()

    def provision(self, ports: PortGroup, lnd_configuration: str | None = None) -> Node:
        """Start one node and return its handle.

        Parameters
        ----------
        ports : PortGroup
            Host ports reserved for this node.
        lnd_configuration : str, optional
            Opaque configuration passed through to the spawner.

        Raises
        ------
        ProvisioningFailure
            If the runtime fails to start, authenticate, or report its
            identity.
        """
        try:
            env = self._spawner(ports, lnd_configuration)
        except Exception as e:
            raise ProvisioningFailure(f"Failed to start node runtime: {e}") from e

        with self._lock:
            self.started.append(env)

        lnd: RpcHandle | None = None
        try:
            lnd = self._authenticator(
                cert=env.cert, macaroon=env.macaroon, socket=env.socket
            )
            node_id = retry(
                lambda: lnd.get_identity()["public_key"],
                attempts=self.identity_attempts,
                interval=self.interval,
                desc=f"Identity lookup at {env.socket}",
            )
        except Exception as e:
            if lnd is not None:
                lnd.close()
            raise ProvisioningFailure(
                f"Failed to authenticate node at {env.socket}: {e}"
            ) from e

        identifier = utils.generate_identifier({"id": node_id[:16], "rpc": env.socket})
        self._ctx.logger.info(f"Node ready: {identifier}")
        return self._build_node(node_id, lnd, env)

    def _build_node(self, node_id: str, lnd: RpcHandle, env: NodeEnvironment) -> Node:
        handles = [lnd]
        teardown = env.kill

        def rpc(macaroon: str) -> RpcHandle:
            handle = self._authenticator(
                cert=env.cert, macaroon=macaroon, socket=env.socket
            )
            handles.append(handle)
            return handle

        def generate(address: str | None = None, count: int = 0) -> None:
            self.generate(lnd, env, address=address, count=count)

        def kill() -> None:
            try:
                teardown()
            finally:
                for handle in handles:
                    handle.close()

        # Rollback and Node.kill go through the same teardown
        env.kill = kill

        return Node(
            id=node_id,
            lnd=lnd,
            rpc=rpc,
            chain=ChainFacade(
                add_peer=env.add_chain_peer,
                generate_to_address=env.generate,
                get_block_info=env.get_block_info,
                socket=env.chain_socket,
            ),
            generate=generate,
            kill=kill,
            socket=env.ln_socket,
            rpc_socket=env.socket,
            macaroon=env.macaroon,
            cert=env.cert,
        )

    def generate(
        self,
        lnd: RpcHandle,
        env: NodeEnvironment,
        address: str | None = None,
        count: int = 0,
    ) -> None:
        """Mine `count` blocks, waiting for maturity when it is crossed.

        Parameters
        ----------
        lnd : RpcHandle
            The node's RPC handle, used for addresses and UTXOs.
        env : NodeEnvironment
            The node runtime that mines the blocks.
        address : str, optional
            Destination of the block rewards. A fresh node address is
            used when omitted.
        count : int, optional
            Number of blocks to mine.

        Raises
        ------
        MaturityTimeout
            If `count` reaches coinbase maturity and no spendable output
            shows up within the allowed polls.
        """
        address = address or lnd.create_chain_address()["address"]
        env.generate(count, address)
        self._ctx.logger.debug(f"Generated {count} block(s) to {address}.")

        if not count or count < settings.MATURITY:
            return

        def _first_utxo() -> dict:
            utxos = lnd.get_utxos()["utxos"]
            if not utxos:
                raise LNClusterError("Expected a UTXO in the node wallet.")
            return utxos[0]

        try:
            retry(
                _first_utxo,
                attempts=self.maturity_attempts,
                interval=self.interval,
                desc="Waiting for a mature UTXO",
            )
        except RetryExhausted as e:
            raise MaturityTimeout(
                f"No spendable output after {e.attempts} polls following "
                f"generation of {count} blocks."
            ) from e

    def rollback(self) -> None:
        """Tear down every runtime started by this provisioner.

        Every teardown is attempted; failures are logged, not raised.
        """
        with self._lock:
            envs, self.started = list(self.started), []
        if not envs:
            return

        self._ctx.logger.warn(f"Rolling back {len(envs)} node runtime(s)...")
        with ThreadPoolExecutor(max_workers=len(envs)) as executor:
            futures = {executor.submit(env.kill): env for env in envs}
            for future in as_completed(futures):
                try:
                    future.result()
                except Exception as e:
                    self._ctx.logger.error(
                        f"Failed to tear down node at {futures[future].socket}: {e}"
                    )
