"""Docker-backed node runtimes: one bitcoind and one LND container per node."""

from __future__ import annotations

import io
import json
import shlex
import tarfile
import threading
import uuid
from typing import TYPE_CHECKING

from docker.errors import APIError, NotFound
from docker.models.containers import Container

from lncluster import settings, utils
from lncluster.core.errors import LNClusterError
from lncluster.core.node.environment import NodeEnvironment
from lncluster.core.retry import retry

if TYPE_CHECKING:
    from lncluster.core.cluster.ports import PortGroup
    from lncluster.core.context import LNClusterContext


class DockerNodeSpawner:
    """Start a regtest bitcoind + LND pair for one node.

    Parameters
    ----------
    ctx : LNClusterContext
        An initialized context providing the Docker client, environment
        variables and logger.

    Notes
    -----
    Both containers join the `lncluster_shared` bridge network so that
    chain backends can peer with each other by container name. Host
    ports are bound on 127.0.0.1 only.
    """

    def __init__(self, ctx: LNClusterContext):
        self._ctx = ctx
        self._network_lock = threading.Lock()

    def __call__(
        self, ports: PortGroup, lnd_configuration: str | None = None
    ) -> NodeEnvironment:
        """Spawn the node runtime and return its connection material."""
        node_id = uuid.uuid4().hex[:10]
        started: list[Container] = []
        self._ensure_shared_network()
        try:
            btc = self._run_bitcoind(node_id, ports)
            started.append(btc)
            self._wait_for_bitcoind(btc)
            # LND only reports itself synced once the chain has a tip
            self._bitcoin_cli(btc, "generatetoaddress", "1", settings.GENERATE_ADDRESS)

            lnd = self._run_lnd(node_id, ports, btc.name, lnd_configuration)
            started.append(lnd)
            cert, macaroon = self._wait_for_credentials(lnd)
        except Exception:
            self._remove_containers(started)
            raise

        identifier = utils.generate_identifier(
            {"node": node_id, "bitcoind": btc.name, "lnd": lnd.name}
        )
        self._ctx.logger.debug(f"Node runtime up: {identifier}")
        return NodeEnvironment(
            cert=cert,
            macaroon=macaroon,
            socket=f"localhost:{ports.lightning_rpc}",
            chain_socket=f"{btc.name}:{settings.CHAIN_P2P_PORT}",
            ln_socket=f"127.0.0.1:{ports.lightning_p2p}",
            add_chain_peer=lambda socket: self._bitcoin_cli(
                btc, "addnode", socket, "add"
            ),
            generate=lambda count, address: self._bitcoin_cli(
                btc, "generatetoaddress", str(count), address
            ),
            get_block_info=lambda: self._block_info(btc),
            kill=lambda: self._remove_containers([lnd, btc]),
        )

    def _labels(self, node_id: str) -> dict[str, str]:
        return {settings.ROOT_LABEL_KEY: "true", settings.NODE_LABEL_KEY: node_id}

    def _ensure_shared_network(self) -> None:
        """Ensure the shared network exists."""
        client = self._ctx.docker_client
        with self._network_lock:
            try:
                client.networks.get(settings.SHARED_NETWORK)
                return
            except NotFound:
                pass
            self._ctx.logger.debug("Creating shared network...")
            try:
                client.networks.create(
                    name=settings.SHARED_NETWORK,
                    driver="bridge",
                    labels={settings.ROOT_LABEL_KEY: "true"},
                )
            except APIError:
                # Another process created it first
                client.networks.get(settings.SHARED_NETWORK)

    def _chain_auth(self) -> list[str]:
        user = self._ctx.env.get("CHAIN_RPC_USER") or settings.CHAIN_RPC_USER
        password = self._ctx.env.get("CHAIN_RPC_PASS") or settings.CHAIN_RPC_PASS
        return [f"-rpcuser={user}", f"-rpcpassword={password}"]

    def _run_bitcoind(self, node_id: str, ports: PortGroup) -> Container:
        name = f"lncluster-{node_id}-bitcoind"
        image = self._ctx.env.get("BITCOIND_IMAGE") or settings.DEFAULT_BITCOIND_IMAGE
        command = [
            "-regtest",
            "-server=1",
            "-txindex=1",
            "-listen=1",
            "-printtoconsole=1",
            "-fallbackfee=0.0002",
            "-rpcbind=0.0.0.0",
            "-rpcallowip=0.0.0.0/0",
            f"-port={settings.CHAIN_P2P_PORT}",
            f"-rpcport={settings.CHAIN_RPC_PORT}",
            f"-zmqpubrawblock=tcp://0.0.0.0:{settings.CHAIN_ZMQ_BLOCK_PORT}",
            f"-zmqpubrawtx=tcp://0.0.0.0:{settings.CHAIN_ZMQ_TX_PORT}",
            *self._chain_auth(),
        ]
        self._ctx.logger.debug(f"Starting container '{name}' from image '{image}'...")
        return self._ctx.docker_client.containers.run(
            image,
            command=command,
            name=name,
            hostname=name,
            detach=True,
            network=settings.SHARED_NETWORK,
            labels=self._labels(node_id),
            ports={
                f"{settings.CHAIN_P2P_PORT}/tcp": ("127.0.0.1", ports.chain_p2p),
                f"{settings.CHAIN_RPC_PORT}/tcp": ("127.0.0.1", ports.chain_rpc),
                f"{settings.CHAIN_ZMQ_BLOCK_PORT}/tcp": (
                    "127.0.0.1",
                    ports.chain_zmq_block,
                ),
                f"{settings.CHAIN_ZMQ_TX_PORT}/tcp": ("127.0.0.1", ports.chain_zmq_tx),
            },
        )

    def _run_lnd(
        self,
        node_id: str,
        ports: PortGroup,
        bitcoind_host: str,
        lnd_configuration: str | None,
    ) -> Container:
        name = f"lncluster-{node_id}-lnd"
        image = self._ctx.env.get("LND_IMAGE") or settings.DEFAULT_LND_IMAGE
        user, password = (a.split("=", 1)[1] for a in self._chain_auth())
        zmq_host = f"tcp://{bitcoind_host}"
        command = [
            "--bitcoin.regtest",
            "--bitcoin.node=bitcoind",
            f"--bitcoind.rpchost={bitcoind_host}:{settings.CHAIN_RPC_PORT}",
            f"--bitcoind.rpcuser={user}",
            f"--bitcoind.rpcpass={password}",
            f"--bitcoind.zmqpubrawblock={zmq_host}:{settings.CHAIN_ZMQ_BLOCK_PORT}",
            f"--bitcoind.zmqpubrawtx={zmq_host}:{settings.CHAIN_ZMQ_TX_PORT}",
            "--noseedbackup",
            f"--listen=0.0.0.0:{settings.LIGHTNING_P2P_PORT}",
            f"--restlisten=0.0.0.0:{settings.LIGHTNING_REST_PORT}",
            "--tlsextradomain=localhost",
            f"--tlsextradomain={name}",
            "--tlsextraip=127.0.0.1",
            *shlex.split(lnd_configuration or ""),
        ]
        self._ctx.logger.debug(f"Starting container '{name}' from image '{image}'...")
        return self._ctx.docker_client.containers.run(
            image,
            command=command,
            name=name,
            hostname=name,
            detach=True,
            network=settings.SHARED_NETWORK,
            labels=self._labels(node_id),
            ports={
                f"{settings.LIGHTNING_P2P_PORT}/tcp": (
                    "127.0.0.1",
                    ports.lightning_p2p,
                ),
                f"{settings.LIGHTNING_REST_PORT}/tcp": (
                    "127.0.0.1",
                    ports.lightning_rpc,
                ),
            },
        )

    def _startup_retries(self) -> int:
        value = self._ctx.env.get("STARTUP_RETRIES")
        return int(value) if value else settings.DEFAULT_STARTUP_RETRIES

    def _wait_for_bitcoind(self, container: Container) -> None:
        retry(
            lambda: self._bitcoin_cli(container, "getblockchaininfo"),
            attempts=self._startup_retries(),
            interval=settings.STARTUP_INTERVAL,
            desc=f"Waiting for '{container.name}'",
        )

    def _wait_for_credentials(self, container: Container) -> tuple[str, str]:
        """Poll for the TLS cert and admin macaroon.

        Only Docker API errors (e.g. the file not existing yet) are
        retried. A container that has exited fails immediately.
        """

        def _read() -> tuple[str, str]:
            container.reload()
            if container.status == "exited":
                logs = container.logs(tail=20).decode("utf-8", errors="replace")
                raise LNClusterError(
                    f"Container '{container.name}' exited during startup:\n{logs}"
                )
            cert = self._read_file(container, settings.LND_TLS_CERT).decode("utf-8")
            macaroon = self._read_file(container, settings.LND_ADMIN_MACAROON)
            return cert, macaroon.hex()

        return retry(
            _read,
            attempts=self._startup_retries(),
            interval=settings.STARTUP_INTERVAL,
            retry_on=APIError,
            desc=f"Waiting for '{container.name}' credentials",
        )

    def _read_file(self, container: Container, path: str) -> bytes:
        """Read a single file out of a container."""
        bits, _ = container.get_archive(path)
        with tarfile.open(fileobj=io.BytesIO(b"".join(bits))) as tar:
            member = tar.next()
            f = tar.extractfile(member) if member else None
            if f is None:
                raise LNClusterError(f"'{path}' in '{container.name}' is not a file.")
            return f.read()

    def _bitcoin_cli(self, container: Container, *args: str) -> str:
        """Run `bitcoin-cli` inside the chain container and return stdout."""
        cmd = ["bitcoin-cli", "-regtest", *self._chain_auth(), *args]
        exit_code, output = container.exec_run(cmd)
        text = output.decode("utf-8", errors="replace").strip() if output else ""
        if exit_code != 0:
            raise LNClusterError(
                f"bitcoin-cli {' '.join(args)} failed in '{container.name}' "
                f"(exit {exit_code}): {text}"
            )
        return text

    def _block_info(self, container: Container) -> dict:
        info = json.loads(self._bitcoin_cli(container, "getblockchaininfo"))
        return {
            "current_block_hash": info["bestblockhash"],
            "current_block_height": info["blocks"],
        }

    def _remove_containers(self, containers: list[Container]) -> None:
        for container in containers:
            try:
                container.remove(force=True)
                self._ctx.logger.debug(f"Removed container '{container.name}'.")
            except NotFound:
                pass
