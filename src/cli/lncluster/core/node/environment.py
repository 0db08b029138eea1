"""Contracts between the orchestration engine and a node's backing runtime."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from lncluster.core.cluster.ports import PortGroup


@dataclass
class NodeEnvironment:
    """Connection material and controls for one running node runtime.

    Attributes
    ----------
    cert : str
        PEM-encoded TLS certificate of the node's RPC server.
    macaroon : str
        Hex-encoded admin macaroon.
    socket : str
        `host:port` of the node's RPC server.
    chain_socket : str
        Address other chain backends use to peer with this one.
    ln_socket : str
        `host:port` of the node's p2p listener.
    add_chain_peer : Callable[[str], None]
        Add a chain peer by address.
    generate : Callable[[int, str], Any]
        Mine `count` blocks to `address`.
    get_block_info : Callable[[], dict]
        Return chain tip information.
    kill : Callable[[], None]
        Stop and remove the runtime.
    """

    cert: str
    macaroon: str
    socket: str
    chain_socket: str
    ln_socket: str
    add_chain_peer: Callable[[str], None]
    generate: Callable[[int, str], Any]
    get_block_info: Callable[[], dict]
    kill: Callable[[], None]


class NodeSpawner(Protocol):
    def __call__(
        self, ports: PortGroup, lnd_configuration: str | None = None
    ) -> NodeEnvironment: ...


class RpcHandle(Protocol):
    def get_identity(self) -> dict: ...

    def create_chain_address(self) -> dict: ...

    def get_utxos(self) -> dict: ...

    def close(self) -> None: ...


class Authenticator(Protocol):
    def __call__(self, cert: str, macaroon: str, socket: str) -> RpcHandle: ...
