"""Handles for a provisioned node."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from lncluster.core.node.environment import RpcHandle


@dataclass
class ChainFacade:
    """The node's chain backend as seen by the rest of the cluster."""

    add_peer: Callable[[str], None]
    generate_to_address: Callable[[int, str], Any]
    get_block_info: Callable[[], dict]
    socket: str


@dataclass
class Node:
    """One running node and everything needed to drive it.

    Attributes
    ----------
    id : str
        Hex-encoded identity public key.
    lnd : RpcHandle
        Authenticated RPC handle.
    rpc : Callable[..., RpcHandle]
        `rpc(macaroon=...)` returns a fresh handle authenticated with
        other credentials. It is closed along with `lnd` by `kill`.
    chain : ChainFacade
        Chain backend controls.
    generate : Callable[..., None]
        `generate(address=None, count=0)`; mines blocks and, when the
        count crosses coinbase maturity, waits for a spendable output.
    kill : Callable[[], None]
        Tear down the node runtime. Only the node invokes it.
    socket : str
        Node p2p address.
    rpc_socket : str
        Node RPC address.
    macaroon : str
        Hex-encoded admin macaroon.
    cert : str
        PEM-encoded TLS certificate.
    """

    id: str
    lnd: RpcHandle
    rpc: Callable[..., RpcHandle]
    chain: ChainFacade = field(repr=False)
    generate: Callable[..., None] = field(repr=False)
    kill: Callable[[], None] = field(repr=False)
    socket: str = ""
    rpc_socket: str = ""
    macaroon: str = field(default="", repr=False)
    cert: str = field(default="", repr=False)

    @property
    def public_key(self) -> str:
        """Alias for `id`."""
        return self.id

    def to_dict(self) -> dict[str, str]:
        """Return the node's connection details as plain strings."""
        return {
            "id": self.id,
            "socket": self.socket,
            "rpc_socket": self.rpc_socket,
            "chain_socket": self.chain.socket,
            "macaroon": self.macaroon,
            "cert": self.cert,
        }
