"""Authenticated access to an LND node over its REST gateway."""

from __future__ import annotations

import os
import tempfile

import requests

from lncluster.core.errors import LNClusterError

DEFAULT_TIMEOUT = 30


class LndRestClient:
    """Minimal LND REST client.

    Parameters
    ----------
    cert : str
        PEM-encoded TLS certificate used to verify the node.
    macaroon : str
        Hex-encoded macaroon sent with every request.
    socket : str
        `host:port` of the node's REST listener.
    timeout : float, optional
        Per-request timeout in seconds.

    Notes
    -----
    `requests` verifies TLS against a file path, so the certificate is
    written to a temporary file that lives as long as the client.
    """

    def __init__(
        self, cert: str, macaroon: str, socket: str, timeout: float = DEFAULT_TIMEOUT
    ) -> None:
        self.socket = socket
        self.timeout = timeout
        self._cert_file = self._write_cert(cert)
        self.session = requests.Session()
        self.session.verify = self._cert_file
        self.session.headers.update({"Grpc-Metadata-macaroon": macaroon})

    def __repr__(self) -> str:
        return f"<LndRestClient socket={self.socket}>"

    @staticmethod
    def _write_cert(cert: str) -> str:
        fd, path = tempfile.mkstemp(prefix="lncluster-", suffix=".cert")
        with os.fdopen(fd, "w") as f:
            f.write(cert)
        return path

    def _get(self, path: str) -> dict:
        url = f"https://{self.socket}{path}"
        try:
            resp = self.session.get(url, timeout=self.timeout)
            resp.raise_for_status()
        except requests.RequestException as e:
            raise LNClusterError(f"LND request to {url} failed: {e}") from e
        return resp.json()

    def get_identity(self) -> dict:
        """Return `{"public_key": <hex>}` for the node."""
        info = self._get("/v1/getinfo")
        return {"public_key": info["identity_pubkey"]}

    def create_chain_address(self) -> dict:
        """Return `{"address": <str>}`, a fresh receiving address."""
        resp = self._get("/v1/newaddress?type=WITNESS_PUBKEY_HASH")
        return {"address": resp["address"]}

    def get_utxos(self) -> dict:
        """Return `{"utxos": [...]}`, the wallet's unspent outputs."""
        resp = self._get("/v1/utxos?min_confs=0&max_confs=2147483647")
        return {"utxos": resp.get("utxos", [])}

    def close(self) -> None:
        """Close the session and remove the certificate file."""
        self.session.close()
        if os.path.exists(self._cert_file):
            os.remove(self._cert_file)


def authenticate(cert: str, macaroon: str, socket: str) -> LndRestClient:
    """Return an authenticated client for the node at `socket`."""
    return LndRestClient(cert=cert, macaroon=macaroon, socket=socket)
