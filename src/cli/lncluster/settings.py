"""Settings and configuration for lncluster."""

# Docker labels
ROOT_LABEL_KEY = "org.lncluster.root"
ROOT_LABEL = f"{ROOT_LABEL_KEY}=true"
NODE_LABEL_KEY = "org.lncluster.node"
SHARED_NETWORK = "lncluster_shared"

# Images
DEFAULT_BITCOIND_IMAGE = "lightninglabs/bitcoin-core:27"
DEFAULT_LND_IMAGE = "lightninglabs/lnd:v0.18.3-beta"

# Port allocation
PORTS_PER_NODE = 6
START_PORT = 1025
END_PORT = 65000
PORT_ATTEMPTS = 25

# LND identity lookup after authentication
IDENTITY_ATTEMPTS = 25

# Shared retry interval (seconds)
RETRY_INTERVAL = 0.01

# Chain maturity
MATURITY = 100
MATURITY_POLL_ATTEMPTS = 3000

# Container startup
DEFAULT_STARTUP_RETRIES = 600
STARTUP_INTERVAL = 0.5

# Regtest chain backend
CHAIN_RPC_USER = "lncluster"
CHAIN_RPC_PASS = "lncluster"
CHAIN_P2P_PORT = 18444
CHAIN_RPC_PORT = 18443
CHAIN_ZMQ_BLOCK_PORT = 28332
CHAIN_ZMQ_TX_PORT = 28333
LIGHTNING_P2P_PORT = 9735
LIGHTNING_REST_PORT = 8080
GENERATE_ADDRESS = "2N8hwP1WmJrFF5QWABn38y63uYLhnJYJYTF"

# LND paths inside the container
LND_DIR = "/root/.lnd"
LND_TLS_CERT = f"{LND_DIR}/tls.cert"
LND_ADMIN_MACAROON = f"{LND_DIR}/data/chain/bitcoin/regtest/admin.macaroon"

# Templates
CONFIG_TEMPLATE = """
[config]
# Docker daemon to use; defaults to the current Docker context
DOCKER_HOST=

BITCOIND_IMAGE=
LND_IMAGE=

CHAIN_RPC_USER=
CHAIN_RPC_PASS=

# Polls (0.5s apart) to wait for a node container to come up
STARTUP_RETRIES=
"""
