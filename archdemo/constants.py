"""archdemo constants."""

# Default leader node address when neither the CLI nor the config names one.
NODE1_ADDRESS = "http://localhost:9002"
DEFAULT_NETWORK = "regtest"

CONFIG_DIR_ENV = "ARCH_DEMO_CONFIG_DIR"
CONFIG_FILE_NAME = "config.toml"
KEYS_FILE_NAME = "keys.json"

# Config keys consumed by the provisioning pipeline.
CFG_NETWORK = "bitcoin.network"
CFG_PROJECT_DIR = "project.directory"
CFG_LEADER_RPC = "leader_rpc_endpoint"

CONFIG_ENV_OVERRIDES = {
    CFG_NETWORK: "ARCH_DEMO_NETWORK",
    CFG_PROJECT_DIR: "ARCH_DEMO_PROJECT_DIR",
    CFG_LEADER_RPC: "ARCH_DEMO_RPC_URL",
}

# Project layout, relative to project.directory.
SHARED_LIBRARIES = ("common", "program", "bip322")
SHARED_GUARD_DIR = "common"
PROGRAM_DIR = "program"
PROJECTS_DIR = "projects"
DEMO_NAME = "demo"
DEMO_APP_TEMPLATE = "app"
DEMO_MANIFEST_NAME = "Cargo.toml"
FRONTEND_DIR = ("app", "frontend")
ENV_FILE_NAME = ".env"
ENV_EXAMPLE_NAME = ".env.example"

# Registry names.
PROGRAM_KEY_BASE = "graffiti"
WALL_ACCOUNT_KEY = "graffiti_wall_state"

# Frontend environment keys.
ENV_PROGRAM_PUBKEY = "VITE_PROGRAM_PUBKEY"
ENV_WALL_ACCOUNT_PUBKEY = "VITE_WALL_ACCOUNT_PUBKEY"
ENV_NETWORK = "VITE_NETWORK"
ENV_RPC_URL = "VITE_RPC_URL"
ENV_KEYS = (ENV_PROGRAM_PUBKEY, ENV_WALL_ACCOUNT_PUBKEY, ENV_NETWORK, ENV_RPC_URL)

PUBKEY_SIZE = 32

# Deployer subprocess.
DEPLOYER_ENV = "ARCH_DEPLOYER"
DEFAULT_DEPLOYER = "arch-deployer"
DEPLOYER_SECRET_ENV = "ARCH_DEPLOYER_SECRET_KEY"
DEFAULT_RETRY_ATTEMPTS = 3
DEFAULT_RETRY_BACKOFF = 0.5
DEFAULT_CALL_TIMEOUT = 120.0
