# constants/networks.py

# Network name -> chain id
NETWORKS = {
    "mainnet": 1,
    "sepolia": 11155111,
}

DEFAULT_NETWORK = "mainnet"
