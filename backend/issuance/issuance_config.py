# Adapter descriptor
adapter_info = {
    "name": "Issuance - Mintable tokens",
    "version": "0.2.1",
    "license": "MIT",
    "description": (
        "This adapter tracks issuance of SWAPR token by simply querying the historical supply of "
        "the token (default 7 days prior), and comparing it to the current supply."
    ),
}

# Network settings
# chain_id: EVM chain id, used to sanity check the RPC we are connected to
# rpc_env: environment variable holding the RPC url for this network
# default_rpc: public RPC used if the env var isn't set (needs archive access for historical reads!)
# block_time: average seconds per block, used to narrow the search for the first block of a day
# poa: inject ExtraDataToPOAMiddleware (needed for chains with extended extraData, e.g. gnosis)
network_mapping = {
    "ethereum": {
        "chain_id": 1,
        "rpc_env": "ETHEREUM_RPC_URL",
        "default_rpc": "https://ethereum-rpc.publicnode.com",
        "block_time": 12.0,
        "poa": False,
    },
    "gnosis": {
        "chain_id": 100,
        "rpc_env": "GNOSIS_RPC_URL",
        "default_rpc": "https://rpc.gnosischain.com",
        "block_time": 5.0,
        "poa": True,
    },
    "arbitrum": {
        "chain_id": 42161,
        "rpc_env": "ARBITRUM_RPC_URL",
        "default_rpc": "https://arb1.arbitrum.io/rpc",
        "block_time": 0.25,
        "poa": True,
    },
}

# Token metadata
# id: primary key, also the id the adapter is registered under
# name: display name
# coingecko_id: id of the token on coingecko, used for the current price
# primary_network: network whose totalSupply is taken as the total supply of the token
# decimals: base unit scale of the token (None -> read decimals() on the primary network)
# addresses: token contract per network
# locked_supply: addresses per network whose balances are subtracted from the total supply (treasuries, burn addresses)
# icon, icon_type: (optional) IPFS CID of the icon and its mime type
# issuance_description, website: (optional) shown alongside the metrics
token_mapping = {
    "swapr": {
        "name": "Swapr",
        "coingecko_id": "swapr",
        "primary_network": "ethereum",
        "decimals": 18,
        "addresses": {
            "ethereum": "0x6cacdb97e3fc8136805a9e7c342d866ab77d0957",  # SWAPR Mainnet
            "gnosis": "0x532801ed6f82fffd2dab70a19fc2d7b2772c4f4b",  # SWAPR Gnosis (Omnibridge)
        },
        "locked_supply": {
            "ethereum": [
                "0x519b70055af55a007110b4ff99b0ea33071c720a",  # DXdao Avatar
            ],
            "gnosis": [
                "0xe716ec63c5673b3a4732d22909b38d779fa47c3f",  # DXdao Avatar (Gnosis)
            ],
        },
        "icon": "QmYPqFXTqYcynD5hT9sZbsoPZXbvjSfL7WWQPL7EwYAyE5",  # NOT THE CORRECT ONE -> TO BE FIXED
        "icon_type": "image/svg+xml",
        "category": "app",
        "issuance_description": "DXdao is issuing DXD token through a continuous fundraiser and exchanged for ETH following a bonding curve model.",
        "website": "https://swapr.eth.link/",
    },
}
