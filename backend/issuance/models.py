from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator, model_validator
from web3 import Web3

from issuance.errors import ConfigurationError
from issuance.issuance_config import network_mapping, token_mapping


class NetworkConfig(BaseModel):
    """RPC settings for one network (see network_mapping)."""
    model_config = ConfigDict(frozen=True)

    name: str
    chain_id: int
    rpc_env: str
    default_rpc: str
    block_time: float = 12.0
    poa: bool = False


class TokenConfig(BaseModel):
    """
    Immutable configuration of one token.

    The circulating supply of the token is the totalSupply on `primary_network`
    minus the balances of all `locked_supply` addresses on every network they are listed for.
    """
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    coingecko_id: str
    primary_network: str
    decimals: Optional[int] = 18
    addresses: Dict[str, str]
    locked_supply: Dict[str, List[str]] = {}
    icon: Optional[str] = None
    icon_type: str = "image/svg+xml"
    category: str = "app"
    issuance_description: Optional[str] = None
    website: Optional[str] = None

    @field_validator("decimals")
    @classmethod
    def check_decimals(cls, v: Optional[int]):
        if v is not None and not 0 <= v <= 255:
            raise ValueError(f"decimals must be between 0 and 255, got {v}")
        return v

    @field_validator("addresses")
    @classmethod
    def check_addresses(cls, v: Dict[str, str]):
        for network, address in v.items():
            if not Web3.is_address(address):
                raise ValueError(f"invalid token address {address} for network {network}")
        return v

    @field_validator("locked_supply")
    @classmethod
    def check_locked_supply(cls, v: Dict[str, List[str]]):
        for network, accounts in v.items():
            for account in accounts:
                if not Web3.is_address(account):
                    raise ValueError(f"invalid locked supply address {account} for network {network}")
        return v

    @model_validator(mode="after")
    def check_networks(self):
        if self.primary_network not in self.addresses:
            raise ValueError(f"primary network {self.primary_network} has no token address")
        missing = [network for network in self.locked_supply if network not in self.addresses]
        if missing:
            raise ValueError(f"locked supply defined for networks without token address: {missing}")
        return self

    @property
    def queried_networks(self) -> List[str]:
        """Primary network first, then every other network with locked supply."""
        networks = [self.primary_network]
        networks.extend(n for n in self.locked_supply if n != self.primary_network)
        return networks


def load_token_config(token_id: str, mapping: Optional[dict] = None, networks: Optional[dict] = None) -> TokenConfig:
    mapping = token_mapping if mapping is None else mapping
    networks = network_mapping if networks is None else networks
    if token_id not in mapping:
        raise ConfigurationError(f"Token '{token_id}' not found in token mapping, please check the file: issuance/issuance_config.py")
    try:
        token = TokenConfig(id=token_id, **mapping[token_id])
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration for token '{token_id}': {e}") from e

    unknown = sorted(n for n in set(token.addresses) | set(token.locked_supply) if n not in networks)
    if unknown:
        raise ConfigurationError(f"Token '{token_id}' uses networks not found in network mapping: {unknown}")
    return token


def load_network_config(network: str, mapping: Optional[dict] = None) -> NetworkConfig:
    mapping = network_mapping if mapping is None else mapping
    if network not in mapping:
        raise ConfigurationError(f"Network '{network}' not found in network mapping, please check the file: issuance/issuance_config.py")
    try:
        return NetworkConfig(name=network, **mapping[network])
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration for network '{network}': {e}") from e
