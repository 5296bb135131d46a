"""
Chain-specific configuration for the subscription client.
"""

from dataclasses import dataclass, field
from typing import Dict, Optional

from eth_utils.address import to_checksum_address

from .base import BaseConfig

# ERC6551 reference registry, deployed at the same address on every chain
ERC6551_REGISTRY = "0x000000006551c19487814612e58FE06813775758"
ERC6551_ACCOUNT_IMPLEMENTATION = "0x55266d75D1a14E4572138116aF39863Ed6596E7F"


@dataclass(frozen=True)
class ChainContracts:
    """Well-known contracts the client talks to on one chain."""
    erc6551_registry: str
    default_erc6551_implementation: str
    profile: Optional[str] = None


@dataclass(frozen=True)
class ChainData:
    """Resolved, validated parameters for a single chain."""
    name: str
    chain_id: int
    rpc_url: str
    explorer_url: str
    native_token: str
    contracts: ChainContracts
    # asset address -> AggregatorV3 feed address, both checksummed
    price_feeds: Dict[str, str] = field(default_factory=dict)


def _normalize_feeds(feeds: Dict[str, str]) -> Dict[str, str]:
    return {
        to_checksum_address(asset): to_checksum_address(feed)
        for asset, feed in feeds.items()
    }


@dataclass
class ChainConfig(BaseConfig):
    """Chain registry: RPC endpoints, well-known contracts and price feeds."""

    DEFAULT_CHAIN: str = BaseConfig.get_env("DEFAULT_CHAIN", "polygon")

    # RPC endpoints, overridable per chain
    ETHEREUM_RPC_URL: str = BaseConfig.get_env(
        "ETHEREUM_RPC_URL", "https://eth.llamarpc.com"
    )
    POLYGON_RPC_URL: str = BaseConfig.get_env(
        "POLYGON_RPC_URL", "https://polygon-rpc.com"
    )
    BASE_RPC_URL: str = BaseConfig.get_env("BASE_RPC_URL", "https://mainnet.base.org")

    ETHEREUM_CHAIN_ID: int = 1
    POLYGON_CHAIN_ID: int = 137
    BASE_CHAIN_ID: int = 8453

    # ERC6551 setup
    ERC6551_REGISTRY: str = BaseConfig.get_env_address(
        "ERC6551_REGISTRY", ERC6551_REGISTRY
    )
    ERC6551_IMPLEMENTATION: str = BaseConfig.get_env_address(
        "ERC6551_IMPLEMENTATION", ERC6551_ACCOUNT_IMPLEMENTATION
    )

    # Profile NFT contracts owning the default token-bound accounts
    ETHEREUM_PROFILE_CONTRACT: Optional[str] = BaseConfig.get_env_address("ETHEREUM_PROFILE_CONTRACT")
    POLYGON_PROFILE_CONTRACT: Optional[str] = BaseConfig.get_env_address("POLYGON_PROFILE_CONTRACT")
    BASE_PROFILE_CONTRACT: Optional[str] = BaseConfig.get_env_address("BASE_PROFILE_CONTRACT")

    @property
    def supported_chains(self) -> Dict[str, Dict]:
        return {
            "ethereum": {
                "chain_id": self.ETHEREUM_CHAIN_ID,
                "rpc_url": self.ETHEREUM_RPC_URL,
                "native_token": "ETH",
                "explorer_url": "https://etherscan.io",
                "profile": self.ETHEREUM_PROFILE_CONTRACT,
            },
            "polygon": {
                "chain_id": self.POLYGON_CHAIN_ID,
                "rpc_url": self.POLYGON_RPC_URL,
                "native_token": "MATIC",
                "explorer_url": "https://polygonscan.com",
                "profile": self.POLYGON_PROFILE_CONTRACT,
            },
            "base": {
                "chain_id": self.BASE_CHAIN_ID,
                "rpc_url": self.BASE_RPC_URL,
                "native_token": "ETH",
                "explorer_url": "https://basescan.org",
                "profile": self.BASE_PROFILE_CONTRACT,
            },
        }

    def get_price_feeds_for_chain(self) -> Dict[str, Dict[str, str]]:
        """Chainlink USD feeds keyed by the asset they price."""
        return {
            "ethereum": {
                # WETH -> ETH/USD
                "0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2": "0x5f4eC3Df9cbd43714FE2740f5E3616155c5b8419",
                # USDC -> USDC/USD
                "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48": "0x8fFfFfd4AfB6115b954Bd326cbe7B4BA576818f6",
                # DAI -> DAI/USD
                "0x6B175474E89094C44Da98b954EedeAC495271d0F": "0xAed0c38402a5d19df6E4c03F4E2DceD6e29c1ee9",
            },
            "polygon": {
                # WMATIC -> MATIC/USD
                "0x0d500B1d8E8eF31E21C99d1Db9A6444d3ADf1270": "0xAB594600376Ec9fD91F8e885dADF0CE036862dE0",
                # USDC.e -> USDC/USD
                "0x2791Bca1f2de4661ED88A30C99A7a9449Aa84174": "0xfE4A8cc5b5B2366C1B58Bea3858e81843581b2F7",
            },
            "base": {
                # WETH -> ETH/USD
                "0x4200000000000000000000000000000000000006": "0x71041dddad3595F9CEd3DcCFBe3D1F4b0a16Bb70",
                # USDC -> USDC/USD
                "0x833589fCD6eDb6E08f4c7C32D4f71b54bdA02913": "0x7e860098F58bBFC8648a4311b374B1D669a2bc6B",
            },
        }

    def get_chain_config(self, chain_name: str) -> Dict:
        """Raw registry entry of a chain; ValueError for chains we do not know."""
        if chain_name not in self.supported_chains:
            raise ValueError(f"Unsupported chain: {chain_name}")
        return self.supported_chains[chain_name]

    def get_price_feeds(self, chain_name: str) -> Dict[str, str]:
        """Get the checksummed price feed registry for a chain."""
        self.get_chain_config(chain_name)
        return _normalize_feeds(self.get_price_feeds_for_chain().get(chain_name, {}))

    def get_chain_data(self, chain_name: Optional[str] = None) -> ChainData:
        """
        Build the immutable chain parameters handed to a session.

        Args:
            chain_name: Chain to resolve, DEFAULT_CHAIN when omitted

        Returns:
            ChainData for the chain
        """
        chain_name = chain_name or self.DEFAULT_CHAIN
        chain = self.get_chain_config(chain_name)
        return ChainData(
            name=chain_name,
            chain_id=chain["chain_id"],
            rpc_url=chain["rpc_url"],
            explorer_url=chain["explorer_url"],
            native_token=chain["native_token"],
            contracts=ChainContracts(
                erc6551_registry=self.ERC6551_REGISTRY,
                default_erc6551_implementation=self.ERC6551_IMPLEMENTATION,
                profile=chain["profile"],
            ),
            price_feeds=self.get_price_feeds(chain_name),
        )
