"""
Web3 integration layer for registry reads and ENS lookups.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from eth_utils import to_checksum_address
from web3 import Web3

logger = logging.getLogger(__name__)


class Web3ENSResolver:
    """Text-record reader for one ENS name, backed by web3.py's ENS module."""

    def __init__(self, ens: Any, name: str):
        self._ens = ens
        self.name = name

    def get_text(self, key: str) -> Optional[str]:
        # ENS.get_text looks the resolver up again; it needs the name, not the
        # resolver contract, to walk parent names for ENSIP-10 wildcard resolution.
        return self._ens.get_text(self.name, key)


class Web3ENSProvider:
    """Adapts `web3.ens` to the `get_resolver(name)` shape used by the verifier."""

    def __init__(self, ens: Any):
        self._ens = ens

    def get_resolver(self, name: str) -> Optional[Web3ENSResolver]:
        resolver = self._ens.resolver(name)
        if resolver is None:
            return None
        return Web3ENSResolver(self._ens, name)


class Web3Client:
    """Read-only web3 client for identity registry contracts."""

    def __init__(self, rpc_url: str, w3: Optional[Web3] = None):
        """Initialize the client.

        Args:
            rpc_url: JSON-RPC endpoint URL
            w3: Preconfigured Web3 instance (skips HTTP provider setup)
        """
        self.rpc_url = rpc_url
        if w3 is None:
            w3 = Web3(Web3.HTTPProvider(rpc_url))
            if not w3.is_connected():
                raise ConnectionError(f"Failed to connect to RPC endpoint {rpc_url}")
        self.w3 = w3
        self.chain_id = self.w3.eth.chain_id
        logger.debug("Connected to chain %s via %s", self.chain_id, rpc_url)

    @property
    def ens_provider(self) -> Web3ENSProvider:
        """Name-resolution provider over the connected node's ENS registry."""
        return Web3ENSProvider(self.w3.ens)

    def get_contract(self, address: str, abi: List[Dict[str, Any]]) -> Any:
        """Get contract instance."""
        return self.w3.eth.contract(address=to_checksum_address(address), abi=abi)

    def call_contract(self, contract: Any, method_name: str, *args, **kwargs) -> Any:
        """Call a read-only contract method."""
        method = getattr(contract.functions, method_name)
        return method(*args, **kwargs).call()
