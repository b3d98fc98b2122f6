"""
Identity registry ABI subset and default deployments.
"""

from __future__ import annotations

from typing import Any, Dict, List

# Read-only functions the SDK calls on the identity registry.
IDENTITY_REGISTRY_ABI: List[Dict[str, Any]] = [
    {
        "inputs": [{"internalType": "uint256", "name": "tokenId", "type": "uint256"}],
        "name": "tokenURI",
        "outputs": [{"internalType": "string", "name": "", "type": "string"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [{"internalType": "uint256", "name": "tokenId", "type": "uint256"}],
        "name": "ownerOf",
        "outputs": [{"internalType": "address", "name": "", "type": "address"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [
            {"internalType": "uint256", "name": "agentId", "type": "uint256"},
            {"internalType": "string", "name": "metadataKey", "type": "string"},
        ],
        "name": "getMetadata",
        "outputs": [{"internalType": "bytes", "name": "", "type": "bytes"}],
        "stateMutability": "view",
        "type": "function",
    },
]

DEFAULT_REGISTRIES: Dict[int, Dict[str, str]] = {
    11155111: {  # Ethereum Sepolia
        "IDENTITY": "0x8004A818BFB912233c491871b3d84c89A494BD9e",
    },
}

DEFAULT_IPFS_GATEWAYS: List[str] = [
    "https://gateway.pinata.cloud/ipfs/",
    "https://ipfs.io/ipfs/",
    "https://dweb.link/ipfs/",
]
