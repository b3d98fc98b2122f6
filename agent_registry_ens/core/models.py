"""
Core data models for the agent registry ENS SDK.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional
from datetime import datetime


# Type aliases
AgentId = str  # "chainId:tokenId" (e.g., "8453:1234")
ChainId = int
Address = str  # 0x-hex
URI = str  # https://... or ipfs://...
Timestamp = int  # unix seconds


class EndpointType(Enum):
    """Types of endpoints that agents can advertise."""
    MCP = "MCP"
    A2A = "A2A"
    ENS = "ENS"
    DID = "DID"
    WALLET = "wallet"


@dataclass
class Endpoint:
    """Represents an agent endpoint."""
    type: EndpointType
    value: str  # endpoint value (URL, name, DID, ENS)
    meta: Dict[str, Any] = field(default_factory=dict)


@dataclass
class RegistrationFile:
    """Agent registration file structure."""
    agentId: Optional[AgentId] = None  # None until minted
    agentURI: Optional[URI] = None  # where this file is published
    name: str = ""
    description: str = ""
    image: Optional[URI] = None
    endpoints: List[Endpoint] = field(default_factory=list)
    owners: List[Address] = field(default_factory=list)  # from chain (read-only, hydrated)
    active: bool = False
    metadata: Dict[str, Any] = field(default_factory=dict)
    updatedAt: Timestamp = field(default_factory=lambda: int(datetime.now().timestamp()))

    def __str__(self) -> str:
        return json.dumps(self.to_dict(), indent=2, default=str)

    def __repr__(self) -> str:
        return f"RegistrationFile(agentId={self.agentId}, agentURI={self.agentURI}, name={self.name})"

    def to_dict(self, chain_id: Optional[int] = None, identity_registry_address: Optional[str] = None) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        endpoints = []
        for endpoint in self.endpoints:
            endpoints.append({
                "name": endpoint.type.value,
                "endpoint": endpoint.value,
                **endpoint.meta
            })

        registrations = []
        if self.agentId:
            agent_id_int = int(self.agentId.split(":")[-1])
            if chain_id and identity_registry_address:
                agent_registry = f"eip155:{chain_id}:{identity_registry_address}"
            else:
                agent_registry = "eip155:1:{identityRegistry}"
            registrations.append({
                "agentId": agent_id_int,
                "agentRegistry": agent_registry
            })

        return {
            "type": "https://eips.ethereum.org/EIPS/eip-8004#registration-v1",
            "name": self.name,
            "description": self.description,
            "image": self.image,
            "endpoints": endpoints,
            "registrations": registrations,
            "active": self.active,
            "updatedAt": self.updatedAt,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> RegistrationFile:
        """Create from dictionary."""
        endpoints = []
        for ep_data in data.get("endpoints", []):
            try:
                ep_type = EndpointType(ep_data["name"])
            except (KeyError, ValueError):
                # agentWallet and custom endpoint names are not tracked here
                continue
            ep_meta = {k: v for k, v in ep_data.items() if k not in ["name", "endpoint"]}
            endpoints.append(Endpoint(type=ep_type, value=ep_data.get("endpoint", ""), meta=ep_meta))

        return cls(
            agentId=data.get("agentId"),
            agentURI=data.get("agentURI"),
            name=data.get("name", ""),
            description=data.get("description", ""),
            image=data.get("image"),
            endpoints=endpoints,
            active=data.get("active", False),
            metadata=data.get("metadata", {}),
            updatedAt=data.get("updatedAt", int(datetime.now().timestamp())),
        )
